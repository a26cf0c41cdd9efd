"""
Shared fixtures for serialsession tests.

MockSerial stands in for serial.Serial so sessions can be exercised without
hardware. It validates settings the way pyserial does and lets a test inject
inbound bytes or force failures.
"""

import threading
from unittest.mock import patch

import pytest
import serial


class MockSerial:
    """Mock serial port for testing without hardware."""

    BYTESIZES = (serial.FIVEBITS, serial.SIXBITS, serial.SEVENBITS, serial.EIGHTBITS)
    PARITIES = (serial.PARITY_NONE, serial.PARITY_EVEN, serial.PARITY_ODD,
                serial.PARITY_MARK, serial.PARITY_SPACE)
    STOPBITS = (serial.STOPBITS_ONE, serial.STOPBITS_ONE_POINT_FIVE, serial.STOPBITS_TWO)

    def __init__(self):
        self.port = None
        self._baudrate = 9600
        self._bytesize = serial.EIGHTBITS
        self._parity = serial.PARITY_NONE
        self._stopbits = serial.STOPBITS_ONE
        self.is_open = False
        self.written = []
        self.open_calls = 0
        self.rejected_ports = set()
        self.close_error = None
        self.write_error = None
        self.read_error = None
        self._rx = bytearray()
        self._lock = threading.Lock()

    # --- settings, validated like pyserial --------------------------------

    @property
    def baudrate(self):
        return self._baudrate

    @baudrate.setter
    def baudrate(self, value):
        if int(value) < 0:
            raise ValueError(f"Not a valid baudrate: {value!r}")
        self._baudrate = int(value)

    @property
    def bytesize(self):
        return self._bytesize

    @bytesize.setter
    def bytesize(self, value):
        if value not in self.BYTESIZES:
            raise ValueError(f"Not a valid byte size: {value!r}")
        self._bytesize = value

    @property
    def parity(self):
        return self._parity

    @parity.setter
    def parity(self, value):
        if value not in self.PARITIES:
            raise ValueError(f"Not a valid parity: {value!r}")
        self._parity = value

    @property
    def stopbits(self):
        return self._stopbits

    @stopbits.setter
    def stopbits(self, value):
        if value not in self.STOPBITS:
            raise ValueError(f"Not a valid stop bit size: {value!r}")
        self._stopbits = value

    # --- lifecycle ---------------------------------------------------------

    def open(self):
        self.open_calls += 1
        if self.port is None:
            raise serial.SerialException("Port must be configured before it can be used.")
        if self.is_open:
            raise serial.SerialException("Port is already open.")
        if self.port in self.rejected_ports:
            raise serial.SerialException(
                f"could not open port {self.port}: [Errno 2] No such file or directory: '{self.port}'"
            )
        self.is_open = True

    def close(self):
        if self.close_error is not None:
            raise self.close_error
        self.is_open = False

    # --- data --------------------------------------------------------------

    @property
    def in_waiting(self) -> int:
        if self.read_error is not None:
            raise self.read_error
        with self._lock:
            return len(self._rx)

    def read(self, size: int = 1) -> bytes:
        if not self.is_open:
            raise serial.SerialException("Attempting to use a port that is not open")
        with self._lock:
            data = bytes(self._rx[:size])
            del self._rx[:size]
            return data

    def write(self, data: bytes) -> int:
        if not self.is_open:
            raise serial.SerialException("Attempting to use a port that is not open")
        if self.write_error is not None:
            raise self.write_error
        with self._lock:
            self.written.append(bytes(data))
        return len(data)

    def inject(self, data: bytes):
        """Simulate bytes arriving from the device."""
        with self._lock:
            self._rx.extend(data)


@pytest.fixture
def mock_serial():
    """Create a mock serial port."""
    return MockSerial()


@pytest.fixture
def patched_serial(mock_serial):
    """Make serial.Serial() hand out the mock port."""
    with patch('serial.Serial') as mock_serial_class:
        mock_serial_class.return_value = mock_serial
        yield mock_serial


@pytest.fixture
def make_session(patched_serial):
    """Build sessions on the mock port and dispose them after the test."""
    from serialsession import SerialSession

    sessions = []

    def factory(port_name="/dev/ttyTEST0", baud_rate=115200, parity="none",
                data_bits=8, stop_bits="one", **kwargs):
        session = SerialSession(port_name, baud_rate, parity, data_bits, stop_bits, **kwargs)
        sessions.append(session)
        return session

    yield factory

    for session in sessions:
        session.dispose()
