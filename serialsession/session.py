"""
Serial Session
==============

Owns one serial line end-to-end: configuration, open/close, transmission,
asynchronous delivery of inbound bytes, and a poll-once error slot.

Example:
    >>> from serialsession import SerialSession
    >>>
    >>> with SerialSession('/dev/ttyUSB0', 115200, 'none', 8, 'one') as port:
    ...     port.add_listener(lambda packet: print(packet))
    ...     if not port.open():
    ...         print(port.current_error)
    ...     port.send("hello\\n")

Nothing here raises for hardware problems. Operations return False and the
reason is read once from ``current_error``.
"""

import logging
import threading
from typing import Callable, List, Optional, Union

import serial

from .channel import PacketChannel
from .errors import ErrorKind, ErrorSlot, PortError
from .settings import PortSettings

logger = logging.getLogger(__name__)

PacketListener = Callable[[bytes], None]
Payload = Union[str, bytes, bytearray, memoryview]

# Exceptions pyserial raises for bad settings or unusable devices
_PORT_ERRORS = (serial.SerialException, OSError, ValueError)


class SerialSession:
    """
    One serial port session.

    The handle is created unopened at construction and released by
    dispose(). While the port is open a watcher thread drains the receive
    buffer and hands each chunk to the registered listeners.

    Attributes:
        settings: Line parameters fixed at construction
        encoding: Text encoding used when sending str payloads
        poll_interval: Seconds the watcher idles when no bytes are waiting
    """

    poll_interval = 0.005

    def __init__(
        self,
        port_name: Optional[str],
        baud_rate: int,
        parity: Optional[str],
        data_bits: int,
        stop_bits: Optional[str],
        encoding: str = "utf-8",
    ):
        """
        Create the session and configure (but do not open) the port.

        Configuration is skipped when any of port_name, parity or stop_bits
        is missing; open() will then fail. Invalid values are recorded in the
        error slot instead of raising.

        Args:
            port_name: Serial port path (e.g., '/dev/ttyUSB0', 'COM3')
            baud_rate: Line speed, must be positive
            parity: none, odd, even, mark or space (anything else means none)
            data_bits: Data bits per character, usually 7 or 8
            stop_bits: none, one, onepointfive or two (anything else means one)
            encoding: Encoding for send(str)
        """
        self.settings = PortSettings.from_strings(port_name, baud_rate, parity, data_bits, stop_bits)
        self.encoding = encoding

        self._errors = ErrorSlot()
        self._lock = threading.Lock()
        self._write_lock = threading.Lock()
        self._listeners: List[PacketListener] = []
        self._listeners_lock = threading.Lock()
        self._watcher: Optional[threading.Thread] = None
        self._stop_watching = threading.Event()
        self._disposed = False

        self._handle: Optional[serial.Serial] = serial.Serial()

        if port_name and parity and stop_bits:
            self._configure()
        else:
            logger.debug("Port name, parity or stop bits missing, port left unconfigured")

    def _configure(self) -> None:
        """Apply settings to the unopened handle, stopping at the first rejected value."""
        handle = self._handle
        settings = self.settings
        try:
            handle.stopbits = settings.stopbits.value
            handle.parity = settings.parity.value
            handle.port = settings.port
            if settings.baudrate <= 0:
                raise ValueError(f"Not a valid baudrate: {settings.baudrate!r}")
            handle.baudrate = settings.baudrate
            if settings.bytesize <= 0:
                raise ValueError(f"Not a valid byte size: {settings.bytesize!r}")
            handle.bytesize = settings.bytesize
        except _PORT_ERRORS as e:
            self._record_exception(ErrorKind.CONFIGURATION, e)
        else:
            logger.debug(f"Configured {settings}")

    # =========================================================================
    # Context manager
    # =========================================================================

    def __enter__(self) -> 'SerialSession':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.dispose()

    def __del__(self):
        # Interpreter shutdown or a failed __init__ may leave attributes missing
        if getattr(self, "_disposed", True):
            return
        try:
            self.dispose()
        except Exception:
            logger.debug("dispose from __del__ failed", exc_info=True)

    # =========================================================================
    # Errors
    # =========================================================================

    def _record(self, error: PortError) -> None:
        logger.warning(f"{error.kind.value} error on {error.port}: {error.detail or error.render()}")
        self._errors.put(error)

    def _record_exception(self, kind: ErrorKind, exc: BaseException) -> None:
        self._record(PortError.from_exception(kind, self.settings.port, exc))

    @property
    def current_error(self) -> str:
        """
        Message of the most recent unread error, or "" if there is none.

        Reading clears it. A newer error replaces an unread one.
        """
        error = self._errors.take()
        return error.render() if error is not None else ""

    def take_error(self) -> Optional[PortError]:
        """Structured form of current_error. Also clears the slot."""
        return self._errors.take()

    # =========================================================================
    # Connection Management
    # =========================================================================

    @property
    def is_open(self) -> bool:
        """True while the handle exists and the device reports open."""
        handle = self._handle
        return handle is not None and bool(handle.is_open)

    def open(self) -> bool:
        """
        Open the serial port and start delivering inbound packets.

        Returns:
            True if the port opened, False otherwise (see current_error)
        """
        with self._write_lock, self._lock:
            handle = self._handle
            if handle is None:
                self._record(PortError(ErrorKind.NO_HANDLE, self.settings.port))
                return False

            try:
                handle.open()
            except _PORT_ERRORS as e:
                self._record_exception(ErrorKind.OPEN, e)
                return False

            # Delivery only starts once the device is really open
            self._start_watcher()

        logger.info(f"Opened {self.settings.port} at {self.settings.baudrate} baud")
        return True

    def close(self) -> None:
        """Close the port if it is open. Failures are recorded, never raised."""
        handle = self._handle
        if handle is None or not handle.is_open:
            return

        self._cancel_pending_write(handle)
        self._join_watcher()

        with self._write_lock, self._lock:
            if not self.is_open:
                return
            try:
                self._handle.close()
            except (serial.SerialException, OSError) as e:
                self._record_exception(ErrorKind.CLOSE, e)
            else:
                logger.info(f"Closed {self.settings.port}")

    def dispose(self) -> None:
        """
        Close the port and release the handle.

        Safe to call at any point of the lifecycle and more than once.
        """
        if self._disposed:
            return
        self._disposed = True

        handle = self._handle
        if handle is not None:
            self._cancel_pending_write(handle)
        self._join_watcher()

        with self._write_lock, self._lock:
            handle, self._handle = self._handle, None
            if handle is not None:
                try:
                    handle.close()
                except (serial.SerialException, OSError) as e:
                    self._record_exception(ErrorKind.CLOSE, e)

        with self._listeners_lock:
            self._listeners.clear()
        logger.debug(f"Disposed session for {self.settings.port}")

    @staticmethod
    def _cancel_pending_write(handle) -> None:
        # Only some pyserial backends can interrupt a blocking write
        cancel = getattr(handle, "cancel_write", None)
        if cancel is None or not handle.is_open:
            return
        try:
            cancel()
        except (serial.SerialException, OSError):
            logger.debug("cancel_write failed", exc_info=True)

    # =========================================================================
    # Transmission
    # =========================================================================

    def send(self, data: Optional[Payload]) -> bool:
        """
        Write a payload with a single blocking write.

        Args:
            data: Text (encoded with self.encoding) or bytes-like payload

        Returns:
            True if the whole payload was handed to the driver. False if the
            port is not open, the payload is empty, or the write failed.
        """
        with self._write_lock:
            handle = self._handle
            if handle is None or not handle.is_open or not data:
                self._record(PortError(ErrorKind.NOT_OPEN, self.settings.port))
                return False

            try:
                if isinstance(data, str):
                    payload = data.encode(self.encoding)
                else:
                    payload = memoryview(data).tobytes()
                handle.write(payload)
            except (serial.SerialException, OSError, ValueError, TypeError) as e:
                # UnicodeEncodeError is a ValueError
                self._record_exception(ErrorKind.SEND, e)
                return False

        logger.debug(f"Sent {len(payload)} bytes to {self.settings.port}")
        return True

    # =========================================================================
    # Inbound delivery
    # =========================================================================

    def add_listener(self, listener: PacketListener) -> None:
        """Register a callable that receives every inbound packet."""
        with self._listeners_lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: PacketListener) -> None:
        with self._listeners_lock:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

    def subscribe(self, maxsize: int = 0) -> PacketChannel:
        """
        Register a queue-backed listener.

        Args:
            maxsize: Queue bound, 0 for unbounded

        Returns:
            PacketChannel to drain; close it to unsubscribe
        """
        channel = PacketChannel(maxsize, on_close=self.remove_listener)
        self.add_listener(channel)
        return channel

    def _start_watcher(self) -> None:
        # One stop event per open period, held by the watcher it belongs to
        stop = threading.Event()
        self._stop_watching = stop
        self._watcher = threading.Thread(
            target=self._watch,
            args=(stop,),
            name=f"serialsession-{self.settings.port}",
            daemon=True,
        )
        self._watcher.start()

    def _join_watcher(self) -> None:
        watcher = self._watcher
        if watcher is None:
            return
        self._stop_watching.set()
        # A listener may close the session from the watcher thread itself
        if watcher is not threading.current_thread():
            watcher.join()
        self._watcher = None

    def _watch(self, stop: threading.Event) -> None:
        """Background thread standing in for the driver's data-received event."""
        while not stop.is_set():
            try:
                delivered = self._drain_port()
            except Exception:
                logger.error(f"Read from {self.settings.port} failed, inbound delivery stopped", exc_info=True)
                return
            if delivered is None:
                return
            if delivered == 0:
                stop.wait(self.poll_interval)

    def _drain_port(self) -> Optional[int]:
        """
        Read whatever is waiting and dispatch it as one packet.

        Returns:
            Number of bytes delivered, or None once the port is gone
        """
        with self._lock:
            handle = self._handle
            if handle is None or not handle.is_open:
                return None
            waiting = handle.in_waiting
            if not waiting:
                return 0
            packet = bytes(handle.read(waiting))

        self._dispatch(packet)
        return len(packet)

    def _dispatch(self, packet: bytes) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(packet)
            except Exception:
                logger.error(f"Packet listener {listener!r} raised", exc_info=True)
