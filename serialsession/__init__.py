"""
serialsession - Asynchronous Serial Port Sessions
=================================================

A small library that owns one serial port at a time: it configures the line,
opens and closes it safely, pushes inbound bytes to listeners from a
background watcher, and keeps the last error in a read-once slot.

Example:
    >>> from serialsession import SerialSession
    >>>
    >>> port = SerialSession('/dev/ttyUSB0', 115200, 'none', 8, 'one')
    >>> port.add_listener(lambda packet: print(packet.decode(errors='replace')))
    >>> if port.open():
    ...     port.send("STATUS\\n")
    ... else:
    ...     print(port.current_error)
    >>> port.dispose()
"""

from .session import SerialSession, PacketListener
from .channel import PacketChannel
from .errors import ErrorKind, PortError
from .settings import (
    Parity,
    StopBits,
    PortSettings,
    resolve_parity,
    resolve_stop_bits,
)
from .catalog import (
    BAUD_RATES,
    STOP_BITS,
    PARITY_BITS,
    DATA_BITS,
    enumerate_ports,
    get_serial_ports,
)

__version__ = "1.0.0"
__all__ = [
    "SerialSession",
    "PacketListener",
    "PacketChannel",
    "ErrorKind",
    "PortError",
    "Parity",
    "StopBits",
    "PortSettings",
    "resolve_parity",
    "resolve_stop_bits",
    "BAUD_RATES",
    "STOP_BITS",
    "PARITY_BITS",
    "DATA_BITS",
    "enumerate_ports",
    "get_serial_ports",
]
