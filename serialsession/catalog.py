"""
Port option catalog

Common option strings for populating settings menus, and enumeration of the
serial ports currently present on the host.
"""

import serial.tools.list_ports
from typing import List, Tuple


# Commonly used baud rates, usually derived from a 1.8432 MHz oscillator
BAUD_RATES = (
    "110", "300", "600", "1200", "2400", "4800", "9600", "14400", "19200",
    "28800", "38400", "56000", "57600", "115200", "128000", "153600",
    "230400", "256000", "460800", "921600", "1843200",
)

STOP_BITS = ("none", "one", "onepointfive", "two")

PARITY_BITS = ("none", "odd", "even", "mark", "space")

# 7 for ASCII, 8 for everything else
DATA_BITS = ("7", "8")


def enumerate_ports() -> List[Tuple[str, str]]:
    """
    Enumerate available serial ports

    Returns:
        List of (port_name, description) tuples sorted by port name
        Example: [("/dev/ttyUSB0", "USB Serial"), ...]
    """
    ports = [(info.device, info.description) for info in serial.tools.list_ports.comports()]
    ports.sort(key=lambda x: x[0])
    return ports


def get_serial_ports() -> Tuple[str, ...]:
    """Names of the serial ports currently recognised by the host."""
    return tuple(device for device, _ in enumerate_ports())
