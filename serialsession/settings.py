"""
Serial Line Settings
====================

Maps the option strings used by configuration UIs onto pyserial values.

Unrecognised parity or stop-bit strings never fail. They resolve to the
defaults below, so a typo in a settings form still yields a usable line:

    parity     -> none
    stop bits  -> one
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import serial


class Parity(Enum):
    """Parity modes, valued with the matching pyserial constants."""
    NONE = serial.PARITY_NONE
    ODD = serial.PARITY_ODD
    EVEN = serial.PARITY_EVEN
    MARK = serial.PARITY_MARK
    SPACE = serial.PARITY_SPACE


class StopBits(Enum):
    """Stop bit counts, valued with the matching pyserial constants."""
    NONE = 0             # not supported by pyserial, rejected when applied
    ONE = serial.STOPBITS_ONE
    ONE_POINT_FIVE = serial.STOPBITS_ONE_POINT_FIVE
    TWO = serial.STOPBITS_TWO


DEFAULT_PARITY = Parity.NONE
DEFAULT_STOP_BITS = StopBits.ONE

_PARITY_NAMES = {
    "none": Parity.NONE,
    "odd": Parity.ODD,
    "even": Parity.EVEN,
    "mark": Parity.MARK,
    "space": Parity.SPACE,
}

_STOP_BIT_NAMES = {
    "none": StopBits.NONE,
    "one": StopBits.ONE,
    "onepointfive": StopBits.ONE_POINT_FIVE,
    "two": StopBits.TWO,
}


def resolve_parity(name: Optional[str]) -> Parity:
    """
    Resolve a parity name case-insensitively.

    Args:
        name: One of none, odd, even, mark, space

    Returns:
        Matching Parity, or Parity.NONE for anything unrecognised
    """
    if not name:
        return DEFAULT_PARITY
    return _PARITY_NAMES.get(name.lower(), DEFAULT_PARITY)


def resolve_stop_bits(name: Optional[str]) -> StopBits:
    """
    Resolve a stop-bit name case-insensitively.

    Args:
        name: One of none, one, onepointfive, two

    Returns:
        Matching StopBits, or StopBits.ONE for anything unrecognised
    """
    if not name:
        return DEFAULT_STOP_BITS
    return _STOP_BIT_NAMES.get(name.lower(), DEFAULT_STOP_BITS)


@dataclass(frozen=True)
class PortSettings:
    """
    Line parameters for one serial session.

    Attributes:
        port: Device name (e.g. "/dev/ttyUSB0", "COM3")
        baudrate: Line speed in bits per second
        parity: Parity mode
        bytesize: Data bits per character (usually 7 or 8)
        stopbits: Stop bits per character
    """
    port: Optional[str]
    baudrate: int = 9600
    parity: Parity = DEFAULT_PARITY
    bytesize: int = 8
    stopbits: StopBits = DEFAULT_STOP_BITS

    @classmethod
    def from_strings(
        cls,
        port: Optional[str],
        baudrate: int,
        parity: Optional[str],
        bytesize: int,
        stopbits: Optional[str],
    ) -> 'PortSettings':
        """Build settings from UI option strings, applying the silent defaults."""
        return cls(
            port=port,
            baudrate=baudrate,
            parity=resolve_parity(parity),
            bytesize=bytesize,
            stopbits=resolve_stop_bits(stopbits),
        )
