"""
Session error reporting.

Operations on a SerialSession never raise for hardware problems. They return
False and leave a PortError in a single-slot holder that the caller polls.
"""

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Where a session error came from."""
    CONFIGURATION = "configuration"
    OPEN = "open"
    CLOSE = "close"
    SEND = "send"
    NO_HANDLE = "no_handle"
    NOT_OPEN = "not_open"


# Guard conditions render as short fixed messages without the header
_FIXED_MESSAGES = {
    ErrorKind.NO_HANDLE: "Port Null",
    ErrorKind.NOT_OPEN: "Port not open",
}


def header_text(port: Optional[str]) -> str:
    """Standard text prefixed to errors raised by the serial driver."""
    return (
        f"An error occurred while trying to open the serial port {port or '<unset>'}\n"
        "Please check the port settings and try again\n"
        "Error message - "
    )


@dataclass(frozen=True)
class PortError:
    """
    One recorded session error.

    Attributes:
        kind: Category of the failure
        port: Port name of the session at the time of the failure
        detail: Message of the underlying exception, if any
    """
    kind: ErrorKind
    port: Optional[str] = None
    detail: str = ""

    @classmethod
    def from_exception(cls, kind: ErrorKind, port: Optional[str], exc: BaseException) -> 'PortError':
        return cls(kind=kind, port=port, detail=str(exc) or exc.__class__.__name__)

    def render(self) -> str:
        """Human-readable message for display to the user."""
        fixed = _FIXED_MESSAGES.get(self.kind)
        if fixed is not None:
            return fixed
        return header_text(self.port) + self.detail

    def __str__(self) -> str:
        return self.render()


class ErrorSlot:
    """
    Holds at most one unread PortError.

    put() overwrites any unread error. take() returns the pending error and
    empties the slot in one locked step.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._error: Optional[PortError] = None

    def put(self, error: PortError) -> None:
        with self._lock:
            self._error = error

    def take(self) -> Optional[PortError]:
        with self._lock:
            error, self._error = self._error, None
            return error

    def __bool__(self) -> bool:
        with self._lock:
            return self._error is not None
