"""
Queue-backed packet subscription.

A PacketChannel is a listener that parks packets in a queue so a consumer
thread can drain them at its own pace instead of running inside the
session's watcher thread.
"""

import logging
import queue
import threading
from typing import Callable, Iterator, Optional

logger = logging.getLogger(__name__)

# Wakes an iterating consumer once the channel is closed
_CLOSED = object()


class PacketChannel:
    """
    Receives inbound packets from a SerialSession.

    Example:
        >>> with session.subscribe() as packets:
        ...     for packet in packets:
        ...         handle(packet)
    """

    def __init__(self, maxsize: int = 0, on_close: Optional[Callable[['PacketChannel'], None]] = None):
        """
        Args:
            maxsize: Queue bound, 0 for unbounded. When full, new packets are
                     dropped so the session is never blocked.
            on_close: Called once with this channel when it is closed
        """
        self._queue: queue.Queue = queue.Queue(maxsize)
        self._on_close = on_close
        self._closed = False
        # Orders puts against close so no packet lands behind the marker
        self._lock = threading.Lock()
        self.dropped = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def __call__(self, packet: bytes) -> None:
        """Listener entry point used by the session."""
        with self._lock:
            if self._closed:
                return
            try:
                self._queue.put_nowait(packet)
                return
            except queue.Full:
                self.dropped += 1
        logger.warning(f"Packet channel full, dropped {len(packet)} byte packet")

    def get(self, timeout: Optional[float] = None) -> Optional[bytes]:
        """
        Wait for the next packet.

        Args:
            timeout: Seconds to wait, None to wait forever

        Returns:
            Next packet, or None if the channel was closed

        Raises:
            queue.Empty: If the timeout expired with no packet
        """
        return self._unwrap(self._queue.get(timeout=timeout))

    def get_nowait(self) -> Optional[bytes]:
        """Next queued packet, or None if there is none or the channel is closed."""
        try:
            return self._unwrap(self._queue.get_nowait())
        except queue.Empty:
            return None

    def _unwrap(self, item):
        if item is _CLOSED:
            # Leave the marker for any other waiting consumer
            self._queue.put_nowait(_CLOSED)
            return None
        return item

    def __iter__(self) -> Iterator[bytes]:
        while True:
            packet = self.get()
            if packet is None:
                return
            yield packet

    def close(self) -> None:
        """Stop receiving packets and wake any blocked consumer."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            # Bypass maxsize so the marker always fits
            with self._queue.mutex:
                self._queue.queue.append(_CLOSED)
                self._queue.unfinished_tasks += 1
                self._queue.not_empty.notify_all()
        if self._on_close is not None:
            self._on_close(self)

    def __enter__(self) -> 'PacketChannel':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
