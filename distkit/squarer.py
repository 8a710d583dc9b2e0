"""Turns a queue of integers into a stream of their squares."""

from __future__ import annotations

import queue
import threading
import time
from collections.abc import Iterator

_POLL_SECONDS = 0.05


class _SquareStream:
    """Read side of a squarer: each ``get`` yields the square of the next input."""

    def __init__(self, source: queue.Queue, closed: threading.Event) -> None:
        self._source = source
        self._closed = closed

    def get(self, timeout: float | None = None) -> int:
        """Return the next square.

        Raises ``queue.Empty`` if no input arrives within ``timeout`` and
        ``RuntimeError`` once the squarer has been closed.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            if self._closed.is_set():
                raise RuntimeError("squarer is closed")
            wait = _POLL_SECONDS
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise queue.Empty
                wait = min(wait, remaining)
            try:
                value = self._source.get(timeout=wait)
            except queue.Empty:
                continue
            return value * value

    def __iter__(self) -> Iterator[int]:
        while True:
            try:
                yield self.get()
            except RuntimeError:
                return


class Squarer:
    """Squares every integer read from a source queue until closed."""

    def __init__(self) -> None:
        self._closed = threading.Event()
        self._stream: _SquareStream | None = None

    def initialize(self, source: queue.Queue) -> _SquareStream:
        """Attach the source queue and return the stream of squares."""
        if self._stream is not None:
            raise RuntimeError("squarer is already initialized")
        self._stream = _SquareStream(source, self._closed)
        return self._stream

    def close(self) -> None:
        """Stop delivering squares; waiting readers are released."""
        if self._stream is None:
            raise RuntimeError("squarer is not initialized")
        self._closed.set()