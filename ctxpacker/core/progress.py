# ctxpacker/core/progress.py

from __future__ import annotations

import queue
import threading
from typing import Callable, Iterator, Optional, Protocol, Tuple


class CancelEventLike(Protocol):
    """Duck-typed cancel event (e.g., threading.Event)."""
    def is_set(self) -> bool: ...


class ProgressSink(Protocol):
    """What long-running operations report to."""
    def report(self, status: str, percent: Optional[float] = None) -> None: ...
    def clear(self) -> None: ...

    @property
    def is_cancelled(self) -> bool: ...


def is_cancelled(cancel_event: Optional[CancelEventLike]) -> bool:
    return bool(cancel_event is not None and getattr(cancel_event, "is_set", None) and cancel_event.is_set())


class ProgressReporter:
    """
    Calls ``callback(status, percent)`` for every report.

    Reports are dropped once cancellation was requested. ``clear()`` sends
    ``("", None)`` so an observer can reset its status line.
    """

    def __init__(
        self,
        callback: Callable[[str, Optional[float]], None],
        cancel_event: Optional[threading.Event] = None,
    ):
        if callback is None:
            raise ValueError("callback is required")
        self._callback = callback
        self.cancel_event = cancel_event if cancel_event is not None else threading.Event()

    @property
    def is_cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def report(self, status: str, percent: Optional[float] = None) -> None:
        if self.is_cancelled:
            return
        self._callback(status, percent)

    def clear(self) -> None:
        self._callback("", None)

    def cancel(self) -> None:
        self.cancel_event.set()


class ProgressChannel(ProgressReporter):
    """
    Progress reporter that hands messages to another thread through a queue.

    The worker calls ``report``/``clear``; the observer calls ``drain()``.
    """

    def __init__(self, cancel_event: Optional[threading.Event] = None):
        self._queue: "queue.Queue[Tuple[str, Optional[float]]]" = queue.Queue()
        super().__init__(self._put, cancel_event)

    def _put(self, status: str, percent: Optional[float]) -> None:
        self._queue.put((status, percent))

    def drain(self) -> Iterator[Tuple[str, Optional[float]]]:
        while True:
            try:
                yield self._queue.get_nowait()
            except queue.Empty:
                return
