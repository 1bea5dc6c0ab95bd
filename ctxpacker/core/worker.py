# ctxpacker/core/worker.py

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Dict

from ctxpacker.utils.logger import logger


class OperationWorker:
    """
    Runs tree operations on one background thread.

    Every submission has a kind ("filter", "search", ...). Submitting a new
    operation of a kind cancels the one still pending or running for that
    kind; the callable gets its cancel event as ``cancel_event=``.
    """

    def __init__(self):
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="ctxpacker")
        self._events: Dict[str, threading.Event] = {}
        self._lock = threading.Lock()

    def submit(self, kind: str, fn: Callable[..., Any], *args, **kwargs) -> Future:
        event = threading.Event()
        with self._lock:
            previous = self._events.get(kind)
            if previous is not None:
                logger.debug(f"Cancelling previous '{kind}' operation")
                previous.set()
            self._events[kind] = event
        return self._executor.submit(fn, *args, cancel_event=event, **kwargs)

    def cancel(self, kind: str) -> None:
        with self._lock:
            event = self._events.pop(kind, None)
        if event is not None:
            event.set()

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            for event in self._events.values():
                event.set()
            self._events.clear()
        self._executor.shutdown(wait=wait)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.shutdown()
