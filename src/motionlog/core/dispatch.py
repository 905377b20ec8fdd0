"""Single-threaded callback queue shared by every sensor subscription."""

from __future__ import annotations

import logging
import threading
from queue import Queue
from typing import Any, Callable, Optional, Tuple

logger = logging.getLogger(__name__)

_STOP = object()

Job = Tuple[Callable[..., Any], Tuple[Any, ...]]


class DispatchQueue:
    """
    Run submitted callbacks one at a time on a dedicated worker thread.

    Sources post sample deliveries here so handlers never run concurrently,
    which lets the per-kind loggers stay lock-free. Exceptions raised by a
    callback are logged and the worker keeps going.
    """

    def __init__(self, name: str = "MotionLogDispatch") -> None:
        self._name = name
        self._queue: "Queue[Any]" = Queue()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self._closed = False

    def _ensure_started(self) -> None:
        with self._lock:
            if self._thread is None:
                self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
                self._thread.start()

    def submit(self, fn: Callable[..., Any], *args: Any) -> bool:
        """Queue ``fn(*args)``; returns False once the queue is closed."""
        if self._closed:
            return False
        self._ensure_started()
        self._queue.put((fn, args))
        return True

    def on_worker_thread(self) -> bool:
        return self._thread is not None and threading.current_thread() is self._thread

    def drain(self, timeout: Optional[float] = None) -> bool:
        """Block until every job submitted so far has run."""
        if self._thread is None or self.on_worker_thread():
            return True
        if self._closed:
            self._thread.join(timeout)
            return not self._thread.is_alive()
        done = threading.Event()
        self._queue.put((done.set, ()))
        return done.wait(timeout)

    def close(self, timeout: Optional[float] = 1.0) -> None:
        """Run pending jobs, then stop the worker."""
        if self._closed:
            return
        self._closed = True
        if self._thread is None:
            return
        self._queue.put(_STOP)
        if not self.on_worker_thread():
            self._thread.join(timeout)

    @property
    def closed(self) -> bool:
        return self._closed

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            if item is _STOP:
                break
            fn, args = item
            try:
                fn(*args)
            except Exception:
                logger.exception("Dispatch callback %r failed", fn)
