"""
Concurrency utilities.

Provides a `synchronized` decorator that acquires an instance `_lock` if
present, and the dispatchers used to run best-effort side effects
(persistence, reminder resync) after a registry mutation has committed.

Side effects are fire-and-forget: the mutating call never waits for them and
their failures are logged, never raised back to the caller.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from functools import wraps
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)


def synchronized(func: Callable) -> Callable:
    """Decorator that acquires `self._lock` if present on the instance.

    If no `_lock` attribute exists on `self`, the function is executed without
    locking.
    """

    @wraps(func)
    def _wrapped(*args, **kwargs):
        self = args[0] if args else None
        lock = getattr(self, "_lock", None)
        if lock is None:
            return func(*args, **kwargs)
        with lock:
            return func(*args, **kwargs)

    return _wrapped


def _run_logged(description: str, fn: Callable[..., Any], args: tuple, kwargs: dict) -> None:
    try:
        fn(*args, **kwargs)
    except Exception as exc:
        logger.warning("Side effect '%s' failed: %s", description, exc, exc_info=True)


class Dispatcher(Protocol):
    """Anything that can run a side effect later (or now)."""

    def submit(self, description: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None: ...

    def drain(self, timeout: float | None = None) -> bool: ...

    def shutdown(self, wait: bool = True) -> None: ...


class InlineDispatcher:
    """Runs side effects immediately on the calling thread (tests, CLI)."""

    def submit(self, description: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        _run_logged(description, fn, args, kwargs)

    def drain(self, timeout: float | None = None) -> bool:
        return True

    def shutdown(self, wait: bool = True) -> None:
        return None


class SerialDispatcher:
    """Single background worker; side effects run one at a time in submit order.

    FIFO order is what keeps a plant's reminder cancel ahead of the matching
    reschedule when several mutations happen back to back.
    """

    def __init__(self, name: str = "CareSideEffects") -> None:
        self._name = name
        self._executor: ThreadPoolExecutor | None = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)
        self._lock = threading.Lock()

    def submit(self, description: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        with self._lock:
            if self._executor is None:
                logger.warning("Dispatcher %s is shut down; dropping '%s'", self._name, description)
                return
            self._executor.submit(_run_logged, description, fn, args, kwargs)

    def drain(self, timeout: float | None = None) -> bool:
        """Block until everything submitted so far has run."""
        with self._lock:
            if self._executor is None:
                return True
            marker: Future = self._executor.submit(lambda: None)
        try:
            marker.result(timeout=timeout)
        except FutureTimeoutError:
            return False
        return True

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait)
            logger.debug("Dispatcher %s stopped", self._name)
