"""Cooperative cancellation shared by every blocking stage of a batch."""

import logging
import threading
from collections.abc import Callable

from reup.models.errors import OperationCancelledError

logger = logging.getLogger(__name__)


class CancellationToken:
    """A one-shot cancellation signal.

    Blocking operations either poll ``cancelled``, sleep through ``wait`` or
    ``register`` a callback that interrupts them (e.g. killing a subprocess).
    Callbacks run exactly once, in the thread that calls ``cancel``, or
    immediately on registration when the token is already cancelled.
    """

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: dict[int, Callable[[], None]] = {}
        self._next_id = 0

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Signal cancellation and fire registered callbacks."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks = list(self._callbacks.values())
            self._callbacks.clear()
        for callback in callbacks:
            self._invoke(callback)

    def raise_if_cancelled(self, component: str = "") -> None:
        if self._event.is_set():
            raise OperationCancelledError(component=component)

    def wait(self, timeout: float | None = None) -> bool:
        """Sleep up to ``timeout`` seconds; return True if cancelled meanwhile."""
        return self._event.wait(timeout)

    def register(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Run ``callback`` on cancellation. Returns a function that unregisters it."""
        with self._lock:
            if not self._event.is_set():
                handle = self._next_id
                self._next_id += 1
                self._callbacks[handle] = callback

                def unregister() -> None:
                    with self._lock:
                        self._callbacks.pop(handle, None)

                return unregister
        self._invoke(callback)
        return lambda: None

    @staticmethod
    def _invoke(callback: Callable[[], None]) -> None:
        try:
            callback()
        except Exception:
            logger.exception("Cancellation callback failed")
