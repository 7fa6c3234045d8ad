"""Synchronous, ordered event dispatch to registered observers."""

import threading
from typing import List, Tuple

from parallel_harness.events.base import LifecycleEvent, Observer
from parallel_harness.exceptions import ObserverError
from parallel_harness.logging_config import get_logger

logger = get_logger("events")


class LifecycleDispatcher:
    """Owns the ordered observer list and fans events out to it.

    ``dispatch`` runs on the caller's thread. Every observer sees the
    event even when an earlier one raises; failures are raised together
    as one :class:`ObserverError` after the whole chain has run.
    """

    def __init__(self) -> None:
        self._observers: Tuple[Observer, ...] = ()
        self._lock = threading.Lock()

    def register(self, observer: Observer) -> None:
        with self._lock:
            self._observers = self._observers + (observer,)
        logger.debug(f"Registered observer {type(observer).__name__}")

    @property
    def observers(self) -> Tuple[Observer, ...]:
        return self._observers

    def dispatch(self, event: LifecycleEvent) -> None:
        failures: List[Tuple[Observer, Exception]] = []
        for observer in self._observers:
            try:
                observer.on_event(event)
            except Exception as e:
                logger.error(
                    f"Observer {type(observer).__name__} failed on "
                    f"{event.kind.value}: {e}",
                    extra={
                        "context_id": event.context_id,
                        "event": event.kind.value,
                        "observer": type(observer).__name__,
                        "error": str(e),
                    },
                    exc_info=True,
                )
                failures.append((observer, e))
        if failures:
            raise ObserverError(event, failures)
