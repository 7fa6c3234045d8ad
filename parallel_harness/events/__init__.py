"""Lifecycle events, the dispatcher and the built-in observers."""

from parallel_harness.events.base import EventKind, LifecycleEvent, Observer
from parallel_harness.events.dispatcher import LifecycleDispatcher
from parallel_harness.events.observers import FailureCaptureObserver, LoggingObserver

__all__ = [
    "EventKind",
    "LifecycleEvent",
    "Observer",
    "LifecycleDispatcher",
    "FailureCaptureObserver",
    "LoggingObserver",
]
