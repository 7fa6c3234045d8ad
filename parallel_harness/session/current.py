"""Ambient access to the running context's session.

Register :class:`AmbientContextObserver` with the dispatcher and test
code can reach its own session without passing context ids around:

    registry = ResourceRegistry()
    dispatcher.register(AmbientContextObserver())
    ...
    def test_login(session):
        CurrentSession(registry).get().navigate("/login")

Dispatch is synchronous on the context's own thread, so the id set
during BeforeMethod is visible to the body that follows it.
"""

import threading
from contextvars import ContextVar, Token
from typing import Dict, Optional

from parallel_harness.events.base import EventKind, LifecycleEvent, Observer
from parallel_harness.exceptions import HarnessError
from parallel_harness.session.registry import ResourceRegistry

_current_context_id: ContextVar[Optional[str]] = ContextVar(
    "parallel_harness_context_id", default=None
)


def current_context_id() -> str:
    context_id = _current_context_id.get()
    if context_id is None:
        raise HarnessError("Not running inside an execution context")
    return context_id


class AmbientContextObserver(Observer):
    """Tracks the active context id in a ContextVar."""

    def __init__(self) -> None:
        self._tokens: Dict[str, Token] = {}
        self._lock = threading.Lock()

    def on_event(self, event: LifecycleEvent) -> None:
        if event.kind is EventKind.BEFORE_METHOD:
            token = _current_context_id.set(event.context_id)
            with self._lock:
                self._tokens[event.context_id] = token
        elif event.kind is EventKind.AFTER_METHOD:
            with self._lock:
                token = self._tokens.pop(event.context_id, None)
            if token is not None:
                _current_context_id.reset(token)


class CurrentSession:
    """Looks up the session of whichever context is running."""

    def __init__(self, registry: ResourceRegistry):
        self.registry = registry

    def get(self):
        return self.registry.lookup(current_context_id())
