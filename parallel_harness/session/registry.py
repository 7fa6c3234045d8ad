"""Registry binding one session to exactly one execution context id."""

import threading
from typing import Any, Dict, List

from parallel_harness.exceptions import DuplicateBindingError, NoResourceBoundError


class ResourceRegistry:
    """Maps execution-context ids to their session handles.

    Keyed by explicit ids rather than thread identity, so the registry
    can be driven with synthetic ids. The lock only makes each operation
    atomic; same-id calls are sequential within one context's lifecycle.
    """

    def __init__(self) -> None:
        self._bindings: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def bind(self, context_id: str, resource: Any) -> None:
        with self._lock:
            if context_id in self._bindings:
                raise DuplicateBindingError(context_id)
            self._bindings[context_id] = resource

    def lookup(self, context_id: str) -> Any:
        with self._lock:
            try:
                return self._bindings[context_id]
            except KeyError:
                raise NoResourceBoundError(context_id) from None

    def unbind(self, context_id: str) -> None:
        """Remove a binding; a missing binding is a no-op."""
        with self._lock:
            self._bindings.pop(context_id, None)

    def bound_ids(self) -> List[str]:
        with self._lock:
            return list(self._bindings)

    def __contains__(self, context_id: str) -> bool:
        with self._lock:
            return context_id in self._bindings

    def __len__(self) -> int:
        with self._lock:
            return len(self._bindings)
