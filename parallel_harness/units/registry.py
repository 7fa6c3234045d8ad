"""Unit registration and discovery by suite name."""

from typing import Any, Callable, Dict, Iterable, List, Tuple

from parallel_harness.exceptions import UnitRegistrationError
from parallel_harness.units.base import TestUnit

# Internal registry: (name, suite, body, params)
_REGISTRY: List[Tuple[str, str, Callable[..., Any], Dict[str, Any]]] = []


def register(*, suite: str, name: str = None, **default_params):
    """Decorator to register a function as a test unit of ``suite``."""

    def _decorator(body: Callable[..., Any]):
        unit_name = name or body.__name__
        for existing, existing_suite, _, _ in _REGISTRY:
            if existing == unit_name and existing_suite == suite:
                raise UnitRegistrationError(
                    f"Unit '{unit_name}' is already registered in suite '{suite}'"
                )
        _REGISTRY.append((unit_name, suite, body, dict(default_params)))
        return body

    return _decorator


def units_for(suite: str) -> Iterable[TestUnit]:
    """Get all units registered for suite, in registration order."""
    for unit_name, sid, body, params in _REGISTRY:
        if sid == suite:
            yield TestUnit(unit_name, body, dict(params))


def list_registered() -> List[Dict[str, Any]]:
    """List all registered units."""
    return [
        {"name": unit_name, "suite": sid, "params": dict(params)}
        for unit_name, sid, _, params in _REGISTRY
    ]
