"""Test units: a named body run against one session."""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict


class SkipUnit(Exception):
    """Raise from a unit body to end the unit as Skipped."""

    pass


@dataclass
class TestUnit:
    """A test body plus the keyword parameters it is called with.

    Example:
        >>> def open_home(session, url):
        ...     session.navigate(url)
        >>> unit = TestUnit("open_home", open_home, {"url": "https://example.org"})
    """

    name: str
    body: Callable[..., Any]
    params: Dict[str, Any] = field(default_factory=dict)

    __test__ = False

    def __call__(self, session) -> Any:
        return self.body(session, **self.params)
