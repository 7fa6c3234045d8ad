"""Lifecycle event variants and the observer capability."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Optional

from parallel_harness.runner.result import TestResult


class EventKind(Enum):
    BEFORE_METHOD = "BeforeMethod"
    AFTER_METHOD = "AfterMethod"
    TEST_SUCCESS = "TestSuccess"
    TEST_FAILURE = "TestFailure"
    TEST_SKIPPED = "TestSkipped"
    SUITE_START = "SuiteStart"
    SUITE_FINISH = "SuiteFinish"

    @property
    def is_suite_level(self) -> bool:
        return self in (EventKind.SUITE_START, EventKind.SUITE_FINISH)


@dataclass(frozen=True)
class LifecycleEvent:
    """A state transition notification.

    ``context_id`` and ``result`` are None for suite-level events;
    ``SuiteFinish`` carries per-state ``counts`` instead.
    """

    kind: EventKind
    context_id: Optional[str] = None
    result: Optional[TestResult] = None
    suite: Optional[str] = None
    counts: Dict[str, int] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def tag(self) -> str:
        return self.context_id or "suite"


class Observer:
    """Receives every dispatched event on the dispatching thread.

    Observers are invoked concurrently from distinct contexts and must be
    thread-safe.
    """

    def on_event(self, event: LifecycleEvent) -> None:
        raise NotImplementedError
