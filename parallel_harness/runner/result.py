"""Result types: per-context TestResult and TestState enum."""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import List, Optional


class TestState(Enum):
    """Execution context states; the last three are terminal."""

    CREATED = "Created"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    SKIPPED = "Skipped"

    __test__ = False

    @property
    def is_terminal(self) -> bool:
        return self in (TestState.SUCCEEDED, TestState.FAILED, TestState.SKIPPED)


@dataclass
class TestResult:
    unit: str
    context_id: str
    state: TestState = TestState.CREATED
    elapsed: Optional[float] = None
    executed_at: Optional[str] = None  # ISO timestamp when the context started running
    message: str = ""
    error_type: Optional[str] = None
    artifacts: List[str] = field(default_factory=list)
    observer_errors: List[str] = field(default_factory=list)
    teardown_error: Optional[str] = None
    error: Optional[BaseException] = field(default=None, repr=False, compare=False)

    __test__ = False  # not a pytest test class

    def to_dict(self):
        # the live exception is not serialisable; error_type/message carry it
        d = {f.name: getattr(self, f.name) for f in fields(self) if f.name != "error"}
        d["state"] = self.state.value
        d["artifacts"] = list(self.artifacts)
        d["observer_errors"] = list(self.observer_errors)
        return d
