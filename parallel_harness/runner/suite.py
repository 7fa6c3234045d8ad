"""Suite runner: bounded-concurrency execution of independent test units."""

import itertools
import threading
import time
from collections import Counter
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from parallel_harness.events.base import EventKind, LifecycleEvent
from parallel_harness.events.dispatcher import LifecycleDispatcher
from parallel_harness.exceptions import ConfigurationError, ObserverError
from parallel_harness.logging_config import get_logger
from parallel_harness.runner.execute import ExecutionContext
from parallel_harness.runner.result import TestResult, TestState
from parallel_harness.session.base import SessionConfig, SessionFactory
from parallel_harness.session.registry import ResourceRegistry
from parallel_harness.units.base import TestUnit

logger = get_logger("runner")

_context_counter = itertools.count(1)
_counter_lock = threading.Lock()


def next_context_id() -> str:
    """Issue a process-wide unique execution-context id."""
    with _counter_lock:
        return f"ctx-{next(_context_counter):05d}"


@dataclass
class SuiteReport:
    suite: str
    started_at: Optional[str] = None
    elapsed: Optional[float] = None
    results: List[TestResult] = field(default_factory=list)
    suite_errors: List[str] = field(default_factory=list)

    @property
    def counts(self) -> Dict[str, int]:
        """Terminal state value -> number of units; zero counts are omitted."""
        return dict(
            Counter(r.state.value for r in self.results if r.state.is_terminal)
        )

    @property
    def artifacts(self) -> List[str]:
        return [path for r in self.results for path in r.artifacts]

    @property
    def errors(self) -> List[str]:
        errors = list(self.suite_errors)
        for r in self.results:
            prefix = f"{r.context_id} {r.unit}"
            if r.error_type:
                errors.append(f"{prefix}: {r.error_type}: {r.message}")
            errors.extend(f"{prefix}: {e}" for e in r.observer_errors)
            if r.teardown_error:
                errors.append(f"{prefix}: teardown: {r.teardown_error}")
        return errors

    @property
    def failed(self) -> bool:
        return any(
            r.state is TestState.FAILED or not r.state.is_terminal for r in self.results
        )

    def to_dict(self):
        return {
            "suite": self.suite,
            "started_at": self.started_at,
            "elapsed": self.elapsed,
            "counts": self.counts,
            "artifacts": self.artifacts,
            "errors": self.errors,
            "results": [r.to_dict() for r in self.results],
        }


class SuiteRunner:
    """Runs units concurrently, each in its own ExecutionContext.

    Contexts are independent: a failing unit never cancels its siblings.
    """

    def __init__(
        self,
        dispatcher: LifecycleDispatcher,
        registry: ResourceRegistry,
        session_factory: SessionFactory,
        session_config: Optional[SessionConfig] = None,
        name: str = "suite",
    ):
        self.dispatcher = dispatcher
        self.registry = registry
        self.session_factory = session_factory
        self.session_config = session_config
        self.name = name

    def run(self, units: Iterable[TestUnit], concurrency_degree: int) -> SuiteReport:
        units = self._validate(units, concurrency_degree)
        overall_start = time.time()
        report = SuiteReport(suite=self.name, started_at=datetime.now().isoformat())

        logger.info(
            f"Running {len(units)} units in suite '{self.name}' "
            f"(concurrency={concurrency_degree})",
            extra={
                "suite": self.name,
                "unit_count": len(units),
                "concurrency": concurrency_degree,
            },
        )
        self._dispatch_suite_event(EventKind.SUITE_START, report)

        contexts = [
            ExecutionContext(
                next_context_id(),
                unit,
                self.registry,
                self.dispatcher,
                self.session_factory,
                self.session_config,
            )
            for unit in units
        ]
        if contexts:
            with ThreadPoolExecutor(
                max_workers=concurrency_degree,
                thread_name_prefix=f"{self.name}-worker",
            ) as executor:
                future_to_context = {executor.submit(ctx.run): ctx for ctx in contexts}
                for future in as_completed(future_to_context):
                    ctx = future_to_context[future]
                    try:
                        future.result()
                    except Exception as e:
                        logger.error(
                            f"Context {ctx.context_id} ended abnormally: {e}",
                            extra={"context_id": ctx.context_id, "error": str(e)},
                            exc_info=True,
                        )
                        report.suite_errors.append(
                            f"{ctx.context_id} {ctx.unit.name}: {type(e).__name__}: {e}"
                        )

        report.results = [ctx.result for ctx in contexts]
        report.elapsed = time.time() - overall_start
        self._dispatch_suite_event(EventKind.SUITE_FINISH, report)

        logger.info(
            f"Suite '{self.name}' completed in {report.elapsed:.2f}s: {report.counts}",
            extra={"suite": self.name, "elapsed": report.elapsed, "counts": report.counts},
        )
        return report

    @staticmethod
    def _validate(units, concurrency_degree) -> List[TestUnit]:
        if isinstance(concurrency_degree, bool) or not isinstance(concurrency_degree, int):
            raise ConfigurationError(
                f"concurrency_degree must be an int, got {type(concurrency_degree).__name__}"
            )
        if concurrency_degree <= 0:
            raise ConfigurationError(
                f"concurrency_degree must be > 0, got {concurrency_degree}"
            )
        if units is None or isinstance(units, (str, bytes)):
            raise ConfigurationError("units must be an iterable of TestUnit")
        try:
            units = list(units)
        except TypeError:
            raise ConfigurationError("units must be an iterable of TestUnit") from None

        validated = []
        for unit in units:
            if isinstance(unit, TestUnit):
                validated.append(unit)
            elif callable(unit):
                validated.append(TestUnit(getattr(unit, "__name__", repr(unit)), unit))
            else:
                raise ConfigurationError(f"Not a test unit: {unit!r}")
        return validated

    def _dispatch_suite_event(self, kind: EventKind, report: SuiteReport) -> None:
        event = LifecycleEvent(
            kind=kind,
            suite=self.name,
            counts=report.counts if kind is EventKind.SUITE_FINISH else {},
        )
        try:
            self.dispatcher.dispatch(event)
        except ObserverError as e:
            logger.warning(f"Suite '{self.name}': {e}", extra={"event": kind.value})
            report.suite_errors.extend(
                f"{kind.value}: {type(obs).__name__}: {exc}" for obs, exc in e.failures
            )
