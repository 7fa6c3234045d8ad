"""One execution context: a test unit run against its own session."""

import time
from datetime import datetime
from typing import Optional

from parallel_harness.events.base import EventKind, LifecycleEvent
from parallel_harness.events.dispatcher import LifecycleDispatcher
from parallel_harness.exceptions import (
    DuplicateBindingError,
    HarnessError,
    ObserverError,
    ResourceTeardownError,
)
from parallel_harness.logging_config import get_logger
from parallel_harness.runner.result import TestResult, TestState
from parallel_harness.session.base import Session, SessionConfig, SessionFactory
from parallel_harness.session.registry import ResourceRegistry
from parallel_harness.units.base import SkipUnit, TestUnit

logger = get_logger("runner")

_OUTCOME_EVENTS = {
    TestState.SUCCEEDED: EventKind.TEST_SUCCESS,
    TestState.FAILED: EventKind.TEST_FAILURE,
    TestState.SKIPPED: EventKind.TEST_SKIPPED,
}


class ExecutionContext:
    """Drives one unit through Created -> Running -> terminal -> teardown.

    Event order is BeforeMethod, exactly one of TestSuccess/TestFailure/
    TestSkipped, then AfterMethod. The session is closed and unbound only
    after AfterMethod has been dispatched, so failure observers always
    find it bound.
    """

    def __init__(
        self,
        context_id: str,
        unit: TestUnit,
        registry: ResourceRegistry,
        dispatcher: LifecycleDispatcher,
        session_factory: SessionFactory,
        session_config: Optional[SessionConfig] = None,
    ):
        self.context_id = context_id
        self.unit = unit
        self.registry = registry
        self.dispatcher = dispatcher
        self.session_factory = session_factory
        self.session_config = session_config
        self.state = TestState.CREATED
        self.result = TestResult(unit=unit.name, context_id=context_id)
        self._session: Optional[Session] = None
        self._bound = False

    def run(self) -> TestResult:
        if self.state is not TestState.CREATED:
            raise HarnessError(
                f"Context {self.context_id} already ran ({self.state.value})"
            )

        start_time = time.time()
        self.result.executed_at = datetime.now().isoformat()
        try:
            acquire_error = self._start()
            if acquire_error is None:
                outcome, error = self._execute_body()
            else:
                outcome, error = TestState.FAILED, acquire_error
            self.result.elapsed = time.time() - start_time
            self._finish(outcome, error)
        finally:
            self._teardown()
        return self.result

    def _set_state(self, state: TestState) -> None:
        self.state = state
        self.result.state = state

    def _start(self) -> Optional[Exception]:
        """Open and bind the session, then dispatch BeforeMethod.

        Returns the acquisition error, if any; the unit then fails without
        running its body.
        """
        self._set_state(TestState.RUNNING)
        error = None
        try:
            self._session = self.session_factory.open(self.session_config)
            self.registry.bind(self.context_id, self._session)
            self._bound = True
        except DuplicateBindingError as e:
            logger.error(
                f"Context {self.context_id} could not bind its session: {e}",
                extra={"context_id": self.context_id, "unit": self.unit.name},
            )
            self._close_session()
            error = e
        except Exception as e:
            logger.error(
                f"Context {self.context_id} could not open a session: {e}",
                extra={
                    "context_id": self.context_id,
                    "unit": self.unit.name,
                    "error": str(e),
                },
                exc_info=True,
            )
            error = e

        self._dispatch(EventKind.BEFORE_METHOD)
        return error

    def _execute_body(self):
        try:
            self.unit(self._session)
        except SkipUnit as e:
            return TestState.SKIPPED, e
        except Exception as e:
            logger.debug(
                f"Unit {self.unit.name} raised {type(e).__name__}: {e}",
                extra={"context_id": self.context_id, "unit": self.unit.name},
            )
            return TestState.FAILED, e
        return TestState.SUCCEEDED, None

    def _finish(self, outcome: TestState, error: Optional[Exception]) -> None:
        self._set_state(outcome)
        if error is not None:
            self.result.error = error
            self.result.error_type = type(error).__name__
            self.result.message = str(error)
        logger.info(
            f"Unit {self.unit.name} {outcome.value.lower()} in "
            f"{self.result.elapsed:.2f}s",
            extra={
                "context_id": self.context_id,
                "unit": self.unit.name,
                "elapsed": self.result.elapsed,
                "status": outcome.value,
            },
        )
        self._dispatch(_OUTCOME_EVENTS[outcome])

    def _teardown(self) -> None:
        try:
            self._dispatch(EventKind.AFTER_METHOD)
            self._close_session()
        finally:
            if self._bound:
                self.registry.unbind(self.context_id)
                self._bound = False

    def _close_session(self) -> None:
        session, self._session = self._session, None
        if session is None:
            return
        try:
            session.close()
        except Exception as e:
            error = e
            if not isinstance(e, ResourceTeardownError):
                error = ResourceTeardownError(str(e))
            self.result.teardown_error = str(error)
            logger.error(
                f"Context {self.context_id} session teardown failed: {error}",
                extra={"context_id": self.context_id, "error": str(error)},
            )

    def _dispatch(self, kind: EventKind) -> None:
        event = LifecycleEvent(kind=kind, context_id=self.context_id, result=self.result)
        try:
            self.dispatcher.dispatch(event)
        except ObserverError as e:
            logger.warning(
                f"Context {self.context_id}: {e}",
                extra={"context_id": self.context_id, "event": kind.value},
            )
            self.result.observer_errors.extend(
                f"{kind.value}: {type(obs).__name__}: {exc}" for obs, exc in e.failures
            )
