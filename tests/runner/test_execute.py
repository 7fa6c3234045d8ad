import pytest

from parallel_harness.events.base import EventKind, Observer
from parallel_harness.events.observers import FailureCaptureObserver
from parallel_harness.artifacts.store import FileArtifactStore
from parallel_harness.exceptions import HarnessError, NoResourceBoundError
from parallel_harness.runner.execute import ExecutionContext
from parallel_harness.runner.result import TestState
from parallel_harness.units.base import SkipUnit, TestUnit


def passing(session):
    session.navigate("https://example.org")


def failing(session):
    raise AssertionError("title mismatch")


def skipping(session):
    raise SkipUnit("feature flag off")


class LookupCheck(Observer):
    """Records whether the context's session is bound at each event."""

    def __init__(self, registry):
        self.registry = registry
        self.bound_at = {}

    def on_event(self, event):
        try:
            session = self.registry.lookup(event.context_id)
            self.bound_at[event.kind] = not session.closed
        except NoResourceBoundError:
            self.bound_at[event.kind] = False


class RaisingObserver(Observer):
    def on_event(self, event):
        raise RuntimeError(f"boom on {event.kind.value}")


@pytest.fixture
def make_context(registry, dispatcher, session_factory):
    def _make(body, context_id="ctx-test", params=None):
        return ExecutionContext(
            context_id,
            TestUnit(body.__name__, body, params or {}),
            registry,
            dispatcher,
            session_factory,
        )

    return _make


class TestExecutionContext:
    def test_success_path(self, make_context, dispatcher, recorder, session_factory):
        dispatcher.register(recorder)
        ctx = make_context(passing)
        assert ctx.state is TestState.CREATED

        result = ctx.run()

        assert ctx.state is TestState.SUCCEEDED
        assert result.state is TestState.SUCCEEDED
        assert result.elapsed is not None and result.elapsed >= 0
        assert result.executed_at is not None
        assert recorder.kinds_for("ctx-test") == [
            EventKind.BEFORE_METHOD,
            EventKind.TEST_SUCCESS,
            EventKind.AFTER_METHOD,
        ]
        assert session_factory.sessions[0].visited == ["https://example.org"]
        assert session_factory.sessions[0].closed

    def test_failure_path(self, make_context, dispatcher, recorder):
        dispatcher.register(recorder)

        result = make_context(failing).run()

        assert result.state is TestState.FAILED
        assert result.error_type == "AssertionError"
        assert result.message == "title mismatch"
        assert isinstance(result.error, AssertionError)
        assert recorder.kinds_for("ctx-test") == [
            EventKind.BEFORE_METHOD,
            EventKind.TEST_FAILURE,
            EventKind.AFTER_METHOD,
        ]

    def test_skip_path(self, make_context, dispatcher, recorder):
        dispatcher.register(recorder)

        result = make_context(skipping).run()

        assert result.state is TestState.SKIPPED
        assert result.message == "feature flag off"
        assert recorder.kinds_for("ctx-test") == [
            EventKind.BEFORE_METHOD,
            EventKind.TEST_SKIPPED,
            EventKind.AFTER_METHOD,
        ]

    def test_params_passed_to_body(self, make_context):
        seen = {}

        def with_params(session, url, retries):
            seen.update(url=url, retries=retries)

        make_context(with_params, params={"url": "/login", "retries": 2}).run()

        assert seen == {"url": "/login", "retries": 2}

    def test_run_twice_rejected(self, make_context):
        ctx = make_context(passing)
        ctx.run()

        with pytest.raises(HarnessError, match="already ran"):
            ctx.run()

    def test_events_carry_the_result(self, make_context, dispatcher, recorder):
        dispatcher.register(recorder)
        ctx = make_context(passing)

        ctx.run()

        assert all(e.result is ctx.result for e in recorder.events)


class TestResourceLifetime:
    @pytest.mark.parametrize("body", [passing, failing, skipping])
    def test_no_binding_left_after_teardown(self, make_context, registry, body):
        make_context(body).run()

        with pytest.raises(NoResourceBoundError):
            registry.lookup("ctx-test")
        assert len(registry) == 0

    def test_session_bound_until_after_method(self, make_context, dispatcher, registry):
        check = LookupCheck(registry)
        dispatcher.register(check)

        make_context(failing).run()

        assert check.bound_at == {
            EventKind.BEFORE_METHOD: True,
            EventKind.TEST_FAILURE: True,
            EventKind.AFTER_METHOD: True,
        }

    def test_failure_capture_sees_live_session(
        self, make_context, dispatcher, registry, sink, tmp_path
    ):
        store = FileArtifactStore(tmp_path)
        dispatcher.register(FailureCaptureObserver(registry, store, sink))

        result = make_context(failing).run()

        assert len(store.saved) == 1
        assert result.artifacts == [str(store.saved[0])]
        assert not [r for r in sink.records if "Skipping failure capture" in r[3]]

    def test_teardown_error_still_unbinds(self, make_context, registry, session_factory):
        session_factory.fail_close = True

        result = make_context(passing).run()

        assert result.state is TestState.SUCCEEDED
        assert "driver did not quit" in result.teardown_error
        assert len(registry) == 0

    def test_open_failure_is_a_failed_unit(
        self, make_context, dispatcher, recorder, registry, session_factory
    ):
        session_factory.fail_open = True
        dispatcher.register(recorder)
        ran = []

        result = make_context(lambda session: ran.append(session)).run()

        assert ran == []
        assert result.state is TestState.FAILED
        assert result.error_type == "ConnectionError"
        assert recorder.kinds_for("ctx-test") == [
            EventKind.BEFORE_METHOD,
            EventKind.TEST_FAILURE,
            EventKind.AFTER_METHOD,
        ]
        assert len(registry) == 0

    def test_duplicate_binding_fails_without_touching_owner(
        self, make_context, registry, session_factory
    ):
        owner_session = object()
        registry.bind("ctx-test", owner_session)

        result = make_context(passing).run()

        assert result.state is TestState.FAILED
        assert result.error_type == "DuplicateBindingError"
        assert registry.lookup("ctx-test") is owner_session
        assert session_factory.sessions[0].closed


class TestObserverFailures:
    def test_observer_errors_recorded_not_raised(
        self, make_context, dispatcher, recorder
    ):
        dispatcher.register(RaisingObserver())
        dispatcher.register(recorder)

        result = make_context(passing).run()

        assert result.state is TestState.SUCCEEDED
        assert len(result.observer_errors) == 3
        assert result.observer_errors[0] == (
            "BeforeMethod: RaisingObserver: boom on BeforeMethod"
        )
        assert len(recorder.events) == 3

    def test_observer_error_does_not_block_teardown(
        self, make_context, dispatcher, registry, session_factory
    ):
        dispatcher.register(RaisingObserver())

        make_context(failing).run()

        assert session_factory.sessions[0].closed
        assert len(registry) == 0


class TestStateTerminal:
    @pytest.mark.parametrize(
        "state,terminal",
        [
            (TestState.CREATED, False),
            (TestState.RUNNING, False),
            (TestState.SUCCEEDED, True),
            (TestState.FAILED, True),
            (TestState.SKIPPED, True),
        ],
    )
    def test_is_terminal(self, state, terminal):
        assert state.is_terminal is terminal
