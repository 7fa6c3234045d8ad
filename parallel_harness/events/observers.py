"""Built-in observers: event logging and failure screenshot capture."""

from datetime import datetime

from parallel_harness.artifacts.store import Artifact, ArtifactStore
from parallel_harness.events.base import EventKind, LifecycleEvent, Observer
from parallel_harness.exceptions import NoResourceBoundError
from parallel_harness.session.registry import ResourceRegistry
from parallel_harness.sinks import LogLevel, LogSink, LoggerSink



class LoggingObserver(Observer):
    """Writes one sink record per lifecycle event."""

    def __init__(self, sink: LogSink = None):
        self.sink = sink or LoggerSink()

    def on_event(self, event: LifecycleEvent) -> None:
        level, message = self._describe(event)
        self.sink.emit(level, event.timestamp, event.tag, message)

    @staticmethod
    def _describe(event):
        kind = event.kind
        result = event.result
        if kind is EventKind.SUITE_START:
            return LogLevel.INFO, f"Suite '{event.suite}' started"
        if kind is EventKind.SUITE_FINISH:
            counts = ", ".join(f"{k}={v}" for k, v in sorted(event.counts.items()))
            return LogLevel.INFO, f"Suite '{event.suite}' finished ({counts or 'no units'})"
        if kind is EventKind.BEFORE_METHOD:
            return LogLevel.INFO, f"Starting {result.unit}"
        if kind is EventKind.TEST_SUCCESS:
            return LogLevel.INFO, f"{result.unit} passed in {result.elapsed or 0:.2f}s"
        if kind is EventKind.TEST_FAILURE:
            return (
                LogLevel.ERROR,
                f"{result.unit} failed in {result.elapsed or 0:.2f}s: "
                f"{result.error_type}: {result.message}",
            )
        if kind is EventKind.TEST_SKIPPED:
            return LogLevel.WARN, f"{result.unit} skipped: {result.message}"
        return LogLevel.DEBUG, f"Finished {result.unit} ({result.state.value})"


class FailureCaptureObserver(Observer):
    """On TestFailure, snapshot the failing context's session into the store."""

    def __init__(
        self,
        registry: ResourceRegistry,
        store: ArtifactStore,
        sink: LogSink = None,
        name: str = "failure",
    ):
        self.registry = registry
        self.store = store
        self.sink = sink or LoggerSink()
        self.name = name

    def on_event(self, event: LifecycleEvent) -> None:
        if event.kind is not EventKind.TEST_FAILURE:
            return

        try:
            session = self.registry.lookup(event.context_id)
        except NoResourceBoundError as e:
            self.sink.emit(
                LogLevel.WARN,
                datetime.now(),
                event.tag,
                f"Skipping failure capture: {e}",
            )
            return

        try:
            payload = session.snapshot()
        except Exception as e:
            self.sink.emit(
                LogLevel.ERROR,
                datetime.now(),
                event.tag,
                f"Failure capture failed: {type(e).__name__}: {e}",
            )
            raise

        artifact = Artifact(
            name=self.name,
            context_id=event.context_id,
            payload=payload,
            created_at=datetime.now(),
        )
        path = self.store.save(artifact)
        if event.result is not None:
            event.result.artifacts.append(str(path))
        self.sink.emit(
            LogLevel.INFO, datetime.now(), event.tag, f"Saved failure artifact {path}"
        )
