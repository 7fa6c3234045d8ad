import threading

import pytest

from parallel_harness.context import RunContext
from parallel_harness.events.base import Observer
from parallel_harness.events.dispatcher import LifecycleDispatcher
from parallel_harness.session.base import Session, SessionFactory
from parallel_harness.session.registry import ResourceRegistry
from parallel_harness.sinks import LogSink


class FakeSession(Session):
    """In-memory stand-in for a browser session."""

    def __init__(self, number, fail_close=False, fail_snapshot=False):
        self.number = number
        self.fail_close = fail_close
        self.fail_snapshot = fail_snapshot
        self.visited = []
        self.closed = False
        self.snapshots = 0

    def navigate(self, url):
        self.visited.append(url)

    def snapshot(self):
        if self.fail_snapshot:
            raise RuntimeError("screenshot failed")
        if self.closed:
            raise RuntimeError("session already closed")
        self.snapshots += 1
        return f"png-{self.number}".encode()

    def close(self):
        self.closed = True
        if self.fail_close:
            raise RuntimeError("driver did not quit")


class FakeSessionFactory(SessionFactory):
    def __init__(self):
        self.sessions = []
        self.configs = []
        self.fail_open = False
        self.fail_close = False
        self.fail_snapshot = False
        self._lock = threading.Lock()

    def open(self, session_config=None):
        if self.fail_open:
            raise ConnectionError("browser unreachable")
        with self._lock:
            session = FakeSession(
                len(self.sessions) + 1,
                fail_close=self.fail_close,
                fail_snapshot=self.fail_snapshot,
            )
            self.sessions.append(session)
            self.configs.append(session_config)
        return session


class RecordingSink(LogSink):
    def __init__(self):
        self.records = []
        self._lock = threading.Lock()

    def emit(self, level, timestamp, context_tag, message):
        with self._lock:
            self.records.append((level, timestamp, context_tag, message))

    def for_tag(self, tag):
        return [r for r in self.records if r[2] == tag]


class RecordingObserver(Observer):
    def __init__(self):
        self.events = []
        self._lock = threading.Lock()

    def on_event(self, event):
        with self._lock:
            self.events.append(event)

    def kinds_for(self, context_id):
        return [e.kind for e in self.events if e.context_id == context_id]


@pytest.fixture
def session_factory():
    return FakeSessionFactory()


@pytest.fixture
def registry():
    return ResourceRegistry()


@pytest.fixture
def dispatcher():
    return LifecycleDispatcher()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def recorder():
    return RecordingObserver()


@pytest.fixture
def run_context(tmp_path):
    return RunContext(run_id="test_run", out_dir=tmp_path)
