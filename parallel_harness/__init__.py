"""Parallel test-execution harness with per-context browser sessions and
lifecycle observers."""

__version__ = "0.1.0"

# Core components
from parallel_harness.context import RunContext
from parallel_harness.session.base import Session, SessionConfig, SessionFactory, WindowState
from parallel_harness.session.registry import ResourceRegistry
from parallel_harness.events.base import EventKind, LifecycleEvent, Observer
from parallel_harness.events.dispatcher import LifecycleDispatcher
from parallel_harness.events.observers import FailureCaptureObserver, LoggingObserver
from parallel_harness.artifacts.store import Artifact, ArtifactStore, FileArtifactStore
from parallel_harness.units.base import SkipUnit, TestUnit
from parallel_harness.units.registry import register, units_for
from parallel_harness.runner.result import TestResult, TestState
from parallel_harness.runner.execute import ExecutionContext
from parallel_harness.runner.suite import SuiteReport, SuiteRunner

__all__ = [
    # Version
    "__version__",
    # Core
    "RunContext",
    "Session",
    "SessionConfig",
    "SessionFactory",
    "WindowState",
    "ResourceRegistry",
    # Events
    "EventKind",
    "LifecycleEvent",
    "Observer",
    "LifecycleDispatcher",
    "FailureCaptureObserver",
    "LoggingObserver",
    # Artifacts
    "Artifact",
    "ArtifactStore",
    "FileArtifactStore",
    # Units
    "SkipUnit",
    "TestUnit",
    "register",
    "units_for",
    # Execution
    "TestResult",
    "TestState",
    "ExecutionContext",
    "SuiteReport",
    "SuiteRunner",
]
