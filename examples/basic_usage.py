#!/usr/bin/env python3
"""Basic usage example for the parallel test harness.

This example demonstrates how to:
1. Declare test units
2. Wire the dispatcher with logging and failure-capture observers
3. Run the units concurrently with isolated browser sessions
4. Write the run's results
"""

import time
from pathlib import Path

from parallel_harness import (
    FailureCaptureObserver,
    FileArtifactStore,
    LifecycleDispatcher,
    LoggingObserver,
    ResourceRegistry,
    RunContext,
    SessionConfig,
    SuiteRunner,
    TestUnit,
)
from parallel_harness.logging_config import setup_logging
from parallel_harness.runner.aggregate import write_outputs
from parallel_harness.session.current import AmbientContextObserver, CurrentSession
from parallel_harness.session.playwright_session import PlaywrightSessionFactory

registry = ResourceRegistry()


def opens_example(session):
    session.navigate("https://example.org")
    assert "Example Domain" in session.page.title()


def reads_heading_without_session_arg(session):
    page = CurrentSession(registry).get().page
    page.goto("https://example.org")
    assert page.text_content("h1") == "Not the heading"


def main():
    """Run two units, one of which fails and leaves a screenshot."""
    setup_logging(enable_file=False)

    run_id = f"example-{int(time.time())}"
    ctx = RunContext(run_id=run_id, out_dir=Path("harness_runs"))

    dispatcher = LifecycleDispatcher()
    dispatcher.register(AmbientContextObserver())
    dispatcher.register(LoggingObserver())
    dispatcher.register(
        FailureCaptureObserver(registry, FileArtifactStore(ctx.artifacts_dir))
    )

    config = SessionConfig.from_mapping({"browserKind": "chromium", "windowState": "maximized"})
    runner = SuiteRunner(
        dispatcher, registry, PlaywrightSessionFactory(config), config, name="example"
    )
    report = runner.run(
        [
            TestUnit("opens_example", opens_example),
            TestUnit("reads_heading", reads_heading_without_session_arg),
        ],
        concurrency_degree=2,
    )

    out_dir = write_outputs(ctx, report)
    print(f"📊 {report.counts}")
    for path in report.artifacts:
        print(f"📸 {path}")
    print(f"📄 Results written to {out_dir}")


if __name__ == "__main__":
    main()
