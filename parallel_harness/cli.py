import argparse, importlib, os, sys, datetime
from parallel_harness import config
from parallel_harness.artifacts.store import FileArtifactStore
from parallel_harness.context import RunContext
from parallel_harness.events.dispatcher import LifecycleDispatcher
from parallel_harness.events.observers import FailureCaptureObserver, LoggingObserver
from parallel_harness.exceptions import ConfigurationError, RunIdCollisionError
from parallel_harness.logging_config import setup_logging
from parallel_harness.runner.aggregate import (
    collect,
    prepare_run_dir,
    summarize,
    write_outputs,
)
from parallel_harness.runner.suite import SuiteRunner
from parallel_harness.session.base import SessionConfig, session_config_from_env
from parallel_harness.session.current import AmbientContextObserver
from parallel_harness.session.playwright_session import PlaywrightSessionFactory
from parallel_harness.session.registry import ResourceRegistry
from parallel_harness.units.registry import units_for


def _session_config(args) -> SessionConfig:
    env_cfg = session_config_from_env()
    return SessionConfig.from_mapping(
        {
            "browserKind": args.browser or env_cfg.browser_kind,
            "implicitWaitMillis": (
                args.implicit_wait
                if args.implicit_wait is not None
                else env_cfg.implicit_wait_millis
            ),
            "windowState": args.window_state or env_cfg.window_state.value,
            "headless": env_cfg.headless if args.headless is None else args.headless,
        }
    )


def build_runner(ctx, session_config, suite_name, session_factory=None):
    """Wire registry, dispatcher and observers (ambient, logging, capture)."""
    registry = ResourceRegistry()
    dispatcher = LifecycleDispatcher()
    dispatcher.register(AmbientContextObserver())
    dispatcher.register(LoggingObserver())
    dispatcher.register(
        FailureCaptureObserver(registry, FileArtifactStore(ctx.artifacts_dir))
    )
    return SuiteRunner(
        dispatcher,
        registry,
        session_factory or PlaywrightSessionFactory(session_config),
        session_config=session_config,
        name=suite_name,
    )


def _run(args):
    setup_logging(json_format=True if args.json_logs else None, enable_file=not args.no_log_file)
    workers = args.workers
    if workers is None:
        raw = config.get_env(config.ENV_WORKERS, str(config.DEFAULT_WORKERS))
        try:
            workers = int(raw)
        except ValueError:
            raise SystemExit(f"{config.ENV_WORKERS} must be an integer, got '{raw}'")
    if workers <= 0:
        raise SystemExit("--workers must be > 0")
    try:
        session_config = _session_config(args)
    except ConfigurationError as e:
        raise SystemExit(str(e))

    sys.path.insert(0, os.getcwd())
    importlib.import_module(args.module)
    units = list(units_for(args.suite))
    if not units:
        raise SystemExit(f"No units registered for suite '{args.suite}' in {args.module}")

    run_id = args.run_id or f"{args.suite}-{datetime.datetime.now().strftime('%Y%m%dT%H%M%S')}"
    ctx = RunContext(run_id=run_id, out_dir=args.out)
    try:
        prepare_run_dir(ctx)
        runner = build_runner(ctx, session_config, args.suite)
        report = runner.run(units, workers)
        out_dir = write_outputs(ctx, report)
    except RunIdCollisionError as e:
        raise SystemExit(str(e))

    counts = ", ".join(f"{k}={v}" for k, v in sorted(report.counts.items()))
    print(f"Suite '{args.suite}': {counts}")
    print(f"Results -> {out_dir}")
    for path in report.artifacts:
        print(f"Artifact: {path}")
    return 1 if report.failed else 0


def _report(args):
    ctx = RunContext(run_id=args.run_id, out_dir=args.out)
    counts = summarize(collect(ctx))
    if not counts:
        print(f"No results stored for run '{args.run_id}'")
        return 1
    for state, n in sorted(counts.items()):
        print(f"{state}: {n}")
    return 0


def main(argv=None):
    p = argparse.ArgumentParser(prog="parallel-harness", description="Parallel browser test harness")
    subs = p.add_subparsers(dest="cmd", required=True)

    p1 = subs.add_parser("run", help="Run the units of one suite")
    p1.add_argument("--module", required=True, type=str, help="Module that registers the units")
    p1.add_argument("--suite", required=True, type=str)
    p1.add_argument("--workers", type=int, help=f"Concurrency degree (default: {config.ENV_WORKERS} or {config.DEFAULT_WORKERS})")
    p1.add_argument("--run-id", type=str)
    p1.add_argument("--out", type=str, default=config.DEFAULT_OUT_DIR)
    p1.add_argument("--browser", choices=config.SUPPORTED_BROWSERS)
    p1.add_argument("--window-state", choices=["maximized", "default"])
    p1.add_argument("--implicit-wait", type=int, help="Default page timeout in milliseconds")
    p1.add_argument("--headless", dest="headless", action="store_true", default=None)
    p1.add_argument("--headed", dest="headless", action="store_false")
    p1.add_argument("--json-logs", action="store_true", help="Structured JSON log output")
    p1.add_argument("--no-log-file", action="store_true", help="Log to console only")
    p1.set_defaults(func=_run)

    p2 = subs.add_parser("report", help="Print per-state counts of a stored run")
    p2.add_argument("--run-id", required=True, type=str)
    p2.add_argument("--out", type=str, default=config.DEFAULT_OUT_DIR)
    p2.set_defaults(func=_report)

    args = p.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
