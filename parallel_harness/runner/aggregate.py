import os
import json
from typing import Dict

import pandas as pd

from parallel_harness.exceptions import RunIdCollisionError
from parallel_harness.runner.suite import SuiteReport

RESULT_COLUMNS = [
    "context_id",
    "unit",
    "state",
    "elapsed",
    "executed_at",
    "error_type",
    "message",
    "artifacts",
    "observer_errors",
    "teardown_error",
]


def _ensure_dir(path: str, check_collision: bool = True) -> None:
    """Create directory, optionally checking for run_id collisions."""
    if check_collision and os.path.exists(path):
        if os.path.exists(os.path.join(path, "results.jsonl")):
            raise RunIdCollisionError(f"Run directory already exists with data: {path}")
    os.makedirs(path, exist_ok=True)


def prepare_run_dir(ctx) -> str:
    """Claim the run directory before any unit runs; rejects a reused run_id."""
    out_dir = os.path.join(ctx.out_dir, ctx.run_id)
    _ensure_dir(out_dir)
    return out_dir


def results_frame(report: SuiteReport) -> pd.DataFrame:
    rows = [r.to_dict() for r in report.results]
    frame = pd.DataFrame(rows, columns=RESULT_COLUMNS)
    frame["artifacts"] = frame["artifacts"].apply(lambda v: ";".join(v or []))
    frame["observer_errors"] = frame["observer_errors"].apply(lambda v: ";".join(v or []))
    return frame


def write_outputs(ctx, report: SuiteReport) -> str:
    out_dir = os.path.join(ctx.out_dir, ctx.run_id)
    _ensure_dir(out_dir)
    with open(os.path.join(out_dir, "summary.json"), "w", encoding="utf-8") as f:
        summary = report.to_dict()
        summary.pop("results")
        summary["run_id"] = ctx.run_id
        json.dump(summary, f, ensure_ascii=False, indent=2)
    with open(os.path.join(out_dir, "results.jsonl"), "w", encoding="utf-8") as f:
        for r in report.results:
            f.write(json.dumps(r.to_dict()) + "\n")
    results_frame(report).to_csv(os.path.join(out_dir, "results.csv"), index=False)
    return out_dir


def collect(ctx) -> pd.DataFrame:
    """Load a stored run's results; empty frame if the run has none."""
    path = os.path.join(ctx.out_dir, ctx.run_id, "results.jsonl")
    if not os.path.exists(path) or os.path.getsize(path) == 0:
        return pd.DataFrame(columns=RESULT_COLUMNS)
    return pd.read_json(path, lines=True)


def summarize(frame: pd.DataFrame) -> Dict[str, int]:
    if frame.empty:
        return {}
    return {state: int(n) for state, n in frame["state"].value_counts().items()}
