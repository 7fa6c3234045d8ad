"""Run context for suite executions."""

from dataclasses import dataclass, field
from typing import Dict, Any
from pathlib import Path


@dataclass
class RunContext:
    """Suite run context with run_id, output directory, and extra data."""
    run_id: str
    out_dir: Path = Path("harness_runs")
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def run_dir(self) -> Path:
        return Path(self.out_dir) / self.run_id

    @property
    def artifacts_dir(self) -> Path:
        return self.run_dir / "artifacts"
