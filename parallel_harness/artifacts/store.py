"""Durable storage for failure artifacts with collision-free names."""

import os
import re
import threading
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Union

from parallel_harness.logging_config import get_logger

logger = get_logger("artifacts")

_UNSAFE = re.compile(r"[^A-Za-z0-9_.-]+")


@dataclass(frozen=True)
class Artifact:
    name: str
    context_id: str
    payload: bytes = field(repr=False)
    created_at: datetime = field(default_factory=datetime.now)
    extension: str = "png"

    @property
    def stem(self) -> str:
        """``{name}_{context_id}_{timestamp}`` with filesystem-safe parts."""
        stamp = self.created_at.strftime("%Y%m%dT%H%M%S%f")
        return "_".join(
            _UNSAFE.sub("-", part) for part in (self.name, self.context_id, stamp)
        )


class ArtifactStore:
    """``save`` never returns the same path twice and never overwrites."""

    def save(self, artifact: Artifact) -> Path:
        raise NotImplementedError

    @property
    def saved(self) -> List[Path]:
        raise NotImplementedError


class FileArtifactStore(ArtifactStore):
    """Writes artifacts as files under ``base_dir``.

    Paths are claimed with exclusive-create; if a name is taken a
    ``-<n>`` suffix is appended until a free one is found.
    """

    def __init__(self, base_dir: Union[str, Path]):
        self.base_dir = Path(base_dir)
        self._saved: List[Path] = []
        self._lock = threading.Lock()

    def save(self, artifact: Artifact) -> Path:
        self.base_dir.mkdir(parents=True, exist_ok=True)
        suffix = 0
        while True:
            stem = artifact.stem if suffix == 0 else f"{artifact.stem}-{suffix}"
            path = self.base_dir / f"{stem}.{artifact.extension}"
            try:
                fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o644)
            except FileExistsError:
                suffix += 1
                continue
            break

        with os.fdopen(fd, "wb") as f:
            f.write(artifact.payload)

        with self._lock:
            self._saved.append(path)
        logger.info(
            f"Saved artifact {path.name} ({len(artifact.payload)} bytes)",
            extra={"context_id": artifact.context_id, "path": str(path)},
        )
        return path

    @property
    def saved(self) -> List[Path]:
        with self._lock:
            return list(self._saved)
