from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Protocol

from slugify import slugify

from . import config
from .models import ArtifactKind


class ArtifactSink(Protocol):
    def write(self, name: str, payload: bytes) -> None:
        ...


def report_stem(start_date: str, end_date: str) -> str:
    return f"{slugify(config.REPORT_NAME)}-{start_date}-to-{end_date}"


def artifact_filename(kind: ArtifactKind, start_date: str, end_date: str) -> str:
    return f"{report_stem(start_date, end_date)}.{kind.extension}"


def _check_name(name: str) -> None:
    if not name or ".." in name or "/" in name or "\\" in name:
        raise ValueError(f"Invalid artifact name: {name!r}")


class DirectorySink:
    """Writes artifacts into a directory; a file only appears once fully written."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = root or config.OUT_DIR
        self.written: List[Path] = []

    def write(self, name: str, payload: bytes) -> None:
        _check_name(name)
        self.root.mkdir(parents=True, exist_ok=True)
        path = self.root / name
        temp_path = path.with_name(f"{path.name}.tmp")
        try:
            temp_path.write_bytes(payload)
            temp_path.replace(path)
        except OSError:
            temp_path.unlink(missing_ok=True)
            raise
        self.written.append(path)


class MemorySink:
    def __init__(self) -> None:
        self.artifacts: Dict[str, bytes] = {}

    def write(self, name: str, payload: bytes) -> None:
        _check_name(name)
        self.artifacts[name] = payload
