from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional


class ArtifactKind(str, Enum):
    TEXT = "txt"
    DOCUMENT = "docx"
    CANVAS = "pdf"

    @property
    def extension(self) -> str:
        return self.value

    @property
    def media_type(self) -> str:
        return MEDIA_TYPES[self]


MEDIA_TYPES: Dict[ArtifactKind, str] = {
    ArtifactKind.TEXT: "text/plain; charset=utf-8",
    ArtifactKind.DOCUMENT: "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ArtifactKind.CANVAS: "application/pdf",
}


@dataclass(frozen=True)
class Task:
    id: str
    title: str
    completed: bool
    date: str


TasksByDate = Dict[str, List[Task]]


@dataclass(frozen=True)
class DayStats:
    date: str
    total: int
    completed: int
    rate: int

    @property
    def pending(self) -> int:
        return self.total - self.completed


@dataclass(frozen=True, eq=False)
class ReportData:
    start_date: str
    end_date: str
    tasks: TasksByDate
    total_tasks: int
    total_completed: int
    completion_rate: int

    @property
    def pending(self) -> int:
        return self.total_tasks - self.total_completed

    @property
    def dates(self) -> List[str]:
        # ISO dates sort lexicographically in chronological order
        return sorted(self.tasks)

    @property
    def is_empty(self) -> bool:
        return self.total_tasks == 0


@dataclass(frozen=True)
class Artifact:
    kind: ArtifactKind
    filename: str
    payload: bytes


class ReportGenerationError(Exception):
    """Raised when an artifact could not be assembled, drawn or handed off."""

    def __init__(self, kind: ArtifactKind, code: str, detail: Optional[str] = None) -> None:
        self.kind = kind
        self.code = code
        self.detail = detail or ""
        message = f"[{kind.value}] {code}"
        if self.detail:
            message = f"{message}: {self.detail}"
        super().__init__(message)
