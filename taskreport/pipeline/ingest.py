from __future__ import annotations

import csv
import hashlib
from datetime import date, timedelta
from pathlib import Path
from typing import Iterable, List, Mapping, Sequence, Tuple

from ..config import DEFAULT_RANGE_DAYS
from ..models import Task, TasksByDate
from .formatting import parse_date


REQUIRED_COLUMNS = {"title", "completed", "date"}

TRUE_VALUES = {"true", "1", "yes", "y", "done", "x"}
FALSE_VALUES = {"false", "0", "no", "n", "pending", ""}


def load_rows(csv_path: Path) -> List[dict]:
    if not csv_path.exists():
        raise FileNotFoundError(f"CSV not found: {csv_path}")
    with csv_path.open("r", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        if reader.fieldnames is None:
            raise ValueError("CSV has no header")
        missing = REQUIRED_COLUMNS - set(reader.fieldnames)
        if missing:
            raise ValueError(f"CSV missing columns: {', '.join(sorted(missing))}")
        rows = [row for row in reader if any((value or "").strip() for value in row.values())]
    if not rows:
        raise ValueError("CSV has no data rows")
    return rows


def parse_completed(value: str) -> bool:
    token = (value or "").strip().lower()
    if token in TRUE_VALUES:
        return True
    if token in FALSE_VALUES:
        return False
    raise ValueError(f"Unrecognised completed value: {value!r}")


def _fallback_id(date_str: str, title: str, index: int) -> str:
    return hashlib.md5(f"{date_str}-{index}-{title}".encode("utf-8")).hexdigest()[:12]


def parse_task(row: Mapping[str, str], index: int = 0) -> Task:
    title = (row.get("title") or "").strip()
    date_str = (row.get("date") or "").strip()
    if not title:
        raise ValueError(f"Row {index + 1}: title is required")
    try:
        parse_date(date_str)
    except ValueError as exc:
        raise ValueError(f"Row {index + 1}: invalid date {date_str!r}") from exc
    task_id = (row.get("id") or "").strip() or _fallback_id(date_str, title, index)
    return Task(id=task_id, title=title, completed=parse_completed(row.get("completed", "")), date=date_str)


def parse_tasks(rows: Sequence[Mapping[str, str]]) -> List[Task]:
    return [parse_task(row, index) for index, row in enumerate(rows)]


def group_tasks(tasks: Iterable[Task]) -> TasksByDate:
    """Group tasks by date, keeping input order inside each bucket."""
    grouped: TasksByDate = {}
    for task in tasks:
        grouped.setdefault(task.date, []).append(task)
    return grouped


def select_range(tasks_by_date: Mapping[str, Sequence[Task]], start_date: str, end_date: str) -> TasksByDate:
    # inclusive on both ends
    return {
        day: list(bucket)
        for day, bucket in tasks_by_date.items()
        if start_date <= day <= end_date and bucket
    }


def default_range(today: date, days: int = DEFAULT_RANGE_DAYS) -> Tuple[str, str]:
    start = today - timedelta(days=days - 1)
    return start.isoformat(), today.isoformat()
