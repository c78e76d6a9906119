from __future__ import annotations

from datetime import datetime
from typing import List

from ..config import RULE_WIDTH, REPORT_TITLE
from ..models import ReportData
from .aggregate import iter_days
from .formatting import format_long_date, format_timestamp


def _banner(title: str) -> List[str]:
    rule = "=" * RULE_WIDTH
    return [rule, title, rule]


def render_text(report: ReportData, now: datetime) -> str:
    """Fixed-width plain-text report. Pure string construction, never fails."""
    lines: List[str] = [
        REPORT_TITLE,
        "=" * RULE_WIDTH,
        "",
        f"Report Period: {format_long_date(report.start_date)} - {format_long_date(report.end_date)}",
        f"Generated: {format_timestamp(now)}",
        "",
    ]

    lines += _banner("SUMMARY")
    lines += [
        f"Total Tasks: {report.total_tasks}",
        f"Completed: {report.total_completed}",
        f"Pending: {report.pending}",
        f"Completion Rate: {report.completion_rate}%",
        "",
    ]

    lines += _banner("DETAILED BREAKDOWN")
    lines.append("")
    for day in iter_days(report):
        lines.append(format_long_date(day.date))
        lines.append("-" * RULE_WIDTH)
        for task in report.tasks[day.date]:
            status = "[COMPLETED]" if task.completed else "[PENDING]"
            lines.append(f"{status} {task.title}")
        lines.append("")
        lines.append(f"Day Summary: {day.completed}/{day.total} tasks completed")
        lines.append("")

    lines += _banner("END OF REPORT")
    return "\n".join(lines) + "\n"


def render_text_bytes(report: ReportData, now: datetime) -> bytes:
    return render_text(report, now).encode("utf-8")
