from __future__ import annotations

from fractions import Fraction
from typing import Iterator, List, Mapping, Sequence

from ..models import DayStats, ReportData, Task, TasksByDate


def _round_half_up(value: Fraction) -> int:
    # floor(value + 1/2) for non-negative values, exact for any ratio
    return (2 * value.numerator + value.denominator) // (2 * value.denominator)


def percent(part: int, whole: int) -> int:
    """Integer percentage of part/whole, rounded half away from zero; 0 when whole is 0."""
    if whole <= 0:
        return 0
    return _round_half_up(Fraction(100 * part, whole))


def _completed_count(tasks: Sequence[Task]) -> int:
    return sum(1 for task in tasks if task.completed)


def aggregate(tasks_by_date: Mapping[str, Sequence[Task]], start_date: str, end_date: str) -> ReportData:
    """
    Build the report aggregate from grouped tasks.

    Every bucket present is counted, including dates outside [start_date, end_date];
    range filtering is the caller's job.
    """
    tasks: TasksByDate = {}
    total_tasks = 0
    total_completed = 0
    for date, bucket in tasks_by_date.items():
        bucket = list(bucket)
        tasks[date] = bucket
        total_tasks += len(bucket)
        total_completed += _completed_count(bucket)

    return ReportData(
        start_date=start_date,
        end_date=end_date,
        tasks=tasks,
        total_tasks=total_tasks,
        total_completed=total_completed,
        completion_rate=percent(total_completed, total_tasks),
    )


def day_stats(report: ReportData, date: str) -> DayStats:
    bucket = report.tasks.get(date, [])
    completed = _completed_count(bucket)
    return DayStats(date=date, total=len(bucket), completed=completed, rate=percent(completed, len(bucket)))


def iter_days(report: ReportData) -> Iterator[DayStats]:
    for date in report.dates:
        yield day_stats(report, date)


def average_daily_completion(report: ReportData) -> int:
    """
    Mean of each day's own completion rate, not the pooled rate.

    Days weigh equally regardless of how many tasks they hold; a day with no
    tasks contributes 0.
    """
    dates: List[str] = report.dates
    if not dates:
        return 0
    total = Fraction(0)
    for date in dates:
        bucket = report.tasks[date]
        if bucket:
            total += Fraction(100 * _completed_count(bucket), len(bucket))
    return _round_half_up(total / len(dates))
