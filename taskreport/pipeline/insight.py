from __future__ import annotations

from .formatting import plural


def performance_insight(completion_rate: int, pending: int) -> str:
    # thresholds are fixed at 100 / 80 / 50
    tasks = plural(pending, "task")
    if completion_rate == 100:
        return "Excellent! All tasks completed."
    if completion_rate >= 80:
        return f"Good progress. {pending} {tasks} remaining."
    if completion_rate >= 50:
        return f"Fair progress. {pending} {tasks} need attention."
    return f"Review priorities. {pending} pending {tasks}."
