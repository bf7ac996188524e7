"""Ordering logic for studioboard.

Column order: priority weight (highest first), then due date (earliest first),
with dated tasks ahead of undated ones. Sorting is stable, so undated tasks of
equal priority keep their cache order. Also holds the due-date helpers behind
the "upcoming" list.
"""

import math
from collections import Counter
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from studioboard.models.constants import (
    PRIORITY_WEIGHTS,
    UNKNOWN_PRIORITY_WEIGHT,
    UPCOMING_WINDOW_DAYS,
)
from studioboard.models.task import BOARD_STATUSES, Task, TaskStatus, to_utc_naive


def priority_weight(priority: Optional[str]) -> int:
    """Get the sort weight of a priority (unknown or missing = 0)."""
    if priority is None:
        return UNKNOWN_PRIORITY_WEIGHT
    return PRIORITY_WEIGHTS.get(getattr(priority, "value", priority), UNKNOWN_PRIORITY_WEIGHT)


def _due_sort_key(task: Task) -> tuple:
    """Tasks with due dates come first, earliest first."""
    if task.due_date:
        return (0, to_utc_naive(task.due_date))
    return (1, datetime.max)


def column_sort_key(task: Task) -> tuple:
    return (-priority_weight(task.priority), _due_sort_key(task))


def sort_column(tasks: Iterable[Task]) -> List[Task]:
    """Sort tasks into column order.

    Args:
        tasks: Tasks of one column

    Returns:
        New list in column order
    """
    return sorted(tasks, key=column_sort_key)


def newest_first(tasks: Iterable[Task]) -> List[Task]:
    """Sort tasks by creation time, newest first (undated last)."""
    return sorted(
        tasks,
        key=lambda t: (t.created_at is None, -_timestamp(t.created_at)),
    )


def _timestamp(value: Optional[datetime]) -> float:
    if value is None:
        return 0.0
    return (to_utc_naive(value) - datetime(1970, 1, 1)).total_seconds()


def is_overdue(due_date: datetime, now: Optional[datetime] = None) -> bool:
    """Check if a due date has passed.

    A task due earlier today is not overdue yet; it becomes overdue the next day.
    """
    now = to_utc_naive(now) if now else datetime.utcnow()
    due = to_utc_naive(due_date)
    return due < now and due.date() != now.date()


def days_until_due(due_date: datetime, now: Optional[datetime] = None) -> int:
    """Whole days until a due date, rounded up (negative when overdue)."""
    now = to_utc_naive(now) if now else datetime.utcnow()
    delta = to_utc_naive(due_date) - now
    return math.ceil(delta / timedelta(days=1))


def upcoming_tasks(tasks: Iterable[Task], now: Optional[datetime] = None) -> List[Task]:
    """Get overdue tasks and tasks due soon, most pressing first.

    Completed and undated tasks are excluded. Ordering is overdue first, then
    priority weight (highest first), then due date (earliest first).

    Args:
        tasks: Tasks to consider
        now: Reference time (defaults to current UTC time)

    Returns:
        Filtered and sorted list
    """
    now = now or datetime.utcnow()
    candidates = [
        (task, days_until_due(task.due_date, now))
        for task in tasks
        if task.status != TaskStatus.COMPLETED and task.due_date
    ]
    candidates = [(task, days) for task, days in candidates if days <= UPCOMING_WINDOW_DAYS]
    candidates.sort(
        key=lambda item: (
            0 if item[1] < 0 else 1,
            -priority_weight(item[0].priority),
            to_utc_naive(item[0].due_date),
        )
    )
    return [task for task, _ in candidates]


def status_counts(tasks: Iterable[Task]) -> Dict[TaskStatus, int]:
    """Count tasks per board column (zero for empty columns)."""
    counts = Counter(TaskStatus(task.status) for task in tasks)
    return {status: counts.get(status, 0) for status in BOARD_STATUSES}
