"""Constants for studioboard.

This module centralizes all magic numbers and default values used throughout the application.
"""

from studioboard.models.task import TaskPriority, TaskStatus


# Column sort weights (higher sorts first); unknown priorities weigh 0
PRIORITY_WEIGHTS = {
    TaskPriority.URGENT.value: 4,
    TaskPriority.HIGH.value: 3,
    TaskPriority.MEDIUM.value: 2,
    TaskPriority.LOW.value: 1,
}
UNKNOWN_PRIORITY_WEIGHT = 0

# Column pagination
ITEMS_PER_PAGE_OPTIONS = (5, 10, 20, 50)
DEFAULT_ITEMS_PER_PAGE = 10

# Fetch-all page size (first request asks for this many tasks)
FETCH_PAGE_SIZE = 1000

# Upcoming list: overdue tasks plus tasks due within this many days
UPCOMING_WINDOW_DAYS = 2

# Statuses a regular user can neither enter nor leave
MANAGER_ONLY_STATUSES = frozenset({TaskStatus.ACCEPTED, TaskStatus.COMPLETED})

# Backend listing defaults
DEFAULT_PAGE_LIMIT = 10
DEFAULT_SORT_BY = "createdAt"
