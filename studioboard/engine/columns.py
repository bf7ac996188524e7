"""Kanban column derivation for studioboard.

A column is a pure function of the cached task list and that column's
pagination state: filter by status, sort, then cut a page window.
"""

import math
from typing import Dict, Iterable, List, Mapping, Optional, Union

from pydantic import BaseModel, Field, field_validator

from studioboard.engine.ranking import sort_column
from studioboard.models.constants import DEFAULT_ITEMS_PER_PAGE, ITEMS_PER_PAGE_OPTIONS
from studioboard.models.task import BOARD_STATUSES, Task, TaskStatus


class ColumnPagination(BaseModel):
    """Pagination state of one column."""

    page: int = Field(1, ge=1, description="1-based page number")
    items_per_page: int = Field(DEFAULT_ITEMS_PER_PAGE, description="Tasks per page")

    @field_validator("items_per_page")
    @classmethod
    def _check_items_per_page(cls, value: int) -> int:
        if value not in ITEMS_PER_PAGE_OPTIONS:
            raise ValueError(f"items_per_page must be one of {ITEMS_PER_PAGE_OPTIONS}, got {value}")
        return value


class ColumnView(BaseModel):
    """The visible slice of one column plus what pagination controls need."""

    status: TaskStatus
    tasks: List[Task]
    total_count: int
    total_pages: int
    current_page: int
    items_per_page: int

    class Config:
        """Pydantic configuration."""
        use_enum_values = True


class BoardPagination:
    """Per-column pagination keyed by the closed set of board statuses.

    Every board status always has an entry; keys outside the board raise on
    construction and on access.
    """

    def __init__(self, columns: Optional[Mapping[Union[TaskStatus, str], ColumnPagination]] = None):
        self._columns: Dict[TaskStatus, ColumnPagination] = {
            status: ColumnPagination() for status in BOARD_STATUSES
        }
        for key, pagination in (columns or {}).items():
            self._columns[self._key(key)] = pagination

    @staticmethod
    def _key(status: Union[TaskStatus, str]) -> TaskStatus:
        status = TaskStatus(status)
        if status not in BOARD_STATUSES:
            raise ValueError(f"{status.value} is not a board column")
        return status

    def get(self, status: Union[TaskStatus, str]) -> ColumnPagination:
        return self._columns[self._key(status)]

    def set_page(self, status: Union[TaskStatus, str], page: int) -> ColumnPagination:
        key = self._key(status)
        current = self._columns[key]
        self._columns[key] = ColumnPagination(page=page, items_per_page=current.items_per_page)
        return self._columns[key]

    def set_items_per_page(self, status: Union[TaskStatus, str], items_per_page: int) -> ColumnPagination:
        """Change one column's page size; that column goes back to page 1."""
        key = self._key(status)
        self._columns[key] = ColumnPagination(page=1, items_per_page=items_per_page)
        return self._columns[key]

    def reset_all(self) -> None:
        """Send every column back to page 1, keeping page sizes."""
        for key, current in self._columns.items():
            self._columns[key] = ColumnPagination(page=1, items_per_page=current.items_per_page)

    def as_dict(self) -> Dict[TaskStatus, ColumnPagination]:
        return dict(self._columns)


def page_count(total_count: int, items_per_page: int) -> int:
    """Number of pages for a column; an empty column still has one (empty) page."""
    if items_per_page <= 0:
        raise ValueError("items_per_page must be positive")
    return max(1, math.ceil(total_count / items_per_page))


def derive_column(
    tasks: Iterable[Task],
    status: Union[TaskStatus, str],
    pagination: Optional[ColumnPagination] = None,
) -> ColumnView:
    """Build the visible page of one column.

    Args:
        tasks: Full cached task list
        status: Column status
        pagination: Column pagination (defaults to page 1, default page size)

    Returns:
        ColumnView with the windowed tasks; the page is clamped to the last page
    """
    status = TaskStatus(status)
    pagination = pagination or ColumnPagination()

    column_tasks = sort_column(task for task in tasks if task.status == status)
    total_count = len(column_tasks)
    total_pages = page_count(total_count, pagination.items_per_page)
    current_page = min(pagination.page, total_pages)

    start = (current_page - 1) * pagination.items_per_page
    end = current_page * pagination.items_per_page

    return ColumnView(
        status=status,
        tasks=column_tasks[start:end],
        total_count=total_count,
        total_pages=total_pages,
        current_page=current_page,
        items_per_page=pagination.items_per_page,
    )


def derive_board(tasks: Iterable[Task], pagination: BoardPagination) -> Dict[TaskStatus, ColumnView]:
    """Build every board column."""
    tasks = list(tasks)
    return {status: derive_column(tasks, status, pagination.get(status)) for status in BOARD_STATUSES}
