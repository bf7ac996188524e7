"""Board session: the state container of one mounted board view.

Owns the cache, the per-column pagination, the transition controller and the
field editor for a single actor. Created when a board view mounts, torn down
when it unmounts; nothing is shared between sessions.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional, Union

from studioboard.board.cache import TaskCache
from studioboard.board.controller import TransitionController
from studioboard.board.editor import FieldEditor
from studioboard.board.notifications import Notifier
from studioboard.engine.columns import BoardPagination, ColumnPagination, ColumnView, derive_board, derive_column
from studioboard.engine.ranking import status_counts, upcoming_tasks
from studioboard.integrations.tasks_api import TaskFilter, TasksApiClient
from studioboard.models.actor import Actor
from studioboard.models.task import Task, TaskStatus

logger = logging.getLogger(__name__)


class BoardSession:
    """State and operations of one Kanban board view."""

    def __init__(self, client: TasksApiClient, actor: Actor, notifier: Optional[Notifier] = None):
        self.client = client
        self.actor = actor
        self.notifier = notifier or Notifier()
        self.cache = TaskCache(client, actor, self.notifier)
        self.pagination = BoardPagination()
        self.controller = TransitionController(self.cache, client, actor, self.notifier)
        self.editor = FieldEditor(self.cache, client, self.notifier)
        self.filters: Optional[TaskFilter] = None
        self.mounted = False

    def mount(self, filters: Optional[TaskFilter] = None) -> bool:
        """Initialize the view and load its tasks."""
        self.mounted = True
        logger.debug(f"Board mounted for {self.actor.user_id} ({self.actor.role})")
        return self.refresh(filters)

    def unmount(self) -> None:
        """Tear the view down, dropping all cached state."""
        self.mounted = False
        self.editor.close()
        self.controller.cancel_drag()
        self.cache.clear()
        self.pagination = BoardPagination()
        self.filters = None

    def refresh(self, filters: Optional[TaskFilter] = None) -> bool:
        """Re-fetch tasks; on success every column goes back to page 1."""
        if filters is not None:
            self.filters = filters
        refreshed = self.cache.refresh(self.filters)
        if refreshed:
            self.pagination.reset_all()
        return refreshed

    @property
    def tasks(self) -> List[Task]:
        return self.cache.tasks

    def column(self, status: Union[TaskStatus, str]) -> ColumnView:
        return derive_column(self.cache.tasks, status, self.pagination.get(status))

    def board(self) -> Dict[TaskStatus, ColumnView]:
        return derive_board(self.cache.tasks, self.pagination)

    def set_page(self, status: Union[TaskStatus, str], page: int) -> ColumnPagination:
        return self.pagination.set_page(status, page)

    def set_items_per_page(self, status: Union[TaskStatus, str], items_per_page: int) -> ColumnPagination:
        return self.pagination.set_items_per_page(status, items_per_page)

    def upcoming(self, now: Optional[datetime] = None) -> List[Task]:
        return upcoming_tasks(self.cache.tasks, now)

    def counts(self) -> Dict[TaskStatus, int]:
        return status_counts(self.cache.tasks)

    def request_transition(self, task_id: str, target_status: Union[TaskStatus, str]) -> bool:
        return self.controller.request_transition(task_id, target_status)
