"""Client-side task cache for studioboard.

Holds the tasks of the current board view. The backend stays authoritative:
the cache is replaced wholesale on refresh and patched locally for optimistic
updates and field edits.
"""

import logging
from typing import Any, Dict, List, Optional

from studioboard.integrations.tasks_api import TaskFilter, TasksApiClient, TasksApiError
from studioboard.models.actor import Actor
from studioboard.models.task import Task
from studioboard.board.notifications import Notifier

logger = logging.getLogger(__name__)


class TaskCache:
    """In-memory list of the tasks visible to one actor."""

    def __init__(self, client: TasksApiClient, actor: Actor, notifier: Notifier):
        self.client = client
        self.actor = actor
        self.notifier = notifier
        self.loading = False
        self._tasks: List[Task] = []

    @property
    def tasks(self) -> List[Task]:
        return list(self._tasks)

    def scoped_filter(self, filters: Optional[TaskFilter] = None) -> TaskFilter:
        """Restrict a filter to the actor's own tasks unless the actor is an admin."""
        filters = filters or TaskFilter()
        if self.actor.is_admin:
            return filters
        return filters.model_copy(update={"assigned_user_id": self.actor.user_id})

    def refresh(self, filters: Optional[TaskFilter] = None) -> bool:
        """Replace the cache with a fresh fetch.

        A refresh requested while another is in flight is ignored. On failure the
        previous contents are kept and an error notification is emitted.

        Returns:
            True if the cache was replaced
        """
        if self.loading:
            logger.debug("Refresh ignored: a fetch is already in flight")
            return False

        self.loading = True
        try:
            tasks = self.client.fetch_all(self.scoped_filter(filters))
        except TasksApiError as e:
            logger.warning(f"Task refresh failed: {e}")
            self.notifier.error("Failed to load tasks")
            return False
        finally:
            self.loading = False

        self._tasks = tasks
        logger.debug(f"Task cache refreshed with {len(tasks)} tasks")
        return True

    def get(self, task_id: str) -> Optional[Task]:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def replace(self, task: Task) -> None:
        """Swap in a new version of a cached task (no-op if absent)."""
        self._tasks = [task if cached.id == task.id else cached for cached in self._tasks]

    def apply(self, task_id: str, updates: Dict[str, Any]) -> Optional[Task]:
        """Apply field updates (Python names) to a cached task.

        Returns:
            The task as it was before the update (a snapshot for rollback), or
            None if the task is not cached
        """
        snapshot = self.get(task_id)
        if snapshot is None:
            return None
        self.replace(snapshot.model_copy(update=updates))
        return snapshot

    def restore(self, snapshot: Task) -> None:
        """Put a snapshot taken by `apply` back in place."""
        self.replace(snapshot)

    def remove(self, task_id: str) -> None:
        self._tasks = [task for task in self._tasks if task.id != task_id]

    def clear(self) -> None:
        self._tasks = []
