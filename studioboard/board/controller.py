"""Status transition controller for the board.

Every gesture (drag and drop, next/previous buttons) ends in
`request_transition`, which checks the policy, updates the cache
optimistically, calls the backend, and reverts the cache if the call fails.
"""

import logging
from datetime import datetime
from typing import Optional, Union

from studioboard.board.cache import TaskCache
from studioboard.board.notifications import Notifier
from studioboard.engine.transitions import (
    REJECTION_MESSAGES,
    is_frozen,
    next_status,
    previous_status,
    rejection_reason,
    transition_updates,
)
from studioboard.integrations.tasks_api import TasksApiClient, TasksApiError
from studioboard.models.actor import Actor
from studioboard.models.task import TaskStatus

logger = logging.getLogger(__name__)


class PermissionDenied(Exception):
    """Raised when an actor attempts an admin-only operation."""


class TransitionController:
    """Turns board gestures into policy-checked status changes."""

    def __init__(self, cache: TaskCache, client: TasksApiClient, actor: Actor, notifier: Notifier):
        self.cache = cache
        self.client = client
        self.actor = actor
        self.notifier = notifier
        self.dragging_task_id: Optional[str] = None

    def begin_drag(self, task_id: str) -> bool:
        """Start dragging a task; refused when its stage is frozen for the actor."""
        task = self.cache.get(task_id)
        if task is None:
            self.notifier.error("Task not found")
            return False
        if is_frozen(self.actor, task.status):
            logger.info(f"Drag of task {task_id} refused: {task.status} is manager-only")
            self.notifier.error(REJECTION_MESSAGES[rejection_reason(self.actor, task.status, task.status)])
            return False
        self.dragging_task_id = task_id
        return True

    def cancel_drag(self) -> None:
        self.dragging_task_id = None

    def drop(self, target_status: Union[TaskStatus, str]) -> bool:
        """Drop the dragged task on a column."""
        task_id, self.dragging_task_id = self.dragging_task_id, None
        if task_id is None:
            return False
        return self.request_transition(task_id, target_status)

    def advance(self, task_id: str) -> bool:
        """Move a task to the next stage ("next" button)."""
        return self._step(task_id, next_status)

    def retreat(self, task_id: str) -> bool:
        """Move a task to the previous stage ("previous" button)."""
        return self._step(task_id, previous_status)

    def _step(self, task_id: str, neighbour) -> bool:
        task = self.cache.get(task_id)
        if task is None:
            self.notifier.error("Task not found")
            return False
        target = neighbour(self.actor, task.status)
        if target is None:
            reason = rejection_reason(self.actor, task.status, task.status)
            self.notifier.error(REJECTION_MESSAGES[reason] if reason else "No stage in that direction")
            return False
        return self.request_transition(task_id, target)

    def request_transition(self, task_id: str, target_status: Union[TaskStatus, str]) -> bool:
        """Move a task to `target_status` if the actor's policy allows it.

        Args:
            task_id: Cached task to move
            target_status: Destination column

        Returns:
            True if the task ends up in `target_status`
        """
        target = TaskStatus(target_status)
        task = self.cache.get(task_id)
        if task is None:
            self.notifier.error("Task not found")
            return False

        reason = rejection_reason(self.actor, task.status, target)
        if reason is not None:
            logger.info(f"Transition of task {task_id} refused ({reason.value}): {task.status} -> {target.value}")
            self.notifier.error(REJECTION_MESSAGES[reason])
            return False

        if task.status == target:
            return True

        updates = transition_updates(target, now=datetime.utcnow(), source=task.status)
        snapshot = self.cache.apply(task_id, updates)

        payload = {"status": updates["status"]}
        if "completed_date" in updates:
            completed = updates["completed_date"]
            payload["completedDate"] = completed.isoformat() if completed else None

        try:
            self.client.update_task(task_id, payload)
        except TasksApiError as e:
            logger.warning(f"Status update of task {task_id} failed, reverting: {e}")
            self.cache.restore(snapshot)
            self.notifier.error("Failed to update the task")
            return False

        self.notifier.success("Task status updated")
        return True

    def delete_task(self, task_id: str) -> bool:
        """Delete a task (admins only).

        Raises:
            PermissionDenied: If the actor is not an admin
        """
        if not self.actor.is_admin:
            raise PermissionDenied("Only admins can delete tasks")

        try:
            message = self.client.delete_task(task_id)
        except TasksApiError as e:
            logger.warning(f"Delete of task {task_id} failed: {e}")
            self.notifier.error("Failed to delete the task")
            return False

        self.cache.remove(task_id)
        self.notifier.success(message)
        return True
