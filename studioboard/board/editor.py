"""Inline field editor for a task's detail view."""

import logging
from datetime import date, datetime
from typing import Any, Optional

from pydantic import ValidationError

from studioboard.board.cache import TaskCache
from studioboard.board.notifications import Notifier
from studioboard.integrations.tasks_api import TasksApiClient, TasksApiError
from studioboard.models.task import Task, TaskPriority

logger = logging.getLogger(__name__)

# Python field name -> wire name
EDITABLE_FIELDS = {
    "title": "title",
    "description": "description",
    "notes": "notes",
    "deliverables": "deliverables",
    "priority": "priority",
    "assigned_user_id": "assignedUserId",
    "start_date": "startDate",
    "due_date": "dueDate",
    "attached_video": "attachedVideo",
}


def _wire_value(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return getattr(value, "value", value)


class FieldEditor:
    """Edits one field of one task at a time."""

    def __init__(self, cache: TaskCache, client: TasksApiClient, notifier: Notifier):
        self.cache = cache
        self.client = client
        self.notifier = notifier
        self.selected_task: Optional[Task] = None
        self.editing_field: Optional[str] = None
        self.pending_value: Any = None

    def open(self, task_id: str) -> Optional[Task]:
        """Open the detail view on a cached task."""
        self.cancel()
        self.selected_task = self.cache.get(task_id)
        return self.selected_task

    def close(self) -> None:
        self.cancel()
        self.selected_task = None

    def begin_edit(self, field: str) -> None:
        """Enter edit mode for `field`, replacing any edit in progress."""
        if self.selected_task is None:
            raise RuntimeError("No task is open")
        if field not in EDITABLE_FIELDS:
            raise ValueError(f"Field {field!r} is not editable")

        current = getattr(self.selected_task, field)
        if field == "assigned_user_id":
            current = self.selected_task.assignee_id
        self.editing_field = field
        self.pending_value = current

    def set_value(self, value: Any) -> None:
        if self.editing_field is None:
            raise RuntimeError("No field is being edited")
        self.pending_value = value

    def cancel(self) -> None:
        """Leave edit mode without saving."""
        self.editing_field = None
        self.pending_value = None

    def save(self) -> bool:
        """Send the pending value and update the cache and detail view.

        On failure the editor stays in edit mode so the value can be retried.

        Returns:
            True if the backend accepted the change
        """
        if self.selected_task is None or self.editing_field is None:
            return False

        task_id = self.selected_task.id
        field = self.editing_field
        wire_name = EDITABLE_FIELDS[field]
        value = _wire_value(self.pending_value)

        base = self.cache.get(task_id) or self.selected_task
        try:
            if field == "priority":
                value = TaskPriority(value).value
            updated = Task.model_validate({**base.to_wire(), wire_name: value})
        except ValueError as e:
            # pydantic's ValidationError is a ValueError
            count = e.error_count() if isinstance(e, ValidationError) else 1
            logger.info(f"Rejected invalid value for {field} of task {task_id}: {count} errors")
            self.notifier.error(f"Invalid value for {wire_name}")
            return False

        try:
            self.client.update_task(task_id, {wire_name: value})
        except TasksApiError as e:
            logger.warning(f"Update of {field} on task {task_id} failed: {e}")
            self.notifier.error("Failed to update the task")
            return False

        self.cache.replace(updated)
        self.selected_task = updated
        self.cancel()
        self.notifier.success("Task updated")
        return True
