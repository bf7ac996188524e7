"""Repository layer for database operations."""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import asc, desc, func

from studioboard.models.task import Task, TaskStatus, to_utc_naive
from studioboard.models.constants import DEFAULT_SORT_BY
from studioboard.database.models import TaskDB, enum_to_value

logger = logging.getLogger(__name__)

# Wire sort keys -> columns
SORT_COLUMNS = {
    "createdAt": TaskDB.created_at,
    "updatedAt": TaskDB.updated_at,
    "dueDate": TaskDB.due_date,
    "startDate": TaskDB.start_date,
    "completedDate": TaskDB.completed_date,
    "title": TaskDB.title,
    "status": TaskDB.status,
    "priority": TaskDB.priority,
}

ENUM_FIELDS = {"status", "priority"}
DATE_FIELDS = {"start_date", "due_date", "completed_date"}


def _column_values(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Normalize Python-named task fields into column values."""
    values = {}
    for name, value in fields.items():
        if name in ENUM_FIELDS and value is not None:
            value = enum_to_value(value)
        elif name in DATE_FIELDS:
            value = to_utc_naive(value)
        values[name] = value
    return values


class TaskRepository:
    """Repository for Task database operations."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, fields: Dict[str, Any]) -> Task:
        """Create a new task from Python-named fields."""
        values = _column_values(fields)
        if values.get("status") == TaskStatus.COMPLETED.value and not values.get("completed_date"):
            values["completed_date"] = datetime.utcnow()
        try:
            task_db = TaskDB(**values)
            self.db.add(task_db)
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Created task {task_db.id}: {task_db.title[:50]}")
            return task_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create task: {type(e).__name__}: {str(e)}")
            raise

    def get(self, task_id: str) -> Optional[Task]:
        """Get task by ID."""
        task_db = self.db.query(TaskDB).filter(TaskDB.id == task_id).first()
        return task_db.to_pydantic() if task_db else None

    def list_page(
        self,
        page: int = 1,
        limit: int = 10,
        sort_by: str = DEFAULT_SORT_BY,
        sort_order: str = "desc",
        status: Optional[str] = None,
        priority: Optional[str] = None,
        assigned_user_id: Optional[str] = None,
        title: Optional[str] = None,
    ) -> Tuple[List[Task], int]:
        """Get one page of tasks matching the filters.

        Args:
            page: 1-based page number
            limit: Page size
            sort_by: Wire name of the sort field (unknown names sort by createdAt)
            sort_order: "asc" or "desc"
            status, priority, assigned_user_id: Exact-match filters
            title: Case-insensitive substring filter

        Returns:
            (tasks on the page, total matching count)
        """
        query = self.db.query(TaskDB)
        if status:
            query = query.filter(TaskDB.status == status)
        if priority:
            query = query.filter(TaskDB.priority == priority)
        if assigned_user_id:
            query = query.filter(TaskDB.assigned_user_id == assigned_user_id)
        if title:
            query = query.filter(func.lower(TaskDB.title).contains(title.lower(), autoescape=True))

        total = query.count()

        column = SORT_COLUMNS.get(sort_by, SORT_COLUMNS[DEFAULT_SORT_BY])
        direction = asc if sort_order == "asc" else desc
        tasks_db = (
            query.order_by(direction(column), direction(TaskDB.id))
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return [task_db.to_pydantic() for task_db in tasks_db], total

    def update(self, task_id: str, fields: Dict[str, Any]) -> Optional[Task]:
        """Apply a partial update.

        Moving a task to completed without an explicit completed_date stamps it
        with the current time.

        Returns:
            Updated task, or None if no task has this ID
        """
        task_db = self.db.query(TaskDB).filter(TaskDB.id == task_id).first()
        if not task_db:
            return None

        values = _column_values(fields)
        if values.get("status") == TaskStatus.COMPLETED.value and not values.get("completed_date"):
            values["completed_date"] = datetime.utcnow()

        for name, value in values.items():
            setattr(task_db, name, value)
        task_db.updated_at = datetime.utcnow()

        try:
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Updated task {task_id}: {sorted(values)}")
            return task_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update task {task_id}: {type(e).__name__}: {str(e)}")
            raise

    def delete(self, task_id: str) -> Optional[Task]:
        """Delete a task.

        Returns:
            The deleted task, or None if no task has this ID
        """
        task_db = self.db.query(TaskDB).filter(TaskDB.id == task_id).first()
        if not task_db:
            return None

        deleted = task_db.to_pydantic()
        try:
            self.db.delete(task_db)
            self.db.commit()
            logger.debug(f"Deleted task {task_id}")
            return deleted
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete task {task_id}: {type(e).__name__}: {str(e)}")
            raise
