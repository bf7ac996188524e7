"""Task data model for studioboard.

Field names are snake_case in Python; the wire format (REST payloads) uses the
backend's camelCase names and `_id`, exposed here as aliases.
"""

from datetime import datetime, timezone
from typing import Optional, Union
from enum import Enum
from pydantic import BaseModel, Field


class TaskStatus(str, Enum):
    """Task status enumeration."""
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    REVIEW = "review"
    ACCEPTED = "accepted"
    COMPLETED = "completed"
    CANCELLED = "cancelled"  # Admin-only side state, not shown on the board


class TaskPriority(str, Enum):
    """Task priority enumeration."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


# Kanban columns, in board order
BOARD_STATUSES = (
    TaskStatus.TODO,
    TaskStatus.IN_PROGRESS,
    TaskStatus.REVIEW,
    TaskStatus.ACCEPTED,
    TaskStatus.COMPLETED,
)


class UserSummary(BaseModel):
    """Embedded summary of the user a task is assigned to."""

    id: str = Field(..., alias="_id")
    name: Optional[str] = None
    email: Optional[str] = None

    class Config:
        """Pydantic configuration."""
        populate_by_name = True


class ServiceRequestSummary(BaseModel):
    """Embedded summary of the service request a task belongs to."""

    id: str = Field(..., alias="_id")
    title: Optional[str] = None

    class Config:
        """Pydantic configuration."""
        populate_by_name = True


class Task(BaseModel):
    """Canonical Task model."""

    id: str = Field(..., alias="_id", description="Opaque task identifier")
    title: str = Field(..., description="Task title")
    description: str = Field("", description="Task description")
    status: TaskStatus = Field(TaskStatus.TODO, description="Task status (board column)")
    priority: Optional[Union[TaskPriority, str]] = Field(
        None,
        description="Task priority; missing or unrecognized values sort last",
    )
    notes: str = Field("", description="Free-text notes")
    deliverables: str = Field("", description="Free-text deliverables")
    attached_video: Optional[str] = Field(None, alias="attachedVideo", description="URL of an attached video")
    assigned_user_id: Optional[Union[UserSummary, str]] = Field(
        None,
        alias="assignedUserId",
        description="Assignee id, or the embedded user summary when the backend populates it",
    )
    service_request_id: Optional[Union[ServiceRequestSummary, str]] = Field(
        None,
        alias="serviceRequestId",
        description="Service request id, or the embedded summary when populated",
    )
    start_date: Optional[datetime] = Field(None, alias="startDate")
    due_date: Optional[datetime] = Field(None, alias="dueDate")
    completed_date: Optional[datetime] = Field(
        None,
        alias="completedDate",
        description="Set when the task transitions to completed",
    )
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
        populate_by_name = True

    @property
    def assignee_id(self) -> Optional[str]:
        """Assignee id whether or not the reference is populated."""
        if isinstance(self.assigned_user_id, UserSummary):
            return self.assigned_user_id.id
        return self.assigned_user_id

    @property
    def service_request_ref(self) -> Optional[str]:
        """Service request id whether or not the reference is populated."""
        if isinstance(self.service_request_id, ServiceRequestSummary):
            return self.service_request_id.id
        return self.service_request_id

    def to_wire(self) -> dict:
        """Serialize to the backend's JSON shape."""
        return self.model_dump(by_alias=True, mode="json")


def to_utc_naive(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize a datetime to naive UTC so aware and naive values compare."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
