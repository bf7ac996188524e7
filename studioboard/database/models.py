"""SQLAlchemy database models for studioboard."""

from datetime import datetime
import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from typing import Union, TypeVar, Type
from studioboard.database.database import Base
from studioboard.models.task import TaskStatus, TaskPriority

T = TypeVar('T')


def enum_to_value(enum_obj: Union[str, T]) -> str:
    """Convert enum to string value (handles both enum and string)."""
    if hasattr(enum_obj, 'value'):
        return enum_obj.value
    return str(enum_obj)


def value_to_enum(value: str, enum_class: Type[T], default: T) -> T:
    """Convert string to enum with fallback to default."""
    if not value:
        return default
    try:
        return enum_class(value.lower())
    except (ValueError, AttributeError):
        return default


def new_object_id() -> str:
    return uuid.uuid4().hex


class UserDB(Base):
    """Database model for a back-office user (task assignee)."""

    __tablename__ = "users"

    id = Column(String, primary_key=True, default=new_object_id)
    name = Column(String, nullable=False)
    email = Column(String, nullable=True, unique=True)
    role = Column(String, nullable=False, default="user")

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to the embedded summary."""
        from studioboard.models.task import UserSummary
        return UserSummary(id=self.id, name=self.name, email=self.email)


class ServiceRequestDB(Base):
    """Database model for a customer service request (parent of tasks)."""

    __tablename__ = "service_requests"

    id = Column(String, primary_key=True, default=new_object_id)
    title = Column(String, nullable=False)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to the embedded summary."""
        from studioboard.models.task import ServiceRequestSummary
        return ServiceRequestSummary(id=self.id, title=self.title)


class TaskDB(Base):
    """Database model for Task."""

    __tablename__ = "tasks"

    # Primary key
    id = Column(String, primary_key=True, default=new_object_id)

    # References
    service_request_id = Column(
        String, ForeignKey("service_requests.id", ondelete="SET NULL"), nullable=True, index=True
    )
    assigned_user_id = Column(String, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    # Basic fields
    title = Column(String, nullable=False)
    description = Column(String, nullable=False, default="")
    status = Column(String, nullable=False, default=TaskStatus.TODO.value, index=True)
    priority = Column(String, nullable=False, default=TaskPriority.MEDIUM.value)
    notes = Column(String, nullable=False, default="")
    deliverables = Column(String, nullable=False, default="")
    attached_video = Column(String, nullable=True)

    # Dates
    start_date = Column(DateTime, nullable=True)
    due_date = Column(DateTime, nullable=True)
    completed_date = Column(DateTime, nullable=True)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    assigned_user = relationship(UserDB, lazy="joined")
    service_request = relationship(ServiceRequestDB, lazy="joined")

    def to_pydantic(self):
        """Convert database model to Pydantic model, embedding referenced summaries."""
        from studioboard.models.task import Task

        assigned = self.assigned_user.to_pydantic() if self.assigned_user else self.assigned_user_id
        service_request = self.service_request.to_pydantic() if self.service_request else self.service_request_id

        return Task(
            id=self.id,
            title=self.title,
            description=self.description or "",
            status=value_to_enum(self.status, TaskStatus, TaskStatus.TODO),
            priority=value_to_enum(self.priority, TaskPriority, TaskPriority.MEDIUM),
            notes=self.notes or "",
            deliverables=self.deliverables or "",
            attached_video=self.attached_video,
            assigned_user_id=assigned,
            service_request_id=service_request,
            start_date=self.start_date,
            due_date=self.due_date,
            completed_date=self.completed_date,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
