"""Data models for studioboard."""

from studioboard.models.task import (
    Task,
    TaskStatus,
    TaskPriority,
    UserSummary,
    ServiceRequestSummary,
    BOARD_STATUSES,
)
from studioboard.models.actor import Actor, ActorRole

__all__ = [
    "Task",
    "TaskStatus",
    "TaskPriority",
    "UserSummary",
    "ServiceRequestSummary",
    "BOARD_STATUSES",
    "Actor",
    "ActorRole",
]
