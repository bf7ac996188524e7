"""Board view state for studioboard."""

from studioboard.board.session import BoardSession
from studioboard.board.cache import TaskCache
from studioboard.board.controller import TransitionController, PermissionDenied
from studioboard.board.editor import FieldEditor, EDITABLE_FIELDS
from studioboard.board.notifications import Notifier, Notification, NotificationLevel

__all__ = [
    "BoardSession",
    "TaskCache",
    "TransitionController",
    "PermissionDenied",
    "FieldEditor",
    "EDITABLE_FIELDS",
    "Notifier",
    "Notification",
    "NotificationLevel",
]
