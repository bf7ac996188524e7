"""Board engine for studioboard: transition policy, ordering and columns."""

from studioboard.engine.transitions import (
    RejectionReason,
    TransitionRejected,
    allowed_targets,
    can_transition,
    check_transition,
    is_frozen,
    next_status,
    previous_status,
    rejection_reason,
    transition_updates,
)
from studioboard.engine.ranking import sort_column, upcoming_tasks, status_counts
from studioboard.engine.columns import BoardPagination, ColumnPagination, ColumnView, derive_column, derive_board

__all__ = [
    "RejectionReason",
    "TransitionRejected",
    "allowed_targets",
    "can_transition",
    "check_transition",
    "is_frozen",
    "next_status",
    "previous_status",
    "rejection_reason",
    "transition_updates",
    "sort_column",
    "upcoming_tasks",
    "status_counts",
    "BoardPagination",
    "ColumnPagination",
    "ColumnView",
    "derive_column",
    "derive_board",
]
