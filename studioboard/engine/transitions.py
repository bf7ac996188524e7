"""Status transition policy for studioboard.

Decides which status changes an actor may make. Admins may move a task between
any two statuses. Regular users walk a restricted graph:

    todo <-> in-progress <-> review

and can neither enter nor leave the manager-only stages (accepted, completed).
All functions here are pure; rejections happen before any network call.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, Optional, Union

from studioboard.models.actor import Actor, ActorRole
from studioboard.models.constants import MANAGER_ONLY_STATUSES
from studioboard.models.task import BOARD_STATUSES, TaskStatus


class RejectionReason(str, Enum):
    """Why a transition was refused."""
    MANAGER_ONLY = "manager_only"
    ILLEGAL = "illegal"


REJECTION_MESSAGES = {
    RejectionReason.MANAGER_ONLY: "This stage is manager-only",
    RejectionReason.ILLEGAL: "Cannot move the task to this status",
}


class TransitionRejected(Exception):
    """Raised when the policy refuses a status change."""

    def __init__(self, reason: RejectionReason, source: TaskStatus, target: TaskStatus):
        self.reason = reason
        self.source = source
        self.target = target
        self.message = REJECTION_MESSAGES[reason]
        super().__init__(f"{self.message} ({source.value} -> {target.value})")


ALL_STATUSES: FrozenSet[TaskStatus] = frozenset(TaskStatus)

USER_TRANSITIONS: Dict[TaskStatus, FrozenSet[TaskStatus]] = {
    TaskStatus.TODO: frozenset({TaskStatus.IN_PROGRESS}),
    TaskStatus.IN_PROGRESS: frozenset({TaskStatus.TODO, TaskStatus.REVIEW}),
    TaskStatus.REVIEW: frozenset({TaskStatus.IN_PROGRESS}),
    TaskStatus.ACCEPTED: frozenset(),
    TaskStatus.COMPLETED: frozenset(),
    TaskStatus.CANCELLED: frozenset(),
}

# Prev/next button adjacency
USER_NEXT = {
    TaskStatus.TODO: TaskStatus.IN_PROGRESS,
    TaskStatus.IN_PROGRESS: TaskStatus.REVIEW,
}
USER_PREVIOUS = {
    TaskStatus.IN_PROGRESS: TaskStatus.TODO,
    TaskStatus.REVIEW: TaskStatus.IN_PROGRESS,
}
# Admins walk the board order; cancelled has no neighbours
ADMIN_NEXT = dict(zip(BOARD_STATUSES[:-1], BOARD_STATUSES[1:]))
ADMIN_PREVIOUS = dict(zip(BOARD_STATUSES[1:], BOARD_STATUSES[:-1]))


def _role(actor: Union[Actor, ActorRole, str]) -> ActorRole:
    if isinstance(actor, Actor):
        return ActorRole(actor.role)
    return ActorRole(actor)


def allowed_targets(actor: Union[Actor, ActorRole, str], status: Union[TaskStatus, str]) -> FrozenSet[TaskStatus]:
    """Get the statuses a task in `status` may be moved to (self excluded).

    Args:
        actor: Actor, or bare role
        status: Current task status

    Returns:
        Set of legal destination statuses
    """
    status = TaskStatus(status)
    if _role(actor) == ActorRole.ADMIN:
        return ALL_STATUSES - {status}
    return USER_TRANSITIONS[status]


def is_frozen(actor: Union[Actor, ActorRole, str], status: Union[TaskStatus, str]) -> bool:
    """Check whether a task in `status` cannot be moved at all by the actor."""
    return _role(actor) == ActorRole.USER and TaskStatus(status) in MANAGER_ONLY_STATUSES


def rejection_reason(
    actor: Union[Actor, ActorRole, str],
    source: Union[TaskStatus, str],
    target: Union[TaskStatus, str],
) -> Optional[RejectionReason]:
    """Get the reason a transition is refused, or None when it is legal.

    A self-transition is a legal no-op unless the source is frozen for the actor.
    """
    source = TaskStatus(source)
    target = TaskStatus(target)
    role = _role(actor)

    if role == ActorRole.ADMIN:
        return None

    if source in MANAGER_ONLY_STATUSES or target in MANAGER_ONLY_STATUSES:
        return RejectionReason.MANAGER_ONLY
    if source == target:
        return None
    if target not in USER_TRANSITIONS[source]:
        return RejectionReason.ILLEGAL
    return None


def can_transition(
    actor: Union[Actor, ActorRole, str],
    source: Union[TaskStatus, str],
    target: Union[TaskStatus, str],
) -> bool:
    return rejection_reason(actor, source, target) is None


def check_transition(
    actor: Union[Actor, ActorRole, str],
    source: Union[TaskStatus, str],
    target: Union[TaskStatus, str],
) -> None:
    """Raise TransitionRejected when the actor may not make this transition."""
    reason = rejection_reason(actor, source, target)
    if reason is not None:
        raise TransitionRejected(reason, TaskStatus(source), TaskStatus(target))


def next_status(actor: Union[Actor, ActorRole, str], status: Union[TaskStatus, str]) -> Optional[TaskStatus]:
    """Target of the "next" button for a task in `status`, or None if hidden."""
    table = ADMIN_NEXT if _role(actor) == ActorRole.ADMIN else USER_NEXT
    return table.get(TaskStatus(status))


def previous_status(actor: Union[Actor, ActorRole, str], status: Union[TaskStatus, str]) -> Optional[TaskStatus]:
    """Target of the "previous" button for a task in `status`, or None if hidden."""
    table = ADMIN_PREVIOUS if _role(actor) == ActorRole.ADMIN else USER_PREVIOUS
    return table.get(TaskStatus(status))


def transition_updates(
    target: Union[TaskStatus, str],
    now: Optional[datetime] = None,
    source: Optional[Union[TaskStatus, str]] = None,
) -> dict:
    """Field updates (Python names) that moving a task to `target` implies.

    Moving to completed stamps `completed_date`; moving out of completed clears it.
    """
    target = TaskStatus(target)
    updates = {"status": target.value}
    if target == TaskStatus.COMPLETED:
        updates["completed_date"] = now or datetime.utcnow()
    elif source is not None and TaskStatus(source) == TaskStatus.COMPLETED:
        updates["completed_date"] = None
    return updates
