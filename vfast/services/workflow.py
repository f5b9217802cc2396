"""
Booking workflow state machine.

``TRANSITIONS`` is the single authority on which status changes are legal.
``apply_transition`` checks the actor, the source status and the action's
arguments before it touches the booking, then applies the status change
together with its bookkeeping (approver ids, timestamps, notes routed by
role, rejection history, status history).

Room binding for ALLOCATE / CANCEL_ALLOCATION is done by the allocation
service, which calls ``apply_transition`` inside its own transaction.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Tuple

from vfast.core.exceptions import (
    InvalidTransitionError,
    NotAuthorizedError,
    ReconsiderationLimitExceededError,
    ValidationError,
)
from vfast.core.permissions import Principal, require_role
from vfast.models.base import utcnow
from vfast.models.booking import Booking, BookingRejection, BookingStatusHistory
from vfast.models.enums import BookingStatus, BookingType, CheckInStatus, UserRole

__all__ = [
    "BookingAction",
    "TRANSITIONS",
    "ACTION_ROLES",
    "CREATE_ROLES",
    "NOTES_FIELD_BY_ROLE",
    "initial_status",
    "allowed_actions",
    "next_status",
    "authorize",
    "apply_transition",
    "record_creation",
    "advance_check_in_status",
    "ensure_resubmittable",
]


class BookingAction(str, Enum):
    DEPARTMENT_APPROVE = "department_approve"
    DEPARTMENT_REJECT = "department_reject"
    ADMIN_APPROVE = "admin_approve"
    ADMIN_REJECT = "admin_reject"
    ALLOCATE = "allocate"
    CANCEL_ALLOCATION = "cancel_allocation"


S = BookingStatus
A = BookingAction

TRANSITIONS: Dict[Tuple[BookingStatus, BookingAction], BookingStatus] = {
    (S.PENDING_DEPARTMENT_APPROVAL, A.DEPARTMENT_APPROVE): S.PENDING_ADMIN_APPROVAL,
    (S.PENDING_DEPARTMENT_APPROVAL, A.DEPARTMENT_REJECT): S.REJECTED,
    (S.PENDING_ADMIN_APPROVAL, A.ADMIN_APPROVE): S.APPROVED,
    (S.PENDING_ADMIN_APPROVAL, A.ADMIN_REJECT): S.REJECTED,
    (S.APPROVED, A.ALLOCATE): S.ALLOCATED,
    (S.PENDING_RECONSIDERATION, A.ALLOCATE): S.ALLOCATED,
    (S.ALLOCATED, A.CANCEL_ALLOCATION): S.PENDING_RECONSIDERATION,
    (S.PENDING_RECONSIDERATION, A.ADMIN_APPROVE): S.APPROVED,
    (S.PENDING_RECONSIDERATION, A.ADMIN_REJECT): S.REJECTED,
}

ACTION_ROLES: Dict[BookingAction, FrozenSet[UserRole]] = {
    A.DEPARTMENT_APPROVE: frozenset({UserRole.DEPARTMENT_APPROVER, UserRole.ADMIN}),
    A.DEPARTMENT_REJECT: frozenset({UserRole.DEPARTMENT_APPROVER, UserRole.ADMIN}),
    A.ADMIN_APPROVE: frozenset({UserRole.ADMIN}),
    A.ADMIN_REJECT: frozenset({UserRole.ADMIN}),
    A.ALLOCATE: frozenset({UserRole.VFAST}),
    A.CANCEL_ALLOCATION: frozenset({UserRole.VFAST}),
}

CREATE_ROLES: FrozenSet[UserRole] = frozenset({UserRole.BOOKING})

REJECT_ACTIONS = frozenset({A.DEPARTMENT_REJECT, A.ADMIN_REJECT})

NOTES_FIELD_BY_ROLE: Dict[UserRole, str] = {
    UserRole.ADMIN: "admin_notes",
    UserRole.DEPARTMENT_APPROVER: "department_notes",
    UserRole.VFAST: "vfast_notes",
}

CHECK_IN_TRANSITIONS: Dict[CheckInStatus, CheckInStatus] = {
    CheckInStatus.NOT_CHECKED_IN: CheckInStatus.CHECKED_IN,
    CheckInStatus.CHECKED_IN: CheckInStatus.CHECKED_OUT,
}


def initial_status(booking_type: BookingType) -> BookingStatus:
    """PERSONAL bookings have no department gate."""
    if booking_type == BookingType.PERSONAL:
        return S.PENDING_ADMIN_APPROVAL
    return S.PENDING_DEPARTMENT_APPROVAL


def allowed_actions(status: BookingStatus) -> List[BookingAction]:
    return [action for (source, action) in TRANSITIONS if source == status]


def next_status(booking: Booking, action: BookingAction) -> BookingStatus:
    """Target status for ``action``, or ``InvalidTransitionError``."""
    target = TRANSITIONS.get((booking.status, action))
    if target is None:
        raise InvalidTransitionError(
            f"Cannot {action.value.replace('_', ' ')} booking {booking.id} "
            f"in status '{booking.status.value}'",
            booking_id=booking.id,
            current_status=booking.status.value,
            action=action.value,
        )
    return target


def authorize(booking: Booking, action: BookingAction, actor: Principal) -> None:
    """
    Role gate for a workflow action.

    Department approvers are additionally scoped to their own department.
    """
    require_role(actor, ACTION_ROLES[action])
    if actor.role == UserRole.DEPARTMENT_APPROVER and (
        actor.department_id is None or booking.department_id != actor.department_id
    ):
        raise NotAuthorizedError(
            f"Booking {booking.id} does not belong to your department",
            user_id=actor.user_id,
        )


def _route_notes(booking: Booking, actor: Principal, notes: Optional[str]) -> None:
    if notes is None:
        return
    field_name = NOTES_FIELD_BY_ROLE.get(actor.role)
    if field_name is not None:
        setattr(booking, field_name, notes)


def apply_transition(
    booking: Booking,
    action: BookingAction,
    actor: Principal,
    *,
    notes: Optional[str] = None,
    reason: Optional[str] = None,
    max_reconsiderations: int,
    now: Optional[datetime] = None,
) -> BookingStatusHistory:
    """
    Move ``booking`` along ``action`` and record the change.

    Every check runs before the first attribute is written, so a refused
    action leaves the booking exactly as it was.
    """
    authorize(booking, action, actor)
    source = booking.status
    target = next_status(booking, action)

    if action in REJECT_ACTIONS:
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError(
                "A rejection reason is required",
                field_errors={"reason": ["must not be empty"]},
            )

    reconsidering = source == S.PENDING_RECONSIDERATION and action == A.ADMIN_APPROVE
    if reconsidering and booking.reconsideration_count + 1 > max_reconsiderations:
        raise ReconsiderationLimitExceededError(booking.id, max_reconsiderations)

    if action == A.CANCEL_ALLOCATION and booking.check_in_status != CheckInStatus.NOT_CHECKED_IN:
        raise InvalidTransitionError(
            f"Cannot cancel allocation of booking {booking.id} after check-in",
            booking_id=booking.id,
            current_status=booking.status.value,
            action=action.value,
        )

    now = now or utcnow()

    if action == A.DEPARTMENT_APPROVE:
        booking.department_approver_id = actor.user_id
        booking.department_approval_at = now
    elif action == A.ADMIN_APPROVE:
        booking.admin_approver_id = actor.user_id
        booking.admin_approval_at = now
        if reconsidering:
            booking.reconsideration_count += 1
            booking.is_reconsidered = True
    elif action in REJECT_ACTIONS:
        booking.rejection_history.append(
            BookingRejection(
                reason=reason,
                rejected_by=actor.user_id,
                stage=source,
                rejected_at=now,
            )
        )

    _route_notes(booking, actor, notes if notes is not None else reason)
    booking.status = target

    history = BookingStatusHistory(
        from_status=source,
        to_status=target,
        action=action.value,
        changed_by=actor.user_id,
        notes=reason if action in REJECT_ACTIONS else notes,
        changed_at=now,
    )
    booking.status_history.append(history)
    return history


def record_creation(booking: Booking, actor: Principal, now: Optional[datetime] = None) -> BookingStatusHistory:
    history = BookingStatusHistory(
        from_status=None,
        to_status=booking.status,
        action="create",
        changed_by=actor.user_id,
        changed_at=now or utcnow(),
    )
    booking.status_history.append(history)
    return history


def advance_check_in_status(booking: Booking, target: CheckInStatus) -> None:
    """
    Booking-level check-in sub-state.

    Only an ALLOCATED booking moves, and only one step forward at a time.
    """
    if booking.status != S.ALLOCATED or CHECK_IN_TRANSITIONS.get(booking.check_in_status) != target:
        raise InvalidTransitionError(
            f"Cannot mark booking {booking.id} as {target.value.replace('_', ' ')} "
            f"(status '{booking.status.value}', check-in '{booking.check_in_status.value}')",
            booking_id=booking.id,
            current_status=booking.status.value,
            action=f"mark_{target.value}",
        )
    booking.check_in_status = target


def ensure_resubmittable(
    booking: Booking,
    actor: Principal,
    max_reconsiderations: int,
    already_resubmitted: bool = False,
) -> None:
    """
    A requestor may resubmit their own rejected booking once, within the cap.

    Further attempts have to go through the live resubmission instead.
    """
    require_role(actor, CREATE_ROLES)
    if booking.user_id != actor.user_id:
        raise NotAuthorizedError(
            f"Booking {booking.id} belongs to another user",
            user_id=actor.user_id,
        )
    if booking.status != S.REJECTED:
        raise InvalidTransitionError(
            f"Only rejected bookings can be resubmitted (booking {booking.id} is '{booking.status.value}')",
            booking_id=booking.id,
            current_status=booking.status.value,
            action="resubmit",
        )
    if already_resubmitted:
        raise InvalidTransitionError(
            f"Booking {booking.id} has already been resubmitted",
            booking_id=booking.id,
            current_status=booking.status.value,
            action="resubmit",
        )
    if booking.reconsideration_count + 1 > max_reconsiderations:
        raise ReconsiderationLimitExceededError(booking.id, max_reconsiderations)
