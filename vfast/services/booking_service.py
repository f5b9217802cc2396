"""
Booking lifecycle service.

Creation, approval and rejection, resubmission, soft delete, the
booking-level check-in/check-out and the read side (queues, journey).
Allocation lives in ``AllocationService``.
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from vfast.core import events
from vfast.core.exceptions import (
    InvalidTransitionError,
    NotAuthorizedError,
    ResourceNotFoundError,
    ValidationError,
)
from vfast.core.permissions import Principal, require_role
from vfast.models.base import utcnow
from vfast.models.booking import Booking
from vfast.models.enums import (
    BookingStatus,
    CheckInStatus,
    RoomStatus,
    UserRole,
    WorkflowStage,
)
from vfast.repositories.booking import BookingFilter, BookingRepository
from vfast.repositories.guest import GuestRepository
from vfast.repositories.room import RoomRepository
from vfast.repositories.user import DepartmentRepository
from vfast.schemas.booking import BookingCreate, BookingJourney, JourneyEntry
from vfast.services.base import BaseService
from vfast.services.workflow import (
    CREATE_ROLES,
    BookingAction,
    advance_check_in_status,
    apply_transition,
    ensure_resubmittable,
    initial_status,
    record_creation,
)

STAY_ROLES = [UserRole.VFAST]


class BookingService(BaseService):
    """
    High-level orchestration of the booking workflow.
    """

    def __init__(self, db_session: Session, **kwargs):
        super().__init__(db_session, **kwargs)
        self.repository = BookingRepository(db_session)
        self.rooms = RoomRepository(db_session)
        self.guests = GuestRepository(db_session)
        self.departments = DepartmentRepository(db_session)

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------

    def create_booking(self, data: BookingCreate, actor: Principal) -> Booking:
        """
        Create a booking in its initial status.

        OFFICIAL bookings start in department review, PERSONAL bookings in
        admin review.
        """
        require_role(actor, CREATE_ROLES)
        self._validate_request(data)

        with self.transaction():
            booking = self._build_booking(data, actor)
            record_creation(booking, actor)
            self.repository.create(booking)
            self._emit(
                events.BOOKING_CREATED,
                booking.id,
                status=booking.status.value,
                booking_type=booking.booking_type.value,
                user_id=actor.user_id,
            )

        self._logger.info(
            f"Booking {booking.id} created in status {booking.status.value}",
            extra={"booking_id": booking.id, "user_id": actor.user_id},
        )
        return booking

    def resubmit(self, booking_id: int, data: BookingCreate, actor: Principal) -> Booking:
        """
        Resubmit a rejected booking as a new request.

        The new booking points back at the rejected one and carries its
        reconsideration count forward.
        """
        self._validate_request(data)

        with self.transaction():
            original = self.repository.get_active_for_update(booking_id)
            ensure_resubmittable(
                original,
                actor,
                self.settings.MAX_RECONSIDERATIONS,
                already_resubmitted=self.repository.has_live_resubmission(original.id),
            )

            booking = self._build_booking(data, actor)
            booking.reconsidered_from_id = original.id
            booking.is_reconsidered = True
            booking.reconsideration_count = original.reconsideration_count + 1
            record_creation(booking, actor)
            self.repository.create(booking)
            self._emit(
                events.BOOKING_RESUBMITTED,
                booking.id,
                original_booking_id=original.id,
                reconsideration_count=booking.reconsideration_count,
            )

        self._logger.info(
            f"Booking {booking_id} resubmitted as {booking.id}",
            extra={"booking_id": booking.id, "user_id": actor.user_id},
        )
        return booking

    def _validate_request(self, data: BookingCreate) -> None:
        if data.number_of_rooms > self.settings.MAX_ROOMS_PER_BOOKING:
            raise ValidationError(
                f"At most {self.settings.MAX_ROOMS_PER_BOOKING} rooms can be requested",
                field_errors={"number_of_rooms": ["exceeds the configured maximum"]},
            )
        if data.department_id is not None and self.departments.find_by_id(data.department_id) is None:
            raise ResourceNotFoundError("Department", data.department_id)

    def _build_booking(self, data: BookingCreate, actor: Principal) -> Booking:
        return Booking(
            user_id=actor.user_id,
            department_id=data.department_id,
            purpose=data.purpose,
            booking_type=data.booking_type,
            guest_count=data.guest_count,
            number_of_rooms=data.number_of_rooms,
            check_in_date=data.check_in_date,
            check_out_date=data.check_out_date,
            room_preference=data.room_preference,
            special_requests=data.special_requests,
            document_path=data.document_path,
            status=initial_status(data.booking_type),
            check_in_status=CheckInStatus.NOT_CHECKED_IN,
            is_reconsidered=False,
            reconsideration_count=0,
            key_handed_over=False,
            is_deleted=False,
        )

    # -------------------------------------------------------------------------
    # Approval workflow
    # -------------------------------------------------------------------------

    def department_approve(self, booking_id: int, actor: Principal, notes: Optional[str] = None) -> Booking:
        return self._transition(booking_id, BookingAction.DEPARTMENT_APPROVE, actor, notes=notes)

    def department_reject(
        self,
        booking_id: int,
        actor: Principal,
        reason: str,
        notes: Optional[str] = None,
    ) -> Booking:
        return self._transition(booking_id, BookingAction.DEPARTMENT_REJECT, actor, notes=notes, reason=reason)

    def admin_approve(self, booking_id: int, actor: Principal, notes: Optional[str] = None) -> Booking:
        """Approve a booking in admin review, or re-approve one under reconsideration."""
        return self._transition(booking_id, BookingAction.ADMIN_APPROVE, actor, notes=notes)

    def admin_reject(
        self,
        booking_id: int,
        actor: Principal,
        reason: str,
        notes: Optional[str] = None,
    ) -> Booking:
        return self._transition(booking_id, BookingAction.ADMIN_REJECT, actor, notes=notes, reason=reason)

    def _transition(
        self,
        booking_id: int,
        action: BookingAction,
        actor: Principal,
        *,
        notes: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> Booking:
        with self.transaction():
            booking = self.repository.get_active_for_update(booking_id)
            history = apply_transition(
                booking,
                action,
                actor,
                notes=notes,
                reason=reason,
                max_reconsiderations=self.settings.MAX_RECONSIDERATIONS,
            )
            self._emit(
                events.BOOKING_STATUS_CHANGED,
                booking.id,
                old_status=history.from_status.value,
                new_status=history.to_status.value,
                action=action.value,
                actor_id=actor.user_id,
            )
            if action == BookingAction.ADMIN_REJECT:
                self._emit(events.BOOKING_REJECTED_BY_ADMIN, booking.id, reason=reason)

        self._logger.info(
            f"Booking {booking.id}: {action.value} -> {booking.status.value}",
            extra={"booking_id": booking.id, "user_id": actor.user_id, "action": action.value},
        )
        return booking

    # -------------------------------------------------------------------------
    # Stay handling
    # -------------------------------------------------------------------------

    def mark_checked_in(self, booking_id: int, actor: Principal) -> Booking:
        """Mark the stay as started and record the key handover."""
        require_role(actor, STAY_ROLES)
        with self.transaction():
            booking = self.repository.get_active_for_update(booking_id)
            advance_check_in_status(booking, CheckInStatus.CHECKED_IN)
            booking.key_handed_over = True
            booking.checked_in_at = utcnow()

        self._logger.info(
            f"Booking {booking.id} checked in",
            extra={"booking_id": booking.id, "user_id": actor.user_id},
        )
        return booking

    def mark_checked_out(self, booking_id: int, actor: Principal) -> Booking:
        """
        End the stay.

        Guests still checked in are checked out and the bound rooms are
        released; the bindings stay as the allocation record.
        """
        require_role(actor, STAY_ROLES)
        with self.transaction():
            booking = self.repository.get_active_for_update(booking_id)
            advance_check_in_status(booking, CheckInStatus.CHECKED_OUT)
            now = utcnow()
            booking.checked_out_at = now

            for guest in self.guests.checked_in_for_booking(booking.id):
                guest.checked_in = False
                guest.check_out_time = now

            room_ids = [binding.room_id for binding in booking.room_bindings]
            for room in self.rooms.lock_many(room_ids):
                if room.status == RoomStatus.OCCUPIED:
                    self.rooms.set_status(room, RoomStatus.AVAILABLE)

        self._logger.info(
            f"Booking {booking.id} checked out",
            extra={"booking_id": booking.id, "user_id": actor.user_id},
        )
        return booking

    def update_document(self, booking_id: int, document_path: Optional[str], actor: Principal) -> Booking:
        require_role(actor, [UserRole.BOOKING, UserRole.VFAST])
        with self.transaction():
            booking = self.repository.get_active_for_update(booking_id)
            self._ensure_visible(booking, actor)
            booking.document_path = document_path
        return booking

    def soft_delete(self, booking_id: int, actor: Principal) -> Booking:
        """Hide a booking from queues and reports; allocated bookings are kept."""
        require_role(actor, [UserRole.BOOKING, UserRole.ADMIN])
        with self.transaction():
            booking = self.repository.get_active_for_update(booking_id)
            if actor.role == UserRole.BOOKING and booking.user_id != actor.user_id:
                raise NotAuthorizedError(
                    f"Booking {booking.id} belongs to another user",
                    user_id=actor.user_id,
                )
            if booking.status == BookingStatus.ALLOCATED:
                raise InvalidTransitionError(
                    f"Booking {booking.id} holds rooms and cannot be deleted",
                    booking_id=booking.id,
                    current_status=booking.status.value,
                    action="delete",
                )
            booking.soft_delete()

        self._logger.info(
            f"Booking {booking.id} soft-deleted",
            extra={"booking_id": booking.id, "user_id": actor.user_id},
        )
        return booking

    # -------------------------------------------------------------------------
    # Read side
    # -------------------------------------------------------------------------

    def get_booking(self, booking_id: int, actor: Optional[Principal] = None) -> Booking:
        booking = self.repository.get_active(booking_id)
        if actor is not None:
            self._ensure_visible(booking, actor)
        return booking

    def list_for_actor(
        self,
        actor: Principal,
        status: Optional[BookingStatus] = None,
        stage: Optional[WorkflowStage] = None,
    ) -> List[Booking]:
        """
        Queue view scoped by role.

        Requestors see their own bookings, department approvers their
        department's, admins and VFast staff everything.
        """
        filters = BookingFilter(status=status, stage=stage)
        if actor.role == UserRole.BOOKING:
            filters.user_id = actor.user_id
        elif actor.role == UserRole.DEPARTMENT_APPROVER:
            if actor.department_id is None:
                return []
            filters.department_id = actor.department_id
        items, _ = self.repository.search(filters)
        return items

    def journey(self, booking_id: int, actor: Optional[Principal] = None) -> BookingJourney:
        """Chronological timeline of a booking."""
        booking = self.get_booking(booking_id, actor)
        entries: List[JourneyEntry] = []
        for history in booking.status_history:
            entries.append(
                JourneyEntry(
                    at=history.changed_at,
                    event=history.action,
                    status=history.to_status,
                    actor_id=history.changed_by,
                    notes=history.notes,
                )
            )
        if booking.checked_in_at is not None:
            entries.append(JourneyEntry(at=booking.checked_in_at, event="checked_in", status=booking.status))
        if booking.checked_out_at is not None:
            entries.append(JourneyEntry(at=booking.checked_out_at, event="checked_out", status=booking.status))

        return BookingJourney(
            booking_id=booking.id,
            current_status=booking.status,
            current_workflow_stage=booking.current_workflow_stage,
            entries=entries,
        )

    def _ensure_visible(self, booking: Booking, actor: Principal) -> None:
        if actor.role == UserRole.BOOKING and booking.user_id != actor.user_id:
            raise NotAuthorizedError(f"Booking {booking.id} belongs to another user", user_id=actor.user_id)
        if actor.role == UserRole.DEPARTMENT_APPROVER and (
            actor.department_id is None or booking.department_id != actor.department_id
        ):
            raise NotAuthorizedError(
                f"Booking {booking.id} does not belong to your department",
                user_id=actor.user_id,
            )
