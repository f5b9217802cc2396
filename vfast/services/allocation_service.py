"""
Room allocation transactor.

Binding rooms to a booking touches two tables: the rooms flip to
OCCUPIED and the booking moves to ALLOCATED. Both happen in one
transaction holding row locks on the booking and on every targeted room,
so two staff members allocating the same room at the same time cannot
both succeed. If any room fails its checks nothing is written.

A serialization failure or deadlock reported by the database is the one
error retried automatically: the transaction either committed fully or
rolled back fully, so running it again is safe.
"""

from typing import Iterable, List, Optional

from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session

from vfast.core import events
from vfast.core.exceptions import (
    BookingNotAllocatableError,
    RoomUnavailableError,
    ValidationError,
)
from vfast.core.permissions import Principal, require_role
from vfast.models.booking import Booking, BookingRoom
from vfast.models.enums import BookingStatus, RoomStatus
from vfast.repositories.booking import BookingRepository
from vfast.repositories.room import RoomRepository
from vfast.services.base import BaseService
from vfast.services.workflow import ACTION_ROLES, BookingAction, apply_transition

ALLOCATABLE_STATUSES = frozenset({BookingStatus.APPROVED, BookingStatus.PENDING_RECONSIDERATION})

# SQLSTATE codes for serialization failure and deadlock
RETRYABLE_SQLSTATES = frozenset({"40001", "40P01"})


def is_retryable_db_error(exc: BaseException) -> bool:
    if not isinstance(exc, DBAPIError):
        return False
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    return code in RETRYABLE_SQLSTATES


class AllocationService(BaseService):
    """
    Allocates and releases rooms for approved bookings.
    """

    def __init__(self, db_session: Session, **kwargs):
        super().__init__(db_session, **kwargs)
        self.bookings = BookingRepository(db_session)
        self.rooms = RoomRepository(db_session)

    def allocate(
        self,
        booking_id: int,
        room_ids: Iterable[int],
        actor: Principal,
        notes: Optional[str] = None,
    ) -> Booking:
        """
        Bind ``room_ids`` to the booking and move it to ALLOCATED.

        Raises:
            NotAuthorizedError: actor is not VFast staff
            BookingNotAllocatableError: booking is not approved or under reconsideration
            RoomUnavailableError: a room is missing, not available, under
                maintenance or held by another booking for overlapping dates
        """
        require_role(actor, ACTION_ROLES[BookingAction.ALLOCATE])
        room_ids = self._normalize_room_ids(room_ids)

        max_attempts = self.settings.ALLOCATION_MAX_RETRIES
        attempt = 0
        while True:
            attempt += 1
            try:
                return self._allocate_once(booking_id, room_ids, actor, notes)
            except DBAPIError as e:
                if not is_retryable_db_error(e) or attempt >= max_attempts:
                    raise
                self._logger.warning(
                    f"Allocation of booking {booking_id} hit a serialization failure, "
                    f"retrying ({attempt}/{max_attempts})",
                    extra={"booking_id": booking_id, "attempt": attempt},
                )

    def _allocate_once(
        self,
        booking_id: int,
        room_ids: List[int],
        actor: Principal,
        notes: Optional[str],
    ) -> Booking:
        with self.transaction():
            booking = self.bookings.get_active_for_update(booking_id)
            if booking.status not in ALLOCATABLE_STATUSES:
                raise BookingNotAllocatableError(booking.id, booking.status.value)
            if len(room_ids) > booking.number_of_rooms:
                raise ValidationError(
                    f"Booking {booking.id} requested {booking.number_of_rooms} room(s), "
                    f"{len(room_ids)} given",
                    field_errors={"room_ids": ["more rooms than requested"]},
                )

            rooms = self.rooms.lock_many(room_ids)
            self._check_rooms(booking, room_ids, rooms)

            history = apply_transition(
                booking,
                BookingAction.ALLOCATE,
                actor,
                notes=notes,
                max_reconsiderations=self.settings.MAX_RECONSIDERATIONS,
            )
            for room in rooms:
                self.rooms.set_status(room, RoomStatus.OCCUPIED)
                booking.room_bindings.append(
                    BookingRoom(room=room, allocated_by=actor.user_id, allocated_at=history.changed_at)
                )

            room_numbers = [room.room_number for room in rooms]
            self._emit(
                events.ROOM_ALLOCATED,
                booking.id,
                room_numbers=room_numbers,
                actor_id=actor.user_id,
            )
            self._emit(
                events.BOOKING_STATUS_CHANGED,
                booking.id,
                old_status=history.from_status.value,
                new_status=history.to_status.value,
                action=BookingAction.ALLOCATE.value,
                actor_id=actor.user_id,
            )

        self._logger.info(
            f"Booking {booking.id} allocated rooms {', '.join(room_numbers)}",
            extra={"booking_id": booking.id, "user_id": actor.user_id, "room_numbers": room_numbers},
        )
        return booking

    def _check_rooms(self, booking: Booking, room_ids: List[int], rooms) -> None:
        found = {room.id for room in rooms}
        for room_id in room_ids:
            if room_id not in found:
                raise RoomUnavailableError(
                    f"Room {room_id} does not exist",
                    room_id=room_id,
                    reason="not_found",
                    booking_id=booking.id,
                )

        under_maintenance = self.rooms.rooms_under_maintenance(room_ids)
        for room in rooms:
            if room.id in under_maintenance or room.status == RoomStatus.UNDER_MAINTENANCE:
                raise RoomUnavailableError(
                    f"Room {room.room_number} is under maintenance",
                    room_id=room.id,
                    reason="under_maintenance",
                    booking_id=booking.id,
                )
            if room.status != RoomStatus.AVAILABLE:
                raise RoomUnavailableError(
                    f"Room {room.room_number} is no longer available",
                    room_id=room.id,
                    reason=room.status.value,
                    booking_id=booking.id,
                )

        conflicts = self.bookings.find_conflicting_bindings(
            room_ids,
            booking.check_in_date,
            booking.check_out_date,
            exclude_booking_id=booking.id,
        )
        if conflicts:
            conflict = conflicts[0]
            raise RoomUnavailableError(
                f"Room {conflict.room.room_number} is already allocated to booking "
                f"{conflict.booking_id} for overlapping dates",
                room_id=conflict.room_id,
                reason="overlapping_allocation",
                booking_id=booking.id,
            )

    def cancel_allocation(self, booking_id: int, actor: Principal, notes: Optional[str] = None) -> Booking:
        """
        Release the booking's rooms and send it back for reconsideration.

        Room release and the status change commit together.
        """
        require_role(actor, ACTION_ROLES[BookingAction.CANCEL_ALLOCATION])
        with self.transaction():
            booking = self.bookings.get_active_for_update(booking_id)
            history = apply_transition(
                booking,
                BookingAction.CANCEL_ALLOCATION,
                actor,
                notes=notes,
                max_reconsiderations=self.settings.MAX_RECONSIDERATIONS,
            )
            room_ids = [binding.room_id for binding in booking.room_bindings]
            released = []
            for room in self.rooms.lock_many(room_ids):
                if room.status == RoomStatus.OCCUPIED:
                    self.rooms.set_status(room, RoomStatus.AVAILABLE)
                released.append(room.room_number)
            booking.room_bindings.clear()

            self._emit(
                events.BOOKING_STATUS_CHANGED,
                booking.id,
                old_status=history.from_status.value,
                new_status=history.to_status.value,
                action=BookingAction.CANCEL_ALLOCATION.value,
                actor_id=actor.user_id,
            )

        self._logger.info(
            f"Allocation of booking {booking.id} cancelled, released {', '.join(released) or 'no rooms'}",
            extra={"booking_id": booking.id, "user_id": actor.user_id},
        )
        return booking

    @staticmethod
    def _normalize_room_ids(room_ids: Iterable[int]) -> List[int]:
        room_ids = list(room_ids)
        if not room_ids:
            raise ValidationError(
                "At least one room is required",
                field_errors={"room_ids": ["must not be empty"]},
            )
        if len(set(room_ids)) != len(room_ids):
            raise ValidationError(
                "Duplicate rooms in allocation request",
                field_errors={"room_ids": ["must not contain duplicates"]},
            )
        return room_ids
