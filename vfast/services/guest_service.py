"""
Guest roster service.

Guests check in and out one by one. The booking's aggregate check-in
status is moved separately by ``BookingService.mark_checked_in`` /
``mark_checked_out``.
"""

from typing import List

from sqlalchemy.orm import Session

from vfast.core.exceptions import (
    GuestAlreadyCheckedInError,
    GuestNotCheckedInError,
    InvalidTransitionError,
)
from vfast.core.permissions import Principal, require_role
from vfast.models.base import utcnow
from vfast.models.booking import Booking
from vfast.models.enums import BookingStatus, CheckInStatus, UserRole
from vfast.models.guest import Guest, GuestNote
from vfast.repositories.booking import BookingRepository
from vfast.repositories.guest import GuestRepository
from vfast.schemas.guest import GuestCreate, GuestNoteCreate, GuestUpdate
from vfast.services.base import BaseService

ROSTER_ROLES = [UserRole.VFAST]
READ_ROLES = [UserRole.VFAST, UserRole.ADMIN]


class GuestService(BaseService):
    def __init__(self, db_session: Session, **kwargs):
        super().__init__(db_session, **kwargs)
        self.repository = GuestRepository(db_session)
        self.bookings = BookingRepository(db_session)

    @staticmethod
    def _ensure_open_stay(booking: Booking, action: str) -> None:
        """Roster changes need an allocated booking whose stay has not ended."""
        if booking.status != BookingStatus.ALLOCATED or booking.check_in_status == CheckInStatus.CHECKED_OUT:
            raise InvalidTransitionError(
                f"Cannot {action} for booking {booking.id} "
                f"(status '{booking.status.value}', check-in '{booking.check_in_status.value}')",
                booking_id=booking.id,
                current_status=booking.status.value,
                action=action,
            )

    def add_guest(self, booking_id: int, data: GuestCreate, actor: Principal) -> Guest:
        require_role(actor, ROSTER_ROLES)
        with self.transaction():
            booking = self.bookings.get_active_for_update(booking_id)
            self._ensure_open_stay(booking, "add guest")
            guest = Guest(
                booking_id=booking.id,
                checked_in=False,
                is_verified=False,
                **data.model_dump(),
            )
            self.repository.create(guest)

        self._logger.info(
            f"Guest {guest.id} added to booking {booking_id}",
            extra={"booking_id": booking_id, "user_id": actor.user_id},
        )
        return guest

    def update_guest(self, guest_id: int, data: GuestUpdate, actor: Principal) -> Guest:
        require_role(actor, ROSTER_ROLES)
        with self.transaction():
            guest = self.repository.get_for_update(guest_id)
            self.repository.update(guest, data.model_dump(exclude_unset=True))
        return guest

    def verify_kyc(self, guest_id: int, kyc_document_url: str, actor: Principal) -> Guest:
        require_role(actor, ROSTER_ROLES)
        with self.transaction():
            guest = self.repository.get_for_update(guest_id)
            guest.kyc_document_url = kyc_document_url
            guest.is_verified = True
        self._logger.info(f"Guest {guest_id} KYC verified", extra={"user_id": actor.user_id})
        return guest

    def remove_guest(self, guest_id: int, actor: Principal) -> None:
        require_role(actor, ROSTER_ROLES)
        with self.transaction():
            guest = self.repository.get_for_update(guest_id)
            if guest.checked_in:
                raise GuestAlreadyCheckedInError(
                    "Check the guest out before removing them",
                    guest_id=guest.id,
                )
            self.repository.delete(guest)

    def check_in(self, guest_id: int, actor: Principal) -> Guest:
        """
        Check a guest in.

        The first guest to check in is recorded on the booking.
        """
        require_role(actor, ROSTER_ROLES)
        with self.transaction():
            guest = self.repository.get_for_update(guest_id)
            if guest.checked_in:
                raise GuestAlreadyCheckedInError(guest_id=guest.id)
            booking = self.bookings.get_active_for_update(guest.booking_id)
            self._ensure_open_stay(booking, "check in guest")

            guest.checked_in = True
            guest.check_in_time = utcnow()
            guest.check_out_time = None
            if booking.first_checked_in_guest_name is None:
                booking.first_checked_in_guest_name = guest.name

        self._logger.info(
            f"Guest {guest.id} checked in",
            extra={"booking_id": guest.booking_id, "user_id": actor.user_id},
        )
        return guest

    def check_out(self, guest_id: int, actor: Principal) -> Guest:
        require_role(actor, ROSTER_ROLES)
        with self.transaction():
            guest = self.repository.get_for_update(guest_id)
            if not guest.checked_in:
                raise GuestNotCheckedInError(guest_id=guest.id)
            guest.checked_in = False
            guest.check_out_time = utcnow()

        self._logger.info(
            f"Guest {guest.id} checked out",
            extra={"booking_id": guest.booking_id, "user_id": actor.user_id},
        )
        return guest

    def get_guest(self, guest_id: int, actor: Principal) -> Guest:
        require_role(actor, READ_ROLES)
        return self.repository.get_by_id(guest_id)

    def list_guests(self, booking_id: int, actor: Principal) -> List[Guest]:
        require_role(actor, READ_ROLES)
        self.bookings.get_active(booking_id)
        return self.repository.list_by_booking(booking_id)

    # -------------------------------------------------------------------------
    # Notes
    # -------------------------------------------------------------------------

    def add_note(self, guest_id: int, data: GuestNoteCreate, actor: Principal) -> GuestNote:
        require_role(actor, ROSTER_ROLES)
        with self.transaction():
            guest = self.repository.get_by_id(guest_id)
            note = self.repository.add_note(
                GuestNote(
                    guest_id=guest.id,
                    note=data.note,
                    note_type=data.note_type,
                    author_id=actor.user_id,
                    created_at=utcnow(),
                )
            )
        return note

    def list_notes(self, guest_id: int, actor: Principal) -> List[GuestNote]:
        require_role(actor, READ_ROLES)
        self.repository.get_by_id(guest_id)
        return self.repository.list_notes(guest_id)
