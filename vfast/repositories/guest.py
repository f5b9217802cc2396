from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from vfast.core.exceptions import GuestNotFoundError
from vfast.models.guest import Guest, GuestNote
from vfast.repositories.base import BaseRepository


class GuestRepository(BaseRepository[Guest]):
    not_found_error = GuestNotFoundError

    def __init__(self, db: Session):
        super().__init__(Guest, db)

    def list_by_booking(self, booking_id: int) -> List[Guest]:
        stmt = select(Guest).where(Guest.booking_id == booking_id).order_by(Guest.id)
        return list(self.db.execute(stmt).scalars().all())

    def checked_in_for_booking(self, booking_id: int) -> List[Guest]:
        stmt = (
            select(Guest)
            .where(Guest.booking_id == booking_id, Guest.checked_in.is_(True))
            .order_by(Guest.id)
        )
        return list(self.db.execute(stmt).scalars().all())

    def add_note(self, note: GuestNote) -> GuestNote:
        self.db.add(note)
        self.db.flush()
        return note

    def list_notes(self, guest_id: int) -> List[GuestNote]:
        stmt = select(GuestNote).where(GuestNote.guest_id == guest_id).order_by(GuestNote.created_at, GuestNote.id)
        return list(self.db.execute(stmt).scalars().all())
