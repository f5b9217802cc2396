"""
Guest roster models.
"""

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vfast.models.base import Base, IntegerIdMixin, TimestampMixin, enum_column, utcnow
from vfast.models.enums import GuestNoteType

if TYPE_CHECKING:
    from vfast.models.booking import Booking

__all__ = ["Guest", "GuestNote"]


class Guest(IntegerIdMixin, TimestampMixin, Base):
    """
    A person staying under an allocated booking.

    Each guest checks in and out independently of the booking's
    aggregate check-in status.
    """

    __tablename__ = "guests"

    booking_id: Mapped[int] = mapped_column(
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    contact: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # KYC
    kyc_document_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    citizen_category: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    origin: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    spoc_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    spoc_contact: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    food_preferences: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    travel_details: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    other_special_requests: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Stay
    checked_in: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    check_in_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    check_out_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    booking: Mapped["Booking"] = relationship("Booking", back_populates="guests")
    notes: Mapped[List["GuestNote"]] = relationship(
        "GuestNote",
        back_populates="guest",
        cascade="all, delete-orphan",
        order_by="GuestNote.id",
    )

    def __repr__(self) -> str:
        return f"<Guest(id={self.id}, name={self.name!r}, checked_in={self.checked_in})>"


class GuestNote(IntegerIdMixin, Base):
    __tablename__ = "guest_notes"

    guest_id: Mapped[int] = mapped_column(
        ForeignKey("guests.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    note: Mapped[str] = mapped_column(Text, nullable=False)
    note_type: Mapped[GuestNoteType] = mapped_column(
        enum_column(GuestNoteType, "guest_note_type"),
        nullable=False,
        default=GuestNoteType.GENERAL,
    )
    author_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    guest: Mapped[Guest] = relationship("Guest", back_populates="notes")
