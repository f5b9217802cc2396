"""
Booking models for the guest-house workflow.

This module defines the booking entity together with its room bindings,
the append-only rejection history and the status-change audit trail.
"""

from datetime import date as Date, datetime
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date as SQLDate,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    event,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from vfast.models.base import (
    Base,
    IntegerIdMixin,
    SoftDeleteMixin,
    TimestampMixin,
    enum_column,
    utcnow,
)
from vfast.models.enums import (
    BookingStatus,
    BookingType,
    CheckInStatus,
    RoomType,
    WorkflowStage,
)

if TYPE_CHECKING:
    from vfast.models.guest import Guest
    from vfast.models.room import Room
    from vfast.models.user import Department, User

__all__ = [
    "Booking",
    "BookingRoom",
    "BookingRejection",
    "BookingStatusHistory",
    "STAGE_BY_STATUS",
    "derive_workflow_stage",
    "stage_predicate",
]


STAGE_BY_STATUS: Dict[BookingStatus, WorkflowStage] = {
    BookingStatus.PENDING_DEPARTMENT_APPROVAL: WorkflowStage.DEPARTMENT_REVIEW,
    BookingStatus.PENDING_ADMIN_APPROVAL: WorkflowStage.ADMIN_REVIEW,
    BookingStatus.APPROVED: WorkflowStage.ALLOCATION_PENDING,
    BookingStatus.REJECTED: WorkflowStage.REJECTED,
    BookingStatus.PENDING_RECONSIDERATION: WorkflowStage.RECONSIDERATION,
}

_ALLOCATED_STAGES: Dict[CheckInStatus, WorkflowStage] = {
    CheckInStatus.NOT_CHECKED_IN: WorkflowStage.ALLOCATED,
    CheckInStatus.CHECKED_IN: WorkflowStage.CHECKED_IN,
    CheckInStatus.CHECKED_OUT: WorkflowStage.CHECKED_OUT,
}


def derive_workflow_stage(status: BookingStatus, check_in_status: CheckInStatus) -> WorkflowStage:
    """Project (status, check_in_status) onto the queue-facing stage."""
    if status == BookingStatus.ALLOCATED:
        return _ALLOCATED_STAGES[check_in_status]
    return STAGE_BY_STATUS[status]


def stage_predicate(stage: WorkflowStage) -> Tuple[BookingStatus, Optional[CheckInStatus]]:
    """
    Inverse of ``derive_workflow_stage`` for query filters.

    Returns the status and, for allocated stages, the check-in status a
    row must have to be in ``stage``.
    """
    for check_in_status, allocated_stage in _ALLOCATED_STAGES.items():
        if allocated_stage == stage:
            return BookingStatus.ALLOCATED, check_in_status
    for status, mapped_stage in STAGE_BY_STATUS.items():
        if mapped_stage == stage:
            return status, None
    raise ValueError(f"Unknown workflow stage: {stage}")


class Booking(IntegerIdMixin, TimestampMixin, SoftDeleteMixin, Base):
    """
    A requested stay moving through the approval workflow.

    Attributes:
        purpose: Reason for the stay
        booking_type: OFFICIAL bookings pass the department gate,
            PERSONAL bookings go straight to admin review
        guest_count: Number of guests (>= 1)
        number_of_rooms: Rooms requested (>= 1)
        check_in_date / check_out_date: Stay range, check-out strictly later
        status: Current workflow status
        check_in_status: Aggregate check-in sub-state, meaningful once
            the booking is ALLOCATED
        admin_notes / department_notes / vfast_notes: Notes per acting role
        reconsideration_count: Times the booking went back for review
        reconsidered_from_id: Booking this one was resubmitted from
    """

    __tablename__ = "bookings"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        comment="Requestor",
    )
    department_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("departments.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
        comment="Required for OFFICIAL bookings, NULL for PERSONAL",
    )

    # Request details
    purpose: Mapped[str] = mapped_column(Text, nullable=False)
    booking_type: Mapped[BookingType] = mapped_column(
        enum_column(BookingType, "booking_type"),
        nullable=False,
        default=BookingType.OFFICIAL,
    )
    guest_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    number_of_rooms: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    room_preference: Mapped[Optional[RoomType]] = mapped_column(
        enum_column(RoomType, "room_preference"),
        nullable=True,
    )
    check_in_date: Mapped[Date] = mapped_column(SQLDate, nullable=False, index=True)
    check_out_date: Mapped[Date] = mapped_column(SQLDate, nullable=False, index=True)
    special_requests: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    document_path: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
        comment="Reference to the uploaded supporting ZIP",
    )

    # Workflow
    status: Mapped[BookingStatus] = mapped_column(
        enum_column(BookingStatus, "booking_status"),
        nullable=False,
        default=BookingStatus.PENDING_DEPARTMENT_APPROVAL,
        index=True,
    )
    check_in_status: Mapped[CheckInStatus] = mapped_column(
        enum_column(CheckInStatus, "check_in_status"),
        nullable=False,
        default=CheckInStatus.NOT_CHECKED_IN,
        index=True,
    )

    # Approver bookkeeping
    department_approver_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    department_approval_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    admin_approver_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    admin_approval_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Notes per acting role
    admin_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    department_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    vfast_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Reconsideration
    is_reconsidered: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    reconsideration_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    reconsidered_from_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("bookings.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Stay handling
    key_handed_over: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    first_checked_in_guest_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    checked_in_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    checked_out_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    user: Mapped["User"] = relationship("User", foreign_keys=[user_id])
    department: Mapped[Optional["Department"]] = relationship("Department")
    department_approver: Mapped[Optional["User"]] = relationship("User", foreign_keys=[department_approver_id])
    admin_approver: Mapped[Optional["User"]] = relationship("User", foreign_keys=[admin_approver_id])
    reconsidered_from: Mapped[Optional["Booking"]] = relationship("Booking", remote_side="Booking.id")

    room_bindings: Mapped[List["BookingRoom"]] = relationship(
        "BookingRoom",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="BookingRoom.id",
    )
    rejection_history: Mapped[List["BookingRejection"]] = relationship(
        "BookingRejection",
        back_populates="booking",
        cascade="save-update, merge",
        passive_deletes=True,
        order_by="BookingRejection.id",
    )
    status_history: Mapped[List["BookingStatusHistory"]] = relationship(
        "BookingStatusHistory",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="BookingStatusHistory.id",
    )
    guests: Mapped[List["Guest"]] = relationship(
        "Guest",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="Guest.id",
    )

    __table_args__ = (
        CheckConstraint("check_out_date > check_in_date", name="ck_booking_check_out_after_check_in"),
        CheckConstraint("guest_count >= 1", name="ck_booking_guest_count_positive"),
        CheckConstraint("number_of_rooms >= 1", name="ck_booking_rooms_positive"),
        CheckConstraint("reconsideration_count >= 0", name="ck_booking_reconsideration_non_negative"),
        Index("ix_bookings_status_check_in", "status", "check_in_status"),
        Index("ix_bookings_department_status", "department_id", "status"),
    )

    @validates("guest_count")
    def validate_guest_count(self, key: str, value: int) -> int:
        if value is None or value < 1:
            raise ValueError("guest_count must be at least 1")
        return value

    @validates("number_of_rooms")
    def validate_number_of_rooms(self, key: str, value: int) -> int:
        if value is None or value < 1:
            raise ValueError("number_of_rooms must be at least 1")
        return value

    @property
    def current_workflow_stage(self) -> WorkflowStage:
        return derive_workflow_stage(self.status, self.check_in_status)

    @property
    def rooms(self) -> List["Room"]:
        return [binding.room for binding in self.room_bindings]

    @property
    def room_numbers(self) -> List[str]:
        return [binding.room.room_number for binding in self.room_bindings]

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, status={self.status.value}, type={self.booking_type.value})>"


class BookingRoom(IntegerIdMixin, Base):
    """Binding of one room to an allocated booking."""

    __tablename__ = "booking_rooms"

    booking_id: Mapped[int] = mapped_column(
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    room_id: Mapped[int] = mapped_column(
        ForeignKey("rooms.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    allocated_by: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    allocated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    booking: Mapped[Booking] = relationship("Booking", back_populates="room_bindings")
    room: Mapped["Room"] = relationship("Room", lazy="joined")

    __table_args__ = (
        UniqueConstraint("booking_id", "room_id", name="uq_booking_room"),
    )


class BookingRejection(IntegerIdMixin, Base):
    """
    One entry of a booking's rejection history.

    Entries are immutable once written; the history only grows.
    """

    __tablename__ = "booking_rejections"

    booking_id: Mapped[int] = mapped_column(
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    rejected_by: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    stage: Mapped[BookingStatus] = mapped_column(
        enum_column(BookingStatus, "rejection_stage"),
        nullable=False,
        comment="Status the booking was rejected from",
    )
    rejected_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    booking: Mapped[Booking] = relationship("Booking", back_populates="rejection_history")


@event.listens_for(BookingRejection, "before_update")
def _reject_rejection_update(mapper, connection, target):
    raise ValueError("Rejection history entries are immutable")


@event.listens_for(BookingRejection, "before_delete")
def _reject_rejection_delete(mapper, connection, target):
    raise ValueError("Rejection history entries cannot be deleted")


class BookingStatusHistory(IntegerIdMixin, Base):
    """
    Booking status change history for audit trail.

    Attributes:
        from_status: Previous status (NULL for creation)
        to_status: New status
        action: Workflow action that caused the change
        changed_by: User who performed the action
        notes: Notes or reason supplied with the action
    """

    __tablename__ = "booking_status_history"

    booking_id: Mapped[int] = mapped_column(
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    from_status: Mapped[Optional[BookingStatus]] = mapped_column(
        enum_column(BookingStatus, "history_from_status"),
        nullable=True,
    )
    to_status: Mapped[BookingStatus] = mapped_column(
        enum_column(BookingStatus, "history_to_status"),
        nullable=False,
    )
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    changed_by: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    changed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        index=True,
    )

    booking: Mapped[Booking] = relationship("Booking", back_populates="status_history")
