"""
Room registry models.

Room status is only changed by the allocation transactor, the
reservation operations and maintenance scheduling.
"""

from datetime import date as Date, datetime
from typing import List, Optional

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Date as SQLDate,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vfast.models.base import Base, IntegerIdMixin, TimestampMixin, enum_column
from vfast.models.enums import MaintenanceStatus, RoomStatus, RoomType

__all__ = ["Room", "RoomMaintenance"]


class Room(IntegerIdMixin, TimestampMixin, Base):
    """
    A physical guest-house room.

    Attributes:
        room_number: Unique human-facing number (e.g. "R01")
        room_type: Type of room
        floor: Floor number
        status: Current occupancy status
        features: List of feature labels
        reserved_by: User who placed a manual reservation
        reserved_at: When the reservation was placed
        reservation_notes: Free text attached to the reservation
    """

    __tablename__ = "rooms"

    room_number: Mapped[str] = mapped_column(
        String(20),
        unique=True,
        nullable=False,
        index=True,
        comment="Human-facing room number",
    )
    room_type: Mapped[RoomType] = mapped_column(
        enum_column(RoomType, "room_type"),
        nullable=False,
        default=RoomType.SINGLE,
    )
    floor: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[RoomStatus] = mapped_column(
        enum_column(RoomStatus, "room_status"),
        nullable=False,
        default=RoomStatus.AVAILABLE,
        index=True,
    )
    features: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    reserved_by: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    reserved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    reservation_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    maintenance_records: Mapped[List["RoomMaintenance"]] = relationship(
        "RoomMaintenance",
        back_populates="room",
        cascade="all, delete-orphan",
        order_by="RoomMaintenance.start_date",
    )

    @property
    def is_available(self) -> bool:
        return self.status == RoomStatus.AVAILABLE

    def clear_reservation(self) -> None:
        self.reserved_by = None
        self.reserved_at = None
        self.reservation_notes = None

    def __repr__(self) -> str:
        return f"<Room(id={self.id}, number={self.room_number!r}, status={self.status.value})>"


class RoomMaintenance(IntegerIdMixin, TimestampMixin, Base):
    """
    A maintenance window for a room.

    At most one IN_PROGRESS record per room; enforced by the room service
    under a row lock on the room.
    """

    __tablename__ = "room_maintenance"

    room_id: Mapped[int] = mapped_column(
        ForeignKey("rooms.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    start_date: Mapped[Date] = mapped_column(SQLDate, nullable=False)
    end_date: Mapped[Optional[Date]] = mapped_column(SQLDate, nullable=True)
    status: Mapped[MaintenanceStatus] = mapped_column(
        enum_column(MaintenanceStatus, "maintenance_status"),
        nullable=False,
        default=MaintenanceStatus.IN_PROGRESS,
        index=True,
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    room: Mapped[Room] = relationship("Room", back_populates="maintenance_records")

    __table_args__ = (
        CheckConstraint(
            "end_date IS NULL OR end_date >= start_date",
            name="ck_maintenance_end_after_start",
        ),
        Index("ix_room_maintenance_room_status", "room_id", "status"),
    )
