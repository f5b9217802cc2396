"""ORM models for the VFast booking service."""

from vfast.models.base import Base
from vfast.models.booking import (
    Booking,
    BookingRejection,
    BookingRoom,
    BookingStatusHistory,
    derive_workflow_stage,
)
from vfast.models.enums import (
    BookingStatus,
    BookingType,
    CheckInStatus,
    GuestNoteType,
    MaintenanceStatus,
    RoomStatus,
    RoomType,
    UserRole,
    WorkflowStage,
)
from vfast.models.guest import Guest, GuestNote
from vfast.models.room import Room, RoomMaintenance
from vfast.models.user import Department, User

__all__ = [
    "Base",
    "Booking",
    "BookingRejection",
    "BookingRoom",
    "BookingStatusHistory",
    "derive_workflow_stage",
    "BookingStatus",
    "BookingType",
    "CheckInStatus",
    "GuestNoteType",
    "MaintenanceStatus",
    "RoomStatus",
    "RoomType",
    "UserRole",
    "WorkflowStage",
    "Guest",
    "GuestNote",
    "Room",
    "RoomMaintenance",
    "Department",
    "User",
]
