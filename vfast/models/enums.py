"""
Enumerations shared by the ORM models and the API schemas.

Values are the lowercase strings stored in the database.
"""

from enum import Enum

__all__ = [
    "UserRole",
    "BookingType",
    "BookingStatus",
    "CheckInStatus",
    "WorkflowStage",
    "RoomType",
    "RoomStatus",
    "MaintenanceStatus",
    "GuestNoteType",
]


class UserRole(str, Enum):
    """Roles recognised by the role gate."""

    BOOKING = "booking"
    DEPARTMENT_APPROVER = "department_approver"
    ADMIN = "admin"
    VFAST = "vfast"


class BookingType(str, Enum):
    OFFICIAL = "official"
    PERSONAL = "personal"


class BookingStatus(str, Enum):
    """The six workflow states a booking can hold."""

    PENDING_DEPARTMENT_APPROVAL = "pending_department_approval"
    PENDING_ADMIN_APPROVAL = "pending_admin_approval"
    APPROVED = "approved"
    REJECTED = "rejected"
    ALLOCATED = "allocated"
    PENDING_RECONSIDERATION = "pending_reconsideration"


class CheckInStatus(str, Enum):
    NOT_CHECKED_IN = "not_checked_in"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"


class WorkflowStage(str, Enum):
    """UI-facing projection of (status, check_in_status)."""

    DEPARTMENT_REVIEW = "department_review"
    ADMIN_REVIEW = "admin_review"
    ALLOCATION_PENDING = "allocation_pending"
    ALLOCATED = "allocated"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    REJECTED = "rejected"
    RECONSIDERATION = "reconsideration"


class RoomType(str, Enum):
    SINGLE = "single"
    DOUBLE = "double"
    DELUXE = "deluxe"
    SUITE = "suite"


class RoomStatus(str, Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    RESERVED = "reserved"
    UNDER_MAINTENANCE = "under_maintenance"


class MaintenanceStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class GuestNoteType(str, Enum):
    GENERAL = "general"
    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"
    ISSUE = "issue"
