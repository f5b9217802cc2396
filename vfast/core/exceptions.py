"""
Custom Exceptions for the VFast booking service

Every domain failure raised by the services derives from
``BaseAppException`` so the API layer can render it uniformly.
"""

from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(str, Enum):
    """Standard error codes for the application"""
    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"

    # Authentication & Authorization
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    AUTHORIZATION_FAILED = "AUTHORIZATION_FAILED"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_DATE_RANGE = "INVALID_DATE_RANGE"
    DUPLICATE_ENTRY = "DUPLICATE_ENTRY"

    # Workflow errors
    INVALID_TRANSITION = "INVALID_TRANSITION"
    RECONSIDERATION_LIMIT = "RECONSIDERATION_LIMIT"
    BOOKING_NOT_ALLOCATABLE = "BOOKING_NOT_ALLOCATABLE"
    ROOM_UNAVAILABLE = "ROOM_UNAVAILABLE"
    ROOM_STATE_CONFLICT = "ROOM_STATE_CONFLICT"
    GUEST_ALREADY_CHECKED_IN = "GUEST_ALREADY_CHECKED_IN"
    GUEST_NOT_CHECKED_IN = "GUEST_NOT_CHECKED_IN"


class BaseAppException(Exception):
    """
    Base exception class for all application exceptions.

    Provides consistent error handling across the application with
    structured error information.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format"""
        return {
            "error": {
                "message": self.message,
                "code": self.error_code.value,
                "details": self.details,
                "type": self.__class__.__name__
            }
        }

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message='{self.message}', error_code='{self.error_code.value}')"


# ========================================
# General Application Exceptions
# ========================================

class ValidationError(BaseAppException):
    """Exception raised when data validation fails"""

    def __init__(
        self,
        message: str = "Validation failed",
        field_errors: Optional[Dict[str, List[str]]] = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        status_code: int = 422
    ):
        details = {"field_errors": field_errors} if field_errors else {}
        super().__init__(message, error_code, details, status_code)


class InvalidDateRangeError(ValidationError):
    """Exception raised when a date range ends before it starts"""

    def __init__(
        self,
        message: str = "End date must not be before start date",
        start_date: Optional[str] = None,
        end_date: Optional[str] = None
    ):
        super().__init__(message, error_code=ErrorCode.INVALID_DATE_RANGE)
        self.details.update({"start_date": start_date, "end_date": end_date})


class DuplicateEntryError(BaseAppException):
    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, ErrorCode.DUPLICATE_ENTRY, details, 409)


class ResourceNotFoundError(BaseAppException):
    """Exception raised when a requested resource is not found"""

    def __init__(
        self,
        resource_type: str = "Resource",
        resource_id: Optional[Any] = None,
        message: Optional[str] = None
    ):
        if not message:
            message = f"{resource_type} not found"
            if resource_id is not None:
                message += f" (ID: {resource_id})"

        details = {
            "resource_type": resource_type,
            "resource_id": resource_id
        }
        super().__init__(message, ErrorCode.RESOURCE_NOT_FOUND, details, 404)


class BookingNotFoundError(ResourceNotFoundError):
    def __init__(self, booking_id: Optional[int] = None):
        super().__init__("Booking", booking_id)


class RoomNotFoundError(ResourceNotFoundError):
    def __init__(self, room_ref: Optional[Any] = None):
        super().__init__("Room", room_ref)


class GuestNotFoundError(ResourceNotFoundError):
    def __init__(self, guest_id: Optional[int] = None):
        super().__init__("Guest", guest_id)


class MaintenanceNotFoundError(ResourceNotFoundError):
    def __init__(self, maintenance_id: Optional[int] = None):
        super().__init__("RoomMaintenance", maintenance_id)


# ========================================
# Authentication & Authorization Exceptions
# ========================================

class AuthenticationError(BaseAppException):
    """Exception raised when the acting user cannot be identified"""

    def __init__(
        self,
        message: str = "Authentication failed",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, ErrorCode.AUTHENTICATION_FAILED, details, 401)


class NotAuthorizedError(BaseAppException):
    """Exception raised when the actor's role does not permit the action"""

    def __init__(
        self,
        message: str = "Access denied",
        required_roles: Optional[List[str]] = None,
        user_id: Optional[int] = None
    ):
        details: Dict[str, Any] = {}
        if required_roles:
            details["required_roles"] = required_roles
        if user_id is not None:
            details["user_id"] = user_id
        super().__init__(message, ErrorCode.AUTHORIZATION_FAILED, details, 403)


# ========================================
# Workflow Exceptions
# ========================================

class BookingError(BaseAppException):
    """Base class for booking-related exceptions"""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        booking_id: Optional[int] = None,
        room_id: Optional[int] = None,
        status_code: int = 409
    ):
        details: Dict[str, Any] = {"booking_id": booking_id}
        if room_id is not None:
            details["room_id"] = room_id
        super().__init__(message, error_code, details, status_code)


class InvalidTransitionError(BookingError):
    """Status change not legal from the booking's current status"""

    def __init__(
        self,
        message: str,
        booking_id: Optional[int] = None,
        current_status: Optional[str] = None,
        action: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.INVALID_TRANSITION
    ):
        super().__init__(message, error_code, booking_id=booking_id)
        self.details.update({"current_status": current_status, "action": action})


class ReconsiderationLimitExceededError(InvalidTransitionError):
    def __init__(self, booking_id: Optional[int], limit: int):
        super().__init__(
            f"Booking has reached the maximum of {limit} reconsiderations",
            booking_id=booking_id,
            error_code=ErrorCode.RECONSIDERATION_LIMIT,
        )
        self.details["limit"] = limit


class BookingNotAllocatableError(BookingError):
    """Allocation attempted on a booking that is not approved"""

    def __init__(self, booking_id: int, current_status: Optional[str] = None):
        super().__init__(
            f"Booking {booking_id} cannot be allocated from status '{current_status}'",
            ErrorCode.BOOKING_NOT_ALLOCATABLE,
            booking_id=booking_id,
        )
        self.details["current_status"] = current_status


class RoomUnavailableError(BookingError):
    """Exception raised when room is not available for allocation"""

    def __init__(
        self,
        message: str = "Room is not available",
        room_id: Optional[int] = None,
        reason: Optional[str] = None,
        booking_id: Optional[int] = None
    ):
        super().__init__(
            message,
            ErrorCode.ROOM_UNAVAILABLE,
            booking_id=booking_id,
            room_id=room_id,
        )
        if reason:
            self.details["reason"] = reason


class RoomStateError(BaseAppException):
    """Reservation or maintenance request that conflicts with the room's status"""

    def __init__(self, message: str, room_id: Optional[int] = None):
        super().__init__(message, ErrorCode.ROOM_STATE_CONFLICT, {"room_id": room_id}, 409)


class GuestError(BaseAppException):
    """Base class for guest-related exceptions"""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        guest_id: Optional[int] = None,
        status_code: int = 409
    ):
        details = {"guest_id": guest_id} if guest_id is not None else {}
        super().__init__(message, error_code, details, status_code)


class GuestAlreadyCheckedInError(GuestError):
    """Exception raised when guest is already checked in"""

    def __init__(
        self,
        message: str = "Guest is already checked in",
        guest_id: Optional[int] = None
    ):
        super().__init__(message, ErrorCode.GUEST_ALREADY_CHECKED_IN, guest_id)


class GuestNotCheckedInError(GuestError):
    """Exception raised when guest is not checked in"""

    def __init__(
        self,
        message: str = "Guest is not checked in",
        guest_id: Optional[int] = None
    ):
        super().__init__(message, ErrorCode.GUEST_NOT_CHECKED_IN, guest_id)


__all__ = [
    "ErrorCode",
    "BaseAppException",
    "ValidationError",
    "InvalidDateRangeError",
    "DuplicateEntryError",
    "ResourceNotFoundError",
    "BookingNotFoundError",
    "RoomNotFoundError",
    "GuestNotFoundError",
    "MaintenanceNotFoundError",
    "AuthenticationError",
    "NotAuthorizedError",
    "BookingError",
    "InvalidTransitionError",
    "ReconsiderationLimitExceededError",
    "BookingNotAllocatableError",
    "RoomUnavailableError",
    "RoomStateError",
    "GuestError",
    "GuestAlreadyCheckedInError",
    "GuestNotCheckedInError",
]
