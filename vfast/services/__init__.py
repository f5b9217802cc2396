from vfast.services.allocation_service import AllocationService
from vfast.services.base import BaseService
from vfast.services.booking_service import BookingService
from vfast.services.directory_service import DirectoryService
from vfast.services.guest_service import GuestService
from vfast.services.report_service import ReportService
from vfast.services.room_service import RoomService

__all__ = [
    "AllocationService",
    "BaseService",
    "BookingService",
    "DirectoryService",
    "GuestService",
    "ReportService",
    "RoomService",
]
