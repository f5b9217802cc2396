from vfast.repositories.base import BaseRepository
from vfast.repositories.booking import BookingFilter, BookingRepository
from vfast.repositories.guest import GuestRepository
from vfast.repositories.room import RoomRepository
from vfast.repositories.user import DepartmentRepository, UserRepository

__all__ = [
    "BaseRepository",
    "BookingFilter",
    "BookingRepository",
    "GuestRepository",
    "RoomRepository",
    "DepartmentRepository",
    "UserRepository",
]
