"""
Shared FastAPI dependencies.

The acting user is resolved from the ``X-User-Id`` header set by the
upstream authentication layer.

Example usage in a router:
    from fastapi import Depends, APIRouter
    from vfast.api import deps

    router = APIRouter()

    @router.get("/me")
    def read_me(principal = Depends(deps.get_current_principal)):
        return principal
"""

from typing import Callable, Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from vfast.core.exceptions import AuthenticationError
from vfast.core.permissions import Principal, require_role
from vfast.db.session import get_db
from vfast.models.enums import UserRole
from vfast.repositories.user import UserRepository
from vfast.services.allocation_service import AllocationService
from vfast.services.booking_service import BookingService
from vfast.services.guest_service import GuestService
from vfast.services.report_service import ReportService
from vfast.services.room_service import RoomService


# --- Authentication & Authorization -------------------------------------------

def get_current_principal(
    x_user_id: Optional[int] = Header(default=None, alias="X-User-Id"),
    db: Session = Depends(get_db),
) -> Principal:
    if x_user_id is None:
        raise AuthenticationError("Missing X-User-Id header")
    user = UserRepository(db).find_by_id(x_user_id)
    if user is None:
        raise AuthenticationError(f"Unknown user {x_user_id}")
    return Principal.from_user(user)


def require_roles(*roles: UserRole) -> Callable[..., Principal]:
    """
    Dependency factory gating an endpoint on the caller's role.

        @router.post("/rooms", dependencies=[Depends(require_roles(UserRole.VFAST))])
    """

    def dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        require_role(principal, roles)
        return principal

    return dependency


# --- Services ------------------------------------------------------------------

def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    return BookingService(db)


def get_allocation_service(db: Session = Depends(get_db)) -> AllocationService:
    return AllocationService(db)


def get_guest_service(db: Session = Depends(get_db)) -> GuestService:
    return GuestService(db)


def get_room_service(db: Session = Depends(get_db)) -> RoomService:
    return RoomService(db)


def get_report_service(db: Session = Depends(get_db)) -> ReportService:
    return ReportService(db)


__all__ = [
    "get_db",
    "get_current_principal",
    "require_roles",
    "get_booking_service",
    "get_allocation_service",
    "get_guest_service",
    "get_room_service",
    "get_report_service",
]
