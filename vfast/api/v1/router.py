"""
API v1 Router - Main Entry Point
Aggregates all v1 endpoints of the booking service
"""
from fastapi import APIRouter

from vfast.api.v1 import bookings, directory, guests, reports, rooms
from vfast.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(
    responses={
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden"},
        404: {"description": "Not Found"},
        409: {"description": "Conflict"},
        422: {"description": "Validation Error"},
        500: {"description": "Internal Server Error"},
    }
)

router.include_router(bookings.router, tags=["Booking Workflow"])
router.include_router(guests.router, tags=["Guest Roster"])
router.include_router(rooms.router, tags=["Room Registry"])
router.include_router(reports.router, tags=["Reports"])
router.include_router(directory.router, tags=["Directory"])


@router.get("/health", tags=["Health"])
def health_check():
    return {"status": "ok"}
