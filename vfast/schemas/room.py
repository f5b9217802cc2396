"""
Room registry schemas.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import Field, model_validator

from vfast.models.enums import MaintenanceStatus, RoomStatus, RoomType
from vfast.schemas.common import BaseSchema

__all__ = [
    "RoomCreate",
    "RoomResponse",
    "ReservationRequest",
    "MaintenanceCreate",
    "MaintenanceResponse",
]


class RoomCreate(BaseSchema):
    room_number: str = Field(..., min_length=1, max_length=20)
    room_type: RoomType = RoomType.SINGLE
    floor: int = Field(default=0, ge=0)
    features: List[str] = Field(default_factory=list)


class RoomResponse(BaseSchema):
    id: int
    room_number: str
    room_type: RoomType
    floor: int
    status: RoomStatus
    features: List[str] = Field(default_factory=list)
    reserved_by: Optional[int] = None
    reserved_at: Optional[datetime] = None
    reservation_notes: Optional[str] = None


class ReservationRequest(BaseSchema):
    notes: Optional[str] = Field(default=None, max_length=1000)


class MaintenanceCreate(BaseSchema):
    reason: str = Field(..., min_length=1, max_length=2000)
    start_date: date
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def validate_dates(self) -> "MaintenanceCreate":
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        return self


class MaintenanceResponse(BaseSchema):
    id: int
    room_id: int
    reason: str
    start_date: date
    end_date: Optional[date] = None
    status: MaintenanceStatus
    completed_at: Optional[datetime] = None
