"""
Booking request/response schemas.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from vfast.models.enums import (
    BookingStatus,
    BookingType,
    CheckInStatus,
    RoomType,
    WorkflowStage,
)
from vfast.schemas.common import BaseSchema

__all__ = [
    "BookingCreate",
    "ApprovalRequest",
    "RejectionRequest",
    "AllocationRequest",
    "CancelAllocationRequest",
    "DocumentUpdate",
    "RejectionEntry",
    "BookingResponse",
    "JourneyEntry",
    "BookingJourney",
]


class BookingCreate(BaseSchema):
    """
    A stay request.

    OFFICIAL requests name the department that reviews them; PERSONAL
    requests carry no department.
    """

    purpose: str = Field(..., min_length=1, max_length=2000)
    booking_type: BookingType = BookingType.OFFICIAL
    department_id: Optional[int] = None
    guest_count: int = Field(..., ge=1)
    number_of_rooms: int = Field(default=1, ge=1)
    check_in_date: date
    check_out_date: date
    room_preference: Optional[RoomType] = None
    special_requests: Optional[str] = Field(default=None, max_length=2000)
    document_path: Optional[str] = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def validate_booking(self) -> "BookingCreate":
        if self.check_out_date <= self.check_in_date:
            raise ValueError("check_out_date must be after check_in_date")
        if self.booking_type == BookingType.OFFICIAL and self.department_id is None:
            raise ValueError("department_id is required for official bookings")
        if self.booking_type == BookingType.PERSONAL and self.department_id is not None:
            raise ValueError("personal bookings cannot reference a department")
        return self


class ApprovalRequest(BaseSchema):
    notes: Optional[str] = Field(default=None, max_length=2000)


class RejectionRequest(BaseSchema):
    reason: str = Field(..., min_length=1, max_length=2000)
    notes: Optional[str] = Field(default=None, max_length=2000)


class AllocationRequest(BaseSchema):
    room_ids: List[int] = Field(..., min_length=1)
    notes: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("room_ids")
    @classmethod
    def validate_room_ids(cls, v: List[int]) -> List[int]:
        if len(set(v)) != len(v):
            raise ValueError("room_ids must not contain duplicates")
        return v


class CancelAllocationRequest(BaseSchema):
    notes: Optional[str] = Field(default=None, max_length=2000)


class DocumentUpdate(BaseSchema):
    document_path: Optional[str] = Field(default=None, max_length=500)


class RejectionEntry(BaseSchema):
    reason: str
    rejected_at: datetime
    rejected_by: Optional[int] = None
    stage: BookingStatus


class BookingResponse(BaseSchema):
    id: int
    user_id: int
    department_id: Optional[int] = None
    purpose: str
    booking_type: BookingType
    guest_count: int
    number_of_rooms: int
    check_in_date: date
    check_out_date: date
    room_preference: Optional[RoomType] = None
    special_requests: Optional[str] = None
    document_path: Optional[str] = None

    status: BookingStatus
    check_in_status: CheckInStatus
    current_workflow_stage: WorkflowStage
    room_numbers: List[str] = Field(default_factory=list)

    department_approver_id: Optional[int] = None
    department_approval_at: Optional[datetime] = None
    admin_approver_id: Optional[int] = None
    admin_approval_at: Optional[datetime] = None
    admin_notes: Optional[str] = None
    department_notes: Optional[str] = None
    vfast_notes: Optional[str] = None

    rejection_history: List[RejectionEntry] = Field(default_factory=list)
    is_reconsidered: bool = False
    reconsideration_count: int = 0
    reconsidered_from_id: Optional[int] = None

    key_handed_over: bool = False
    first_checked_in_guest_name: Optional[str] = None
    is_deleted: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class JourneyEntry(BaseSchema):
    at: datetime
    event: str
    status: Optional[BookingStatus] = None
    actor_id: Optional[int] = None
    notes: Optional[str] = None


class BookingJourney(BaseSchema):
    booking_id: int
    current_status: BookingStatus
    current_workflow_stage: WorkflowStage
    entries: List[JourneyEntry]
