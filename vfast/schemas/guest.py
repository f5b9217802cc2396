"""
Guest roster schemas.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from vfast.models.enums import GuestNoteType
from vfast.schemas.common import BaseSchema

__all__ = [
    "GuestCreate",
    "GuestUpdate",
    "GuestResponse",
    "KycVerification",
    "GuestNoteCreate",
    "GuestNoteResponse",
]


class GuestKycFields(BaseSchema):
    kyc_document_url: Optional[str] = Field(default=None, max_length=500)
    citizen_category: Optional[str] = Field(default=None, max_length=50)
    origin: Optional[str] = Field(default=None, max_length=200)
    spoc_name: Optional[str] = Field(default=None, max_length=200)
    spoc_contact: Optional[str] = Field(default=None, max_length=100)
    food_preferences: Optional[str] = None
    travel_details: Optional[str] = None
    other_special_requests: Optional[str] = None


class GuestCreate(GuestKycFields):
    name: str = Field(..., min_length=1, max_length=200)
    contact: Optional[str] = Field(default=None, max_length=100)


class GuestUpdate(GuestKycFields):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    contact: Optional[str] = Field(default=None, max_length=100)


class GuestResponse(GuestKycFields):
    id: int
    booking_id: int
    name: str
    contact: Optional[str] = None
    is_verified: bool
    checked_in: bool
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None


class KycVerification(BaseSchema):
    kyc_document_url: str = Field(..., min_length=1, max_length=500)


class GuestNoteCreate(BaseSchema):
    note: str = Field(..., min_length=1, max_length=2000)
    note_type: GuestNoteType = GuestNoteType.GENERAL


class GuestNoteResponse(BaseSchema):
    id: int
    guest_id: int
    note: str
    note_type: GuestNoteType
    author_id: Optional[int] = None
    created_at: datetime
