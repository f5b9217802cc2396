"""
Read-only report schemas.
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import Field, model_validator

from vfast.models.enums import BookingStatus, CheckInStatus
from vfast.schemas.common import BaseSchema

__all__ = [
    "ReportFilter",
    "DepartmentSummaryRow",
    "DepartmentSummary",
    "RoomAllocationRow",
]


class ReportFilter(BaseSchema):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[BookingStatus] = None
    department_id: Optional[int] = None

    @model_validator(mode="after")
    def validate_range(self) -> "ReportFilter":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        return self


class DepartmentSummaryRow(BaseSchema):
    department_id: Optional[int] = None
    department_name: str
    total: int = 0
    pending_department_approval: int = 0
    pending_admin_approval: int = 0
    approved: int = 0
    allocated: int = 0
    rejected: int = 0
    pending_reconsideration: int = 0


class DepartmentSummary(BaseSchema):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    rows: List[DepartmentSummaryRow] = Field(default_factory=list)


class RoomAllocationRow(BaseSchema):
    booking_id: int
    purpose: str
    department_name: Optional[str] = None
    check_in_date: date
    check_out_date: date
    check_in_status: CheckInStatus
    room_numbers: List[str]
    guest_names: List[str]
