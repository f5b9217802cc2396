"""
Reporting endpoints.
"""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from vfast.api import deps
from vfast.core.exceptions import InvalidDateRangeError
from vfast.core.permissions import Principal
from vfast.models.enums import BookingStatus
from vfast.schemas.booking import BookingResponse
from vfast.schemas.common import PaginatedResponse
from vfast.schemas.report import DepartmentSummary, ReportFilter, RoomAllocationRow
from vfast.services.report_service import ReportService

router = APIRouter(prefix="/reports")


def get_report_filter(
    start_date: Optional[date] = Query(default=None),
    end_date: Optional[date] = Query(default=None),
    booking_status: Optional[BookingStatus] = Query(default=None, alias="status"),
    department_id: Optional[int] = Query(default=None),
) -> ReportFilter:
    if start_date and end_date and end_date < start_date:
        raise InvalidDateRangeError(
            "end_date cannot be before start_date",
            start_date=start_date.isoformat(),
            end_date=end_date.isoformat(),
        )
    return ReportFilter(
        start_date=start_date,
        end_date=end_date,
        status=booking_status,
        department_id=department_id,
    )


@router.get("/bookings", response_model=PaginatedResponse[BookingResponse])
def booking_report(
    page: Optional[int] = Query(default=None),
    page_size: Optional[int] = Query(default=None),
    report_filter: ReportFilter = Depends(get_report_filter),
    principal: Principal = Depends(deps.get_current_principal),
    service: ReportService = Depends(deps.get_report_service),
):
    return service.booking_report(report_filter, principal, page=page, page_size=page_size)


@router.get("/department-summary", response_model=DepartmentSummary)
def department_summary(
    report_filter: ReportFilter = Depends(get_report_filter),
    principal: Principal = Depends(deps.get_current_principal),
    service: ReportService = Depends(deps.get_report_service),
):
    return service.department_summary(report_filter, principal)


@router.get("/room-allocations", response_model=List[RoomAllocationRow])
def room_allocation_report(
    report_filter: ReportFilter = Depends(get_report_filter),
    principal: Principal = Depends(deps.get_current_principal),
    service: ReportService = Depends(deps.get_report_service),
):
    return service.room_allocation_report(report_filter, principal)
