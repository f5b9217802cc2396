"""
Read-only reporting over bookings.
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from vfast.core.exceptions import NotAuthorizedError
from vfast.core.pagination import page_window
from vfast.core.permissions import Principal, require_role
from vfast.models.enums import UserRole
from vfast.repositories.booking import BookingFilter, BookingRepository
from vfast.schemas.booking import BookingResponse
from vfast.schemas.common import PaginatedResponse
from vfast.schemas.report import (
    DepartmentSummary,
    DepartmentSummaryRow,
    ReportFilter,
    RoomAllocationRow,
)
from vfast.services.base import BaseService

REPORT_ROLES = [UserRole.ADMIN, UserRole.VFAST, UserRole.DEPARTMENT_APPROVER]
ALLOCATION_REPORT_ROLES = [UserRole.ADMIN, UserRole.VFAST]

UNASSIGNED_DEPARTMENT = "Personal"


class ReportService(BaseService):
    def __init__(self, db_session: Session, **kwargs):
        super().__init__(db_session, **kwargs)
        self.bookings = BookingRepository(db_session)

    def booking_report(
        self,
        report_filter: ReportFilter,
        actor: Principal,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> PaginatedResponse[BookingResponse]:
        """
        Paginated bookings filtered by check-in date range, status and department.

        Department approvers only ever see their own department.
        """
        require_role(actor, REPORT_ROLES)
        department_id = report_filter.department_id
        if actor.role == UserRole.DEPARTMENT_APPROVER:
            if actor.department_id is None:
                raise NotAuthorizedError("Approver has no department", user_id=actor.user_id)
            department_id = actor.department_id

        params = page_window(page, page_size, self.settings)
        items, total = self.bookings.search(
            BookingFilter(
                status=report_filter.status,
                department_id=department_id,
                start_date=report_filter.start_date,
                end_date=report_filter.end_date,
            ),
            offset=params.offset,
            limit=params.limit,
        )
        return PaginatedResponse[BookingResponse].create(
            items=[BookingResponse.model_validate(booking) for booking in items],
            total_items=total,
            page=params.page,
            page_size=params.page_size,
        )

    def department_summary(self, report_filter: ReportFilter, actor: Principal) -> DepartmentSummary:
        require_role(actor, [UserRole.ADMIN])
        rows = self.bookings.department_summary(report_filter.start_date, report_filter.end_date)
        return DepartmentSummary(
            start_date=report_filter.start_date,
            end_date=report_filter.end_date,
            rows=[
                DepartmentSummaryRow(
                    department_id=row.department_id,
                    department_name=row.name or UNASSIGNED_DEPARTMENT,
                    total=row.total,
                    pending_department_approval=row.pending_department_approval,
                    pending_admin_approval=row.pending_admin_approval,
                    approved=row.approved,
                    allocated=row.allocated,
                    rejected=row.rejected,
                    pending_reconsideration=row.pending_reconsideration,
                )
                for row in rows
            ],
        )

    def room_allocation_report(self, report_filter: ReportFilter, actor: Principal) -> List[RoomAllocationRow]:
        require_role(actor, ALLOCATION_REPORT_ROLES)
        bookings = self.bookings.allocated_with_rooms(report_filter.start_date, report_filter.end_date)
        return [
            RoomAllocationRow(
                booking_id=booking.id,
                purpose=booking.purpose,
                department_name=booking.department.name if booking.department else None,
                check_in_date=booking.check_in_date,
                check_out_date=booking.check_out_date,
                check_in_status=booking.check_in_status,
                room_numbers=booking.room_numbers,
                guest_names=[guest.name for guest in booking.guests],
            )
            for booking in bookings
        ]
