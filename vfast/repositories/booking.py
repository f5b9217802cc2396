"""
Booking persistence: queues, conflict lookups and report queries.
"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import and_, case, func, select
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.sql.elements import ColumnElement

from vfast.core.exceptions import BookingNotFoundError
from vfast.models.booking import Booking, BookingRoom, stage_predicate
from vfast.models.enums import BookingStatus, CheckInStatus, WorkflowStage
from vfast.models.user import Department
from vfast.repositories.base import BaseRepository


@dataclass
class BookingFilter:
    """Read-side filter shared by queues and reports."""

    status: Optional[BookingStatus] = None
    stage: Optional[WorkflowStage] = None
    department_id: Optional[int] = None
    user_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    include_deleted: bool = False


class BookingRepository(BaseRepository[Booking]):
    not_found_error = BookingNotFoundError

    def __init__(self, db: Session):
        super().__init__(Booking, db)

    def get_active(self, booking_id: int) -> Booking:
        """Fetch a booking that has not been soft-deleted."""
        booking = self.find_by_id(booking_id)
        if booking is None or booking.is_deleted:
            raise BookingNotFoundError(booking_id)
        return booking

    def get_active_for_update(self, booking_id: int) -> Booking:
        booking = self.get_for_update(booking_id)
        if booking.is_deleted:
            raise BookingNotFoundError(booking_id)
        return booking

    # ==================== Queues ====================

    def _conditions(self, filters: BookingFilter) -> List[ColumnElement]:
        conditions: List[ColumnElement] = []
        if not filters.include_deleted:
            conditions.append(Booking.is_deleted.is_(False))
        if filters.status is not None:
            conditions.append(Booking.status == filters.status)
        if filters.stage is not None:
            status, check_in_status = stage_predicate(filters.stage)
            conditions.append(Booking.status == status)
            if check_in_status is not None:
                conditions.append(Booking.check_in_status == check_in_status)
        if filters.department_id is not None:
            conditions.append(Booking.department_id == filters.department_id)
        if filters.user_id is not None:
            conditions.append(Booking.user_id == filters.user_id)
        # Date ranges apply to the check-in date, both ends inclusive
        if filters.start_date is not None:
            conditions.append(Booking.check_in_date >= filters.start_date)
        if filters.end_date is not None:
            conditions.append(Booking.check_in_date <= filters.end_date)
        return conditions

    def search(
        self,
        filters: BookingFilter,
        offset: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Tuple[List[Booking], int]:
        """Filtered bookings, newest first, with the unpaginated total."""
        conditions = self._conditions(filters)
        total = self.db.execute(
            select(func.count()).select_from(Booking).where(*conditions)
        ).scalar_one()

        stmt = (
            select(Booking)
            .where(*conditions)
            .options(selectinload(Booking.room_bindings), selectinload(Booking.rejection_history))
            .order_by(Booking.created_at.desc(), Booking.id.desc())
        )
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(self.db.execute(stmt).scalars().all()), total

    def list_by_status(self, status: BookingStatus) -> List[Booking]:
        items, _ = self.search(BookingFilter(status=status))
        return items

    def has_live_resubmission(self, original_id: int) -> bool:
        """True when a non-deleted booking was already resubmitted from ``original_id``."""
        stmt = select(Booking.id).where(
            Booking.reconsidered_from_id == original_id,
            Booking.is_deleted.is_(False),
        )
        return self.db.execute(stmt.limit(1)).first() is not None

    # ==================== Allocation ====================

    def find_conflicting_bindings(
        self,
        room_ids: Sequence[int],
        check_in_date: date,
        check_out_date: date,
        exclude_booking_id: Optional[int] = None,
    ) -> List[BookingRoom]:
        """
        Bindings of other live allocations that overlap ``[check_in, check_out)``.

        A checked-out booking keeps its bindings as history but no longer
        holds the rooms.
        """
        conditions = [
            BookingRoom.room_id.in_(list(room_ids)),
            Booking.status == BookingStatus.ALLOCATED,
            Booking.check_in_status != CheckInStatus.CHECKED_OUT,
            Booking.is_deleted.is_(False),
            Booking.check_in_date < check_out_date,
            Booking.check_out_date > check_in_date,
        ]
        if exclude_booking_id is not None:
            conditions.append(Booking.id != exclude_booking_id)
        stmt = (
            select(BookingRoom)
            .join(Booking, BookingRoom.booking_id == Booking.id)
            .where(and_(*conditions))
            .order_by(BookingRoom.room_id)
        )
        return list(self.db.execute(stmt).scalars().all())

    # ==================== Reports ====================

    def department_summary(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Tuple]:
        """Per-department booking counts by status."""

        def count_status(status: BookingStatus):
            return func.count(case((Booking.status == status, 1)))

        conditions = self._conditions(BookingFilter(start_date=start_date, end_date=end_date))
        stmt = (
            select(
                Booking.department_id,
                Department.name,
                func.count(Booking.id).label("total"),
                count_status(BookingStatus.PENDING_DEPARTMENT_APPROVAL).label("pending_department_approval"),
                count_status(BookingStatus.PENDING_ADMIN_APPROVAL).label("pending_admin_approval"),
                count_status(BookingStatus.APPROVED).label("approved"),
                count_status(BookingStatus.ALLOCATED).label("allocated"),
                count_status(BookingStatus.REJECTED).label("rejected"),
                count_status(BookingStatus.PENDING_RECONSIDERATION).label("pending_reconsideration"),
            )
            .select_from(Booking)
            .outerjoin(Department, Booking.department_id == Department.id)
            .where(*conditions)
            .group_by(Booking.department_id, Department.name)
            .order_by(Department.name)
        )
        return list(self.db.execute(stmt).all())

    def allocated_with_rooms(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Booking]:
        """Live allocations with their rooms, guests and department loaded."""
        filters = BookingFilter(status=BookingStatus.ALLOCATED, start_date=start_date, end_date=end_date)
        stmt = (
            select(Booking)
            .where(*self._conditions(filters))
            .options(
                selectinload(Booking.room_bindings),
                selectinload(Booking.guests),
                selectinload(Booking.department),
            )
            .order_by(Booking.check_in_date, Booking.id)
        )
        return list(self.db.execute(stmt).scalars().all())
