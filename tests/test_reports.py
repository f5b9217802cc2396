from datetime import date

import pytest

from conftest import official_request, personal_request
from vfast.core.exceptions import NotAuthorizedError
from vfast.core.pagination import page_window
from vfast.models.enums import BookingStatus
from vfast.schemas.guest import GuestCreate
from vfast.schemas.report import ReportFilter


@pytest.fixture
def seeded(booking_service, make_approved, make_allocated, requestor, other_requestor, admin, finance, physics, room_r01):
    allocated = make_allocated([room_r01])
    approved = make_approved(check_in_date=date(2025, 2, 1), check_out_date=date(2025, 2, 3))
    pending = booking_service.create_booking(official_request(physics.id), other_requestor)
    personal = booking_service.create_booking(personal_request(), requestor)
    rejected = booking_service.admin_reject(personal.id, admin, reason="no rooms")
    return {
        "allocated": allocated,
        "approved": approved,
        "pending": pending,
        "rejected": rejected,
    }


class TestBookingReport:
    def test_paginates(self, seeded, report_service, admin):
        page = report_service.booking_report(ReportFilter(), admin, page=1, page_size=3)
        assert page.meta.total_items == 4
        assert page.meta.total_pages == 2
        assert page.meta.has_next is True
        assert len(page.items) == 3

        last = report_service.booking_report(ReportFilter(), admin, page=2, page_size=3)
        assert len(last.items) == 1
        assert last.meta.has_previous is True

    def test_page_size_is_clamped(self, seeded, report_service, admin):
        page = report_service.booking_report(ReportFilter(), admin, page_size=10_000)
        assert page.meta.page_size == report_service.settings.MAX_PAGE_SIZE

    def test_filters_by_check_in_range_and_status(self, seeded, report_service, admin):
        february = report_service.booking_report(
            ReportFilter(start_date=date(2025, 2, 1), end_date=date(2025, 2, 28)), admin
        )
        assert [b.id for b in february.items] == [seeded["approved"].id]

        rejected = report_service.booking_report(ReportFilter(status=BookingStatus.REJECTED), admin)
        assert [b.id for b in rejected.items] == [seeded["rejected"].id]
        assert rejected.items[0].rejection_history[0].reason == "no rooms"

    def test_soft_deleted_bookings_are_excluded(self, seeded, booking_service, report_service, other_requestor, admin):
        booking_service.soft_delete(seeded["pending"].id, other_requestor)
        page = report_service.booking_report(ReportFilter(), admin)
        assert seeded["pending"].id not in [b.id for b in page.items]

    def test_approver_sees_own_department_only(self, seeded, report_service, approver, physics):
        page = report_service.booking_report(ReportFilter(department_id=physics.id), approver)
        assert {b.id for b in page.items} == {seeded["allocated"].id, seeded["approved"].id}

    def test_requestors_have_no_reports(self, seeded, report_service, requestor):
        with pytest.raises(NotAuthorizedError):
            report_service.booking_report(ReportFilter(), requestor)


class TestSummaries:
    def test_department_summary(self, seeded, report_service, admin):
        summary = report_service.department_summary(ReportFilter(), admin)
        rows = {row.department_name: row for row in summary.rows}

        assert rows["Finance"].total == 2
        assert rows["Finance"].allocated == 1
        assert rows["Finance"].approved == 1
        assert rows["Physics"].pending_department_approval == 1
        assert rows["Personal"].rejected == 1

    def test_department_summary_is_admin_only(self, seeded, report_service, vfast):
        with pytest.raises(NotAuthorizedError):
            report_service.department_summary(ReportFilter(), vfast)

    def test_room_allocation_report(self, seeded, report_service, guest_service, vfast):
        guest_service.add_guest(seeded["allocated"].id, GuestCreate(name="Kiran Shah"), vfast)

        rows = report_service.room_allocation_report(ReportFilter(), vfast)
        assert len(rows) == 1
        assert rows[0].booking_id == seeded["allocated"].id
        assert rows[0].room_numbers == ["R01"]
        assert rows[0].guest_names == ["Kiran Shah"]
        assert rows[0].department_name == "Finance"


class TestPageWindow:
    def test_bad_inputs_are_clamped(self, report_service):
        settings = report_service.settings
        assert page_window(None, None, settings).page == 1
        assert page_window(0, -5, settings).page_size == settings.DEFAULT_PAGE_SIZE
        assert page_window(3, 10_000, settings).page_size == settings.MAX_PAGE_SIZE
        assert page_window(3, 10, settings).offset == 20
