import pytest
from pydantic import ValidationError as SchemaValidationError

from conftest import CHECK_IN, CHECK_OUT, official_request, personal_request
from vfast.core import events
from vfast.core.exceptions import (
    InvalidTransitionError,
    NotAuthorizedError,
    ReconsiderationLimitExceededError,
    ResourceNotFoundError,
    ValidationError,
)
from vfast.core.permissions import Principal
from vfast.models.enums import (
    BookingStatus,
    BookingType,
    CheckInStatus,
    RoomStatus,
    UserRole,
    WorkflowStage,
)
from vfast.repositories.booking import BookingRepository


class TestCreateBooking:
    def test_official_booking_starts_in_department_review(self, booking_service, requestor, finance, recorder):
        booking = booking_service.create_booking(official_request(finance.id), requestor)

        assert booking.status == BookingStatus.PENDING_DEPARTMENT_APPROVAL
        assert booking.current_workflow_stage == WorkflowStage.DEPARTMENT_REVIEW
        assert booking.check_in_date == CHECK_IN
        assert booking.check_out_date == CHECK_OUT
        assert booking.guest_count == 2
        assert booking.user_id == requestor.user_id
        assert recorder.types == [events.BOOKING_CREATED]

    def test_personal_booking_skips_department(self, booking_service, requestor):
        booking = booking_service.create_booking(personal_request(), requestor)
        assert booking.booking_type == BookingType.PERSONAL
        assert booking.status == BookingStatus.PENDING_ADMIN_APPROVAL
        assert booking.department_id is None

    def test_only_requestors_create(self, booking_service, admin, finance):
        with pytest.raises(NotAuthorizedError):
            booking_service.create_booking(official_request(finance.id), admin)

    def test_room_count_is_capped(self, booking_service, requestor, finance):
        with pytest.raises(ValidationError):
            booking_service.create_booking(official_request(finance.id, number_of_rooms=6, guest_count=6), requestor)

    def test_unknown_department(self, booking_service, requestor, finance):
        with pytest.raises(ResourceNotFoundError):
            booking_service.create_booking(official_request(finance.id + 100), requestor)

    def test_request_schema_rejects_bad_dates(self, finance):
        with pytest.raises(SchemaValidationError):
            official_request(finance.id, check_out_date=CHECK_IN)

    def test_request_schema_requires_department_for_official(self):
        with pytest.raises(SchemaValidationError):
            official_request(None)

    def test_creation_is_recorded_in_journey(self, booking_service, requestor, finance):
        booking = booking_service.create_booking(official_request(finance.id), requestor)
        journey = booking_service.journey(booking.id, requestor)
        assert [entry.event for entry in journey.entries] == ["create"]


class TestApprovalFlow:
    def test_department_approval(self, booking_service, requestor, approver, finance, recorder):
        booking = booking_service.create_booking(official_request(finance.id), requestor)
        booking = booking_service.department_approve(booking.id, approver, notes="ok")

        assert booking.status == BookingStatus.PENDING_ADMIN_APPROVAL
        assert booking.department_notes == "ok"
        assert booking.department_approval_at is not None
        changed = recorder.of_type(events.BOOKING_STATUS_CHANGED)
        assert changed[-1].data["new_status"] == BookingStatus.PENDING_ADMIN_APPROVAL.value

    def test_admin_rejection(self, booking_service, requestor, approver, admin, finance, recorder):
        booking = booking_service.create_booking(official_request(finance.id), requestor)
        booking_service.department_approve(booking.id, approver, notes="ok")
        booking = booking_service.admin_reject(booking.id, admin, reason="budget")

        assert booking.status == BookingStatus.REJECTED
        assert len(booking.rejection_history) == 1
        assert booking.rejection_history[0].reason == "budget"
        assert booking.rejection_history[0].rejected_at is not None
        assert recorder.of_type(events.BOOKING_REJECTED_BY_ADMIN)[0].data["reason"] == "budget"

    def test_rejecting_rejected_booking_keeps_history(self, booking_service, requestor, approver, finance):
        booking = booking_service.create_booking(official_request(finance.id), requestor)
        booking_service.department_reject(booking.id, approver, reason="not a department event")

        with pytest.raises(InvalidTransitionError):
            booking_service.department_reject(booking.id, approver, reason="again")

        booking = booking_service.get_booking(booking.id)
        assert booking.status == BookingStatus.REJECTED
        assert [entry.reason for entry in booking.rejection_history] == ["not a department event"]

    def test_other_department_cannot_approve(self, booking_service, requestor, physics_approver, finance):
        booking = booking_service.create_booking(official_request(finance.id), requestor)
        with pytest.raises(NotAuthorizedError):
            booking_service.department_approve(booking.id, physics_approver)
        assert booking_service.get_booking(booking.id).status == BookingStatus.PENDING_DEPARTMENT_APPROVAL

    def test_refused_action_publishes_nothing(self, booking_service, requestor, admin, finance, recorder):
        booking = booking_service.create_booking(official_request(finance.id), requestor)
        recorder.events.clear()
        with pytest.raises(InvalidTransitionError):
            booking_service.admin_approve(booking.id, admin)
        assert recorder.events == []

    def test_journey_lists_every_transition(self, make_approved, booking_service, requestor):
        booking = make_approved()
        journey = booking_service.journey(booking.id, requestor)
        assert [entry.event for entry in journey.entries] == ["create", "department_approve", "admin_approve"]
        assert journey.current_workflow_stage == WorkflowStage.ALLOCATION_PENDING


class TestResubmission:
    def _rejected(self, booking_service, requestor, admin):
        booking = booking_service.create_booking(personal_request(), requestor)
        return booking_service.admin_reject(booking.id, admin, reason="dates clash")

    def test_resubmit_links_to_original(self, booking_service, requestor, admin, recorder):
        original = self._rejected(booking_service, requestor, admin)
        booking = booking_service.resubmit(original.id, personal_request(purpose="Family visit, new dates"), requestor)

        assert booking.id != original.id
        assert booking.reconsidered_from_id == original.id
        assert booking.is_reconsidered is True
        assert booking.reconsideration_count == 1
        assert booking.status == BookingStatus.PENDING_ADMIN_APPROVAL
        assert events.BOOKING_RESUBMITTED in recorder.types

    def test_resubmit_is_capped(self, booking_service, requestor, admin):
        booking = self._rejected(booking_service, requestor, admin)
        for _ in range(3):
            booking = booking_service.resubmit(booking.id, personal_request(), requestor)
            booking = booking_service.admin_reject(booking.id, admin, reason="still no")
        assert booking.reconsideration_count == 3

        with pytest.raises(ReconsiderationLimitExceededError):
            booking_service.resubmit(booking.id, personal_request(), requestor)

    def test_rejected_booking_resubmits_once(self, booking_service, requestor, admin):
        original = self._rejected(booking_service, requestor, admin)
        copy = booking_service.resubmit(original.id, personal_request(), requestor)

        with pytest.raises(InvalidTransitionError):
            booking_service.resubmit(original.id, personal_request(), requestor)

        live = booking_service.list_for_actor(requestor)
        assert [b.id for b in live if b.reconsidered_from_id == original.id] == [copy.id]

    def test_deleted_resubmission_frees_the_original(self, booking_service, requestor, admin):
        original = self._rejected(booking_service, requestor, admin)
        copy = booking_service.resubmit(original.id, personal_request(), requestor)
        booking_service.soft_delete(copy.id, requestor)

        again = booking_service.resubmit(original.id, personal_request(), requestor)
        assert again.reconsidered_from_id == original.id

    def test_only_owner_resubmits(self, booking_service, requestor, other_requestor, admin):
        original = self._rejected(booking_service, requestor, admin)
        with pytest.raises(NotAuthorizedError):
            booking_service.resubmit(original.id, personal_request(), other_requestor)


class TestSoftDelete:
    def test_deleted_booking_disappears(self, booking_service, requestor, finance):
        booking = booking_service.create_booking(official_request(finance.id), requestor)
        booking_service.soft_delete(booking.id, requestor)

        with pytest.raises(ResourceNotFoundError):
            booking_service.get_booking(booking.id)
        assert booking_service.list_for_actor(requestor) == []

    def test_allocated_booking_cannot_be_deleted(self, make_allocated, booking_service, requestor, room_r01):
        booking = make_allocated([room_r01])
        with pytest.raises(InvalidTransitionError):
            booking_service.soft_delete(booking.id, requestor)

    def test_only_owner_deletes(self, booking_service, requestor, other_requestor, finance):
        booking = booking_service.create_booking(official_request(finance.id), requestor)
        with pytest.raises(NotAuthorizedError):
            booking_service.soft_delete(booking.id, other_requestor)


class TestQueues:
    def test_queue_scoping_by_role(
        self, booking_service, requestor, other_requestor, approver, admin, finance, physics
    ):
        mine = booking_service.create_booking(official_request(finance.id), requestor)
        theirs = booking_service.create_booking(official_request(physics.id), other_requestor)

        assert [b.id for b in booking_service.list_for_actor(requestor)] == [mine.id]
        assert [b.id for b in booking_service.list_for_actor(approver)] == [mine.id]
        assert {b.id for b in booking_service.list_for_actor(admin)} == {mine.id, theirs.id}

    def test_filter_by_stage(self, booking_service, make_approved, requestor, admin, finance):
        approved = make_approved()
        booking_service.create_booking(official_request(finance.id), requestor)

        pending = booking_service.list_for_actor(admin, stage=WorkflowStage.ALLOCATION_PENDING)
        assert [b.id for b in pending] == [approved.id]

    def test_requestor_cannot_read_others_booking(self, booking_service, requestor, other_requestor, finance):
        booking = booking_service.create_booking(official_request(finance.id), requestor)
        with pytest.raises(NotAuthorizedError):
            booking_service.get_booking(booking.id, other_requestor)

    def test_approver_without_department_sees_no_personal_bookings(self, booking_service, requestor):
        booking = booking_service.create_booking(personal_request(), requestor)
        orphan = Principal(user_id=404, role=UserRole.DEPARTMENT_APPROVER)

        with pytest.raises(NotAuthorizedError):
            booking_service.get_booking(booking.id, orphan)
        assert booking_service.list_for_actor(orphan) == []

    def test_bookings_by_status(self, booking_service, make_approved, requestor, finance, db_session):
        approved = make_approved()
        booking_service.create_booking(official_request(finance.id), requestor)

        repository = BookingRepository(db_session)
        assert [b.id for b in repository.list_by_status(BookingStatus.APPROVED)] == [approved.id]
        assert repository.list_by_status(BookingStatus.ALLOCATED) == []


class TestStay:
    def test_check_in_and_out(self, make_allocated, booking_service, vfast, room_r01, db_session):
        booking = make_allocated([room_r01])

        booking = booking_service.mark_checked_in(booking.id, vfast)
        assert booking.check_in_status == CheckInStatus.CHECKED_IN
        assert booking.key_handed_over is True
        assert booking.current_workflow_stage == WorkflowStage.CHECKED_IN

        booking = booking_service.mark_checked_out(booking.id, vfast)
        assert booking.check_in_status == CheckInStatus.CHECKED_OUT
        assert booking.status == BookingStatus.ALLOCATED
        assert booking.room_numbers == ["R01"]
        db_session.refresh(room_r01)
        assert room_r01.status == RoomStatus.AVAILABLE

    def test_cannot_check_out_before_check_in(self, make_allocated, booking_service, vfast, room_r01):
        booking = make_allocated([room_r01])
        with pytest.raises(InvalidTransitionError):
            booking_service.mark_checked_out(booking.id, vfast)

    def test_cannot_check_in_unallocated(self, make_approved, booking_service, vfast):
        booking = make_approved()
        with pytest.raises(InvalidTransitionError):
            booking_service.mark_checked_in(booking.id, vfast)

    def test_document_update(self, booking_service, requestor, finance):
        booking = booking_service.create_booking(official_request(finance.id), requestor)
        booking = booking_service.update_document(booking.id, "uploads/guests.zip", requestor)
        assert booking.document_path == "uploads/guests.zip"
