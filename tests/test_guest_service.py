import pytest

from vfast.core.exceptions import (
    GuestAlreadyCheckedInError,
    GuestNotCheckedInError,
    InvalidTransitionError,
    NotAuthorizedError,
)
from vfast.models.enums import GuestNoteType
from vfast.repositories.booking import BookingRepository
from vfast.schemas.guest import GuestCreate, GuestNoteCreate, GuestUpdate


@pytest.fixture
def stay(make_allocated, room_r01):
    return make_allocated([room_r01])


@pytest.fixture
def guest(stay, guest_service, vfast):
    return guest_service.add_guest(
        stay.id,
        GuestCreate(name="Dr. Meera Iyer", contact="+91 98450 00000", citizen_category="Indian", origin="Chennai"),
        vfast,
    )


class TestRoster:
    def test_add_guest_to_allocated_booking(self, guest, stay, guest_service, vfast):
        assert guest.booking_id == stay.id
        assert guest.checked_in is False
        assert guest.is_verified is False
        assert [g.name for g in guest_service.list_guests(stay.id, vfast)] == ["Dr. Meera Iyer"]

    def test_add_guest_requires_allocation(self, make_approved, guest_service, vfast):
        booking = make_approved()
        with pytest.raises(InvalidTransitionError):
            guest_service.add_guest(booking.id, GuestCreate(name="Early Bird"), vfast)

    def test_only_vfast_manages_roster(self, stay, guest_service, admin):
        with pytest.raises(NotAuthorizedError):
            guest_service.add_guest(stay.id, GuestCreate(name="Someone"), admin)

    def test_update_guest(self, guest, guest_service, vfast):
        updated = guest_service.update_guest(guest.id, GuestUpdate(food_preferences="Vegetarian"), vfast)
        assert updated.food_preferences == "Vegetarian"
        assert updated.name == "Dr. Meera Iyer"

    def test_verify_kyc(self, guest, guest_service, vfast):
        verified = guest_service.verify_kyc(guest.id, "kyc/meera.pdf", vfast)
        assert verified.is_verified is True
        assert verified.kyc_document_url == "kyc/meera.pdf"


class TestGuestCheckIn:
    def test_check_in_and_out(self, guest, stay, guest_service, vfast, db_session):
        checked_in = guest_service.check_in(guest.id, vfast)
        assert checked_in.checked_in is True
        assert checked_in.check_in_time is not None

        booking = BookingRepository(db_session).get_active(stay.id)
        assert booking.first_checked_in_guest_name == "Dr. Meera Iyer"

        checked_out = guest_service.check_out(guest.id, vfast)
        assert checked_out.checked_in is False
        assert checked_out.check_out_time is not None

    def test_double_check_in(self, guest, guest_service, vfast):
        guest_service.check_in(guest.id, vfast)
        with pytest.raises(GuestAlreadyCheckedInError):
            guest_service.check_in(guest.id, vfast)

    def test_check_out_without_check_in(self, guest, guest_service, vfast):
        with pytest.raises(GuestNotCheckedInError):
            guest_service.check_out(guest.id, vfast)

    def test_first_guest_name_is_kept(self, guest, stay, guest_service, vfast, db_session):
        second = guest_service.add_guest(stay.id, GuestCreate(name="Ravi Iyer"), vfast)
        guest_service.check_in(guest.id, vfast)
        guest_service.check_in(second.id, vfast)
        booking = BookingRepository(db_session).get_active(stay.id)
        assert booking.first_checked_in_guest_name == "Dr. Meera Iyer"

    def test_checked_in_guest_cannot_be_removed(self, guest, guest_service, vfast):
        guest_service.check_in(guest.id, vfast)
        with pytest.raises(GuestAlreadyCheckedInError):
            guest_service.remove_guest(guest.id, vfast)

    def test_booking_check_out_checks_out_guests(self, guest, stay, guest_service, booking_service, vfast):
        guest_service.check_in(guest.id, vfast)
        booking_service.mark_checked_in(stay.id, vfast)
        booking_service.mark_checked_out(stay.id, vfast)

        refreshed = guest_service.get_guest(guest.id, vfast)
        assert refreshed.checked_in is False
        assert refreshed.check_out_time is not None

    def test_no_check_in_after_stay_ended(self, guest, stay, booking_service, guest_service, vfast):
        booking_service.mark_checked_in(stay.id, vfast)
        booking_service.mark_checked_out(stay.id, vfast)
        with pytest.raises(InvalidTransitionError):
            guest_service.check_in(guest.id, vfast)


class TestGuestNotes:
    def test_notes_are_listed_in_order(self, guest, guest_service, vfast, admin):
        guest_service.add_note(guest.id, GuestNoteCreate(note="Arrived late"), vfast)
        guest_service.add_note(guest.id, GuestNoteCreate(note="Broken shower", note_type=GuestNoteType.ISSUE), vfast)

        notes = guest_service.list_notes(guest.id, admin)
        assert [n.note for n in notes] == ["Arrived late", "Broken shower"]
        assert notes[1].note_type == GuestNoteType.ISSUE
        assert notes[0].author_id == vfast.user_id
