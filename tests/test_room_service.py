from datetime import date

import pytest

from vfast.core.exceptions import (
    DuplicateEntryError,
    NotAuthorizedError,
    RoomNotFoundError,
    RoomStateError,
)
from vfast.models.enums import MaintenanceStatus, RoomStatus, RoomType
from vfast.schemas.room import MaintenanceCreate, RoomCreate


def maintenance(reason="Repainting"):
    return MaintenanceCreate(reason=reason, start_date=date(2025, 1, 5), end_date=date(2025, 1, 7))


class TestRegistry:
    def test_create_and_lookup(self, room_service, vfast):
        room = room_service.create_room(
            RoomCreate(room_number="R10", room_type=RoomType.DELUXE, floor=2, features=["AC", "Balcony"]),
            vfast,
        )
        assert room.status == RoomStatus.AVAILABLE
        assert room_service.get_by_number("R10").id == room.id
        assert room_service.get_room(room.id).features == ["AC", "Balcony"]

    def test_duplicate_room_number(self, room_service, vfast, room_r01):
        with pytest.raises(DuplicateEntryError):
            room_service.create_room(RoomCreate(room_number="R01"), vfast)

    def test_racing_insert_reports_duplicate(self, room_service, vfast, room_r01, monkeypatch):
        monkeypatch.setattr(room_service.repository, "find_by_number", lambda room_number: None)
        with pytest.raises(DuplicateEntryError):
            room_service.create_room(RoomCreate(room_number="R01"), vfast)

        monkeypatch.undo()
        assert room_service.get_by_number("R01").id == room_r01.id

    def test_requestor_cannot_create_rooms(self, room_service, requestor):
        with pytest.raises(NotAuthorizedError):
            room_service.create_room(RoomCreate(room_number="R11"), requestor)

    def test_unknown_room_number(self, room_service):
        with pytest.raises(RoomNotFoundError):
            room_service.get_by_number("Z99")

    def test_available_rooms_by_type(self, room_service, vfast, room_r01, room_r02, room_r03):
        room_service.reserve_room(room_r02.id, vfast)
        assert [r.room_number for r in room_service.list_available()] == ["R01", "R03"]
        assert [r.room_number for r in room_service.list_available(RoomType.SUITE)] == ["R03"]


class TestReservations:
    def test_reserve_and_release(self, room_service, vfast, room_r01):
        room = room_service.reserve_room(room_r01.id, vfast, notes="Board meeting")
        assert room.status == RoomStatus.RESERVED
        assert room.reserved_by == vfast.user_id
        assert room.reservation_notes == "Board meeting"

        room = room_service.release_reservation(room_r01.id, vfast)
        assert room.status == RoomStatus.AVAILABLE
        assert room.reserved_by is None
        assert room.reservation_notes is None

    def test_occupied_room_cannot_be_reserved(self, make_allocated, room_service, vfast, room_r01):
        make_allocated([room_r01])
        with pytest.raises(RoomStateError):
            room_service.reserve_room(room_r01.id, vfast)

    def test_release_requires_reservation(self, room_service, vfast, room_r01):
        with pytest.raises(RoomStateError):
            room_service.release_reservation(room_r01.id, vfast)


class TestMaintenance:
    def test_schedule_and_complete(self, room_service, vfast, room_r01, db_session):
        record = room_service.schedule_maintenance(room_r01.id, maintenance(), vfast)
        assert record.status == MaintenanceStatus.IN_PROGRESS
        db_session.refresh(room_r01)
        assert room_r01.status == RoomStatus.UNDER_MAINTENANCE
        assert [m.id for m in room_service.list_active_maintenance()] == [record.id]

        record = room_service.complete_maintenance(record.id, vfast)
        assert record.status == MaintenanceStatus.COMPLETED
        assert record.completed_at is not None
        db_session.refresh(room_r01)
        assert room_r01.status == RoomStatus.AVAILABLE
        assert room_service.list_active_maintenance() == []

    def test_one_open_window_per_room(self, room_service, vfast, room_r01):
        room_service.schedule_maintenance(room_r01.id, maintenance(), vfast)
        with pytest.raises(RoomStateError):
            room_service.schedule_maintenance(room_r01.id, maintenance("Plumbing"), vfast)

    def test_occupied_room_refused(self, make_allocated, room_service, vfast, room_r01):
        make_allocated([room_r01])
        with pytest.raises(RoomStateError):
            room_service.schedule_maintenance(room_r01.id, maintenance(), vfast)

    def test_complete_twice(self, room_service, vfast, room_r01):
        record = room_service.schedule_maintenance(room_r01.id, maintenance(), vfast)
        room_service.complete_maintenance(record.id, vfast)
        with pytest.raises(RoomStateError):
            room_service.complete_maintenance(record.id, vfast)

    def test_window_dates_are_validated(self):
        with pytest.raises(ValueError):
            MaintenanceCreate(reason="Backwards", start_date=date(2025, 1, 7), end_date=date(2025, 1, 5))
