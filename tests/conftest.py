import os

# Settings are read at import time, so the environment is fixed first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import date
from typing import List

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from vfast.core.events import BookingEvent, EventBus
from vfast.core.permissions import Principal
from vfast.db.init_db import drop_db, init_db
from vfast.models import Department, Room, User
from vfast.models.enums import BookingType, RoomStatus, RoomType, UserRole
from vfast.schemas.booking import BookingCreate
from vfast.services.allocation_service import AllocationService
from vfast.services.booking_service import BookingService
from vfast.services.guest_service import GuestService
from vfast.services.report_service import ReportService
from vfast.services.room_service import RoomService

CHECK_IN = date(2025, 1, 10)
CHECK_OUT = date(2025, 1, 12)


class EventRecorder:
    """Subscriber that keeps every published event."""

    def __init__(self):
        self.events: List[BookingEvent] = []

    def __call__(self, event: BookingEvent) -> None:
        self.events.append(event)

    @property
    def types(self) -> List[str]:
        return [event.event_type for event in self.events]

    def of_type(self, event_type: str) -> List[BookingEvent]:
        return [event for event in self.events if event.event_type == event_type]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    drop_db(engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.close()


@pytest.fixture
def recorder():
    return EventRecorder()


@pytest.fixture
def bus(recorder):
    bus = EventBus()
    bus.subscribe_all(recorder)
    return bus


# ----- Services -----

@pytest.fixture
def booking_service(db_session, bus):
    return BookingService(db_session, bus=bus)


@pytest.fixture
def allocation_service(db_session, bus):
    return AllocationService(db_session, bus=bus)


@pytest.fixture
def guest_service(db_session, bus):
    return GuestService(db_session, bus=bus)


@pytest.fixture
def room_service(db_session, bus):
    return RoomService(db_session, bus=bus)


@pytest.fixture
def report_service(db_session, bus):
    return ReportService(db_session, bus=bus)


# ----- Directory data -----

@pytest.fixture
def finance(db_session):
    department = Department(name="Finance", code="FIN")
    db_session.add(department)
    db_session.commit()
    return department


@pytest.fixture
def physics(db_session):
    department = Department(name="Physics", code="PHY")
    db_session.add(department)
    db_session.commit()
    return department


def _add_user(db_session, name, role, department=None) -> Principal:
    user = User(
        name=name,
        email=f"{name.lower().replace(' ', '.')}@example.org",
        role=role,
        department_id=department.id if department else None,
    )
    db_session.add(user)
    db_session.commit()
    return Principal.from_user(user)


@pytest.fixture
def requestor(db_session, finance):
    return _add_user(db_session, "Asha Rao", UserRole.BOOKING, finance)


@pytest.fixture
def other_requestor(db_session, physics):
    return _add_user(db_session, "Ben Okafor", UserRole.BOOKING, physics)


@pytest.fixture
def approver(db_session, finance):
    return _add_user(db_session, "Finance Head", UserRole.DEPARTMENT_APPROVER, finance)


@pytest.fixture
def physics_approver(db_session, physics):
    return _add_user(db_session, "Physics Head", UserRole.DEPARTMENT_APPROVER, physics)


@pytest.fixture
def admin(db_session):
    return _add_user(db_session, "Site Admin", UserRole.ADMIN)


@pytest.fixture
def vfast(db_session):
    return _add_user(db_session, "Front Desk", UserRole.VFAST)


# ----- Rooms -----

def _add_room(db_session, number, room_type=RoomType.DOUBLE, status=RoomStatus.AVAILABLE) -> Room:
    room = Room(room_number=number, room_type=room_type, floor=1, status=status, features=[])
    db_session.add(room)
    db_session.commit()
    return room


@pytest.fixture
def room_r01(db_session):
    return _add_room(db_session, "R01")


@pytest.fixture
def room_r02(db_session):
    return _add_room(db_session, "R02")


@pytest.fixture
def room_r03(db_session):
    return _add_room(db_session, "R03", room_type=RoomType.SUITE)


# ----- Bookings -----

def official_request(department_id, **overrides) -> BookingCreate:
    data = dict(
        purpose="Audit committee visit",
        booking_type=BookingType.OFFICIAL,
        department_id=department_id,
        guest_count=2,
        number_of_rooms=1,
        check_in_date=CHECK_IN,
        check_out_date=CHECK_OUT,
    )
    data.update(overrides)
    return BookingCreate(**data)


def personal_request(**overrides) -> BookingCreate:
    data = dict(
        purpose="Family visit",
        booking_type=BookingType.PERSONAL,
        guest_count=1,
        number_of_rooms=1,
        check_in_date=CHECK_IN,
        check_out_date=CHECK_OUT,
    )
    data.update(overrides)
    return BookingCreate(**data)


@pytest.fixture
def make_approved(booking_service, requestor, approver, admin, finance):
    """Factory for OFFICIAL bookings taken through both approvals."""

    def factory(**overrides):
        booking = booking_service.create_booking(official_request(finance.id, **overrides), requestor)
        booking_service.department_approve(booking.id, approver)
        return booking_service.admin_approve(booking.id, admin)

    return factory


@pytest.fixture
def make_allocated(make_approved, allocation_service, vfast):
    def factory(rooms, **overrides):
        booking = make_approved(number_of_rooms=len(rooms), **overrides)
        return allocation_service.allocate(booking.id, [room.id for room in rooms], vfast)

    return factory
