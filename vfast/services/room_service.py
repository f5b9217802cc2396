"""
Room registry service: rooms, manual reservations and maintenance windows.
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from vfast.core.exceptions import DuplicateEntryError, RoomStateError
from vfast.core.permissions import Principal, require_role
from vfast.models.base import utcnow
from vfast.models.enums import MaintenanceStatus, RoomStatus, RoomType, UserRole
from vfast.models.room import Room, RoomMaintenance
from vfast.repositories.room import RoomRepository
from vfast.schemas.room import MaintenanceCreate, RoomCreate
from vfast.services.base import BaseService

REGISTRY_ROLES = [UserRole.VFAST, UserRole.ADMIN]


class RoomService(BaseService):
    def __init__(self, db_session: Session, **kwargs):
        super().__init__(db_session, **kwargs)
        self.repository = RoomRepository(db_session)

    def create_room(self, data: RoomCreate, actor: Principal) -> Room:
        require_role(actor, REGISTRY_ROLES)
        if self.repository.find_by_number(data.room_number) is not None:
            raise DuplicateEntryError(f"Room {data.room_number} already exists", field="room_number")

        with self.transaction(), self.unique_insert(
            f"Room {data.room_number} already exists", field="room_number"
        ):
            room = self.repository.create(
                Room(
                    room_number=data.room_number,
                    room_type=data.room_type,
                    floor=data.floor,
                    features=list(data.features),
                    status=RoomStatus.AVAILABLE,
                )
            )

        self._logger.info(f"Room {room.room_number} created", extra={"user_id": actor.user_id})
        return room

    def list_rooms(
        self,
        status: Optional[RoomStatus] = None,
        room_type: Optional[RoomType] = None,
    ) -> List[Room]:
        return self.repository.list_rooms(status=status, room_type=room_type)

    def list_available(self, room_type: Optional[RoomType] = None) -> List[Room]:
        return self.repository.list_rooms(status=RoomStatus.AVAILABLE, room_type=room_type)

    def get_room(self, room_id: int) -> Room:
        return self.repository.get_by_id(room_id)

    def get_by_number(self, room_number: str) -> Room:
        return self.repository.get_by_number(room_number)

    # -------------------------------------------------------------------------
    # Reservations
    # -------------------------------------------------------------------------

    def reserve_room(self, room_id: int, actor: Principal, notes: Optional[str] = None) -> Room:
        """Hold an available room outside the booking workflow."""
        require_role(actor, REGISTRY_ROLES)
        with self.transaction():
            room = self.repository.get_for_update(room_id)
            if room.status != RoomStatus.AVAILABLE:
                raise RoomStateError(
                    f"Room {room.room_number} is {room.status.value} and cannot be reserved",
                    room_id=room.id,
                )
            self.repository.set_status(room, RoomStatus.RESERVED)
            room.reserved_by = actor.user_id
            room.reserved_at = utcnow()
            room.reservation_notes = notes

        self._logger.info(f"Room {room.room_number} reserved", extra={"user_id": actor.user_id})
        return room

    def release_reservation(self, room_id: int, actor: Principal) -> Room:
        require_role(actor, REGISTRY_ROLES)
        with self.transaction():
            room = self.repository.get_for_update(room_id)
            if room.status != RoomStatus.RESERVED:
                raise RoomStateError(f"Room {room.room_number} is not reserved", room_id=room.id)
            self.repository.set_status(room, RoomStatus.AVAILABLE)
            room.clear_reservation()

        self._logger.info(f"Room {room.room_number} reservation released", extra={"user_id": actor.user_id})
        return room

    # -------------------------------------------------------------------------
    # Maintenance
    # -------------------------------------------------------------------------

    def schedule_maintenance(self, room_id: int, data: MaintenanceCreate, actor: Principal) -> RoomMaintenance:
        """
        Open a maintenance window and take the room out of service.

        Occupied rooms and rooms with an open window are refused.
        """
        require_role(actor, REGISTRY_ROLES)
        with self.transaction():
            room = self.repository.get_for_update(room_id)
            if room.status == RoomStatus.OCCUPIED:
                raise RoomStateError(
                    f"Room {room.room_number} is occupied and cannot go under maintenance",
                    room_id=room.id,
                )
            if self.repository.active_maintenance(room.id) is not None:
                raise RoomStateError(
                    f"Room {room.room_number} already has maintenance in progress",
                    room_id=room.id,
                )

            record = self.repository.add_maintenance(
                RoomMaintenance(
                    room_id=room.id,
                    reason=data.reason,
                    start_date=data.start_date,
                    end_date=data.end_date,
                    status=MaintenanceStatus.IN_PROGRESS,
                )
            )
            room.clear_reservation()
            self.repository.set_status(room, RoomStatus.UNDER_MAINTENANCE)

        self._logger.info(
            f"Maintenance {record.id} scheduled for room {room.room_number}",
            extra={"user_id": actor.user_id, "room_id": room.id},
        )
        return record

    def complete_maintenance(self, maintenance_id: int, actor: Principal) -> RoomMaintenance:
        require_role(actor, REGISTRY_ROLES)
        with self.transaction():
            record = self.repository.get_maintenance_for_update(maintenance_id)
            if record.status != MaintenanceStatus.IN_PROGRESS:
                raise RoomStateError(
                    f"Maintenance {record.id} is already completed",
                    room_id=record.room_id,
                )
            room = self.repository.get_for_update(record.room_id)
            record.status = MaintenanceStatus.COMPLETED
            record.completed_at = utcnow()
            if room.status == RoomStatus.UNDER_MAINTENANCE:
                self.repository.set_status(room, RoomStatus.AVAILABLE)

        self._logger.info(
            f"Maintenance {record.id} completed, room {room.room_number} is {room.status.value}",
            extra={"user_id": actor.user_id, "room_id": room.id},
        )
        return record

    def list_active_maintenance(self) -> List[RoomMaintenance]:
        return self.repository.list_maintenance(MaintenanceStatus.IN_PROGRESS)
