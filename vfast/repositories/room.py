"""
Room registry persistence.
"""

from typing import List, Optional, Sequence, Set

from sqlalchemy import select
from sqlalchemy.orm import Session

from vfast.core.exceptions import MaintenanceNotFoundError, RoomNotFoundError
from vfast.models.enums import MaintenanceStatus, RoomStatus, RoomType
from vfast.models.room import Room, RoomMaintenance
from vfast.repositories.base import BaseRepository


class RoomRepository(BaseRepository[Room]):
    not_found_error = RoomNotFoundError

    def __init__(self, db: Session):
        super().__init__(Room, db)

    def find_by_number(self, room_number: str) -> Optional[Room]:
        stmt = select(Room).where(Room.room_number == room_number)
        return self.db.execute(stmt).scalars().first()

    def get_by_number(self, room_number: str) -> Room:
        room = self.find_by_number(room_number)
        if room is None:
            raise RoomNotFoundError(room_number)
        return room

    def lock_many(self, room_ids: Sequence[int]) -> List[Room]:
        """
        Lock the given rooms in id order.

        A fixed lock order keeps two allocators that target overlapping
        room sets from deadlocking each other.
        """
        stmt = (
            select(Room)
            .where(Room.id.in_(list(room_ids)))
            .order_by(Room.id)
            .with_for_update()
        )
        return list(self.db.execute(stmt).scalars().all())

    def list_rooms(
        self,
        status: Optional[RoomStatus] = None,
        room_type: Optional[RoomType] = None,
    ) -> List[Room]:
        stmt = select(Room).order_by(Room.room_number)
        if status is not None:
            stmt = stmt.where(Room.status == status)
        if room_type is not None:
            stmt = stmt.where(Room.room_type == room_type)
        return list(self.db.execute(stmt).scalars().all())

    def set_status(self, room: Room, status: RoomStatus) -> Room:
        room.status = status
        return room

    # ==================== Maintenance ====================

    def get_maintenance_for_update(self, maintenance_id: int) -> RoomMaintenance:
        stmt = select(RoomMaintenance).where(RoomMaintenance.id == maintenance_id).with_for_update()
        record = self.db.execute(stmt).scalars().first()
        if record is None:
            raise MaintenanceNotFoundError(maintenance_id)
        return record

    def active_maintenance(self, room_id: int) -> Optional[RoomMaintenance]:
        stmt = select(RoomMaintenance).where(
            RoomMaintenance.room_id == room_id,
            RoomMaintenance.status == MaintenanceStatus.IN_PROGRESS,
        )
        return self.db.execute(stmt).scalars().first()

    def rooms_under_maintenance(self, room_ids: Sequence[int]) -> Set[int]:
        stmt = select(RoomMaintenance.room_id).where(
            RoomMaintenance.room_id.in_(list(room_ids)),
            RoomMaintenance.status == MaintenanceStatus.IN_PROGRESS,
        )
        return set(self.db.execute(stmt).scalars().all())

    def list_maintenance(self, status: Optional[MaintenanceStatus] = None) -> List[RoomMaintenance]:
        stmt = select(RoomMaintenance).order_by(RoomMaintenance.start_date, RoomMaintenance.id)
        if status is not None:
            stmt = stmt.where(RoomMaintenance.status == status)
        return list(self.db.execute(stmt).scalars().all())

    def add_maintenance(self, record: RoomMaintenance) -> RoomMaintenance:
        self.db.add(record)
        self.db.flush()
        return record
