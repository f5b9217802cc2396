"""
Room registry endpoints.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from vfast.api import deps
from vfast.core.permissions import Principal
from vfast.models.enums import RoomStatus, RoomType
from vfast.schemas.room import (
    MaintenanceCreate,
    MaintenanceResponse,
    ReservationRequest,
    RoomCreate,
    RoomResponse,
)
from vfast.services.room_service import RoomService

router = APIRouter(prefix="/rooms")


@router.post("", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
def create_room(
    payload: RoomCreate,
    principal: Principal = Depends(deps.get_current_principal),
    service: RoomService = Depends(deps.get_room_service),
):
    return service.create_room(payload, principal)


@router.get("", response_model=List[RoomResponse])
def list_rooms(
    room_status: Optional[RoomStatus] = Query(default=None, alias="status"),
    room_type: Optional[RoomType] = Query(default=None),
    principal: Principal = Depends(deps.get_current_principal),
    service: RoomService = Depends(deps.get_room_service),
):
    return service.list_rooms(status=room_status, room_type=room_type)


@router.get("/available", response_model=List[RoomResponse])
def list_available_rooms(
    room_type: Optional[RoomType] = Query(default=None),
    principal: Principal = Depends(deps.get_current_principal),
    service: RoomService = Depends(deps.get_room_service),
):
    return service.list_available(room_type)


@router.get("/maintenance", response_model=List[MaintenanceResponse])
def list_active_maintenance(
    principal: Principal = Depends(deps.get_current_principal),
    service: RoomService = Depends(deps.get_room_service),
):
    return service.list_active_maintenance()


@router.post("/maintenance/{maintenance_id}/complete", response_model=MaintenanceResponse)
def complete_maintenance(
    maintenance_id: int,
    principal: Principal = Depends(deps.get_current_principal),
    service: RoomService = Depends(deps.get_room_service),
):
    return service.complete_maintenance(maintenance_id, principal)


@router.get("/by-number/{room_number}", response_model=RoomResponse)
def get_room_by_number(
    room_number: str,
    principal: Principal = Depends(deps.get_current_principal),
    service: RoomService = Depends(deps.get_room_service),
):
    return service.get_by_number(room_number)


@router.get("/{room_id}", response_model=RoomResponse)
def get_room(
    room_id: int,
    principal: Principal = Depends(deps.get_current_principal),
    service: RoomService = Depends(deps.get_room_service),
):
    return service.get_room(room_id)


@router.post("/{room_id}/reserve", response_model=RoomResponse)
def reserve_room(
    room_id: int,
    payload: ReservationRequest,
    principal: Principal = Depends(deps.get_current_principal),
    service: RoomService = Depends(deps.get_room_service),
):
    return service.reserve_room(room_id, principal, notes=payload.notes)


@router.post("/{room_id}/release", response_model=RoomResponse)
def release_reservation(
    room_id: int,
    principal: Principal = Depends(deps.get_current_principal),
    service: RoomService = Depends(deps.get_room_service),
):
    return service.release_reservation(room_id, principal)


@router.post(
    "/{room_id}/maintenance",
    response_model=MaintenanceResponse,
    status_code=status.HTTP_201_CREATED,
)
def schedule_maintenance(
    room_id: int,
    payload: MaintenanceCreate,
    principal: Principal = Depends(deps.get_current_principal),
    service: RoomService = Depends(deps.get_room_service),
):
    return service.schedule_maintenance(room_id, payload, principal)
