"""
Guest roster endpoints.
"""
from typing import List

from fastapi import APIRouter, Depends, Response, status

from vfast.api import deps
from vfast.core.permissions import Principal
from vfast.schemas.guest import (
    GuestCreate,
    GuestNoteCreate,
    GuestNoteResponse,
    GuestResponse,
    GuestUpdate,
    KycVerification,
)
from vfast.services.guest_service import GuestService

router = APIRouter()


@router.post(
    "/bookings/{booking_id}/guests",
    response_model=GuestResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_guest(
    booking_id: int,
    payload: GuestCreate,
    principal: Principal = Depends(deps.get_current_principal),
    service: GuestService = Depends(deps.get_guest_service),
):
    return service.add_guest(booking_id, payload, principal)


@router.get("/bookings/{booking_id}/guests", response_model=List[GuestResponse])
def list_guests(
    booking_id: int,
    principal: Principal = Depends(deps.get_current_principal),
    service: GuestService = Depends(deps.get_guest_service),
):
    return service.list_guests(booking_id, principal)


@router.get("/guests/{guest_id}", response_model=GuestResponse)
def get_guest(
    guest_id: int,
    principal: Principal = Depends(deps.get_current_principal),
    service: GuestService = Depends(deps.get_guest_service),
):
    return service.get_guest(guest_id, principal)


@router.patch("/guests/{guest_id}", response_model=GuestResponse)
def update_guest(
    guest_id: int,
    payload: GuestUpdate,
    principal: Principal = Depends(deps.get_current_principal),
    service: GuestService = Depends(deps.get_guest_service),
):
    return service.update_guest(guest_id, payload, principal)


@router.delete("/guests/{guest_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_guest(
    guest_id: int,
    principal: Principal = Depends(deps.get_current_principal),
    service: GuestService = Depends(deps.get_guest_service),
):
    service.remove_guest(guest_id, principal)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/guests/{guest_id}/verify-kyc", response_model=GuestResponse)
def verify_kyc(
    guest_id: int,
    payload: KycVerification,
    principal: Principal = Depends(deps.get_current_principal),
    service: GuestService = Depends(deps.get_guest_service),
):
    return service.verify_kyc(guest_id, payload.kyc_document_url, principal)


@router.post("/guests/{guest_id}/check-in", response_model=GuestResponse)
def check_in_guest(
    guest_id: int,
    principal: Principal = Depends(deps.get_current_principal),
    service: GuestService = Depends(deps.get_guest_service),
):
    return service.check_in(guest_id, principal)


@router.post("/guests/{guest_id}/check-out", response_model=GuestResponse)
def check_out_guest(
    guest_id: int,
    principal: Principal = Depends(deps.get_current_principal),
    service: GuestService = Depends(deps.get_guest_service),
):
    return service.check_out(guest_id, principal)


@router.post(
    "/guests/{guest_id}/notes",
    response_model=GuestNoteResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_note(
    guest_id: int,
    payload: GuestNoteCreate,
    principal: Principal = Depends(deps.get_current_principal),
    service: GuestService = Depends(deps.get_guest_service),
):
    return service.add_note(guest_id, payload, principal)


@router.get("/guests/{guest_id}/notes", response_model=List[GuestNoteResponse])
def list_notes(
    guest_id: int,
    principal: Principal = Depends(deps.get_current_principal),
    service: GuestService = Depends(deps.get_guest_service),
):
    return service.list_notes(guest_id, principal)
