"""
Booking workflow endpoints.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from vfast.api import deps
from vfast.core.permissions import Principal
from vfast.models.enums import BookingStatus, WorkflowStage
from vfast.schemas.booking import (
    AllocationRequest,
    ApprovalRequest,
    BookingCreate,
    BookingJourney,
    BookingResponse,
    CancelAllocationRequest,
    DocumentUpdate,
    RejectionRequest,
)
from vfast.services.allocation_service import AllocationService
from vfast.services.booking_service import BookingService

router = APIRouter(prefix="/bookings")


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    payload: BookingCreate,
    principal: Principal = Depends(deps.get_current_principal),
    service: BookingService = Depends(deps.get_booking_service),
):
    return service.create_booking(payload, principal)


@router.get("", response_model=List[BookingResponse])
def list_bookings(
    booking_status: Optional[BookingStatus] = Query(default=None, alias="status"),
    stage: Optional[WorkflowStage] = Query(default=None),
    principal: Principal = Depends(deps.get_current_principal),
    service: BookingService = Depends(deps.get_booking_service),
):
    """Queue view; what each caller sees depends on their role."""
    return service.list_for_actor(principal, status=booking_status, stage=stage)


@router.get("/{booking_id}", response_model=BookingResponse)
def get_booking(
    booking_id: int,
    principal: Principal = Depends(deps.get_current_principal),
    service: BookingService = Depends(deps.get_booking_service),
):
    return service.get_booking(booking_id, principal)


@router.get("/{booking_id}/journey", response_model=BookingJourney)
def get_journey(
    booking_id: int,
    principal: Principal = Depends(deps.get_current_principal),
    service: BookingService = Depends(deps.get_booking_service),
):
    return service.journey(booking_id, principal)


@router.post("/{booking_id}/resubmit", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def resubmit_booking(
    booking_id: int,
    payload: BookingCreate,
    principal: Principal = Depends(deps.get_current_principal),
    service: BookingService = Depends(deps.get_booking_service),
):
    return service.resubmit(booking_id, payload, principal)


# ----- Approvals -----

@router.post("/{booking_id}/department-approve", response_model=BookingResponse)
def department_approve(
    booking_id: int,
    payload: ApprovalRequest,
    principal: Principal = Depends(deps.get_current_principal),
    service: BookingService = Depends(deps.get_booking_service),
):
    return service.department_approve(booking_id, principal, notes=payload.notes)


@router.post("/{booking_id}/department-reject", response_model=BookingResponse)
def department_reject(
    booking_id: int,
    payload: RejectionRequest,
    principal: Principal = Depends(deps.get_current_principal),
    service: BookingService = Depends(deps.get_booking_service),
):
    return service.department_reject(booking_id, principal, reason=payload.reason, notes=payload.notes)


@router.post("/{booking_id}/admin-approve", response_model=BookingResponse)
def admin_approve(
    booking_id: int,
    payload: ApprovalRequest,
    principal: Principal = Depends(deps.get_current_principal),
    service: BookingService = Depends(deps.get_booking_service),
):
    return service.admin_approve(booking_id, principal, notes=payload.notes)


@router.post("/{booking_id}/admin-reject", response_model=BookingResponse)
def admin_reject(
    booking_id: int,
    payload: RejectionRequest,
    principal: Principal = Depends(deps.get_current_principal),
    service: BookingService = Depends(deps.get_booking_service),
):
    return service.admin_reject(booking_id, principal, reason=payload.reason, notes=payload.notes)


# ----- Allocation -----

@router.post("/{booking_id}/allocate", response_model=BookingResponse)
def allocate_rooms(
    booking_id: int,
    payload: AllocationRequest,
    principal: Principal = Depends(deps.get_current_principal),
    service: AllocationService = Depends(deps.get_allocation_service),
):
    return service.allocate(booking_id, payload.room_ids, principal, notes=payload.notes)


@router.post("/{booking_id}/cancel-allocation", response_model=BookingResponse)
def cancel_allocation(
    booking_id: int,
    payload: CancelAllocationRequest,
    principal: Principal = Depends(deps.get_current_principal),
    service: AllocationService = Depends(deps.get_allocation_service),
):
    return service.cancel_allocation(booking_id, principal, notes=payload.notes)


# ----- Stay -----

@router.post("/{booking_id}/check-in", response_model=BookingResponse)
def mark_checked_in(
    booking_id: int,
    principal: Principal = Depends(deps.get_current_principal),
    service: BookingService = Depends(deps.get_booking_service),
):
    return service.mark_checked_in(booking_id, principal)


@router.post("/{booking_id}/check-out", response_model=BookingResponse)
def mark_checked_out(
    booking_id: int,
    principal: Principal = Depends(deps.get_current_principal),
    service: BookingService = Depends(deps.get_booking_service),
):
    return service.mark_checked_out(booking_id, principal)


@router.put("/{booking_id}/document", response_model=BookingResponse)
def update_document(
    booking_id: int,
    payload: DocumentUpdate,
    principal: Principal = Depends(deps.get_current_principal),
    service: BookingService = Depends(deps.get_booking_service),
):
    return service.update_document(booking_id, payload.document_path, principal)


@router.delete("/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_booking(
    booking_id: int,
    principal: Principal = Depends(deps.get_current_principal),
    service: BookingService = Depends(deps.get_booking_service),
):
    service.soft_delete(booking_id, principal)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
