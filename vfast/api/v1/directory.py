"""
User and department directory endpoints.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from vfast.api import deps
from vfast.core.permissions import Principal
from vfast.models.enums import UserRole
from vfast.schemas.user import DepartmentCreate, DepartmentResponse, UserCreate, UserResponse
from vfast.services.directory_service import DirectoryService

router = APIRouter()


def get_directory_service(db: Session = Depends(deps.get_db)) -> DirectoryService:
    return DirectoryService(db)


@router.get("/me", response_model=UserResponse)
def read_me(
    principal: Principal = Depends(deps.get_current_principal),
    db: Session = Depends(deps.get_db),
):
    return DirectoryService(db).users.get_by_id(principal.user_id)


@router.post("/departments", response_model=DepartmentResponse, status_code=status.HTTP_201_CREATED)
def create_department(
    payload: DepartmentCreate,
    principal: Principal = Depends(deps.get_current_principal),
    service: DirectoryService = Depends(get_directory_service),
):
    return service.create_department(payload, principal)


@router.get("/departments", response_model=List[DepartmentResponse])
def list_departments(
    principal: Principal = Depends(deps.get_current_principal),
    service: DirectoryService = Depends(get_directory_service),
):
    return service.list_departments()


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    principal: Principal = Depends(deps.get_current_principal),
    service: DirectoryService = Depends(get_directory_service),
):
    return service.create_user(payload, principal)


@router.get("/users", response_model=List[UserResponse])
def list_users(
    role: Optional[UserRole] = Query(default=None),
    principal: Principal = Depends(deps.get_current_principal),
    service: DirectoryService = Depends(get_directory_service),
):
    return service.list_users(principal, role=role)
