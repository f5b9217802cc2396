from __future__ import annotations

from typing import Optional

from pydantic import EmailStr, Field

from vfast.models.enums import UserRole
from vfast.schemas.common import BaseSchema

__all__ = ["DepartmentCreate", "DepartmentResponse", "UserCreate", "UserResponse"]


class DepartmentCreate(BaseSchema):
    name: str = Field(..., min_length=1, max_length=120)
    code: Optional[str] = Field(default=None, max_length=20)


class DepartmentResponse(BaseSchema):
    id: int
    name: str
    code: Optional[str] = None


class UserCreate(BaseSchema):
    name: str = Field(..., min_length=1, max_length=120)
    email: EmailStr
    role: UserRole = UserRole.BOOKING
    phone: Optional[str] = Field(default=None, max_length=30)
    department_id: Optional[int] = None


class UserResponse(BaseSchema):
    id: int
    name: str
    email: str
    role: UserRole
    phone: Optional[str] = None
    department_id: Optional[int] = None
