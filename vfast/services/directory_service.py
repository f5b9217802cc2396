"""
Users and departments known to the booking system.
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from vfast.core.exceptions import DuplicateEntryError, ResourceNotFoundError, ValidationError
from vfast.core.permissions import Principal, require_role
from vfast.models.enums import UserRole
from vfast.models.user import Department, User
from vfast.repositories.user import DepartmentRepository, UserRepository
from vfast.schemas.user import DepartmentCreate, UserCreate
from vfast.services.base import BaseService


class DirectoryService(BaseService):
    def __init__(self, db_session: Session, **kwargs):
        super().__init__(db_session, **kwargs)
        self.users = UserRepository(db_session)
        self.departments = DepartmentRepository(db_session)

    def create_department(self, data: DepartmentCreate, actor: Principal) -> Department:
        require_role(actor, [UserRole.ADMIN])
        if self.departments.find_by_name(data.name) is not None:
            raise DuplicateEntryError(f"Department '{data.name}' already exists", field="name")
        with self.transaction(), self.unique_insert("Department name or code already exists"):
            department = self.departments.create(Department(name=data.name, code=data.code))
        self._logger.info(f"Department {department.name} created", extra={"user_id": actor.user_id})
        return department

    def list_departments(self) -> List[Department]:
        return self.departments.list_all()

    def create_user(self, data: UserCreate, actor: Principal) -> User:
        """Register a user; department approvers must belong to a department."""
        require_role(actor, [UserRole.ADMIN])
        if self.users.find_by_email(data.email) is not None:
            raise DuplicateEntryError(f"User {data.email} already exists", field="email")
        if data.department_id is not None and self.departments.find_by_id(data.department_id) is None:
            raise ResourceNotFoundError("Department", data.department_id)
        if data.role == UserRole.DEPARTMENT_APPROVER and data.department_id is None:
            raise ValidationError(
                "Department approvers need a department",
                field_errors={"department_id": ["required for department approvers"]},
            )

        with self.transaction(), self.unique_insert(f"User {data.email} already exists", field="email"):
            user = self.users.create(
                User(
                    name=data.name,
                    email=data.email,
                    role=data.role,
                    phone=data.phone,
                    department_id=data.department_id,
                )
            )
        self._logger.info(f"User {user.id} created with role {user.role.value}", extra={"user_id": actor.user_id})
        return user

    def list_users(self, actor: Principal, role: Optional[UserRole] = None) -> List[User]:
        require_role(actor, [UserRole.ADMIN])
        if role is not None:
            return self.users.list_by_role(role)
        return self.users.list_all()
