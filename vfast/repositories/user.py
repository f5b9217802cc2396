from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from vfast.models.enums import UserRole
from vfast.models.user import Department, User
from vfast.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    def __init__(self, db: Session):
        super().__init__(User, db)

    def find_by_email(self, email: str) -> Optional[User]:
        return self.db.execute(select(User).where(User.email == email)).scalars().first()

    def list_by_role(self, role: UserRole) -> List[User]:
        stmt = select(User).where(User.role == role).order_by(User.id)
        return list(self.db.execute(stmt).scalars().all())


class DepartmentRepository(BaseRepository[Department]):
    def __init__(self, db: Session):
        super().__init__(Department, db)

    def find_by_name(self, name: str) -> Optional[Department]:
        return self.db.execute(select(Department).where(Department.name == name)).scalars().first()
