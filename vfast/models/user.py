"""
Users and departments.

Credentials live with the upstream authentication layer; this service
only needs identity, role and department membership.
"""

from typing import List, Optional

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vfast.models.base import Base, IntegerIdMixin, TimestampMixin, enum_column
from vfast.models.enums import UserRole

__all__ = ["Department", "User"]


class Department(IntegerIdMixin, TimestampMixin, Base):
    __tablename__ = "departments"

    name: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True, unique=True)

    users: Mapped[List["User"]] = relationship("User", back_populates="department")

    def __repr__(self) -> str:
        return f"<Department(id={self.id}, name={self.name!r})>"


class User(IntegerIdMixin, TimestampMixin, Base):
    """
    An actor in the booking workflow.

    Attributes:
        role: Workflow role used by the role gate
        department_id: Department the user belongs to; department
            approvers may only act on bookings of this department
    """

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    role: Mapped[UserRole] = mapped_column(
        enum_column(UserRole, "user_role"),
        nullable=False,
        default=UserRole.BOOKING,
        index=True,
    )
    phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    department_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("departments.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    department: Mapped[Optional[Department]] = relationship("Department", back_populates="users")

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email!r}, role={self.role.value})>"
