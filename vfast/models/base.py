"""
Model mixins and column helpers shared by every table.
"""

from datetime import datetime, timezone
from enum import Enum as PyEnum
from typing import Optional, Type

from sqlalchemy import Boolean, DateTime, Enum, Integer
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from vfast.db.base import Base

__all__ = [
    "Base",
    "utcnow",
    "enum_column",
    "IntegerIdMixin",
    "TimestampMixin",
    "SoftDeleteMixin",
]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def enum_column(enum_cls: Type[PyEnum], name: str) -> Enum:
    """
    Closed enum type stored as the member's lowercase value.

    ``validate_strings`` makes the ORM refuse any string outside the enum.
    """
    return Enum(
        enum_cls,
        name=name,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
        native_enum=False,
        length=40,
    )


class IntegerIdMixin:
    """Surrogate integer primary key."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)


class TimestampMixin:
    """
    Mixin for automatic timestamp tracking.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        index=True,
        comment="Record creation timestamp (UTC)",
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=func.now(),
        comment="Record last update timestamp (UTC)",
    )


class SoftDeleteMixin:
    """
    Mixin for soft delete capability.

    Rows are flagged rather than removed so workflow history survives.
    """

    is_deleted: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        index=True,
        comment="Soft delete flag",
    )
    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Deletion timestamp (UTC)",
    )

    def soft_delete(self) -> None:
        self.is_deleted = True
        self.deleted_at = utcnow()
