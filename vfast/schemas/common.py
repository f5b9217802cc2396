"""
Base schema classes and pagination envelopes.
"""

from __future__ import annotations

import math
from typing import Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict, Field, computed_field

T = TypeVar("T")

__all__ = [
    "BaseSchema",
    "PaginationParams",
    "PaginationMeta",
    "PaginatedResponse",
]


class BaseSchema(BaseModel):
    """
    Base schema with common Pydantic configuration.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        use_enum_values=False,
        str_strip_whitespace=True,
        validate_assignment=True,
    )


class PaginationParams(BaseSchema):
    """Pagination query parameters."""

    page: int = Field(default=1, ge=1, description="Page number (1-indexed)")
    page_size: int = Field(default=20, ge=1, description="Items per page")

    @computed_field  # type: ignore[misc]
    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @computed_field  # type: ignore[misc]
    @property
    def limit(self) -> int:
        return self.page_size


class PaginationMeta(BaseSchema):
    total_items: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=0)
    current_page: int = Field(..., ge=1)
    page_size: int = Field(..., ge=1)
    has_next: bool
    has_previous: bool


class PaginatedResponse(BaseSchema, Generic[T]):
    """Generic paginated response."""

    items: List[T] = Field(..., description="List of items")
    meta: PaginationMeta = Field(..., description="Pagination metadata")

    @classmethod
    def create(
        cls,
        items: List[T],
        total_items: int,
        page: int,
        page_size: int,
    ) -> "PaginatedResponse[T]":
        total_pages = math.ceil(total_items / page_size) if total_items else 0
        return cls(
            items=items,
            meta=PaginationMeta(
                total_items=total_items,
                total_pages=total_pages,
                current_page=page,
                page_size=page_size,
                has_next=page < total_pages,
                has_previous=page > 1,
            ),
        )
