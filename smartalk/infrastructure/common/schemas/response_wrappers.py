"""Common response wrapper schemas for API responses."""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """Generic pagination wrapper."""

    items: list[T]
    total: int
    offset: int
    limit: int
    has_next: bool
