"""
Pagination types for queries.

Provides standardized pagination for list queries.

Example:
    events = store.query_events(EventFilter(user_id=user_id, limit=p.limit, offset=p.offset))
    return PaginatedResult(items=events, total=total, pagination=p)
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")

# Maximum allowed page size
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class Pagination:
    """
    Pagination parameters for list queries.

    Attributes:
        limit: Number of items per page
        offset: Number of items to skip
    """

    limit: int = 50
    offset: int = 0

    def __post_init__(self) -> None:
        if self.limit < 1:
            raise ValueError("Limit must be at least 1")
        if self.limit > MAX_PAGE_SIZE:
            raise ValueError(f"Limit cannot exceed {MAX_PAGE_SIZE}")
        if self.offset < 0:
            raise ValueError("Offset cannot be negative")


@dataclass(frozen=True)
class PaginatedResult(Generic[T]):
    """
    Paginated result containing items and metadata.

    Attributes:
        items: List of items for the current page
        total: Total number of items across all pages
        pagination: The pagination parameters used
    """

    items: list[T]
    total: int
    pagination: Pagination

    @property
    def limit(self) -> int:
        return self.pagination.limit

    @property
    def offset(self) -> int:
        return self.pagination.offset

    @property
    def has_next(self) -> bool:
        """Check if there is a next page."""
        return self.pagination.offset + len(self.items) < self.total
