"""
Application common module.

Contains shared application-layer types:
- Pagination / PaginatedResult: standardized paging for list queries
- BackgroundDispatcherProtocol: fire-and-forget execution port
- KeyedLockRegistry: per-key serialization of read-modify-write sequences
"""

from .background import BackgroundDispatcherProtocol
from .locks import KeyedLockRegistry
from .pagination import PaginatedResult, Pagination

__all__ = [
    "BackgroundDispatcherProtocol",
    "KeyedLockRegistry",
    "PaginatedResult",
    "Pagination",
]
