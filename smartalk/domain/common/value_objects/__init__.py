"""Common value objects shared across all domain modules."""

from .ids import EventId, ItemId, ProgressId, UnitGroupId, UserId
from .time_window import TimeWindow, ensure_utc

__all__ = [
    # IDs
    "EventId",
    "ItemId",
    "ProgressId",
    "UnitGroupId",
    "UserId",
    # Time
    "TimeWindow",
    "ensure_utc",
]
