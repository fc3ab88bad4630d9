from dataclasses import dataclass

from ..entity import EntityId


@dataclass(frozen=True)
class UserId(EntityId):
    """Strongly-typed user identifier."""


@dataclass(frozen=True)
class UnitGroupId(EntityId):
    """Strongly-typed identifier of a learning unit (a drama and its keyword set)."""


@dataclass(frozen=True)
class ItemId(EntityId):
    """Strongly-typed identifier of a single learning item (keyword)."""


@dataclass(frozen=True)
class EventId(EntityId):
    """Strongly-typed analytics event identifier."""


@dataclass(frozen=True)
class ProgressId(EntityId):
    """Strongly-typed progress record identifier."""
