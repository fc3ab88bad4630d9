"""
AnalyticsEvent entity.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from smartalk.domain.analytics.event_types import EventType
from smartalk.domain.analytics.payloads import EventPayload, parse_payload
from smartalk.domain.common.entity import Entity
from smartalk.domain.common.value_objects import EventId, UserId, ensure_utc


@dataclass
class AnalyticsEvent(Entity[EventId]):
    """
    A single behavioral event recorded for a user.

    Business Rules:
    - event_type belongs to the fixed EventType vocabulary
    - payload has been sanitized before the entity is created
    - Events are immutable once stored; the engine never updates or deletes them
    """

    id: EventId
    user_id: UserId
    event_type: EventType
    payload: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        self.timestamp = ensure_utc(self.timestamp)

    @property
    def typed_payload(self) -> EventPayload:
        """Typed view of the payload for this event kind."""
        return parse_payload(self.event_type, self.payload)

    @classmethod
    def create(
        cls,
        user_id: UserId,
        event_type: EventType,
        payload: dict[str, Any],
        timestamp: datetime | None = None,
    ) -> "AnalyticsEvent":
        """Create a new event (ID will be 0 until persisted)."""
        return cls(
            id=EventId.generate(),
            user_id=user_id,
            event_type=event_type,
            payload=payload,
            timestamp=timestamp or datetime.now(UTC),
        )

    @classmethod
    def create_with_id(
        cls,
        id: EventId,
        user_id: UserId,
        event_type: EventType,
        payload: dict[str, Any],
        timestamp: datetime,
    ) -> "AnalyticsEvent":
        """Reconstitute an event from persistence."""
        return cls(
            id=id,
            user_id=user_id,
            event_type=event_type,
            payload=payload,
            timestamp=timestamp,
        )
