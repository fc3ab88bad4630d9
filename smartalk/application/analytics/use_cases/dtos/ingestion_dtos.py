"""DTOs for event ingestion use cases."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from smartalk.domain.analytics.entities.analytics_event import AnalyticsEvent


@dataclass(frozen=True)
class EventInput:
    """Raw event as received from a client, before validation."""

    user_id: int
    event_type: str
    event_data: Any = None
    timestamp: datetime | None = None


@dataclass
class BatchIngestionResult:
    """Outcome of a batch whose validation passed."""

    recorded: list[AnalyticsEvent] = field(default_factory=list)
    # Input positions of events dropped because their user is unknown
    dropped_indexes: list[int] = field(default_factory=list)

    @property
    def recorded_count(self) -> int:
        return len(self.recorded)

    @property
    def dropped_count(self) -> int:
        return len(self.dropped_indexes)
