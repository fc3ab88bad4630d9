"""Protocol for the append-only analytics event store."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol

from smartalk.domain.analytics.entities.analytics_event import AnalyticsEvent
from smartalk.domain.analytics.event_types import EventType
from smartalk.domain.common.value_objects import EventId, TimeWindow, UserId


@dataclass(frozen=True)
class EventFilter:
    """
    Criteria for querying stored events.

    Empty criteria match everything. Results are ordered by timestamp,
    newest first when newest_first is set.
    """

    user_id: UserId | None = None
    event_types: frozenset[EventType] = field(default_factory=frozenset)
    window: TimeWindow = field(default_factory=TimeWindow)
    limit: int | None = None
    offset: int = 0
    newest_first: bool = False


class EventStoreProtocol(Protocol):
    """Append-only persistence of analytics events."""

    def append_event(self, event: AnalyticsEvent) -> EventId:
        """
        Persist a single event.

        Args:
            event: The event to store (its ID is ignored)

        Returns:
            ID assigned by the store

        Raises:
            PersistenceError: If the store fails
        """
        ...

    def append_events(self, events: Sequence[AnalyticsEvent]) -> list[EventId]:
        """
        Persist several events in one transaction.

        Args:
            events: Events to store

        Returns:
            IDs in the same order as the input

        Raises:
            PersistenceError: If the store fails
        """
        ...

    def query_events(self, event_filter: EventFilter) -> list[AnalyticsEvent]:
        """
        Return events matching the filter.

        Args:
            event_filter: Query criteria

        Returns:
            Matching events
        """
        ...

    def count_events(self, event_filter: EventFilter) -> int:
        """Count events matching the filter, ignoring limit and offset."""
        ...

    def ping(self) -> None:
        """Raise PersistenceError if the store is unreachable."""
        ...
