"""Use case for per-user analytics queries."""

from collections.abc import Sequence

import structlog

from smartalk.application.analytics.protocols.event_store import EventFilter, EventStoreProtocol
from smartalk.application.common.pagination import PaginatedResult, Pagination
from smartalk.application.identity.protocols.user_directory import UserDirectoryProtocol
from smartalk.domain.analytics.entities.analytics_event import AnalyticsEvent
from smartalk.domain.analytics.event_types import EventType
from smartalk.domain.analytics.services.funnel_analyzer import FunnelAnalyzer
from smartalk.domain.analytics.value_objects import UserStats
from smartalk.domain.common.value_objects import TimeWindow, UserId
from smartalk.domain.identity.exceptions import UserNotFoundError

logger = structlog.get_logger(__name__)


class UserAnalyticsUseCase:
    """Event history and learning statistics of a single user."""

    def __init__(
        self,
        event_store: EventStoreProtocol,
        user_directory: UserDirectoryProtocol,
        analyzer: FunnelAnalyzer,
        learning_event_seconds: int = 30,
    ) -> None:
        self.event_store = event_store
        self.user_directory = user_directory
        self.analyzer = analyzer
        self.learning_event_seconds = learning_event_seconds

    def get_user_events(
        self,
        user_id: int,
        pagination: Pagination,
        event_type_names: Sequence[str] | None = None,
        time_range: str = "all",
    ) -> PaginatedResult[AnalyticsEvent]:
        """
        List a user's events, newest first.

        Args:
            user_id: ID of the user
            pagination: Page size and offset
            event_type_names: Optional event type filter
            time_range: One of "1d", "7d", "30d", "90d", "all"

        Returns:
            One page of events plus the total match count

        Raises:
            UserNotFoundError: If the user does not exist
            ValidationError: If an event type or the range token is invalid
        """
        user_id_vo = self._require_user(user_id)
        event_types = frozenset(EventType.parse(name) for name in event_type_names or ())
        window = TimeWindow.from_range(time_range)

        base = EventFilter(user_id=user_id_vo, event_types=event_types, window=window)
        total = self.event_store.count_events(base)
        events = self.event_store.query_events(
            EventFilter(
                user_id=user_id_vo,
                event_types=event_types,
                window=window,
                limit=pagination.limit,
                offset=pagination.offset,
                newest_first=True,
            )
        )
        return PaginatedResult(items=events, total=total, pagination=pagination)

    def get_user_stats(self, user_id: int, time_range: str = "30d") -> UserStats:
        """
        Summarize a user's learning activity inside a time range.

        Raises:
            UserNotFoundError: If the user does not exist
            ValidationError: If the range token is invalid
        """
        user_id_vo = self._require_user(user_id)
        window = TimeWindow.from_range(time_range)
        events = self.event_store.query_events(EventFilter(user_id=user_id_vo, window=window))
        stats = self.analyzer.user_stats(events, self.learning_event_seconds)
        logger.debug("user_stats_computed", user_id=user_id, total_events=stats.total_events)
        return stats

    def _require_user(self, user_id: int) -> UserId:
        user_id_vo = UserId(user_id)
        if not self.user_directory.exists(user_id_vo):
            raise UserNotFoundError(user_id)
        return user_id_vo
