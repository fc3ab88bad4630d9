"""Use case for funnel, activation, retention and system-wide analytics."""

from collections.abc import Sequence
from datetime import UTC, datetime, timedelta

import structlog

from smartalk.application.analytics.protocols.event_store import EventFilter, EventStoreProtocol
from smartalk.application.analytics.use_cases.dtos import (
    FunnelReport,
    HealthStatus,
    SystemAnalytics,
)
from smartalk.application.identity.protocols.user_directory import UserDirectoryProtocol
from smartalk.domain.analytics.event_types import DEFAULT_FUNNEL_STEPS, EventType
from smartalk.domain.analytics.services.funnel_analyzer import FunnelAnalyzer, safe_rate
from smartalk.domain.analytics.value_objects import FunnelStep, GroupBy, SystemOverview
from smartalk.domain.common.exceptions import ValidationError
from smartalk.domain.common.value_objects import TimeWindow
from smartalk.exceptions import PersistenceError

logger = structlog.get_logger(__name__)

GROUP_BY_VALUES: tuple[GroupBy, ...] = ("hour", "day", "week")
HEALTH_LOOKBACK = timedelta(hours=24)


class FunnelAnalyticsUseCase:
    """
    Read-only aggregation over the event store.

    Every method is repeatable and writes nothing. Results reflect whatever
    the store holds at query time; concurrent ingestion may or may not be
    visible.
    """

    def __init__(
        self,
        event_store: EventStoreProtocol,
        user_directory: UserDirectoryProtocol,
        analyzer: FunnelAnalyzer,
        activation_event: EventType = EventType.MAGIC_MOMENT_COMPLETE,
        session_start_event: EventType = EventType.APP_LAUNCH,
    ) -> None:
        self.event_store = event_store
        self.user_directory = user_directory
        self.analyzer = analyzer
        self.activation_event = activation_event
        self.session_start_event = session_start_event

    def compute_funnel(
        self, steps: Sequence[EventType], window: TimeWindow
    ) -> list[FunnelStep]:
        """
        Count distinct users per declared step inside the window.

        Args:
            steps: Ordered funnel steps (duplicates allowed, order is kept)
            window: Time window

        Returns:
            One FunnelStep per declared step

        Raises:
            ValidationError: If no step is given
        """
        if not steps:
            raise ValidationError("Funnel needs at least one step", field="steps")
        events = self.event_store.query_events(
            EventFilter(event_types=frozenset(steps), window=window)
        )
        return self.analyzer.compute_funnel(events, steps, window)

    def get_funnel(
        self, step_names: Sequence[str] | None = None, time_range: str = "30d"
    ) -> FunnelReport:
        """
        Build a funnel report for a range token.

        Args:
            step_names: Event type names, defaults to the onboarding-to-activation funnel
            time_range: One of "1d", "7d", "30d", "90d", "all"

        Returns:
            FunnelReport with per-step counts. total_users is the first step's
            user count and activation_rate is the activation step's count over it.

        Raises:
            ValidationError: If a step name or the range token is invalid
        """
        steps = (
            [EventType.parse(name) for name in step_names]
            if step_names
            else list(DEFAULT_FUNNEL_STEPS)
        )
        window = TimeWindow.from_range(time_range)
        funnel = self.compute_funnel(steps, window)

        total_users = funnel[0].user_count
        activated = next(
            (s.user_count for s in funnel if s.step_name == self.activation_event.value), 0
        )
        logger.info("funnel_computed", steps=len(funnel), time_range=time_range)
        return FunnelReport(
            steps=funnel,
            total_users=total_users,
            activation_rate=safe_rate(activated, total_users),
            time_range=time_range,
            generated_at=datetime.now(UTC),
        )

    def compute_activation_rate(self, window: TimeWindow) -> float:
        """Share of the users created in the window who reached the activation event."""
        events = self.event_store.query_events(
            EventFilter(event_types=frozenset({self.activation_event}), window=window)
        )
        new_users = self.user_directory.find_created_ids(window)
        return self.analyzer.activation_rate(events, new_users, window, self.activation_event)

    def compute_retention_rate(self, window: TimeWindow) -> float:
        """Active users with at least two session starts in the window, over all active users."""
        events = self.event_store.query_events(EventFilter(window=window))
        return self.analyzer.retention_rate(events, window, self.session_start_event)

    def get_system_analytics(
        self, time_range: str = "7d", group_by: str = "day"
    ) -> SystemAnalytics:
        """
        System-wide overview, event distribution and time series.

        Args:
            time_range: One of "1d", "7d", "30d", "90d", "all"
            group_by: Time-series bucket size: "hour", "day" or "week"

        Returns:
            SystemAnalytics for the range

        Raises:
            ValidationError: If the range token or bucket size is invalid
        """
        if group_by not in GROUP_BY_VALUES:
            raise ValidationError(
                f"group_by must be one of: {', '.join(GROUP_BY_VALUES)}",
                field="group_by",
                value=group_by,
            )
        window = TimeWindow.from_range(time_range)
        events = self.event_store.query_events(EventFilter(window=window))
        new_users = self.user_directory.find_created_ids(window)

        overview = SystemOverview(
            total_users=self.user_directory.count_users(),
            total_events=len(events),
            active_users=len(self.analyzer.distinct_users(events, window=window)),
            new_users=len(new_users),
            activation_rate=self.analyzer.activation_rate(
                events, new_users, window, self.activation_event
            ),
            retention_rate=self.analyzer.retention_rate(
                events, window, self.session_start_event
            ),
        )
        return SystemAnalytics(
            overview=overview,
            event_distribution=self.analyzer.event_distribution(events),
            time_series=self.analyzer.time_series(events, group_by),  # type: ignore[arg-type]
            time_range=time_range,
            generated_at=datetime.now(UTC),
        )

    def get_health_status(self) -> HealthStatus:
        """
        Check store connectivity and recent ingestion activity.

        A store failure is reported as an unhealthy status instead of raised.
        """
        now = datetime.now(UTC)
        try:
            self.event_store.ping()
            recent = self.event_store.count_events(
                EventFilter(window=TimeWindow(start=now - HEALTH_LOOKBACK))
            )
        except PersistenceError as e:
            logger.error("analytics_health_check_failed", error=e.reason)
            return HealthStatus(
                status="unhealthy",
                database_connected=False,
                recent_events=0,
                checked_at=now,
                error=e.reason,
            )
        return HealthStatus(
            status="healthy",
            database_connected=True,
            recent_events=recent,
            checked_at=now,
        )
