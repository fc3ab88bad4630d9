"""
Domain service aggregating raw events into funnels and engagement metrics.

This is a pure domain service: it works on event lists handed in by the
application layer and never touches storage.
"""

from collections import Counter, defaultdict
from collections.abc import Collection, Iterable, Sequence
from datetime import date, datetime, timedelta

from smartalk.domain.analytics.entities.analytics_event import AnalyticsEvent
from smartalk.domain.analytics.event_types import EventType
from smartalk.domain.analytics.payloads import VtprAnswerPayload
from smartalk.domain.analytics.value_objects import (
    EventCount,
    FunnelStep,
    GroupBy,
    TimeSeriesBucket,
    UserStats,
)
from smartalk.domain.common.value_objects import TimeWindow, UserId, ensure_utc


def safe_rate(numerator: int, denominator: int) -> float:
    """Divide, returning 0.0 instead of failing on an empty denominator."""
    if denominator <= 0:
        return 0.0
    return numerator / denominator


def _bucket_key(moment: datetime, group_by: GroupBy) -> str:
    moment = ensure_utc(moment)
    if group_by == "hour":
        return moment.strftime("%Y-%m-%dT%H:00")
    if group_by == "week":
        week_start = moment.date() - timedelta(days=moment.weekday())
        return week_start.isoformat()
    return moment.date().isoformat()


def _trailing_run(days: set[date]) -> int:
    """Length of the run of consecutive days ending on the latest day."""
    if not days:
        return 0
    day = max(days)
    run = 0
    while day in days:
        run += 1
        day -= timedelta(days=1)
    return run


class FunnelAnalyzer:
    """
    Batch aggregation over analytics events.

    Every computation is read-only and repeatable: the same events always
    produce the same result.
    """

    def _in_window(
        self, events: Iterable[AnalyticsEvent], window: TimeWindow
    ) -> Iterable[AnalyticsEvent]:
        if window.is_unbounded:
            return events
        return (e for e in events if window.contains(e.timestamp))

    def distinct_users(
        self,
        events: Iterable[AnalyticsEvent],
        event_type: EventType | None = None,
        window: TimeWindow | None = None,
    ) -> set[UserId]:
        """Users that produced event_type (or any event) inside the window."""
        scoped = self._in_window(events, window or TimeWindow.unbounded())
        return {e.user_id for e in scoped if event_type is None or e.event_type == event_type}

    def compute_funnel(
        self,
        events: Sequence[AnalyticsEvent],
        steps: Sequence[EventType],
        window: TimeWindow,
    ) -> list[FunnelStep]:
        """
        Count distinct users per declared step.

        Steps are ordered by declaration only: a user who fired step 3
        without step 1 still counts at step 3.
        """
        users_by_type: dict[EventType, set[UserId]] = defaultdict(set)
        for event in self._in_window(events, window):
            users_by_type[event.event_type].add(event.user_id)

        funnel: list[FunnelStep] = []
        previous_count = 0
        for index, step in enumerate(steps):
            count = len(users_by_type.get(step, set()))
            rate = 1.0 if index == 0 else safe_rate(count, previous_count)
            funnel.append(
                FunnelStep(
                    step_name=step.value,
                    step_index=index,
                    user_count=count,
                    conversion_rate=rate,
                )
            )
            previous_count = count
        return funnel

    def activation_rate(
        self,
        events: Sequence[AnalyticsEvent],
        new_user_ids: Collection[UserId],
        window: TimeWindow,
        activation_event: EventType = EventType.MAGIC_MOMENT_COMPLETE,
    ) -> float:
        """
        Share of the users created in the window who reached the activation event.

        Only new users count in the numerator, so the rate stays within [0, 1].
        """
        cohort = set(new_user_ids)
        activated = self.distinct_users(events, activation_event, window) & cohort
        return safe_rate(len(activated), len(cohort))

    def retention_rate(
        self,
        events: Sequence[AnalyticsEvent],
        window: TimeWindow,
        session_start_event: EventType = EventType.APP_LAUNCH,
    ) -> float:
        """
        Share of active users with at least two session starts in the window.

        This is a multi-session proxy, not calendar-day retention.
        """
        scoped = list(self._in_window(events, window))
        launches = Counter(e.user_id for e in scoped if e.event_type == session_start_event)
        returning = sum(1 for count in launches.values() if count >= 2)
        active = len({e.user_id for e in scoped})
        return safe_rate(returning, active)

    def event_distribution(self, events: Iterable[AnalyticsEvent]) -> list[EventCount]:
        """Event counts per type, most frequent first."""
        counts = Counter(e.event_type.value for e in events)
        ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        return [EventCount(event_type=name, count=count) for name, count in ordered]

    def time_series(
        self, events: Iterable[AnalyticsEvent], group_by: GroupBy = "day"
    ) -> list[TimeSeriesBucket]:
        """Per-type event counts grouped into hour, day or week buckets (ascending)."""
        grouped: dict[str, Counter[str]] = defaultdict(Counter)
        for event in events:
            grouped[_bucket_key(event.timestamp, group_by)][event.event_type.value] += 1
        return [
            TimeSeriesBucket(bucket=key, events=dict(grouped[key])) for key in sorted(grouped)
        ]

    def user_stats(
        self, events: Sequence[AnalyticsEvent], learning_event_seconds: int = 30
    ) -> UserStats:
        """
        Summarize one user's events.

        Args:
            events: The user's events inside the requested window
            learning_event_seconds: Estimated seconds of study per learning event

        Returns:
            UserStats for the user
        """
        ordered = sorted(events, key=lambda e: e.timestamp)
        types = Counter(e.event_type for e in ordered)

        correct = types[EventType.VTPR_ANSWER_CORRECT]
        incorrect = types[EventType.VTPR_ANSWER_INCORRECT]

        keywords: set[str] = set()
        for event in ordered:
            if event.event_type != EventType.VTPR_ANSWER_CORRECT:
                continue
            payload = event.typed_payload
            if isinstance(payload, VtprAnswerPayload) and payload.keyword_id:
                keywords.add(payload.keyword_id)

        learning_events = sum(1 for e in ordered if e.event_type.is_learning_event)
        study_days = {
            ensure_utc(e.timestamp).date() for e in ordered if e.event_type.is_study_event
        }

        return UserStats(
            total_events=len(ordered),
            onboarding_completed=types[EventType.ONBOARDING_COMPLETE] > 0,
            vtpr_sessions=types[EventType.VTPR_START],
            vtpr_accuracy=safe_rate(correct, correct + incorrect),
            magic_moment_reached=types[EventType.MAGIC_MOMENT_COMPLETE] > 0,
            learning_time_seconds=learning_events * learning_event_seconds,
            keywords_learned=len(keywords),
            last_activity=ordered[-1].timestamp if ordered else None,
            streak_days=_trailing_run(study_days),
        )
