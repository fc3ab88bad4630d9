"""Tests for FunnelAnalyzer domain service."""

from datetime import UTC, datetime, timedelta

import pytest

from smartalk.domain.analytics.entities.analytics_event import AnalyticsEvent
from smartalk.domain.analytics.event_types import EventType
from smartalk.domain.analytics.services.funnel_analyzer import FunnelAnalyzer, safe_rate
from smartalk.domain.common.value_objects import TimeWindow, UserId

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=UTC)


def _event(
    user_id: int,
    event_type: EventType,
    at: datetime = NOW,
    payload: dict[str, object] | None = None,
) -> AnalyticsEvent:
    return AnalyticsEvent.create(UserId(user_id), event_type, dict(payload or {}), at)


class TestSafeRate:
    def test_zero_denominator(self) -> None:
        assert safe_rate(5, 0) == 0.0

    def test_ratio(self) -> None:
        assert safe_rate(1, 4) == 0.25


class TestComputeFunnel:
    """Test suite for funnel computation."""

    @pytest.fixture
    def analyzer(self) -> FunnelAnalyzer:
        return FunnelAnalyzer()

    def test_two_step_funnel(self, analyzer: FunnelAnalyzer) -> None:
        events = [_event(u, EventType.APP_LAUNCH) for u in range(1, 101)]
        events += [_event(u, EventType.ONBOARDING_COMPLETE) for u in range(1, 41)]

        funnel = analyzer.compute_funnel(
            events,
            [EventType.APP_LAUNCH, EventType.ONBOARDING_COMPLETE],
            TimeWindow.unbounded(),
        )

        assert [(s.step_name, s.user_count, s.conversion_rate) for s in funnel] == [
            ("app_launch", 100, 1.0),
            ("onboarding_complete", 40, 0.4),
        ]
        assert [s.step_index for s in funnel] == [0, 1]

    def test_counts_distinct_users(self, analyzer: FunnelAnalyzer) -> None:
        events = [_event(1, EventType.APP_LAUNCH) for _ in range(5)]
        funnel = analyzer.compute_funnel(events, [EventType.APP_LAUNCH], TimeWindow.unbounded())
        assert funnel[0].user_count == 1

    def test_later_step_counts_without_earlier_step(self, analyzer: FunnelAnalyzer) -> None:
        events = [_event(1, EventType.ONBOARDING_COMPLETE)]

        funnel = analyzer.compute_funnel(
            events,
            [EventType.APP_LAUNCH, EventType.ONBOARDING_COMPLETE],
            TimeWindow.unbounded(),
        )

        assert funnel[1].user_count == 1
        # Previous step empty: rate falls back to zero
        assert funnel[1].conversion_rate == 0.0

    def test_empty_store(self, analyzer: FunnelAnalyzer) -> None:
        funnel = analyzer.compute_funnel(
            [], [EventType.APP_LAUNCH, EventType.VTPR_START], TimeWindow.unbounded()
        )
        assert [s.user_count for s in funnel] == [0, 0]
        assert [s.conversion_rate for s in funnel] == [1.0, 0.0]

    def test_window_excludes_old_events(self, analyzer: FunnelAnalyzer) -> None:
        events = [
            _event(1, EventType.APP_LAUNCH, NOW - timedelta(days=40)),
            _event(2, EventType.APP_LAUNCH, NOW - timedelta(days=2)),
        ]
        window = TimeWindow.from_range("30d", now=NOW)

        funnel = analyzer.compute_funnel(events, [EventType.APP_LAUNCH], window)

        assert funnel[0].user_count == 1


class TestRates:
    @pytest.fixture
    def analyzer(self) -> FunnelAnalyzer:
        return FunnelAnalyzer()

    def test_activation_rate_without_new_users(self, analyzer: FunnelAnalyzer) -> None:
        events = [_event(1, EventType.MAGIC_MOMENT_COMPLETE)]
        assert analyzer.activation_rate(events, set(), TimeWindow.unbounded()) == 0.0

    def test_activation_rate(self, analyzer: FunnelAnalyzer) -> None:
        events = [
            _event(1, EventType.MAGIC_MOMENT_COMPLETE),
            _event(1, EventType.MAGIC_MOMENT_COMPLETE),
            _event(2, EventType.MAGIC_MOMENT_COMPLETE),
        ]
        new_users = {UserId(u) for u in range(1, 5)}
        assert analyzer.activation_rate(events, new_users, TimeWindow.unbounded()) == 0.5

    def test_activation_rate_ignores_users_outside_cohort(self, analyzer: FunnelAnalyzer) -> None:
        events = [
            _event(1, EventType.MAGIC_MOMENT_COMPLETE),
            _event(7, EventType.MAGIC_MOMENT_COMPLETE),
            _event(8, EventType.MAGIC_MOMENT_COMPLETE),
        ]

        rate = analyzer.activation_rate(events, {UserId(1)}, TimeWindow.unbounded())

        assert rate == 1.0

    def test_retention_rate(self, analyzer: FunnelAnalyzer) -> None:
        events = [
            _event(1, EventType.APP_LAUNCH),
            _event(1, EventType.APP_LAUNCH, NOW - timedelta(days=1)),
            _event(2, EventType.APP_LAUNCH),
            _event(3, EventType.VTPR_START),
            _event(4, EventType.ONBOARDING_START),
        ]
        assert analyzer.retention_rate(events, TimeWindow.unbounded()) == 0.25

    def test_retention_rate_without_users(self, analyzer: FunnelAnalyzer) -> None:
        assert analyzer.retention_rate([], TimeWindow.unbounded()) == 0.0


class TestDistributionAndSeries:
    @pytest.fixture
    def analyzer(self) -> FunnelAnalyzer:
        return FunnelAnalyzer()

    def test_distribution_most_frequent_first(self, analyzer: FunnelAnalyzer) -> None:
        events = [
            _event(1, EventType.VTPR_START),
            _event(1, EventType.APP_LAUNCH),
            _event(2, EventType.APP_LAUNCH),
            _event(3, EventType.ONBOARDING_START),
        ]

        distribution = analyzer.event_distribution(events)

        assert [(c.event_type, c.count) for c in distribution] == [
            ("app_launch", 2),
            ("onboarding_start", 1),
            ("vtpr_start", 1),
        ]

    def test_time_series_by_day(self, analyzer: FunnelAnalyzer) -> None:
        events = [
            _event(1, EventType.APP_LAUNCH, datetime(2024, 3, 2, 9, tzinfo=UTC)),
            _event(2, EventType.APP_LAUNCH, datetime(2024, 3, 1, 9, tzinfo=UTC)),
            _event(2, EventType.VTPR_START, datetime(2024, 3, 1, 10, tzinfo=UTC)),
        ]

        series = analyzer.time_series(events, "day")

        assert [b.bucket for b in series] == ["2024-03-01", "2024-03-02"]
        assert series[0].events == {"app_launch": 1, "vtpr_start": 1}
        assert series[0].total == 2

    def test_time_series_by_hour_and_week(self, analyzer: FunnelAnalyzer) -> None:
        # 2024-03-14 is a Thursday; its week starts on Monday 2024-03-11
        events = [_event(1, EventType.APP_LAUNCH, datetime(2024, 3, 14, 9, 45, tzinfo=UTC))]

        assert analyzer.time_series(events, "hour")[0].bucket == "2024-03-14T09:00"
        assert analyzer.time_series(events, "week")[0].bucket == "2024-03-11"


class TestUserStats:
    @pytest.fixture
    def analyzer(self) -> FunnelAnalyzer:
        return FunnelAnalyzer()

    def test_empty_history(self, analyzer: FunnelAnalyzer) -> None:
        stats = analyzer.user_stats([])

        assert stats.total_events == 0
        assert stats.vtpr_accuracy == 0.0
        assert stats.last_activity is None
        assert stats.streak_days == 0

    def test_learning_summary(self, analyzer: FunnelAnalyzer) -> None:
        day1 = datetime(2024, 3, 1, 9, tzinfo=UTC)
        day2 = datetime(2024, 3, 2, 9, tzinfo=UTC)
        events = [
            _event(1, EventType.ONBOARDING_COMPLETE, day1),
            _event(1, EventType.VTPR_START, day1),
            _event(1, EventType.VTPR_ANSWER_CORRECT, day1, {"keywordId": "kw-1"}),
            _event(1, EventType.VTPR_ANSWER_CORRECT, day1, {"keywordId": "kw-1"}),
            _event(1, EventType.VTPR_ANSWER_INCORRECT, day2, {"keywordId": "kw-2"}),
            _event(1, EventType.VTPR_ANSWER_CORRECT, day2, {"keywordId": "kw-2"}),
            _event(1, EventType.MAGIC_MOMENT_COMPLETE, day2),
        ]

        stats = analyzer.user_stats(events, learning_event_seconds=30)

        assert stats.total_events == 7
        assert stats.onboarding_completed is True
        assert stats.vtpr_sessions == 1
        assert stats.vtpr_accuracy == 0.75
        assert stats.magic_moment_reached is True
        assert stats.learning_time_seconds == 5 * 30
        assert stats.keywords_learned == 2
        assert stats.last_activity == day2
        assert stats.streak_days == 2

    def test_streak_days_counts_trailing_consecutive_days(self, analyzer: FunnelAnalyzer) -> None:
        days = [datetime(2024, 3, d, 9, tzinfo=UTC) for d in (1, 2, 5, 6, 7)]
        events = [_event(1, EventType.VTPR_START, day) for day in days]

        stats = analyzer.user_stats(events)

        assert stats.streak_days == 3
