"""DTOs for analytics read use cases."""

from dataclasses import dataclass
from datetime import datetime

from smartalk.domain.analytics.value_objects import (
    EventCount,
    FunnelStep,
    SystemOverview,
    TimeSeriesBucket,
)


@dataclass
class FunnelReport:
    steps: list[FunnelStep]
    total_users: int
    activation_rate: float
    time_range: str
    generated_at: datetime


@dataclass
class SystemAnalytics:
    """Overview, distribution and time series for one time range."""

    overview: SystemOverview
    event_distribution: list[EventCount]
    time_series: list[TimeSeriesBucket]
    time_range: str
    generated_at: datetime


@dataclass
class HealthStatus:
    status: str
    database_connected: bool
    # Events stored during the last 24 hours
    recent_events: int
    checked_at: datetime
    error: str | None = None
