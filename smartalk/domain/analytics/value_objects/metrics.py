"""Value objects produced by the funnel and retention analyzer."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

GroupBy = Literal["hour", "day", "week"]


@dataclass(frozen=True)
class FunnelStep:
    """
    One step of an ordered conversion funnel.

    conversion_rate is 1.0 for step 0 and user_count / previous user_count
    afterwards (0.0 when the previous step has no users).
    """

    step_name: str
    step_index: int
    user_count: int
    conversion_rate: float


@dataclass(frozen=True)
class EventCount:
    event_type: str
    count: int


@dataclass(frozen=True)
class TimeSeriesBucket:
    """Event counts per type inside one hour, day or week."""

    bucket: str
    events: dict[str, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return sum(self.events.values())


@dataclass(frozen=True)
class SystemOverview:
    total_users: int
    total_events: int
    active_users: int
    new_users: int
    activation_rate: float
    retention_rate: float


@dataclass(frozen=True)
class UserStats:
    """Learning statistics of one user derived from their events."""

    total_events: int
    onboarding_completed: bool
    vtpr_sessions: int
    vtpr_accuracy: float
    magic_moment_reached: bool
    learning_time_seconds: int
    keywords_learned: int
    last_activity: datetime | None
    streak_days: int
