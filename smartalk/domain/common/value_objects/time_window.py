"""TimeWindow value object for bounding analytics queries."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from ..exceptions import ValidationError
from ..value_object import ValueObject

# Range tokens accepted by the analytics API
TIME_RANGES: dict[str, timedelta | None] = {
    "1d": timedelta(days=1),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
    "90d": timedelta(days=90),
    "all": None,
}


def ensure_utc(value: datetime) -> datetime:
    """Return value as an aware UTC datetime (naive values are assumed to be UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


@dataclass(frozen=True)
class TimeWindow(ValueObject):
    """
    Inclusive time window. A missing bound leaves that side open.

    Business Rules:
    - Bounds are stored as aware UTC datetimes
    - start must not be after end
    """

    start: datetime | None = None
    end: datetime | None = None

    def __post_init__(self) -> None:
        if self.start is not None:
            object.__setattr__(self, "start", ensure_utc(self.start))
        if self.end is not None:
            object.__setattr__(self, "end", ensure_utc(self.end))
        if self.start is not None and self.end is not None and self.start > self.end:
            raise ValidationError("Window start must not be after its end", field="start")

    def contains(self, moment: datetime) -> bool:
        """Check whether a moment falls inside the window."""
        moment = ensure_utc(moment)
        if self.start is not None and moment < self.start:
            return False
        return not (self.end is not None and moment > self.end)

    @property
    def is_unbounded(self) -> bool:
        return self.start is None and self.end is None

    @classmethod
    def unbounded(cls) -> "TimeWindow":
        return cls()

    @classmethod
    def from_range(cls, time_range: str, now: datetime | None = None) -> "TimeWindow":
        """
        Build a window ending now from a range token.

        Args:
            time_range: One of "1d", "7d", "30d", "90d" or "all"
            now: Reference time, defaults to the current UTC time

        Returns:
            TimeWindow covering the requested range

        Raises:
            ValidationError: If the token is unknown
        """
        if time_range not in TIME_RANGES:
            raise ValidationError(
                f"Unknown time range '{time_range}'. Must be one of: {', '.join(TIME_RANGES)}",
                field="time_range",
                value=time_range,
            )
        delta = TIME_RANGES[time_range]
        if delta is None:
            return cls()
        reference = ensure_utc(now) if now else datetime.now(UTC)
        return cls(start=reference - delta, end=None)
