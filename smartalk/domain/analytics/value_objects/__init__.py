from .metrics import (
    EventCount,
    FunnelStep,
    GroupBy,
    SystemOverview,
    TimeSeriesBucket,
    UserStats,
)

__all__ = [
    "EventCount",
    "FunnelStep",
    "GroupBy",
    "SystemOverview",
    "TimeSeriesBucket",
    "UserStats",
]
