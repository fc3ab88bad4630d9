"""Analytics context schemas."""

from smartalk.infrastructure.analytics.schemas.analytics_schemas import (
    AnalyticsHealthResponse,
    BatchEventCreateRequest,
    BatchEventResponse,
    EventCountResponse,
    EventCreateRequest,
    EventResponse,
    FunnelResponse,
    FunnelStepResponse,
    SystemAnalyticsResponse,
    SystemOverviewResponse,
    TimeSeriesBucketResponse,
    UserStatsResponse,
)

__all__ = [
    "AnalyticsHealthResponse",
    "BatchEventCreateRequest",
    "BatchEventResponse",
    "EventCountResponse",
    "EventCreateRequest",
    "EventResponse",
    "FunnelResponse",
    "FunnelStepResponse",
    "SystemAnalyticsResponse",
    "SystemOverviewResponse",
    "TimeSeriesBucketResponse",
    "UserStatsResponse",
]
