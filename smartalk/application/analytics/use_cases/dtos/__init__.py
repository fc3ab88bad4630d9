"""DTOs for analytics use cases."""

from smartalk.application.analytics.use_cases.dtos.ingestion_dtos import (
    BatchIngestionResult,
    EventInput,
)
from smartalk.application.analytics.use_cases.dtos.report_dtos import (
    FunnelReport,
    HealthStatus,
    SystemAnalytics,
)

__all__ = [
    "BatchIngestionResult",
    "EventInput",
    "FunnelReport",
    "HealthStatus",
    "SystemAnalytics",
]
