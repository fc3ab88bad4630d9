"""API routes for analytics event ingestion and reporting."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from smartalk.application.analytics.use_cases.dtos import EventInput
from smartalk.application.analytics.use_cases.event_ingestion_use_case import (
    EventIngestionUseCase,
)
from smartalk.application.analytics.use_cases.funnel_analytics_use_case import (
    FunnelAnalyticsUseCase,
)
from smartalk.application.analytics.use_cases.user_analytics_use_case import (
    UserAnalyticsUseCase,
)
from smartalk.application.common.pagination import MAX_PAGE_SIZE, Pagination
from smartalk.core import container
from smartalk.domain.analytics.entities.analytics_event import AnalyticsEvent
from smartalk.domain.common.exceptions import DomainError
from smartalk.exceptions import SmartalkError
from smartalk.infrastructure.analytics.schemas import (
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
from smartalk.infrastructure.common.di import inject_use_case
from smartalk.infrastructure.common.schemas import PaginatedResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analytics", tags=["analytics"])


def _to_input(request: EventCreateRequest) -> EventInput:
    return EventInput(
        user_id=request.user_id,
        event_type=request.event_type,
        event_data=request.event_data,
        timestamp=request.timestamp,
    )


def _to_response(event: AnalyticsEvent) -> EventResponse:
    return EventResponse(
        id=event.id.value,
        user_id=event.user_id.value,
        event_type=event.event_type.value,
        event_data=event.payload,
        timestamp=event.timestamp,
    )


def _unexpected(action: str, e: Exception) -> HTTPException:
    logger.error(f"Failed to {action}: {e!s}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="An unexpected error occurred. Please try again later.",
    )


@router.post("/events", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
def record_event(
    request: EventCreateRequest,
    use_case: EventIngestionUseCase = Depends(
        inject_use_case(container.event_ingestion_use_case)
    ),
) -> EventResponse:
    """
    Record a single analytics event.

    Raises:
        ValidationError: Unknown event type or malformed payload (400)
        UserNotFoundError: Unknown user (404)
    """
    try:
        return _to_response(use_case.record_event(_to_input(request)))
    except (SmartalkError, DomainError):
        raise
    except Exception as e:
        raise _unexpected("record event", e) from e


@router.post(
    "/events/batch", response_model=BatchEventResponse, status_code=status.HTTP_201_CREATED
)
def record_batch_events(
    request: BatchEventCreateRequest,
    use_case: EventIngestionUseCase = Depends(
        inject_use_case(container.event_ingestion_use_case)
    ),
) -> BatchEventResponse:
    """
    Record a batch of events.

    A malformed event rejects the whole batch. Events of unknown users are
    dropped and reported by input position.
    """
    try:
        result = use_case.record_batch_events([_to_input(e) for e in request.events])
        return BatchEventResponse(
            recorded_count=result.recorded_count,
            dropped_count=result.dropped_count,
            dropped_indexes=result.dropped_indexes,
            event_ids=[e.id.value for e in result.recorded],
        )
    except (SmartalkError, DomainError):
        raise
    except Exception as e:
        raise _unexpected("record event batch", e) from e


@router.get("/users/{user_id}/events", response_model=PaginatedResponse[EventResponse])
def get_user_events(
    user_id: Annotated[int, Path(ge=1)],
    event_type: Annotated[list[str] | None, Query()] = None,
    time_range: str = "all",
    limit: Annotated[int, Query(ge=1, le=MAX_PAGE_SIZE)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
    use_case: UserAnalyticsUseCase = Depends(inject_use_case(container.user_analytics_use_case)),
) -> PaginatedResponse[EventResponse]:
    """List a user's events, newest first."""
    try:
        page = use_case.get_user_events(
            user_id,
            Pagination(limit=limit, offset=offset),
            event_type_names=event_type,
            time_range=time_range,
        )
        return PaginatedResponse[EventResponse](
            items=[_to_response(e) for e in page.items],
            total=page.total,
            offset=page.offset,
            limit=page.limit,
            has_next=page.has_next,
        )
    except (SmartalkError, DomainError):
        raise
    except Exception as e:
        raise _unexpected(f"list events of user {user_id}", e) from e


@router.get("/users/{user_id}/stats", response_model=UserStatsResponse)
def get_user_stats(
    user_id: Annotated[int, Path(ge=1)],
    time_range: str = "30d",
    use_case: UserAnalyticsUseCase = Depends(inject_use_case(container.user_analytics_use_case)),
) -> UserStatsResponse:
    """Learning statistics of a user inside a time range."""
    try:
        stats = use_case.get_user_stats(user_id, time_range)
        return UserStatsResponse(
            user_id=user_id,
            time_range=time_range,
            total_events=stats.total_events,
            onboarding_completed=stats.onboarding_completed,
            vtpr_sessions=stats.vtpr_sessions,
            vtpr_accuracy=stats.vtpr_accuracy,
            magic_moment_reached=stats.magic_moment_reached,
            learning_time_seconds=stats.learning_time_seconds,
            keywords_learned=stats.keywords_learned,
            last_activity=stats.last_activity,
            streak_days=stats.streak_days,
        )
    except (SmartalkError, DomainError):
        raise
    except Exception as e:
        raise _unexpected(f"compute stats of user {user_id}", e) from e


@router.get("/funnel", response_model=FunnelResponse)
def get_funnel(
    step: Annotated[list[str] | None, Query()] = None,
    time_range: str = "30d",
    use_case: FunnelAnalyticsUseCase = Depends(
        inject_use_case(container.funnel_analytics_use_case)
    ),
) -> FunnelResponse:
    """
    Conversion funnel over the declared steps.

    Without step parameters the onboarding-to-activation funnel is used.
    """
    try:
        report = use_case.get_funnel(step, time_range)
        return FunnelResponse(
            steps=[FunnelStepResponse.model_validate(s) for s in report.steps],
            total_users=report.total_users,
            activation_rate=report.activation_rate,
            time_range=report.time_range,
            generated_at=report.generated_at,
        )
    except (SmartalkError, DomainError):
        raise
    except Exception as e:
        raise _unexpected("compute funnel", e) from e


@router.get("/system", response_model=SystemAnalyticsResponse)
def get_system_analytics(
    time_range: str = "7d",
    group_by: str = "day",
    use_case: FunnelAnalyticsUseCase = Depends(
        inject_use_case(container.funnel_analytics_use_case)
    ),
) -> SystemAnalyticsResponse:
    """System-wide overview, event distribution and time series."""
    try:
        analytics = use_case.get_system_analytics(time_range, group_by)
        return SystemAnalyticsResponse(
            overview=SystemOverviewResponse.model_validate(analytics.overview),
            event_distribution=[
                EventCountResponse.model_validate(c) for c in analytics.event_distribution
            ],
            time_series=[
                TimeSeriesBucketResponse.model_validate(b) for b in analytics.time_series
            ],
            time_range=analytics.time_range,
            generated_at=analytics.generated_at,
        )
    except (SmartalkError, DomainError):
        raise
    except Exception as e:
        raise _unexpected("compute system analytics", e) from e


@router.get("/health", response_model=AnalyticsHealthResponse)
def get_health(
    use_case: FunnelAnalyticsUseCase = Depends(
        inject_use_case(container.funnel_analytics_use_case)
    ),
) -> AnalyticsHealthResponse:
    """Store connectivity and ingestion activity of the last 24 hours."""
    health = use_case.get_health_status()
    return AnalyticsHealthResponse(
        status=health.status,
        database_connected=health.database_connected,
        recent_events=health.recent_events,
        checked_at=health.checked_at,
        error=health.error,
    )
