"""Pydantic schemas for analytics API request/response validation."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class EventCreateRequest(BaseModel):
    """
    Schema for recording an event.

    event_type and event_data are checked by the engine itself so that an
    unknown type or a non-object payload is reported as a validation error.
    """

    user_id: int = Field(..., description="ID of the user who produced the event")
    event_type: str = Field(..., description="Event type from the fixed vocabulary")
    event_data: Any = Field(None, description="Free-form event payload object")
    timestamp: datetime | None = Field(None, description="Client time, defaults to now")


class BatchEventCreateRequest(BaseModel):
    """Schema for recording up to 100 events at once."""

    events: list[EventCreateRequest] = Field(..., description="Events to record")


class EventResponse(BaseModel):
    """Schema for a stored event."""

    id: int
    user_id: int
    event_type: str
    event_data: dict[str, Any]
    timestamp: datetime


class BatchEventResponse(BaseModel):
    """Schema for the outcome of a batch."""

    recorded_count: int = Field(..., description="Number of events stored")
    dropped_count: int = Field(..., description="Number of events of unknown users")
    dropped_indexes: list[int] = Field(..., description="Input positions of dropped events")
    event_ids: list[int] = Field(..., description="IDs of the stored events, in input order")


class UserStatsResponse(BaseModel):
    user_id: int
    time_range: str
    total_events: int
    onboarding_completed: bool
    vtpr_sessions: int
    vtpr_accuracy: float
    magic_moment_reached: bool
    learning_time_seconds: int
    keywords_learned: int
    last_activity: datetime | None
    streak_days: int


class FunnelStepResponse(BaseModel):
    step_name: str
    step_index: int
    user_count: int
    conversion_rate: float

    model_config = {"from_attributes": True}


class FunnelResponse(BaseModel):
    """Schema for a funnel report."""

    steps: list[FunnelStepResponse]
    total_users: int = Field(..., description="Distinct users at the first step")
    activation_rate: float = Field(..., description="Activation step users over first step users")
    time_range: str
    generated_at: datetime


class SystemOverviewResponse(BaseModel):
    total_users: int
    total_events: int
    active_users: int
    new_users: int
    activation_rate: float
    retention_rate: float

    model_config = {"from_attributes": True}


class EventCountResponse(BaseModel):
    event_type: str
    count: int

    model_config = {"from_attributes": True}


class TimeSeriesBucketResponse(BaseModel):
    bucket: str
    events: dict[str, int]
    total: int

    model_config = {"from_attributes": True}


class SystemAnalyticsResponse(BaseModel):
    """Schema for the system-wide analytics view."""

    overview: SystemOverviewResponse
    event_distribution: list[EventCountResponse]
    time_series: list[TimeSeriesBucketResponse]
    time_range: str
    generated_at: datetime


class AnalyticsHealthResponse(BaseModel):
    status: str
    database_connected: bool
    recent_events: int = Field(..., description="Events stored during the last 24 hours")
    checked_at: datetime
    error: str | None = None
