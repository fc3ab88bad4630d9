"""Pydantic schemas for learning progress API request/response validation."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class AttemptCreateRequest(BaseModel):
    """Schema for recording an answer."""

    user_id: int = Field(..., ge=1, description="ID of the user answering")
    unit_group_id: int = Field(..., ge=1, description="Unit group the item belongs to")
    item_id: int = Field(..., ge=1, description="Item answered")
    is_correct: bool = Field(..., description="Whether the answer was correct")


class BeginItemRequest(BaseModel):
    """Schema for moving a user to an item."""

    user_id: int = Field(..., ge=1)
    unit_group_id: int = Field(..., ge=1)
    item_id: int = Field(..., ge=1)


class PronunciationResultRequest(BaseModel):
    """Schema for the result of the pronunciation phase."""

    user_id: int = Field(..., ge=1)
    item_id: int = Field(..., ge=1)
    passed: bool = Field(..., description="Whether pronunciation was accepted")


class ProgressRecordResponse(BaseModel):
    id: int
    user_id: int
    unit_group_id: int
    item_id: int
    attempts: int
    correct_attempts: int
    accuracy: float
    status: str
    last_attempt_at: datetime | None


class FocusStateResponse(BaseModel):
    """Focus Mode state of one item."""

    item_id: int
    consecutive_incorrect: int
    active: bool
    highlight_correct_option: bool = Field(
        ..., description="Whether the correct option should be emphasized"
    )


class MilestoneResponse(BaseModel):
    type: str
    payload: dict[str, Any]


class LearningSessionResponse(BaseModel):
    unit_group_id: int
    item_id: int
    phase: str
    attempts_this_phase: int
    started_at: datetime


class AttemptResponse(BaseModel):
    """Schema for everything a recorded attempt produced."""

    progress: ProgressRecordResponse
    focus_mode: FocusStateResponse
    phase: str
    focus_transition: str | None
    milestones: list[MilestoneResponse]
    magic_moment: bool = Field(..., description="Whether the unit group was just completed")


class UnitProgressResponse(BaseModel):
    """Schema for a user's progress through a unit group."""

    user_id: int
    unit_group_id: int
    total_items: int
    unlocked_items: int
    completed_items: int
    total_attempts: int
    correct_attempts: int
    accuracy_percent: float
    records: list[ProgressRecordResponse]
