"""Learning context schemas."""

from smartalk.infrastructure.learning.schemas.progress_schemas import (
    AttemptCreateRequest,
    AttemptResponse,
    BeginItemRequest,
    FocusStateResponse,
    LearningSessionResponse,
    MilestoneResponse,
    ProgressRecordResponse,
    PronunciationResultRequest,
    UnitProgressResponse,
)

__all__ = [
    "AttemptCreateRequest",
    "AttemptResponse",
    "BeginItemRequest",
    "FocusStateResponse",
    "LearningSessionResponse",
    "MilestoneResponse",
    "ProgressRecordResponse",
    "PronunciationResultRequest",
    "UnitProgressResponse",
]
