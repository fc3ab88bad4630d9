"""API routes for learning progress, Focus Mode and learning sessions."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, status

from smartalk.application.learning.use_cases.learning_progress_use_case import (
    LearningProgressUseCase,
)
from smartalk.application.learning.use_cases.record_attempt_use_case import (
    RecordAttemptUseCase,
)
from smartalk.core import container
from smartalk.domain.common.exceptions import DomainError
from smartalk.domain.learning.entities.learning_session import LearningSession
from smartalk.domain.learning.entities.progress_record import ProgressRecord
from smartalk.domain.learning.services.focus_mode import FocusState
from smartalk.exceptions import SmartalkError
from smartalk.infrastructure.common.di import inject_use_case
from smartalk.infrastructure.learning.schemas import (
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

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/progress", tags=["progress"])


def _record_response(record: ProgressRecord) -> ProgressRecordResponse:
    return ProgressRecordResponse(
        id=record.id.value,
        user_id=record.user_id.value,
        unit_group_id=record.unit_group_id.value,
        item_id=record.item_id.value,
        attempts=record.attempts,
        correct_attempts=record.correct_attempts,
        accuracy=record.accuracy,
        status=record.status.value,
        last_attempt_at=record.last_attempt_at,
    )


def _focus_response(item_id: int, state: FocusState) -> FocusStateResponse:
    return FocusStateResponse(
        item_id=item_id,
        consecutive_incorrect=state.consecutive_incorrect,
        active=state.active,
        highlight_correct_option=state.active,
    )


def _session_response(session: LearningSession) -> LearningSessionResponse:
    return LearningSessionResponse(
        unit_group_id=session.unit_group_id.value,
        item_id=session.item_id.value,
        phase=session.phase.value,
        attempts_this_phase=session.attempts_this_phase,
        started_at=session.started_at,
    )


def _unexpected(action: str, e: Exception) -> HTTPException:
    logger.error(f"Failed to {action}: {e!s}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="An unexpected error occurred. Please try again later.",
    )


@router.post("/attempts", response_model=AttemptResponse, status_code=status.HTTP_201_CREATED)
def record_attempt(
    request: AttemptCreateRequest,
    use_case: RecordAttemptUseCase = Depends(inject_use_case(container.record_attempt_use_case)),
) -> AttemptResponse:
    """
    Record an answer to an item.

    Returns the stored progress, the Focus Mode state of the item and any
    milestones the answer produced.

    Raises:
        UserNotFoundError: Unknown user (404)
        ItemNotFoundError: Item is not part of the unit group (404)
        PersistenceError: Store failure (503)
    """
    try:
        outcome = use_case.record_attempt(
            user_id=request.user_id,
            unit_group_id=request.unit_group_id,
            item_id=request.item_id,
            is_correct=request.is_correct,
        )
        return AttemptResponse(
            progress=_record_response(outcome.record),
            focus_mode=_focus_response(request.item_id, outcome.focus_state),
            phase=outcome.phase.value,
            focus_transition=outcome.focus_transition.value if outcome.focus_transition else None,
            milestones=[
                MilestoneResponse(type=m.type.value, payload=m.payload) for m in outcome.milestones
            ],
            magic_moment=outcome.magic_moment,
        )
    except (SmartalkError, DomainError):
        raise
    except Exception as e:
        raise _unexpected(f"record attempt on item {request.item_id}", e) from e


@router.post(
    "/items/begin", response_model=LearningSessionResponse, status_code=status.HTTP_200_OK
)
def begin_item(
    request: BeginItemRequest,
    use_case: LearningProgressUseCase = Depends(
        inject_use_case(container.learning_progress_use_case)
    ),
) -> LearningSessionResponse:
    """Move the user to an item, resetting Focus Mode and starting a session."""
    try:
        session = use_case.begin_item(request.user_id, request.unit_group_id, request.item_id)
        return _session_response(session)
    except (SmartalkError, DomainError):
        raise
    except Exception as e:
        raise _unexpected(f"begin item {request.item_id}", e) from e


@router.post(
    "/pronunciation", response_model=LearningSessionResponse, status_code=status.HTTP_200_OK
)
def complete_pronunciation(
    request: PronunciationResultRequest,
    use_case: LearningProgressUseCase = Depends(
        inject_use_case(container.learning_progress_use_case)
    ),
) -> LearningSessionResponse:
    """Record the pronunciation result for the user's current item."""
    try:
        session = use_case.complete_pronunciation(request.user_id, request.item_id, request.passed)
        return _session_response(session)
    except (SmartalkError, DomainError):
        raise
    except Exception as e:
        raise _unexpected(f"record pronunciation on item {request.item_id}", e) from e


@router.get("/users/{user_id}/groups/{unit_group_id}", response_model=UnitProgressResponse)
def get_unit_progress(
    user_id: Annotated[int, Path(ge=1)],
    unit_group_id: Annotated[int, Path(ge=1)],
    use_case: LearningProgressUseCase = Depends(
        inject_use_case(container.learning_progress_use_case)
    ),
) -> UnitProgressResponse:
    """Progress of a user through a unit group."""
    try:
        summary = use_case.get_unit_progress(user_id, unit_group_id)
        return UnitProgressResponse(
            user_id=user_id,
            unit_group_id=unit_group_id,
            total_items=summary.total_items,
            unlocked_items=summary.unlocked_items,
            completed_items=summary.completed_items,
            total_attempts=summary.total_attempts,
            correct_attempts=summary.correct_attempts,
            accuracy_percent=summary.accuracy_percent,
            records=[_record_response(r) for r in summary.records],
        )
    except (SmartalkError, DomainError):
        raise
    except Exception as e:
        raise _unexpected(f"load progress of user {user_id}", e) from e


@router.get("/users/{user_id}/items/{item_id}/focus", response_model=FocusStateResponse)
def get_focus_state(
    user_id: Annotated[int, Path(ge=1)],
    item_id: Annotated[int, Path(ge=1)],
    use_case: LearningProgressUseCase = Depends(
        inject_use_case(container.learning_progress_use_case)
    ),
) -> FocusStateResponse:
    """Focus Mode state of an item."""
    try:
        return _focus_response(item_id, use_case.get_focus_state(user_id, item_id))
    except (SmartalkError, DomainError):
        raise
    except Exception as e:
        raise _unexpected(f"load focus state of item {item_id}", e) from e
