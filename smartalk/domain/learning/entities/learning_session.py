"""
LearningSession: ephemeral state of the item a user is currently studying.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import Enum

from smartalk.domain.common.value_objects import ItemId, UnitGroupId, ensure_utc


class LearningPhase(str, Enum):
    """Phases of a vTPR item, in order."""

    CONTEXT_GUESSING = "context_guessing"
    PRONUNCIATION_TRAINING = "pronunciation_training"
    COMPLETED = "completed"


@dataclass
class LearningSession:
    """
    One user's pass over one item.

    The session starts in context guessing (pick the matching video), moves
    to pronunciation training after the first correct answer, and ends when
    pronunciation is passed. It is discarded when the user changes item.
    """

    unit_group_id: UnitGroupId
    item_id: ItemId
    phase: LearningPhase = LearningPhase.CONTEXT_GUESSING
    attempts_this_phase: int = 0
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        self.started_at = ensure_utc(self.started_at)

    def record_answer(self, is_correct: bool) -> None:
        """Count a context-guessing answer, moving on to pronunciation when correct."""
        if self.phase != LearningPhase.CONTEXT_GUESSING:
            return
        self.attempts_this_phase += 1
        if is_correct:
            self._enter(LearningPhase.PRONUNCIATION_TRAINING)

    def record_pronunciation(self, passed: bool) -> None:
        if self.phase != LearningPhase.PRONUNCIATION_TRAINING:
            return
        self.attempts_this_phase += 1
        if passed:
            self._enter(LearningPhase.COMPLETED)

    def elapsed(self, now: datetime | None = None) -> timedelta:
        reference = ensure_utc(now) if now else datetime.now(UTC)
        return reference - self.started_at

    def _enter(self, phase: LearningPhase) -> None:
        self.phase = phase
        self.attempts_this_phase = 0
