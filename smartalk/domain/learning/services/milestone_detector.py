"""
Domain service detecting learning milestones between two progress snapshots.

This is a pure domain service with no infrastructure dependencies.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Any

DEFAULT_PERFECT_STREAK_LENGTH = 5
DEFAULT_SPEED_BONUS = timedelta(seconds=30)


class MilestoneType(str, Enum):
    KEYWORD_COMPLETED = "keyword_completed"
    HALF_COMPLETE = "half_complete"
    PERFECT_STREAK = "perfect_streak"
    SPEED_BONUS = "speed_bonus"
    ALL_COMPLETE = "all_complete"


@dataclass(frozen=True)
class Milestone:
    type: MilestoneType
    payload: dict[str, Any] = field(default_factory=dict)

    @property
    def triggers_magic_moment(self) -> bool:
        """all_complete is the one-time gate to the next content stage."""
        return self.type == MilestoneType.ALL_COMPLETE


@dataclass(frozen=True)
class ProgressSnapshot:
    """Progress of a user through one unit group at a point in time."""

    completed_count: int
    total_count: int
    current_streak: int = 0
    session_elapsed: timedelta | None = None


class MilestoneDetector:
    """
    Emits the milestones that became true between two snapshots.

    Detection works on the delta between the previous and current snapshot,
    so re-checking an unchanged snapshot never repeats a milestone. An item
    counts as newly correct when completed_count grew.

    Order of emitted milestones: keyword_completed, half_complete,
    perfect_streak, speed_bonus, all_complete.
    """

    def __init__(
        self,
        perfect_streak_length: int = DEFAULT_PERFECT_STREAK_LENGTH,
        speed_bonus_threshold: timedelta = DEFAULT_SPEED_BONUS,
    ) -> None:
        self.perfect_streak_length = perfect_streak_length
        self.speed_bonus_threshold = speed_bonus_threshold

    def check_milestones(
        self, previous: ProgressSnapshot, current: ProgressSnapshot
    ) -> list[Milestone]:
        """
        Compute newly reached milestones.

        Args:
            previous: Snapshot taken before the update
            current: Snapshot taken after the update

        Returns:
            Milestones in emission order (possibly empty)
        """
        milestones: list[Milestone] = []
        newly_correct = current.completed_count > previous.completed_count
        progress = {
            "completed_count": current.completed_count,
            "total_count": current.total_count,
        }

        if newly_correct:
            milestones.append(Milestone(MilestoneType.KEYWORD_COMPLETED, dict(progress)))

        half = current.total_count // 2
        if half > 0 and self._crossed(previous.completed_count, current.completed_count, half):
            milestones.append(Milestone(MilestoneType.HALF_COMPLETE, dict(progress)))

        if newly_correct and current.current_streak >= self.perfect_streak_length:
            milestones.append(
                Milestone(MilestoneType.PERFECT_STREAK, {"streak": current.current_streak})
            )

        if (
            newly_correct
            and current.session_elapsed is not None
            and current.session_elapsed < self.speed_bonus_threshold
        ):
            milestones.append(
                Milestone(
                    MilestoneType.SPEED_BONUS,
                    {"elapsed_seconds": current.session_elapsed.total_seconds()},
                )
            )

        if current.total_count > 0 and self._crossed(
            previous.completed_count, current.completed_count, current.total_count
        ):
            milestones.append(Milestone(MilestoneType.ALL_COMPLETE, dict(progress)))

        return milestones

    @staticmethod
    def _crossed(before: int, after: int, target: int) -> bool:
        return before < target == after
