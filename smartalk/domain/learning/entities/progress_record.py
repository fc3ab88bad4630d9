"""
ProgressRecord entity: mastery state of one user on one learning item.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from smartalk.domain.common.entity import Entity
from smartalk.domain.common.exceptions import DomainError
from smartalk.domain.common.value_objects import ItemId, ProgressId, UnitGroupId, UserId, ensure_utc


class ProgressStatus(str, Enum):
    """Item status. Members are declared in their only allowed order."""

    LOCKED = "locked"
    UNLOCKED = "unlocked"
    COMPLETED = "completed"

    @property
    def rank(self) -> int:
        return _STATUS_ORDER.index(self)

    def advance_to(self, target: "ProgressStatus") -> "ProgressStatus":
        """Return the later of the two statuses; status never moves backwards."""
        return target if target.rank > self.rank else self


_STATUS_ORDER: tuple[ProgressStatus, ...] = tuple(ProgressStatus)


@dataclass(frozen=True)
class ProgressKey:
    """Identifies a progress record: one per (user, unit group, item)."""

    user_id: UserId
    unit_group_id: UnitGroupId
    item_id: ItemId


@dataclass(frozen=True)
class ProgressDelta:
    """Change applied to a stored record by a single attempt."""

    attempts: int = 0
    correct_attempts: int = 0
    status: ProgressStatus = ProgressStatus.LOCKED
    last_attempt_at: datetime | None = None


@dataclass
class ProgressRecord(Entity[ProgressId]):
    """
    Progress of a user on a single item of a unit group.

    Business Rules:
    - correct_attempts <= attempts
    - Counters only grow
    - Status moves forward only: locked -> unlocked -> completed
    """

    id: ProgressId
    user_id: UserId
    unit_group_id: UnitGroupId
    item_id: ItemId
    attempts: int = 0
    correct_attempts: int = 0
    status: ProgressStatus = ProgressStatus.LOCKED
    last_attempt_at: datetime | None = None

    def __post_init__(self) -> None:
        """Validate invariants."""
        if self.attempts < 0 or self.correct_attempts < 0:
            raise DomainError("Attempt counters cannot be negative")
        if self.correct_attempts > self.attempts:
            raise DomainError("Correct attempts cannot exceed attempts")
        if self.last_attempt_at is not None:
            self.last_attempt_at = ensure_utc(self.last_attempt_at)

    @property
    def key(self) -> ProgressKey:
        return ProgressKey(self.user_id, self.unit_group_id, self.item_id)

    @property
    def accuracy(self) -> float:
        return self.correct_attempts / max(self.attempts, 1)

    @property
    def is_unlocked(self) -> bool:
        """True once the item has been answered correctly at least once."""
        return self.status != ProgressStatus.LOCKED

    def register_attempt(self, is_correct: bool, at: datetime | None = None) -> ProgressDelta:
        """
        Apply one attempt and return the delta to persist.

        A correct attempt unlocks a locked item. Completion is decided by the
        caller (see mark_completed) because it depends on the whole unit group.

        Args:
            is_correct: Whether the answer was correct
            at: Attempt time, defaults to now

        Returns:
            ProgressDelta describing the change
        """
        moment = ensure_utc(at) if at else datetime.now(UTC)
        self.attempts += 1
        if is_correct:
            self.correct_attempts += 1
            self.status = self.status.advance_to(ProgressStatus.UNLOCKED)
        self.last_attempt_at = moment
        return ProgressDelta(
            attempts=1,
            correct_attempts=1 if is_correct else 0,
            status=self.status,
            last_attempt_at=moment,
        )

    def mark_completed(self) -> ProgressDelta:
        """Advance to completed and return the status-only delta."""
        self.status = self.status.advance_to(ProgressStatus.COMPLETED)
        return ProgressDelta(status=self.status)

    def apply(self, delta: ProgressDelta) -> None:
        """Apply a stored delta (used by repositories when upserting)."""
        self.attempts += delta.attempts
        self.correct_attempts += delta.correct_attempts
        self.status = self.status.advance_to(delta.status)
        if delta.last_attempt_at is not None:
            self.last_attempt_at = ensure_utc(delta.last_attempt_at)
        if self.correct_attempts > self.attempts:
            raise DomainError("Correct attempts cannot exceed attempts")

    @classmethod
    def create(cls, key: ProgressKey) -> "ProgressRecord":
        """Create an empty locked record (ID will be 0 until persisted)."""
        return cls(
            id=ProgressId.generate(),
            user_id=key.user_id,
            unit_group_id=key.unit_group_id,
            item_id=key.item_id,
        )

    @classmethod
    def create_with_id(
        cls,
        id: ProgressId,
        key: ProgressKey,
        attempts: int,
        correct_attempts: int,
        status: ProgressStatus,
        last_attempt_at: datetime | None,
    ) -> "ProgressRecord":
        """Reconstitute a record from persistence."""
        return cls(
            id=id,
            user_id=key.user_id,
            unit_group_id=key.unit_group_id,
            item_id=key.item_id,
            attempts=attempts,
            correct_attempts=correct_attempts,
            status=status,
            last_attempt_at=last_attempt_at,
        )
