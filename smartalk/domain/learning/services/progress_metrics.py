"""
Pure metrics over progress records of one unit group.
"""

from collections.abc import Collection, Sequence
from dataclasses import dataclass
from datetime import datetime

from smartalk.domain.common.value_objects import ItemId
from smartalk.domain.learning.entities.progress_record import ProgressRecord, ProgressStatus

DEFAULT_STREAK_ACCURACY = 0.8

_EPOCH = datetime.min


def accuracy(record: ProgressRecord) -> float:
    """Share of correct attempts; 0.0 for a record without attempts."""
    return record.correct_attempts / max(record.attempts, 1)


def streak(records: Sequence[ProgressRecord], threshold: float = DEFAULT_STREAK_ACCURACY) -> int:
    """
    Count trailing records whose accuracy meets the threshold.

    Records are walked from the most recent attempt backwards and counting
    stops at the first record below the threshold.
    """
    ordered = sorted(
        records,
        key=lambda r: r.last_attempt_at.replace(tzinfo=None) if r.last_attempt_at else _EPOCH,
        reverse=True,
    )
    count = 0
    for record in ordered:
        if accuracy(record) < threshold:
            break
        count += 1
    return count


def completed_count(
    records: Sequence[ProgressRecord], required_ids: Collection[ItemId] | None = None
) -> int:
    """
    Items answered correctly at least once (unlocked or completed).

    With required_ids, records of any other item (optional bonus items, or
    items no longer in the catalog) are not counted.
    """
    return sum(
        1
        for r in records
        if r.is_unlocked and (required_ids is None or r.item_id in required_ids)
    )


@dataclass(frozen=True)
class UnitProgressSummary:
    """Aggregate view of a user's progress through a unit group."""

    records: list[ProgressRecord]
    total_items: int
    unlocked_items: int
    completed_items: int
    total_attempts: int
    correct_attempts: int
    accuracy_percent: float


def summarize(
    records: Sequence[ProgressRecord], required_ids: Collection[ItemId]
) -> UnitProgressSummary:
    """Item counts cover required items only; attempt totals cover every record."""
    total_attempts = sum(r.attempts for r in records)
    correct = sum(r.correct_attempts for r in records)
    return UnitProgressSummary(
        records=list(records),
        total_items=len(required_ids),
        unlocked_items=completed_count(records, required_ids),
        completed_items=sum(
            1
            for r in records
            if r.status == ProgressStatus.COMPLETED and r.item_id in required_ids
        ),
        total_attempts=total_attempts,
        correct_attempts=correct,
        accuracy_percent=round(correct / total_attempts * 100, 1) if total_attempts else 0.0,
    )
