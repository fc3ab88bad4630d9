"""Use case for recording an answer to a learning item."""

from collections.abc import Sequence
from datetime import UTC, datetime, timedelta

import structlog

from smartalk.application.common.background import BackgroundDispatcherProtocol
from smartalk.application.common.locks import KeyedLockRegistry
from smartalk.application.identity.protocols.user_directory import UserDirectoryProtocol
from smartalk.application.learning.protocols.item_catalog import ItemCatalogProtocol
from smartalk.application.learning.protocols.milestone_notifier import MilestoneNotifierProtocol
from smartalk.application.learning.protocols.progress_repository import (
    ProgressRepositoryProtocol,
)
from smartalk.application.learning.use_cases.dtos import AttemptOutcome
from smartalk.domain.common.value_objects import ItemId, UnitGroupId, UserId, ensure_utc
from smartalk.domain.identity.exceptions import UserNotFoundError
from smartalk.domain.learning.exceptions import ItemNotFoundError
from smartalk.domain.learning.entities.learning_session import LearningSession
from smartalk.domain.learning.entities.progress_record import (
    ProgressKey,
    ProgressRecord,
    ProgressStatus,
)
from smartalk.domain.learning.services import progress_metrics
from smartalk.domain.learning.services.focus_mode import FocusModeController, FocusTransition
from smartalk.domain.learning.services.milestone_detector import (
    Milestone,
    MilestoneDetector,
    MilestoneType,
    ProgressSnapshot,
)
from smartalk.domain.learning.services.session_tracker import LearningSessionTracker

logger = structlog.get_logger(__name__)


class RecordAttemptUseCase:
    """
    Records one answer and derives everything that follows from it.

    The read-modify-write over the unit group runs under a per-user lock.
    Notifications are handed to the background dispatcher after the lock is
    released, so their failures never reach the caller.
    """

    def __init__(
        self,
        progress_repository: ProgressRepositoryProtocol,
        item_catalog: ItemCatalogProtocol,
        user_directory: UserDirectoryProtocol,
        focus_mode: FocusModeController,
        session_tracker: LearningSessionTracker,
        milestone_detector: MilestoneDetector,
        notifier: MilestoneNotifierProtocol,
        dispatcher: BackgroundDispatcherProtocol,
        locks: KeyedLockRegistry,
        streak_threshold: float = progress_metrics.DEFAULT_STREAK_ACCURACY,
    ) -> None:
        self.progress_repository = progress_repository
        self.item_catalog = item_catalog
        self.user_directory = user_directory
        self.focus_mode = focus_mode
        self.session_tracker = session_tracker
        self.milestone_detector = milestone_detector
        self.notifier = notifier
        self.dispatcher = dispatcher
        self.locks = locks
        self.streak_threshold = streak_threshold

    def record_attempt(
        self,
        user_id: int,
        unit_group_id: int,
        item_id: int,
        is_correct: bool,
        at: datetime | None = None,
    ) -> AttemptOutcome:
        """
        Record an answer of a user to an item of a unit group.

        Args:
            user_id: ID of the user
            unit_group_id: ID of the unit group
            item_id: ID of the item answered
            is_correct: Whether the answer was correct
            at: Attempt time, defaults to now

        Returns:
            AttemptOutcome with the stored record, Focus Mode state and milestones

        Raises:
            UserNotFoundError: If the user does not exist
            ItemNotFoundError: If the item is not part of the unit group
            PersistenceError: If the progress store fails
        """
        user_id_vo = UserId(user_id)
        group_id_vo = UnitGroupId(unit_group_id)
        item_id_vo = ItemId(item_id)
        if not self.user_directory.exists(user_id_vo):
            raise UserNotFoundError(user_id)
        if not self.item_catalog.contains_item(group_id_vo, item_id_vo):
            raise ItemNotFoundError(item_id, unit_group_id)

        key = ProgressKey(user_id_vo, group_id_vo, item_id_vo)
        moment = ensure_utc(at) if at else datetime.now(UTC)

        with self.locks.hold(user_id_vo):
            session, started = self.session_tracker.ensure(
                user_id_vo, group_id_vo, item_id_vo, started_at=moment
            )
            required = self.item_catalog.required_item_ids(group_id_vo)
            records = self.progress_repository.find_by_unit_group(user_id_vo, group_id_vo)
            previous = self._snapshot(records, required)

            record = self.progress_repository.get_progress(key) or ProgressRecord.create(key)
            record = self.progress_repository.upsert_progress(
                key, record.register_attempt(is_correct, moment)
            )

            records = self.progress_repository.find_by_unit_group(user_id_vo, group_id_vo)
            if is_correct and self._complete_group(records, required):
                records = self.progress_repository.find_by_unit_group(user_id_vo, group_id_vo)
                record = next((r for r in records if r.key == key), record)

            prior_focus = self.focus_mode.state(user_id_vo, item_id_vo)
            transition = self.focus_mode.record_answer(user_id_vo, item_id_vo, is_correct)
            focus_state = self.focus_mode.state(user_id_vo, item_id_vo)
            session.record_answer(is_correct)

            current = self._snapshot(records, required, self._elapsed(session, started, moment))
            milestones = self.milestone_detector.check_milestones(previous, current)
            if any(m.type == MilestoneType.ALL_COMPLETE for m in milestones):
                self._release(user_id_vo)

        logger.info(
            "attempt_recorded",
            user_id=user_id,
            unit_group_id=unit_group_id,
            item_id=item_id,
            is_correct=is_correct,
            status=record.status.value,
            milestones=[m.type.value for m in milestones],
            focus_transition=transition.value if transition else None,
        )

        self._notify(user_id_vo, group_id_vo, item_id_vo, milestones)
        if transition is not None:
            # A correct answer has already reset the counter it resolved
            consecutive = (
                prior_focus.consecutive_incorrect
                if transition == FocusTransition.RESOLVED
                else focus_state.consecutive_incorrect
            )
            self._notify_focus(user_id_vo, item_id_vo, transition, consecutive)

        return AttemptOutcome(
            record=record,
            focus_state=focus_state,
            phase=session.phase,
            focus_transition=transition,
            milestones=milestones,
        )

    def _complete_group(
        self, records: Sequence[ProgressRecord], required: frozenset[ItemId]
    ) -> bool:
        """Advance every unlocked record to completed once all required items are unlocked."""
        if not required or progress_metrics.completed_count(records, required) < len(required):
            return False
        pending = [r for r in records if r.status == ProgressStatus.UNLOCKED]
        for pending_record in pending:
            self.progress_repository.upsert_progress(
                pending_record.key, pending_record.mark_completed()
            )
        return bool(pending)

    def _snapshot(
        self,
        records: Sequence[ProgressRecord],
        required: frozenset[ItemId],
        session_elapsed: timedelta | None = None,
    ) -> ProgressSnapshot:
        return ProgressSnapshot(
            completed_count=progress_metrics.completed_count(records, required),
            total_count=len(required),
            current_streak=progress_metrics.streak(records, self.streak_threshold),
            session_elapsed=session_elapsed,
        )

    def _release(self, user_id: UserId) -> None:
        """Drop the in-memory learning state of a user who finished the unit group."""
        self.session_tracker.end(user_id)
        self.focus_mode.forget(user_id)

    @staticmethod
    def _elapsed(
        session: LearningSession, started: bool, moment: datetime
    ) -> timedelta | None:
        # A session opened by this very attempt has no known start time
        if started:
            return None
        return session.elapsed(moment)

    def _notify(
        self,
        user_id: UserId,
        unit_group_id: UnitGroupId,
        item_id: ItemId,
        milestones: list[Milestone],
    ) -> None:
        if not milestones:
            return
        self.dispatcher.dispatch(
            "milestone_notification",
            lambda: self.notifier.notify_milestones(user_id, unit_group_id, item_id, milestones),
        )

    def _notify_focus(
        self,
        user_id: UserId,
        item_id: ItemId,
        transition: FocusTransition,
        consecutive: int,
    ) -> None:
        self.dispatcher.dispatch(
            "focus_mode_notification",
            lambda: self.notifier.notify_focus_transition(
                user_id, item_id, transition, consecutive
            ),
        )
