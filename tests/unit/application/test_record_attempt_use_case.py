"""Tests for RecordAttemptUseCase."""

from datetime import UTC, datetime, timedelta

import pytest

from smartalk.application.learning.use_cases.record_attempt_use_case import (
    RecordAttemptUseCase,
)
from smartalk.domain.common.value_objects import ItemId, UnitGroupId, UserId
from smartalk.domain.identity.exceptions import UserNotFoundError
from smartalk.domain.learning.entities.learning_session import LearningPhase
from smartalk.domain.learning.entities.progress_record import ProgressStatus
from smartalk.domain.learning.exceptions import ItemNotFoundError
from smartalk.domain.learning.services.focus_mode import INACTIVE, FocusTransition
from smartalk.domain.learning.services.milestone_detector import MilestoneType

USER_ID = 1
GROUP_ID = 7
BONUS_ITEM = 20
START = datetime(2024, 3, 15, 12, 0, tzinfo=UTC)


@pytest.fixture
def use_case(
    progress_repository,
    item_catalog,
    user_directory,
    focus_mode,
    session_tracker,
    milestone_detector,
    notifier,
    dispatcher,
    locks,
) -> RecordAttemptUseCase:
    user_directory.add(USER_ID)
    item_catalog.add_group(GROUP_ID, required=range(1, 16), optional=[BONUS_ITEM])
    return RecordAttemptUseCase(
        progress_repository=progress_repository,
        item_catalog=item_catalog,
        user_directory=user_directory,
        focus_mode=focus_mode,
        session_tracker=session_tracker,
        milestone_detector=milestone_detector,
        notifier=notifier,
        dispatcher=dispatcher,
        locks=locks,
    )


def _answer(use_case: RecordAttemptUseCase, item_id: int, is_correct: bool, seconds: int = 0):
    return use_case.record_attempt(
        USER_ID, GROUP_ID, item_id, is_correct, at=START + timedelta(seconds=seconds)
    )


class TestRecordAttempt:
    """Test suite for recording answers."""

    def test_incorrect_attempt(self, use_case: RecordAttemptUseCase, notifier) -> None:
        outcome = _answer(use_case, 1, is_correct=False)

        assert outcome.record.attempts == 1
        assert outcome.record.correct_attempts == 0
        assert outcome.record.status == ProgressStatus.LOCKED
        assert outcome.milestones == []
        assert outcome.focus_state.consecutive_incorrect == 1
        assert outcome.phase == LearningPhase.CONTEXT_GUESSING
        assert notifier.milestone_calls == []

    def test_correct_attempt_unlocks(
        self, use_case: RecordAttemptUseCase, notifier, dispatcher
    ) -> None:
        outcome = _answer(use_case, 1, is_correct=True)

        assert outcome.record.status == ProgressStatus.UNLOCKED
        assert outcome.record.last_attempt_at == START
        assert [m.type for m in outcome.milestones] == [MilestoneType.KEYWORD_COMPLETED]
        assert outcome.phase == LearningPhase.PRONUNCIATION_TRAINING
        assert outcome.magic_moment is False
        assert dispatcher.dispatched == ["milestone_notification"]
        user_id, group_id, item_id, milestones = notifier.milestone_calls[0]
        assert (user_id, group_id, item_id) == (UserId(USER_ID), UnitGroupId(GROUP_ID), ItemId(1))
        assert milestones == outcome.milestones

    def test_counters_accumulate(self, use_case: RecordAttemptUseCase, progress_repository) -> None:
        _answer(use_case, 1, is_correct=False)
        _answer(use_case, 1, is_correct=False, seconds=5)
        outcome = _answer(use_case, 1, is_correct=True, seconds=10)

        assert outcome.record.attempts == 3
        assert outcome.record.correct_attempts == 1
        assert len(progress_repository.records) == 1

    def test_unknown_user(self, use_case: RecordAttemptUseCase, progress_repository) -> None:
        with pytest.raises(UserNotFoundError):
            use_case.record_attempt(99, GROUP_ID, 1, True)
        assert progress_repository.records == {}

    def test_speed_bonus_inside_session(self, use_case: RecordAttemptUseCase) -> None:
        _answer(use_case, 1, is_correct=False)

        outcome = _answer(use_case, 1, is_correct=True, seconds=10)

        assert [m.type for m in outcome.milestones] == [
            MilestoneType.KEYWORD_COMPLETED,
            MilestoneType.SPEED_BONUS,
        ]
        assert outcome.milestones[1].payload == {"elapsed_seconds": 10.0}

    def test_slow_answer_has_no_speed_bonus(self, use_case: RecordAttemptUseCase) -> None:
        _answer(use_case, 1, is_correct=False)

        outcome = _answer(use_case, 1, is_correct=True, seconds=45)

        assert [m.type for m in outcome.milestones] == [MilestoneType.KEYWORD_COMPLETED]

    def test_notifier_failure_does_not_reach_caller(
        self, use_case: RecordAttemptUseCase, notifier
    ) -> None:
        notifier.fail = True

        outcome = _answer(use_case, 1, is_correct=True)

        assert outcome.record.status == ProgressStatus.UNLOCKED
        assert len(outcome.milestones) == 1


class TestUnitGroupCompletion:
    def test_fifteen_of_fifteen(
        self, use_case: RecordAttemptUseCase, progress_repository, notifier
    ) -> None:
        outcomes = [
            _answer(use_case, item_id, is_correct=True, seconds=item_id * 60)
            for item_id in range(1, 16)
        ]

        last = outcomes[-1]
        types = [m.type for m in last.milestones]
        assert MilestoneType.KEYWORD_COMPLETED in types
        assert types[-1] == MilestoneType.ALL_COMPLETE
        assert last.magic_moment is True
        assert last.record.status == ProgressStatus.COMPLETED
        assert all(
            r.status == ProgressStatus.COMPLETED for r in progress_repository.records.values()
        )
        # Earlier answers never reached the gate
        assert not any(o.magic_moment for o in outcomes[:-1])
        assert MilestoneType.HALF_COMPLETE in [m.type for m in outcomes[6].milestones]
        assert MilestoneType.PERFECT_STREAK in [m.type for m in outcomes[4].milestones]
        assert MilestoneType.PERFECT_STREAK not in [m.type for m in outcomes[3].milestones]

    def test_all_complete_fires_once(self, use_case: RecordAttemptUseCase) -> None:
        for item_id in range(1, 16):
            _answer(use_case, item_id, is_correct=True, seconds=item_id * 60)

        again = _answer(use_case, 15, is_correct=True, seconds=2000)

        assert again.milestones == []
        assert again.magic_moment is False

    def test_item_outside_group_is_rejected(
        self, use_case: RecordAttemptUseCase, progress_repository
    ) -> None:
        with pytest.raises(ItemNotFoundError):
            use_case.record_attempt(USER_ID, 999, 1, True, at=START)
        with pytest.raises(ItemNotFoundError):
            use_case.record_attempt(USER_ID, GROUP_ID, 99, True, at=START)
        assert progress_repository.records == {}

    def test_optional_item_does_not_count_toward_completion(
        self, use_case: RecordAttemptUseCase, item_catalog, progress_repository
    ) -> None:
        item_catalog.add_group(3, required=[1, 2, 3], optional=[BONUS_ITEM])

        outcomes = [
            use_case.record_attempt(USER_ID, 3, item_id, True, at=START)
            for item_id in (1, 2, BONUS_ITEM)
        ]

        assert [m.type for m in outcomes[-1].milestones] == []
        assert outcomes[-1].magic_moment is False
        assert all(
            r.status == ProgressStatus.UNLOCKED for r in progress_repository.records.values()
        )

        last = use_case.record_attempt(USER_ID, 3, 3, True, at=START)

        assert last.magic_moment is True
        assert last.milestones[0].payload == {"completed_count": 3, "total_count": 3}
        assert all(
            r.status == ProgressStatus.COMPLETED for r in progress_repository.records.values()
        )

    def test_completion_releases_learning_state(
        self, use_case: RecordAttemptUseCase, session_tracker, focus_mode
    ) -> None:
        for item_id in range(1, 16):
            _answer(use_case, item_id, is_correct=True, seconds=item_id * 60)

        assert session_tracker.current(UserId(USER_ID)) is None
        assert focus_mode.state(UserId(USER_ID), ItemId(15)) == INACTIVE


class TestFocusModeThroughAttempts:
    def test_two_misses_activate(
        self, use_case: RecordAttemptUseCase, notifier, dispatcher
    ) -> None:
        _answer(use_case, 1, is_correct=False)

        outcome = _answer(use_case, 1, is_correct=False, seconds=5)

        assert outcome.focus_transition == FocusTransition.ACTIVATED
        assert outcome.focus_state.active is True
        assert notifier.focus_calls == [
            (UserId(USER_ID), ItemId(1), FocusTransition.ACTIVATED, 2)
        ]
        assert dispatcher.dispatched == ["focus_mode_notification"]

    def test_correct_answer_resolves(self, use_case: RecordAttemptUseCase, notifier) -> None:
        _answer(use_case, 1, is_correct=False)
        _answer(use_case, 1, is_correct=False, seconds=5)

        outcome = _answer(use_case, 1, is_correct=True, seconds=60)

        assert outcome.focus_transition == FocusTransition.RESOLVED
        assert outcome.focus_state.active is False
        assert notifier.focus_calls[-1] == (
            UserId(USER_ID), ItemId(1), FocusTransition.RESOLVED, 2
        )

    def test_item_change_abandons(self, use_case: RecordAttemptUseCase) -> None:
        _answer(use_case, 1, is_correct=False)
        _answer(use_case, 1, is_correct=False, seconds=5)

        outcome = _answer(use_case, 2, is_correct=False, seconds=10)

        assert outcome.focus_transition == FocusTransition.ABANDONED
        assert outcome.focus_state.active is False
        assert outcome.focus_state.consecutive_incorrect == 1

    def test_misses_after_a_correct_answer_activate(
        self, use_case: RecordAttemptUseCase
    ) -> None:
        _answer(use_case, 1, is_correct=True)
        _answer(use_case, 1, is_correct=False, seconds=5)

        outcome = _answer(use_case, 1, is_correct=False, seconds=10)

        assert outcome.phase == LearningPhase.PRONUNCIATION_TRAINING
        assert outcome.focus_transition == FocusTransition.ACTIVATED
        assert outcome.focus_state.active is True
        assert outcome.focus_state.consecutive_incorrect == 2
