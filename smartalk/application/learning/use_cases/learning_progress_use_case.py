"""Use case for item navigation, pronunciation results and progress queries."""

import structlog

from smartalk.application.common.locks import KeyedLockRegistry
from smartalk.application.identity.protocols.user_directory import UserDirectoryProtocol
from smartalk.application.learning.protocols.item_catalog import ItemCatalogProtocol
from smartalk.application.learning.protocols.progress_repository import (
    ProgressRepositoryProtocol,
)
from smartalk.domain.common.exceptions import ValidationError
from smartalk.domain.common.value_objects import ItemId, UnitGroupId, UserId
from smartalk.domain.identity.exceptions import UserNotFoundError
from smartalk.domain.learning.entities.learning_session import LearningPhase, LearningSession
from smartalk.domain.learning.exceptions import ItemNotFoundError
from smartalk.domain.learning.services.focus_mode import FocusModeController, FocusState
from smartalk.domain.learning.services.progress_metrics import UnitProgressSummary, summarize
from smartalk.domain.learning.services.session_tracker import LearningSessionTracker

logger = structlog.get_logger(__name__)


class LearningProgressUseCase:
    """Use case for the learner's position inside a unit group."""

    def __init__(
        self,
        progress_repository: ProgressRepositoryProtocol,
        item_catalog: ItemCatalogProtocol,
        user_directory: UserDirectoryProtocol,
        focus_mode: FocusModeController,
        session_tracker: LearningSessionTracker,
        locks: KeyedLockRegistry,
    ) -> None:
        self.progress_repository = progress_repository
        self.item_catalog = item_catalog
        self.user_directory = user_directory
        self.focus_mode = focus_mode
        self.session_tracker = session_tracker
        self.locks = locks

    def begin_item(self, user_id: int, unit_group_id: int, item_id: int) -> LearningSession:
        """
        Move the user to an item.

        The previous item's Focus Mode state is discarded and a fresh
        learning session starts in the context-guessing phase.

        Raises:
            UserNotFoundError: If the user does not exist
            ItemNotFoundError: If the item is not part of the unit group
        """
        user_id_vo = self._require_user(user_id)
        group_id_vo = UnitGroupId(unit_group_id)
        item_id_vo = ItemId(item_id)
        if not self.item_catalog.contains_item(group_id_vo, item_id_vo):
            raise ItemNotFoundError(item_id, unit_group_id)
        with self.locks.hold(user_id_vo):
            transition = self.focus_mode.change_item(user_id_vo, item_id_vo)
            session = self.session_tracker.begin(user_id_vo, group_id_vo, item_id_vo)

        logger.info(
            "learning_item_started",
            user_id=user_id,
            unit_group_id=unit_group_id,
            item_id=item_id,
            focus_transition=transition.value if transition else None,
        )
        return session

    def complete_pronunciation(self, user_id: int, item_id: int, passed: bool) -> LearningSession:
        """
        Record the result of the pronunciation phase of the current item.

        Passing it completes the item, and the user's learning session and
        Focus Mode state are released.

        Raises:
            UserNotFoundError: If the user does not exist
            ValidationError: If the user is not currently studying item_id
        """
        user_id_vo = self._require_user(user_id)
        with self.locks.hold(user_id_vo):
            session = self.session_tracker.current(user_id_vo)
            if session is None or session.item_id != ItemId(item_id):
                raise ValidationError(
                    f"No active learning session for item {item_id}", field="item_id"
                )
            session.record_pronunciation(passed)
            if session.phase == LearningPhase.COMPLETED:
                self.session_tracker.end(user_id_vo)
                self.focus_mode.forget(user_id_vo)

        logger.info(
            "pronunciation_recorded",
            user_id=user_id,
            item_id=item_id,
            passed=passed,
            phase=session.phase.value,
        )
        return session

    def get_focus_state(self, user_id: int, item_id: int) -> FocusState:
        """Focus Mode state of an item; inactive unless it is the user's current item."""
        user_id_vo = self._require_user(user_id)
        return self.focus_mode.state(user_id_vo, ItemId(item_id))

    def get_unit_progress(self, user_id: int, unit_group_id: int) -> UnitProgressSummary:
        """
        Summarize a user's progress through a unit group.

        Raises:
            UserNotFoundError: If the user does not exist
        """
        user_id_vo = self._require_user(user_id)
        group_id_vo = UnitGroupId(unit_group_id)
        records = self.progress_repository.find_by_unit_group(user_id_vo, group_id_vo)
        return summarize(records, self.item_catalog.required_item_ids(group_id_vo))

    def _require_user(self, user_id: int) -> UserId:
        user_id_vo = UserId(user_id)
        if not self.user_directory.exists(user_id_vo):
            raise UserNotFoundError(user_id)
        return user_id_vo
