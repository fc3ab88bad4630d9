"""
Focus Mode: adaptive hint escalation for a struggling learner.

Focus Mode is a two-state Mealy machine (inactive, active) kept per user for
the item that user is currently answering:

- inactive -> active when the threshold-th consecutive incorrect answer is
  recorded for the same item
- active -> inactive on the next correct answer, or as soon as the item
  changes

While active, the only effect is that the correct option is flagged for
emphasis. Scoring is never touched.
"""

import threading
from dataclasses import dataclass
from enum import Enum

from smartalk.domain.common.value_objects import ItemId, UserId

DEFAULT_TRIGGER_THRESHOLD = 2


class FocusTransition(str, Enum):
    """Outputs of the machine."""

    ACTIVATED = "activated"
    # Deactivated by a correct answer
    RESOLVED = "resolved"
    # Deactivated because the user moved to another item
    ABANDONED = "abandoned"


@dataclass(frozen=True)
class FocusState:
    """Snapshot of Focus Mode for one item."""

    consecutive_incorrect: int = 0
    active: bool = False


INACTIVE = FocusState()


@dataclass
class _ActiveItem:
    item_id: ItemId
    consecutive_incorrect: int = 0
    active: bool = False


class FocusModeController:
    """
    Tracks Focus Mode for every user, addressed by (user_id, item_id).

    State is held in memory only and is independent of any UI lifecycle.
    Every recorded answer feeds the machine, whatever phase the learning
    session is in.
    """

    def __init__(self, trigger_threshold: int = DEFAULT_TRIGGER_THRESHOLD) -> None:
        if trigger_threshold < 1:
            raise ValueError("trigger_threshold must be at least 1")
        self.trigger_threshold = trigger_threshold
        self._items: dict[UserId, _ActiveItem] = {}
        self._lock = threading.Lock()

    def change_item(self, user_id: UserId, item_id: ItemId) -> FocusTransition | None:
        """
        Make item_id the user's active item, discarding the previous item's state.

        Returns:
            ABANDONED if Focus Mode was active on the previous item, else None
        """
        with self._lock:
            current = self._items.get(user_id)
            if current is not None and current.item_id == item_id:
                return None
            self._items[user_id] = _ActiveItem(item_id=item_id)
            if current is not None and current.active:
                return FocusTransition.ABANDONED
            return None

    def record_answer(
        self, user_id: UserId, item_id: ItemId, is_correct: bool
    ) -> FocusTransition | None:
        """
        Feed one answer into the machine.

        An answer for an item other than the active one first switches items.

        Returns:
            The transition that fired, if any
        """
        switched = self.change_item(user_id, item_id)
        with self._lock:
            current = self._items[user_id]
            if is_correct:
                was_active = current.active
                current.consecutive_incorrect = 0
                current.active = False
                return FocusTransition.RESOLVED if was_active else switched

            current.consecutive_incorrect += 1
            if not current.active and current.consecutive_incorrect >= self.trigger_threshold:
                current.active = True
                return FocusTransition.ACTIVATED
            return switched

    def state(self, user_id: UserId, item_id: ItemId) -> FocusState:
        """Focus Mode state of an item; any item other than the active one is inactive."""
        with self._lock:
            current = self._items.get(user_id)
            if current is None or current.item_id != item_id:
                return INACTIVE
            return FocusState(
                consecutive_incorrect=current.consecutive_incorrect,
                active=current.active,
            )

    def should_highlight_correct_option(self, user_id: UserId, item_id: ItemId) -> bool:
        return self.state(user_id, item_id).active

    def forget(self, user_id: UserId) -> None:
        """Drop all state for a user once they are done with the unit group."""
        with self._lock:
            self._items.pop(user_id, None)
