from collections.abc import Sequence
from typing import Protocol

from smartalk.domain.common.value_objects import ItemId, UnitGroupId, UserId
from smartalk.domain.learning.services.focus_mode import FocusTransition
from smartalk.domain.learning.services.milestone_detector import Milestone


class MilestoneNotifierProtocol(Protocol):
    """Delivers side effects of milestones and Focus Mode transitions."""

    def notify_milestones(
        self,
        user_id: UserId,
        unit_group_id: UnitGroupId,
        item_id: ItemId,
        milestones: Sequence[Milestone],
    ) -> None: ...

    def notify_focus_transition(
        self,
        user_id: UserId,
        item_id: ItemId,
        transition: FocusTransition,
        consecutive_incorrect: int,
    ) -> None: ...
