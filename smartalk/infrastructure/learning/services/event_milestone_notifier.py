"""Milestone notifier that records milestones as analytics events."""

from collections.abc import Callable, Sequence

import structlog
from sqlalchemy.orm import Session

from smartalk.domain.analytics.entities.analytics_event import AnalyticsEvent
from smartalk.domain.analytics.event_types import EventType
from smartalk.domain.analytics.payloads import (
    FocusModePayload,
    KeywordProgressPayload,
    MilestonePayload,
)
from smartalk.domain.common.value_objects import ItemId, UnitGroupId, UserId
from smartalk.domain.learning.services.focus_mode import FocusTransition
from smartalk.domain.learning.services.milestone_detector import Milestone, MilestoneType
from smartalk.infrastructure.analytics.repositories.event_repository import EventRepository

logger = structlog.get_logger(__name__)

_FOCUS_EVENTS = {
    FocusTransition.ACTIVATED: EventType.FOCUS_MODE_TRIGGERED,
    FocusTransition.RESOLVED: EventType.FOCUS_MODE_SUCCESS,
}


class EventMilestoneNotifier:
    """
    Appends engine-emitted events for milestones and Focus Mode transitions.

    Runs outside the request, so it opens its own database session per call.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self.session_factory = session_factory

    def notify_milestones(
        self,
        user_id: UserId,
        unit_group_id: UnitGroupId,
        item_id: ItemId,
        milestones: Sequence[Milestone],
    ) -> None:
        events: list[AnalyticsEvent] = []
        for milestone in milestones:
            payload = MilestonePayload(
                milestone_type=milestone.type.value,
                unit_group_id=unit_group_id.value,
                item_id=item_id.value,
                extra=dict(milestone.payload),
            )
            events.append(
                AnalyticsEvent.create(user_id, EventType.MILESTONE_REACHED, payload.to_dict())
            )

            if milestone.type == MilestoneType.KEYWORD_COMPLETED:
                unlock = KeywordProgressPayload(
                    keyword_id=str(item_id.value),
                    drama_id=str(unit_group_id.value),
                    total_completed=milestone.payload.get("completed_count"),
                    total_keywords=milestone.payload.get("total_count"),
                )
                events.append(
                    AnalyticsEvent.create(user_id, EventType.KEYWORD_UNLOCK, unlock.to_dict())
                )

            if milestone.triggers_magic_moment:
                events.append(
                    AnalyticsEvent.create(
                        user_id,
                        EventType.MAGIC_MOMENT_TRIGGER,
                        {"dramaId": str(unit_group_id.value)},
                    )
                )

        self._append(events)
        logger.info(
            "milestones_recorded",
            user_id=user_id.value,
            unit_group_id=unit_group_id.value,
            milestones=[m.type.value for m in milestones],
        )

    def notify_focus_transition(
        self,
        user_id: UserId,
        item_id: ItemId,
        transition: FocusTransition,
        consecutive_incorrect: int,
    ) -> None:
        event_type = _FOCUS_EVENTS.get(transition)
        if event_type is None:
            logger.debug(
                "focus_mode_transition_not_recorded",
                user_id=user_id.value,
                transition=transition.value,
            )
            return

        payload = FocusModePayload(
            item_id=item_id.value, consecutive_incorrect=consecutive_incorrect
        )
        self._append([AnalyticsEvent.create(user_id, event_type, payload.to_dict())])
        logger.info(
            "focus_mode_transition_recorded",
            user_id=user_id.value,
            item_id=item_id.value,
            transition=transition.value,
        )

    def _append(self, events: list[AnalyticsEvent]) -> None:
        if not events:
            return
        db = self.session_factory()
        try:
            EventRepository(db).append_events(events)
        finally:
            db.close()
