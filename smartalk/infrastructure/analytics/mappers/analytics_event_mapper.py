"""Mapper for AnalyticsEvent ORM ↔ Domain conversion."""

from smartalk.domain.analytics.entities.analytics_event import AnalyticsEvent
from smartalk.domain.analytics.event_types import EventType
from smartalk.domain.common.value_objects import EventId, UserId
from smartalk.models import AnalyticsEvent as AnalyticsEventORM


class AnalyticsEventMapper:
    """Mapper for AnalyticsEvent ORM ↔ Domain conversion."""

    def to_domain(self, orm_model: AnalyticsEventORM) -> AnalyticsEvent:
        """Convert ORM model to domain entity."""
        return AnalyticsEvent.create_with_id(
            id=EventId(orm_model.id),
            user_id=UserId(orm_model.user_id),
            event_type=EventType(orm_model.event_type),
            payload=dict(orm_model.event_data or {}),
            timestamp=orm_model.timestamp,
        )

    def to_orm(self, domain_entity: AnalyticsEvent) -> AnalyticsEventORM:
        """Convert domain entity to a new ORM model (events are never updated)."""
        return AnalyticsEventORM(
            id=domain_entity.id.value if domain_entity.id.value != 0 else None,
            user_id=domain_entity.user_id.value,
            event_type=domain_entity.event_type.value,
            event_data=domain_entity.payload,
            timestamp=domain_entity.timestamp,
        )
