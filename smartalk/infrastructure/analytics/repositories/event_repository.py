"""Repository for AnalyticsEvent domain entities."""

from collections.abc import Sequence
from typing import Any

import structlog
from sqlalchemy import Select, func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from smartalk.application.analytics.protocols.event_store import EventFilter
from smartalk.domain.analytics.entities.analytics_event import AnalyticsEvent
from smartalk.domain.common.value_objects import EventId
from smartalk.exceptions import PersistenceError
from smartalk.infrastructure.analytics.mappers.analytics_event_mapper import AnalyticsEventMapper
from smartalk.models import AnalyticsEvent as AnalyticsEventORM

logger = structlog.get_logger(__name__)


class EventRepository:
    """Append-only store of analytics events."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.mapper = AnalyticsEventMapper()

    def append_event(self, event: AnalyticsEvent) -> EventId:
        """
        Persist a single event.

        Args:
            event: The event to store

        Returns:
            ID assigned by the database
        """
        return self.append_events([event])[0]

    def append_events(self, events: Sequence[AnalyticsEvent]) -> list[EventId]:
        """
        Persist several events in one transaction.

        Args:
            events: Events to store

        Returns:
            IDs in the same order as the input
        """
        orm_models = [self.mapper.to_orm(event) for event in events]
        try:
            self.db.add_all(orm_models)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("event_append_failed", count=len(orm_models), error=str(e))
            raise PersistenceError("append_events", str(e)) from e
        return [EventId(orm.id) for orm in orm_models]

    def query_events(self, event_filter: EventFilter) -> list[AnalyticsEvent]:
        """
        Return events matching the filter.

        Args:
            event_filter: Query criteria

        Returns:
            Matching events ordered by timestamp
        """
        stmt = self._apply_filter(select(AnalyticsEventORM), event_filter)
        if event_filter.newest_first:
            stmt = stmt.order_by(AnalyticsEventORM.timestamp.desc(), AnalyticsEventORM.id.desc())
        else:
            stmt = stmt.order_by(AnalyticsEventORM.timestamp.asc(), AnalyticsEventORM.id.asc())
        if event_filter.offset:
            stmt = stmt.offset(event_filter.offset)
        if event_filter.limit is not None:
            stmt = stmt.limit(event_filter.limit)

        try:
            orm_models = self.db.execute(stmt).scalars().all()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError("query_events", str(e)) from e
        return [self.mapper.to_domain(orm) for orm in orm_models]

    def count_events(self, event_filter: EventFilter) -> int:
        """
        Count events matching the filter, ignoring limit and offset.

        Args:
            event_filter: Query criteria

        Returns:
            Number of matching events
        """
        stmt = self._apply_filter(select(func.count(AnalyticsEventORM.id)), event_filter)
        try:
            return self.db.execute(stmt).scalar() or 0
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError("count_events", str(e)) from e

    def ping(self) -> None:
        """Round-trip to the database."""
        try:
            self.db.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError("ping", str(e)) from e

    @staticmethod
    def _apply_filter(stmt: Select[Any], event_filter: EventFilter) -> Select[Any]:
        if event_filter.user_id is not None:
            stmt = stmt.where(AnalyticsEventORM.user_id == event_filter.user_id.value)
        if event_filter.event_types:
            stmt = stmt.where(
                AnalyticsEventORM.event_type.in_(sorted(t.value for t in event_filter.event_types))
            )
        window = event_filter.window
        if window.start is not None:
            stmt = stmt.where(AnalyticsEventORM.timestamp >= window.start)
        if window.end is not None:
            stmt = stmt.where(AnalyticsEventORM.timestamp <= window.end)
        return stmt
