"""Repository for ProgressRecord domain entities."""

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from smartalk.domain.common.value_objects import UnitGroupId, UserId
from smartalk.domain.learning.entities.progress_record import (
    ProgressDelta,
    ProgressKey,
    ProgressRecord,
)
from smartalk.exceptions import PersistenceError
from smartalk.infrastructure.learning.mappers.progress_mapper import ProgressMapper
from smartalk.models import UserProgress as UserProgressORM

logger = structlog.get_logger(__name__)


class ProgressRepository:
    """Repository for per-(user, unit group, item) progress records."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.mapper = ProgressMapper()

    def get_progress(self, key: ProgressKey) -> ProgressRecord | None:
        """
        Find the record of one user on one item.

        Args:
            key: (user, unit group, item) key

        Returns:
            ProgressRecord if it exists, None otherwise
        """
        try:
            orm_model = self._find_orm(key)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError("get_progress", str(e)) from e
        return self.mapper.to_domain(orm_model) if orm_model else None

    def upsert_progress(self, key: ProgressKey, delta: ProgressDelta) -> ProgressRecord:
        """
        Create the record if missing, then apply the delta.

        Args:
            key: (user, unit group, item) key
            delta: Counter increments and target status

        Returns:
            The stored record after the change
        """
        try:
            orm_model = self._find_orm(key)
            record = self.mapper.to_domain(orm_model) if orm_model else ProgressRecord.create(key)
            record.apply(delta)
            orm_model = self.mapper.to_orm(record, orm_model)
            self.db.add(orm_model)
            self.db.commit()
            self.db.refresh(orm_model)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(
                "progress_upsert_failed",
                user_id=key.user_id.value,
                item_id=key.item_id.value,
                error=str(e),
            )
            raise PersistenceError("upsert_progress", str(e)) from e
        return self.mapper.to_domain(orm_model)

    def find_by_unit_group(self, user_id: UserId, unit_group_id: UnitGroupId) -> list[ProgressRecord]:
        """
        Get all records of a user in a unit group.

        Args:
            user_id: The user ID
            unit_group_id: The unit group ID

        Returns:
            Records ordered by item ID
        """
        stmt = (
            select(UserProgressORM)
            .where(
                UserProgressORM.user_id == user_id.value,
                UserProgressORM.unit_group_id == unit_group_id.value,
            )
            .order_by(UserProgressORM.item_id)
        )
        try:
            orm_models = self.db.execute(stmt).scalars().all()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError("find_by_unit_group", str(e)) from e
        return [self.mapper.to_domain(orm) for orm in orm_models]

    def _find_orm(self, key: ProgressKey) -> UserProgressORM | None:
        stmt = select(UserProgressORM).where(
            UserProgressORM.user_id == key.user_id.value,
            UserProgressORM.unit_group_id == key.unit_group_id.value,
            UserProgressORM.item_id == key.item_id.value,
        )
        return self.db.execute(stmt).scalar_one_or_none()
