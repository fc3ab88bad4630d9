"""Mapper for UserProgress ORM ↔ ProgressRecord conversion."""

from smartalk.domain.common.value_objects import ItemId, ProgressId, UnitGroupId, UserId
from smartalk.domain.learning.entities.progress_record import (
    ProgressKey,
    ProgressRecord,
    ProgressStatus,
)
from smartalk.models import UserProgress as UserProgressORM


class ProgressMapper:
    """Mapper for UserProgress ORM ↔ ProgressRecord conversion."""

    def to_domain(self, orm_model: UserProgressORM) -> ProgressRecord:
        """Convert ORM model to domain entity."""
        return ProgressRecord.create_with_id(
            id=ProgressId(orm_model.id),
            key=ProgressKey(
                user_id=UserId(orm_model.user_id),
                unit_group_id=UnitGroupId(orm_model.unit_group_id),
                item_id=ItemId(orm_model.item_id),
            ),
            attempts=orm_model.attempts,
            correct_attempts=orm_model.correct_attempts,
            status=ProgressStatus(orm_model.status),
            last_attempt_at=orm_model.last_attempt_at,
        )

    def to_orm(
        self, domain_entity: ProgressRecord, orm_model: UserProgressORM | None = None
    ) -> UserProgressORM:
        """Convert domain entity to ORM model."""
        if orm_model:
            # Update existing
            orm_model.attempts = domain_entity.attempts
            orm_model.correct_attempts = domain_entity.correct_attempts
            orm_model.status = domain_entity.status.value
            orm_model.last_attempt_at = domain_entity.last_attempt_at
            return orm_model

        # Create new
        return UserProgressORM(
            id=domain_entity.id.value if domain_entity.id.value != 0 else None,
            user_id=domain_entity.user_id.value,
            unit_group_id=domain_entity.unit_group_id.value,
            item_id=domain_entity.item_id.value,
            attempts=domain_entity.attempts,
            correct_attempts=domain_entity.correct_attempts,
            status=domain_entity.status.value,
            last_attempt_at=domain_entity.last_attempt_at,
        )
