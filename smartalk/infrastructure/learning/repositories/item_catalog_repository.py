"""Read-only access to the learning item catalog."""

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from smartalk.domain.common.value_objects import ItemId, UnitGroupId
from smartalk.exceptions import PersistenceError
from smartalk.models import LearningItem as LearningItemORM


class ItemCatalogRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def required_item_ids(self, unit_group_id: UnitGroupId) -> frozenset[ItemId]:
        """Items a user must unlock to complete the unit group."""
        stmt = select(LearningItemORM.id).where(
            LearningItemORM.unit_group_id == unit_group_id.value,
            LearningItemORM.required.is_(True),
        )
        try:
            found = self.db.execute(stmt).scalars().all()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError("required_item_ids", str(e)) from e
        return frozenset(ItemId(value) for value in found)

    def contains_item(self, unit_group_id: UnitGroupId, item_id: ItemId) -> bool:
        stmt = select(LearningItemORM.id).where(
            LearningItemORM.id == item_id.value,
            LearningItemORM.unit_group_id == unit_group_id.value,
        )
        try:
            return self.db.execute(stmt).scalar_one_or_none() is not None
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError("contains_item", str(e)) from e
