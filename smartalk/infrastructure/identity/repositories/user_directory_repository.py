"""Read-only lookups over the users table."""

from collections.abc import Iterable

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from smartalk.domain.common.value_objects import TimeWindow, UserId
from smartalk.exceptions import PersistenceError
from smartalk.models import User as UserORM


class UserDirectoryRepository:
    """Answers existence and count questions about users."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def exists(self, user_id: UserId) -> bool:
        """
        Check whether a user exists.

        Args:
            user_id: The user ID

        Returns:
            True if the user is known
        """
        stmt = select(UserORM.id).where(UserORM.id == user_id.value)
        try:
            return self.db.execute(stmt).scalar_one_or_none() is not None
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError("user_exists", str(e)) from e

    def find_existing_ids(self, user_ids: Iterable[UserId]) -> set[UserId]:
        """
        Filter a collection of user IDs down to the ones that exist.

        Args:
            user_ids: Candidate user IDs

        Returns:
            The subset of IDs that belong to known users
        """
        candidates = {user_id.value for user_id in user_ids}
        if not candidates:
            return set()
        stmt = select(UserORM.id).where(UserORM.id.in_(sorted(candidates)))
        try:
            found = self.db.execute(stmt).scalars().all()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError("find_existing_users", str(e)) from e
        return {UserId(value) for value in found}

    def count_users(self) -> int:
        try:
            return self.db.execute(select(func.count(UserORM.id))).scalar() or 0
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError("count_users", str(e)) from e

    def find_created_ids(self, window: TimeWindow) -> set[UserId]:
        """
        Find users whose account was created inside the window.

        Args:
            window: Creation time window

        Returns:
            IDs of the new users
        """
        stmt = select(UserORM.id)
        if window.start is not None:
            stmt = stmt.where(UserORM.created_at >= window.start)
        if window.end is not None:
            stmt = stmt.where(UserORM.created_at <= window.end)
        try:
            found = self.db.execute(stmt).scalars().all()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError("find_created_users", str(e)) from e
        return {UserId(value) for value in found}
