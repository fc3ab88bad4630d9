"""In-memory registry of each user's active learning session."""

import threading
from datetime import datetime

from smartalk.domain.common.value_objects import ItemId, UnitGroupId, UserId
from smartalk.domain.learning.entities.learning_session import LearningSession


class LearningSessionTracker:
    """Holds at most one LearningSession per user; switching items replaces it."""

    def __init__(self) -> None:
        self._sessions: dict[UserId, LearningSession] = {}
        self._lock = threading.Lock()

    def begin(
        self,
        user_id: UserId,
        unit_group_id: UnitGroupId,
        item_id: ItemId,
        started_at: datetime | None = None,
    ) -> LearningSession:
        """Start a fresh session for item_id, discarding any previous one."""
        session = (
            LearningSession(unit_group_id=unit_group_id, item_id=item_id, started_at=started_at)
            if started_at
            else LearningSession(unit_group_id=unit_group_id, item_id=item_id)
        )
        with self._lock:
            self._sessions[user_id] = session
        return session

    def current(self, user_id: UserId) -> LearningSession | None:
        with self._lock:
            return self._sessions.get(user_id)

    def ensure(
        self,
        user_id: UserId,
        unit_group_id: UnitGroupId,
        item_id: ItemId,
        started_at: datetime | None = None,
    ) -> tuple[LearningSession, bool]:
        """
        Return the session for item_id, starting one when the item changed.

        Returns:
            Tuple of (session, started) where started tells whether a new
            session had to be created
        """
        session = self.current(user_id)
        if (
            session is not None
            and session.item_id == item_id
            and session.unit_group_id == unit_group_id
        ):
            return session, False
        return self.begin(user_id, unit_group_id, item_id, started_at), True

    def end(self, user_id: UserId) -> None:
        with self._lock:
            self._sessions.pop(user_id, None)
