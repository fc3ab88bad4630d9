"""Protocol for per-(user, item) progress persistence."""

from typing import Protocol

from smartalk.domain.common.value_objects import UnitGroupId, UserId
from smartalk.domain.learning.entities.progress_record import (
    ProgressDelta,
    ProgressKey,
    ProgressRecord,
)


class ProgressRepositoryProtocol(Protocol):
    """Protocol for progress record operations."""

    def get_progress(self, key: ProgressKey) -> ProgressRecord | None:
        """
        Find the record of one user on one item.

        Args:
            key: (user, unit group, item) key

        Returns:
            ProgressRecord if it exists, None otherwise
        """
        ...

    def upsert_progress(self, key: ProgressKey, delta: ProgressDelta) -> ProgressRecord:
        """
        Create the record if missing, then apply the delta.

        Counters are incremented and status is only moved forward.

        Args:
            key: (user, unit group, item) key
            delta: Change to apply

        Returns:
            The stored record after the change

        Raises:
            PersistenceError: If the store fails
        """
        ...

    def find_by_unit_group(self, user_id: UserId, unit_group_id: UnitGroupId) -> list[ProgressRecord]:
        """
        Get all records of a user in a unit group.

        Args:
            user_id: The user ID
            unit_group_id: The unit group ID

        Returns:
            Records ordered by item ID
        """
        ...
