"""Protocol for looking up users known to the engine."""

from collections.abc import Iterable
from typing import Protocol

from smartalk.domain.common.value_objects import TimeWindow, UserId


class UserDirectoryProtocol(Protocol):
    """Read-only access to the user table."""

    def exists(self, user_id: UserId) -> bool:
        """
        Check whether a user exists.

        Args:
            user_id: The user ID

        Returns:
            True if the user is known
        """
        ...

    def find_existing_ids(self, user_ids: Iterable[UserId]) -> set[UserId]:
        """
        Filter a collection of user IDs down to the ones that exist.

        Args:
            user_ids: Candidate user IDs

        Returns:
            The subset of IDs that belong to known users
        """
        ...

    def count_users(self) -> int: ...

    def find_created_ids(self, window: TimeWindow) -> set[UserId]:
        """
        Find users whose account was created inside the window.

        Args:
            window: Creation time window

        Returns:
            IDs of the new users
        """
        ...
