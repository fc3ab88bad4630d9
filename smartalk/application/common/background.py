"""Port for running side effects without blocking the triggering request."""

from collections.abc import Callable
from typing import Protocol


class BackgroundDispatcherProtocol(Protocol):
    """Runs callables after the caller has moved on."""

    def dispatch(self, name: str, task: Callable[[], None]) -> None:
        """
        Schedule task for execution.

        Implementations must log and swallow failures raised by task; the
        caller has already completed its own work and must not be affected.

        Args:
            name: Short task name used in log records
            task: Zero-argument callable to run
        """
        ...
