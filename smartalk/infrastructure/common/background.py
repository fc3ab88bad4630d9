"""Background dispatchers for fire-and-forget side effects."""

import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor

import structlog

logger = structlog.get_logger(__name__)


def _run_logged(name: str, task: Callable[[], None]) -> None:
    try:
        task()
    except Exception:
        logger.exception("background_task_failed", task=name)


class ThreadPoolBackgroundDispatcher:
    """
    Runs tasks on a thread pool.

    Failures inside a task are logged and swallowed. Dispatching after
    shutdown drops the task with a warning instead of raising.
    """

    def __init__(self, max_workers: int = 4) -> None:
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="smartalk-bg"
        )
        self._lock = threading.Lock()
        self._closed = False

    def dispatch(self, name: str, task: Callable[[], None]) -> None:
        with self._lock:
            if self._closed:
                logger.warning("background_task_dropped", task=name, reason="dispatcher closed")
                return
            self._executor.submit(_run_logged, name, task)

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work and optionally wait for queued tasks."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._executor.shutdown(wait=wait)
        logger.info("background_dispatcher_stopped")


class InlineDispatcher:
    """Runs tasks synchronously in the caller's thread, with the same failure handling."""

    def dispatch(self, name: str, task: Callable[[], None]) -> None:
        _run_logged(name, task)

    def shutdown(self, wait: bool = True) -> None:
        """Nothing to stop."""
