"""Single-flight guards for the periodic policy passes."""
import logging
import threading
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


class SingleFlight:
    """Allow at most one in-progress run of a named pass.

    A second caller does not wait: the run is skipped and ``run`` returns
    ``None``. Scheduler ticks and manual admin triggers share the same guard.
    """

    def __init__(self, name: str):
        self.name = name
        self._lock = threading.Lock()

    @property
    def in_progress(self) -> bool:
        return self._lock.locked()

    def run(self, func: Callable[..., Any], *args, **kwargs) -> Any | None:
        if not self._lock.acquire(blocking=False):
            logger.warning(f"{self.name} already running, skipping")
            return None
        try:
            return func(*args, **kwargs)
        finally:
            self._lock.release()
