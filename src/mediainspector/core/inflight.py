"""Per-path markers for plans whose execution is pending."""

import threading
from contextlib import contextmanager
from typing import Iterator

from mediainspector.errors import PlanInFlightError
from mediainspector.utils.logger import get_logger

logger = get_logger(__name__)


class InFlightRegistry:
    """At most one outstanding plan per file path.

    Callers hold the marker for the whole execution. Releasing it (normally,
    on failure, or when the caller abandons the run) makes the path
    available again.
    """

    def __init__(self):
        self._paths: set[str] = set()
        self._lock = threading.Lock()

    def acquire(self, path: str) -> None:
        """Mark a path as in flight.

        Raises:
            PlanInFlightError: If the path already has a pending plan
        """
        with self._lock:
            if path in self._paths:
                logger.warning("Plan already in flight", file=path)
                raise PlanInFlightError(path)
            self._paths.add(path)

    def release(self, path: str) -> None:
        with self._lock:
            self._paths.discard(path)

    def is_in_flight(self, path: str) -> bool:
        with self._lock:
            return path in self._paths

    @contextmanager
    def hold(self, path: str) -> Iterator[None]:
        """Hold the in-flight marker for ``path`` for the duration of a block."""
        self.acquire(path)
        try:
            yield
        finally:
            self.release(path)
