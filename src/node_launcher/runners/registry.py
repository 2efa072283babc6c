"""Thread-safe registry of containers created by this process."""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import datetime, timedelta, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ContainerRegistry:
    """Maps container IDs to the local time they were created.

    All access goes through one lock. The lock only ever guards the dict
    itself; callers must not hold it across Docker API calls, which is why
    the registry hands out copies rather than views.
    """

    def __init__(self, clock: Callable[[], datetime] = utcnow) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._created: dict[str, datetime] = {}

    def record(self, container_id: str) -> None:
        """Track a freshly created container, timestamped with the local clock."""
        now = self._clock()
        with self._lock:
            self._created[container_id] = now

    def unrecord(self, container_id: str) -> bool:
        """Stop tracking a container. Returns False if it was not tracked."""
        with self._lock:
            return self._created.pop(container_id, None) is not None

    def snapshot_older_than(self, age: timedelta) -> list[str]:
        """IDs of containers recorded strictly before ``now - age``."""
        boundary = self._clock() - age
        with self._lock:
            return [cid for cid, ts in self._created.items() if ts < boundary]

    def snapshot(self) -> list[str]:
        with self._lock:
            return list(self._created)

    def created_at(self, container_id: str) -> datetime | None:
        with self._lock:
            return self._created.get(container_id)

    def clear(self) -> None:
        with self._lock:
            self._created.clear()

    def __contains__(self, container_id: object) -> bool:
        with self._lock:
            return container_id in self._created

    def __len__(self) -> int:
        with self._lock:
            return len(self._created)
