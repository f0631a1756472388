from __future__ import annotations

from typing import Iterator, List, Optional

from models.records import EventLogEntry, SensorRecord

DEFAULT_EVENT_DEPTH = 8192


class EventRing:
    """Fixed-capacity circular log of recent sensor updates.

    ``_start`` is the slot of the oldest valid entry and ``_count`` the number
    of valid entries; the next write goes to ``(_start + _count) % capacity``
    until the ring is full, after which the oldest entry is overwritten.
    """

    def __init__(self, capacity: int = DEFAULT_EVENT_DEPTH) -> None:
        if capacity <= 0:
            raise ValueError("Event ring capacity must be positive.")
        self._slots: List[Optional[EventLogEntry]] = [None] * capacity
        self._start = 0
        self._count = 0

    @property
    def capacity(self) -> int:
        return len(self._slots)

    def append(self, sensor: SensorRecord) -> EventLogEntry:
        entry = EventLogEntry(sensor=sensor, value=sensor.value, timestamp=sensor.timestamp)
        capacity = len(self._slots)
        if self._count < capacity:
            self._slots[(self._start + self._count) % capacity] = entry
            self._count += 1
        else:
            self._slots[self._start] = entry
            self._start = (self._start + 1) % capacity
        return entry

    def iter_recent(self, limit: Optional[int] = None) -> Iterator[EventLogEntry]:
        """Yield entries newest first.

        The sequence reflects the ring at the time each entry is reached; do
        not resume it after further appends.
        """
        capacity = len(self._slots)
        count = self._count if limit is None else min(self._count, max(limit, 0))
        newest = self._start + self._count - 1
        for offset in range(count):
            entry = self._slots[(newest - offset) % capacity]
            if entry is None:
                return
            yield entry

    def clear(self) -> None:
        self._slots = [None] * len(self._slots)
        self._start = 0
        self._count = 0

    def __len__(self) -> int:
        return self._count
