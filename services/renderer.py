"""JSON views of the sensor store.

Each view is rendered into a document of at most ``max_size`` bytes of UTF-8.
When the content does not fit, trailing entries are dropped but every object
and array that was opened is still closed, so the result always parses.
"""

from __future__ import annotations

import json
import re
import socket
import time
from typing import Callable, List, Optional

from datastore.sensor_store import SensorStore
from models.records import SensorRecord
from storage.archive import ArchiveDirectory

DEFAULT_MAX_SIZE = 65536
RECENT_BYTES_PER_EVENT = 64

_JSON_NUMBER = re.compile(r"-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][+-]?\d+)?")


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def format_value(value: str) -> str:
    """Render a stored value: a bare number when it is one, else a string."""
    if value == "":
        return "null"
    if _JSON_NUMBER.fullmatch(value):
        return value
    return _quote(value)


class BoundedJsonWriter:
    """Accumulate JSON fragments without exceeding a size limit.

    Sizes are counted in UTF-8 bytes. ``open`` reserves room for the matching
    closing text, so ``close`` can always be honoured. After the first
    fragment that does not fit, the writer is marked truncated and refuses
    everything but closes.
    """

    def __init__(self, max_size: int) -> None:
        self.max_size = max_size
        self.truncated = False
        self._parts: List[str] = []
        self._size = 0
        self._closers: List[str] = []
        self._reserved = 0

    @staticmethod
    def _length(fragment: str) -> int:
        return len(fragment.encode("utf-8"))

    def _fits(self, length: int) -> bool:
        return self._size + length + self._reserved <= self.max_size

    def _append(self, fragment: str) -> None:
        self._parts.append(fragment)
        self._size += self._length(fragment)

    def write(self, fragment: str) -> bool:
        if self.truncated or not self._fits(self._length(fragment)):
            self.truncated = True
            return False
        self._append(fragment)
        return True

    def open(self, fragment: str, closer: str, first: str = "") -> bool:
        """Open a container, optionally together with its first member.

        Nothing is written unless the opening text, ``first`` and ``closer``
        all fit, so a container is never emitted empty for lack of room.
        """
        needed = self._length(fragment) + self._length(first) + self._length(closer)
        if self.truncated or not self._fits(needed):
            self.truncated = True
            return False
        self._append(fragment + first)
        self._closers.append(closer)
        self._reserved += self._length(closer)
        return True

    def close(self) -> None:
        closer = self._closers.pop()
        self._reserved -= self._length(closer)
        self._append(closer)

    def getvalue(self) -> str:
        while self._closers:
            self.close()
        return "".join(self._parts)


class ViewRenderer:
    """Builds the latest, recent and history documents. Never mutates state."""

    def __init__(
        self,
        store: SensorStore,
        archive: ArchiveDirectory,
        host: Optional[str] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.archive = archive
        self.host = host or socket.gethostname()
        self._clock = clock

    def latest(self, max_size: int = DEFAULT_MAX_SIZE) -> str:
        writer = BoundedJsonWriter(max_size)
        header = (
            f'{{"host":{_quote(self.host)},"timestamp":{int(self._clock())},"sensor":{{'
        )
        if not writer.open(header, "}}"):
            raise ValueError(f"max_size {max_size} is too small for the latest view")

        groups = 0
        for location in self.store.locations():
            entries = [self._latest_entry(record) for record in self.store.records_in(location)]
            if not entries:
                continue
            prefix = "," if groups else ""
            if not writer.open(f"{prefix}{_quote(location)}:[", "]", first=entries[0]):
                break
            for entry in entries[1:]:
                if not writer.write("," + entry):
                    break
            writer.close()
            groups += 1
            if writer.truncated:
                break

        return writer.getvalue()

    def recent(self, max_size: Optional[int] = None, limit: Optional[int] = None) -> str:
        if max_size is None:
            max_size = max(DEFAULT_MAX_SIZE, self.store.ring.capacity * RECENT_BYTES_PER_EVENT)
        writer = BoundedJsonWriter(max_size)
        header = (
            f'{{"sensor":{{"timestamp":{int(self._clock())},'
            f'"host":{_quote(self.host)},"recent":['
        )
        if not writer.open(header, "]}}"):
            raise ValueError(f"max_size {max_size} is too small for the recent view")

        for index, event in enumerate(self.store.events(limit)):
            sensor = event.sensor
            entry = (
                f'{{"location":{_quote(sensor.location)},"name":{_quote(sensor.name)},'
                f'"time":{event.timestamp},"value":{format_value(event.value)}'
            )
            if sensor.unit:
                entry += f',"unit":{_quote(sensor.unit)}'
            entry += "}"
            if not writer.write(("," if index else "") + entry):
                break

        return writer.getvalue()

    def history(self, max_size: int = DEFAULT_MAX_SIZE) -> str:
        writer = BoundedJsonWriter(max_size)
        header = (
            f'{{"sensor":{{"timestamp":{int(self._clock())},'
            f'"host":{_quote(self.host)},"history":['
        )
        if not writer.open(header, "]}}"):
            raise ValueError(f"max_size {max_size} is too small for the history view")

        for index, day in enumerate(self.archive.list_dates()):
            if not writer.write(("," if index else "") + _quote(day)):
                break

        return writer.getvalue()

    @staticmethod
    def _latest_entry(record: SensorRecord) -> str:
        entry = f'{{"name":{_quote(record.name)}'
        if record.timestamp:
            entry += f',"timestamp":{record.timestamp}'
        entry += f',"value":{format_value(record.value)}'
        if record.has_value and record.unit:
            entry += f',"unit":{_quote(record.unit)}'
        return entry + "}"
