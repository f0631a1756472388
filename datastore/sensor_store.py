"""The in-memory table of configured sensors and their latest values."""

from __future__ import annotations

import logging
import time
from typing import Callable, Dict, Iterator, List, Optional

from datastore.event_ring import EventRing
from datastore.location_index import LocationIndex
from datastore.sensor_config import SensorConfig
from models.records import (
    UNIT_MAX_LENGTH,
    VALUE_MAX_LENGTH,
    EventLogEntry,
    OptionEntry,
    SensorKey,
    SensorRecord,
)
from storage.raw_log import RawLog

logger = logging.getLogger(__name__)


class SensorStore:
    """Owns the sensor records, the options, the event ring and the raw log.

    The set of records is fixed by the configuration; ``set`` is the only
    mutator. All calls are expected on a single thread.
    """

    def __init__(
        self,
        config: SensorConfig,
        ring: EventRing,
        raw_log: Optional[RawLog] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._records: Dict[SensorKey, SensorRecord] = dict(config.sensors)
        self._order: List[SensorRecord] = list(self._records.values())
        self._options: List[OptionEntry] = list(config.options)
        self._locations: LocationIndex = config.locations
        self.ring = ring
        self.raw_log = raw_log
        self._clock = clock
        self._driver_cursor = 0

    def set(self, driver: str, device: str, value: str, unit: Optional[str] = None) -> bool:
        """Record a new value. Returns ``False`` when the sensor is not configured."""
        record = self._records.get((driver, device))
        if record is None:
            logger.debug(
                "Ignoring value for unknown sensor",
                extra={"driver": driver, "device": device},
            )
            return False

        now = int(self._clock())
        record.value = str(value)[:VALUE_MAX_LENGTH]
        if unit and not record.unit:
            record.unit = unit[:UNIT_MAX_LENGTH]
        record.timestamp = now

        self.ring.append(record)

        if self.raw_log is not None:
            try:
                self.raw_log.append(now, record.location, record.name, record.value, record.unit)
            except OSError as exc:
                logger.error(
                    "Cannot write raw log",
                    extra={"path": str(self.raw_log.path), "reason": str(exc)},
                )
        return True

    def get(self, driver: str, device: str) -> Optional[SensorRecord]:
        return self._records.get((driver, device))

    def device_first(self, driver: str) -> Optional[str]:
        self._driver_cursor = 0
        return self.device_next(driver)

    def device_next(self, driver: str) -> Optional[str]:
        for index in range(self._driver_cursor, len(self._order)):
            record = self._order[index]
            if record.driver == driver:
                self._driver_cursor = index + 1
                return record.device
        self._driver_cursor = len(self._order)
        return None

    def devices(self, driver: str) -> Iterator[str]:
        for record in self._order:
            if record.driver == driver:
                yield record.device

    def option(self, name: str) -> Optional[str]:
        for entry in self._options:
            if entry.name == name:
                return entry.value
        return None

    def records(self) -> List[SensorRecord]:
        return list(self._order)

    def locations(self) -> List[str]:
        return self._locations.locations()

    def records_in(self, location: str) -> List[SensorRecord]:
        return [self._records[key] for key in self._locations.sensors_in(location)]

    def events(self, limit: Optional[int] = None) -> Iterator[EventLogEntry]:
        return self.ring.iter_recent(limit)

    def close(self) -> None:
        if self.raw_log is not None:
            self.raw_log.close()

    def __len__(self) -> int:
        return len(self._records)
