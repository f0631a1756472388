"""Domain models shared across the store, the producers and the renderer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

SensorKey = Tuple[str, str]

VALUE_MAX_LENGTH = 127
UNIT_MAX_LENGTH = 31


@dataclass(slots=True)
class SensorRecord:
    """One physical sensor declared in the configuration.

    Identity fields are fixed at load time; only ``value``, ``unit`` and
    ``timestamp`` change afterwards, through ``SensorStore.set``.
    """

    driver: str
    device: str
    location: str
    name: str
    unit: str = ""
    value: str = ""
    timestamp: int = 0

    @property
    def key(self) -> SensorKey:
        return (self.driver, self.device)

    @property
    def has_value(self) -> bool:
        return self.value != ""


@dataclass(frozen=True, slots=True)
class OptionEntry:
    """A ``OPTION <name> <value>`` directive."""

    name: str
    value: str


@dataclass(frozen=True, slots=True)
class EventLogEntry:
    """A recorded state change.

    ``value`` is captured at append time; ``sensor`` points at the live record
    so location, name and unit follow the store.
    """

    sensor: SensorRecord
    value: str
    timestamp: int
