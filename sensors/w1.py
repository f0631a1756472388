"""Linux 1-Wire temperature producer."""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional, Tuple

from datastore.sensor_store import SensorStore

logger = logging.getLogger(__name__)

DRIVER = "w1"
DS18X20_FAMILIES: Tuple[str, ...] = ("10-", "28-")
DEFAULT_SCAN_PERIOD = 10
MIN_SCAN_PERIOD = 5
SCAN_PERIOD_OPTION = "w1.scan.period"


def parse_w1_slave(text: str) -> Optional[str]:
    """Return the temperature in degrees Celsius from a ``w1_slave`` dump.

    The first line ends with ``YES`` when the CRC check passed; the second
    line carries ``t=<millidegrees>``.
    """
    lines = text.splitlines()
    if len(lines) < 2 or " YES" not in lines[0]:
        return None
    marker = lines[1].find(" t=")
    if marker < 0:
        return None
    raw = lines[1][marker + 3 :].strip()
    try:
        millidegrees = Decimal(raw)
    except InvalidOperation:
        return None
    return f"{millidegrees / 1000:.3f}"


def scan_period_from(store: SensorStore) -> int:
    option = store.option(SCAN_PERIOD_OPTION)
    if option is None:
        return DEFAULT_SCAN_PERIOD
    try:
        period = int(option)
    except ValueError:
        logger.warning("Invalid %s option %r, using default", SCAN_PERIOD_OPTION, option)
        return DEFAULT_SCAN_PERIOD
    return max(period, MIN_SCAN_PERIOD)


class OneWireScanner:
    """Polls every configured ``w1`` device and feeds the store."""

    def __init__(self, store: SensorStore, root_path: Path) -> None:
        self.store = store
        self.root_path = root_path
        self.scan_period = scan_period_from(store)
        self.last_scan = 0

    def background(self, now: float) -> None:
        if now < self.last_scan + self.scan_period:
            return
        self.scan()
        self.last_scan = int(now)

    def scan(self) -> int:
        """Read all devices once and return how many values were accepted."""
        accepted = 0
        device = self.store.device_first(DRIVER)
        while device is not None:
            value = self._read_device(device)
            if value is not None and self.store.set(DRIVER, device, value, "Celsius"):
                accepted += 1
            device = self.store.device_next(DRIVER)
        return accepted

    def _read_device(self, device: str) -> Optional[str]:
        if not device.startswith(DS18X20_FAMILIES):
            return None
        path = self.root_path / device / "w1_slave"
        try:
            text = path.read_text(encoding="ascii", errors="replace")
        except OSError as exc:
            logger.debug(
                "Cannot read 1-Wire device",
                extra={"device": device, "path": str(path), "reason": str(exc)},
            )
            return None
        return parse_w1_slave(text)
