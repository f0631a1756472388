"""Wiring of the sensor store, its producers and the archival scheduler."""

from __future__ import annotations

import logging
import time
from datetime import tzinfo
from functools import lru_cache
from pathlib import Path
from typing import Callable, List, Optional, Protocol

from datastore.event_ring import EventRing
from datastore.sensor_config import SensorConfig, load_sensor_config
from datastore.sensor_store import SensorStore
from sensors.w1 import OneWireScanner
from services.archiver import ArchivalScheduler, SchedulerStatus
from services.renderer import ViewRenderer
from settings import get_settings
from storage.archive import ArchiveDirectory
from storage.raw_log import RawLog

logger = logging.getLogger(__name__)


class Producer(Protocol):
    def background(self, now: float) -> None: ...


class SensorService:
    """Single owner of the store and everything ticking around it."""

    def __init__(
        self,
        config: SensorConfig,
        raw_log_path: Path,
        archive_dir: Path,
        archive_extension: str = "csv",
        event_depth: int = 8192,
        quiet_period: int = 10,
        host: Optional[str] = None,
        w1_root: Optional[Path] = None,
        clock: Callable[[], float] = time.time,
        tz: Optional[tzinfo] = None,
    ) -> None:
        self.raw_log = RawLog(raw_log_path)
        self.archive = ArchiveDirectory(archive_dir, extension=archive_extension)
        self.store = SensorStore(
            config,
            ring=EventRing(event_depth),
            raw_log=self.raw_log,
            clock=clock,
        )
        self.scheduler = ArchivalScheduler(
            self.raw_log,
            self.archive,
            now=clock(),
            quiet_period=quiet_period,
            tz=tz,
        )
        self.renderer = ViewRenderer(self.store, self.archive, host=host, clock=clock)
        self.producers: List[Producer] = []
        if w1_root is not None:
            self.producers.append(OneWireScanner(self.store, w1_root))

    def background(self, now: float) -> None:
        """Periodic entry point: poll producers, then run the scheduler."""
        for producer in self.producers:
            producer.background(now)
        self.scheduler.tick(now)

    def status(self) -> SchedulerStatus:
        return self.scheduler.status()

    def shutdown(self) -> None:
        self.store.close()
        logger.info("Sensor service stopped", extra={"event_count": len(self.store.ring)})


@lru_cache
def build_default_service(config_path: Optional[str] = None) -> SensorService:
    """Factory that wires the service from the environment settings."""
    settings = get_settings()
    config = load_sensor_config(config_path or settings.config_path)
    return SensorService(
        config=config,
        raw_log_path=Path(settings.raw_log_path),
        archive_dir=Path(settings.archive_dir),
        archive_extension=settings.archive_extension,
        event_depth=settings.event_depth,
        quiet_period=settings.quiet_period,
        host=settings.host_name,
        w1_root=Path(settings.w1_root),
    )
