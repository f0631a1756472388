"""Closing and rotation of the raw sensor log into dated archives."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from typing import Optional

from storage.archive import ArchiveDirectory, ArchiveError
from storage.raw_log import RawLog

logger = logging.getLogger(__name__)

ONE_HOUR = 3600
DAILY_MOVE_HOUR = 23
DEFAULT_QUIET_PERIOD = 10


@dataclass(frozen=True)
class SchedulerStatus:
    log_open: bool
    last_write: int
    last_move: int
    last_snapshot: int
    last_error: Optional[str]


class ArchivalScheduler:
    """Ticked periodically to close the raw log and archive it.

    Once the raw log has been quiet for ``quiet_period`` seconds it is closed.
    Right after closing, if one hour ago was within hour 23 the log is moved
    into the previous day's archive; otherwise, at most once per hour, it is
    copied into today's archive so a restart loses at most an hour of
    archived data.
    """

    def __init__(
        self,
        raw_log: RawLog,
        archive: ArchiveDirectory,
        now: float,
        quiet_period: int = DEFAULT_QUIET_PERIOD,
        tz: Optional[tzinfo] = None,
    ) -> None:
        self.raw_log = raw_log
        self.archive = archive
        self.quiet_period = quiet_period
        self._tz = tz
        self.last_move = 0
        self.last_snapshot = 0
        self.last_error: Optional[str] = None
        self._reconcile_startup(int(now))

    def tick(self, now: float) -> None:
        current = int(now)
        if not self.raw_log.is_open:
            return
        if current <= self.raw_log.last_write + self.quiet_period:
            return

        self.raw_log.close()

        hour_ago = current - ONE_HOUR
        if self._local(hour_ago).hour == DAILY_MOVE_HOUR and current > self.last_move + ONE_HOUR + 1:
            if self._archive("move", self._day_of(hour_ago)):
                self.last_move = current
                self.last_snapshot = current
        elif hour_ago > self.last_snapshot:
            if self._archive("copy", self._day_of(current)):
                self.last_snapshot = current

    def status(self) -> SchedulerStatus:
        return SchedulerStatus(
            log_open=self.raw_log.is_open,
            last_write=self.raw_log.last_write,
            last_move=self.last_move,
            last_snapshot=self.last_snapshot,
            last_error=self.last_error,
        )

    def _reconcile_startup(self, now: int) -> None:
        # Restarting just after midnight must not move today's data over an
        # archive of yesterday that already exists.
        hour_ago = now - ONE_HOUR
        if self._local(hour_ago).hour != DAILY_MOVE_HOUR:
            return
        yesterday = self._day_of(hour_ago)
        if self.archive.exists(yesterday):
            self.last_move = now
            logger.info(
                "Daily archive already present, skipping move",
                extra={"archive": self.archive.name_for(yesterday)},
            )

    def _archive(self, method: str, day: date) -> bool:
        if not self.raw_log.exists():
            return False
        try:
            if method == "move":
                target = self.archive.move_in(self.raw_log.path, day)
            else:
                target = self.archive.copy_in(self.raw_log.path, day)
        except ArchiveError as exc:
            self.last_error = str(exc)
            logger.error(
                "Archival %s failed",
                method,
                extra={"archive": self.archive.name_for(day), "reason": str(exc)},
            )
            return False

        self.last_error = None
        logger.info("Archival %s completed", method, extra={"archive": target.name})
        return True

    def _local(self, timestamp: int) -> datetime:
        return datetime.fromtimestamp(timestamp, self._tz)

    def _day_of(self, timestamp: int) -> date:
        return self._local(timestamp).date()
