from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Optional, TextIO

logger = logging.getLogger(__name__)


class RawLog:
    """Append-only CSV mirror of every accepted sensor update.

    The handle is opened lazily on the first write and closed by the archival
    scheduler once writes have been quiet for a while.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.last_write = 0
        self._handle: Optional[TextIO] = None
        self._writer = None

    @property
    def is_open(self) -> bool:
        return self._handle is not None

    def append(self, timestamp: int, location: str, name: str, value: str, unit: str) -> None:
        if self._handle is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._handle = self.path.open("a", encoding="utf-8", newline="")
            self._writer = csv.writer(self._handle, lineterminator="\n")
            logger.debug("Opened raw log", extra={"path": str(self.path)})

        self._writer.writerow([timestamp, location, name, value, unit])
        self._handle.flush()
        self.last_write = timestamp

    def close(self) -> None:
        if self._handle is None:
            return
        handle = self._handle
        self._handle = None
        self._writer = None
        handle.close()
        logger.debug("Closed raw log", extra={"path": str(self.path)})

    def exists(self) -> bool:
        return self.path.is_file()
