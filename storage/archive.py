from __future__ import annotations

import errno
import os
import re
import shutil
from datetime import date
from pathlib import Path
from typing import List


class ArchiveError(Exception):
    """A copy or move into the archive directory failed."""


class ArchiveDirectory:
    """Dated archive files named ``YYYY-MM-DD.<extension>``."""

    def __init__(self, root_path: Path, extension: str = "csv") -> None:
        self.root_path = root_path
        self.extension = extension.lstrip(".")
        self._pattern = re.compile(
            r"^(\d{4}-\d{2}-\d{2})\." + re.escape(self.extension) + r"$"
        )
        root_path.mkdir(parents=True, exist_ok=True)

    def name_for(self, day: date) -> str:
        return f"{day.year:04d}-{day.month:02d}-{day.day:02d}.{self.extension}"

    def path_for(self, day: date) -> Path:
        return self.root_path / self.name_for(day)

    def exists(self, day: date) -> bool:
        return self.path_for(day).is_file()

    def copy_in(self, source: Path, day: date) -> Path:
        """Copy ``source`` over the archive for ``day``, leaving ``source`` intact."""
        target = self.path_for(day)
        try:
            self._stage_and_replace(source, target)
        except OSError as exc:
            raise ArchiveError(f"cannot copy {source} to {target}: {exc}") from exc
        return target

    def move_in(self, source: Path, day: date) -> Path:
        """Move ``source`` over the archive for ``day``; ``source`` is gone afterwards.

        Across filesystems the data is staged first, so a failed copy leaves
        the existing archive untouched.
        """
        target = self.path_for(day)
        try:
            try:
                os.replace(source, target)
            except OSError as exc:
                if exc.errno != errno.EXDEV:
                    raise
                self._stage_and_replace(source, target)
                source.unlink()
        except OSError as exc:
            raise ArchiveError(f"cannot move {source} to {target}: {exc}") from exc
        return target

    def _stage_and_replace(self, source: Path, target: Path) -> None:
        staging = self.root_path / f".{target.name}.partial"
        try:
            shutil.copyfile(source, staging)
            os.replace(staging, target)
        except OSError:
            staging.unlink(missing_ok=True)
            raise

    def list_dates(self) -> List[str]:
        if not self.root_path.is_dir():
            return []

        dates = []
        for path in self.root_path.iterdir():
            if path.name.startswith(".") or not path.is_file():
                continue
            match = self._pattern.match(path.name)
            if match:
                dates.append(match.group(1))
        return sorted(dates)
