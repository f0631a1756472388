"""Parsing of the sensor definition file."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from datastore.location_index import LocationIndex
from models.records import UNIT_MAX_LENGTH, OptionEntry, SensorKey, SensorRecord

logger = logging.getLogger(__name__)

MAX_LINE_LENGTH = 1023
MAX_TOKENS = 16

_TRAILING_CONTROL = re.compile(r"[\x00-\x1f\x7f]+$")
_SPACES = re.compile(r" +")


class ConfigError(Exception):
    """The configuration cannot be loaded at all."""


@dataclass
class SensorConfig:
    """Everything declared in one configuration file."""

    sensors: Dict[SensorKey, SensorRecord] = field(default_factory=dict)
    options: List[OptionEntry] = field(default_factory=list)
    locations: LocationIndex = field(default_factory=LocationIndex)
    skipped_lines: int = 0

    def option(self, name: str) -> Optional[str]:
        for entry in self.options:
            if entry.name == name:
                return entry.value
        return None


def split_line(line: str) -> List[str]:
    """Split one directive into tokens.

    Raises ``ConfigError`` when the token count exceeds ``MAX_TOKENS``.
    """
    candidate = _TRAILING_CONTROL.sub("", line).strip(" ")
    if not candidate:
        return []
    tokens = _SPACES.split(candidate)
    if len(tokens) > MAX_TOKENS:
        raise ConfigError(f"too many tokens ({len(tokens)}) in line: {candidate[:80]!r}")
    return tokens


def parse_config(lines: List[str], source: str = "<config>") -> SensorConfig:
    config = SensorConfig()

    for line_number, raw_line in enumerate(lines, start=1):
        line = raw_line.lstrip(" \t")
        if not line or line.startswith("#") or not line.strip():
            continue

        if len(line.rstrip("\r\n")) > MAX_LINE_LENGTH:
            raise ConfigError(f"{source}:{line_number}: line exceeds {MAX_LINE_LENGTH} characters")

        try:
            tokens = split_line(line)
        except ConfigError as exc:
            raise ConfigError(f"{source}:{line_number}: {exc}") from exc
        if not tokens:
            continue

        if tokens[0] == "OPTION":
            if len(tokens) < 3:
                logger.warning(
                    "Invalid option line (too few items)",
                    extra={"path": source, "line_number": line_number},
                )
                config.skipped_lines += 1
                continue
            config.options.append(OptionEntry(name=tokens[1], value=tokens[2]))
            continue

        if len(tokens) < 4:
            logger.warning(
                "Invalid sensor line (too few items)",
                extra={"path": source, "line_number": line_number},
            )
            config.skipped_lines += 1
            continue

        driver, device, location, name = tokens[:4]
        key = (driver, device)
        if key in config.sensors:
            logger.warning(
                "Duplicate sensor declaration ignored",
                extra={
                    "path": source,
                    "line_number": line_number,
                    "driver": driver,
                    "device": device,
                },
            )
            config.skipped_lines += 1
            continue

        unit = tokens[4][:UNIT_MAX_LENGTH] if len(tokens) >= 5 else ""
        config.sensors[key] = SensorRecord(
            driver=driver,
            device=device,
            location=location,
            name=name,
            unit=unit,
        )
        config.locations.add(location, key)

    return config


def load_sensor_config(path: Union[str, Path]) -> SensorConfig:
    """Load a configuration file, raising ``ConfigError`` when it is unusable."""
    config_path = Path(path)
    try:
        with config_path.open("r", encoding="utf-8", errors="replace", newline="") as handle:
            lines = handle.readlines()
    except OSError as exc:
        raise ConfigError(f"cannot access configuration file {config_path}: {exc}") from exc

    config = parse_config(lines, source=str(config_path))
    logger.info(
        "Loaded sensor configuration",
        extra={"path": str(config_path), "sensor_count": len(config.sensors)},
    )
    return config
