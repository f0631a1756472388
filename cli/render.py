from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, Optional

import typer

from datastore.sensor_config import SensorConfig


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def _format_time(timestamp: Optional[int]) -> str:
    if not timestamp:
        return "never"
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M:%S")


def _format_value(value: Any, unit: Optional[str]) -> str:
    if value is None:
        return "-"
    return f"{value} {unit}" if unit else f"{value}"


def render_latest(payload: Dict[str, Any]) -> None:
    echo_heading(f"Latest readings on {payload.get('host')}")
    echo_key_values([("timestamp", _format_time(payload.get("timestamp")))])

    locations = payload.get("sensor") or {}
    if not locations:
        typer.echo("No sensors configured.")
        return
    for location, sensors in locations.items():
        typer.echo()
        echo_heading(location)
        for sensor in sensors:
            typer.echo(
                f"  - {sensor.get('name')}: "
                f"{_format_value(sensor.get('value'), sensor.get('unit'))} "
                f"({_format_time(sensor.get('timestamp'))})"
            )


def render_recent(payload: Dict[str, Any]) -> None:
    body = payload.get("sensor") or {}
    echo_heading(f"Recent updates on {body.get('host')}")
    events = body.get("recent") or []
    if not events:
        typer.echo("No recent updates.")
        return
    for event in events:
        typer.echo(
            f"  {_format_time(event.get('time'))} "
            f"{event.get('location')}/{event.get('name')}: "
            f"{_format_value(event.get('value'), event.get('unit'))}"
        )


def render_history(payload: Dict[str, Any]) -> None:
    body = payload.get("sensor") or {}
    echo_heading(f"Archives on {body.get('host')}")
    days = body.get("history") or []
    if not days:
        typer.echo("No archive available.")
        return
    for day in sorted(days):
        typer.echo(f"  - {day}")


def render_config(config: SensorConfig) -> None:
    echo_heading("Sensors")
    if not config.sensors:
        typer.echo("No sensors declared.")
    for location in config.locations:
        typer.echo(f"{location}:")
        for driver, device in config.locations.sensors_in(location):
            record = config.sensors[(driver, device)]
            unit = f" [{record.unit}]" if record.unit else ""
            typer.echo(f"  - {record.name} ({driver} {device}){unit}")

    typer.echo()
    echo_heading("Options")
    if config.options:
        echo_key_values((entry.name, entry.value) for entry in config.options)
    else:
        typer.echo("No options declared.")

    if config.skipped_lines:
        typer.secho(
            f"{config.skipped_lines} line(s) skipped, see warnings above.",
            fg=typer.colors.YELLOW,
        )
