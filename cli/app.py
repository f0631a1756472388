from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_config, render_history, render_latest, render_recent
from datastore.sensor_config import ConfigError, load_sensor_config


@dataclass
class CLIState:
    config: CLIConfig
    client: Optional[ApiClient] = None

    def api(self) -> ApiClient:
        if self.client is None:
            self.client = ApiClient(self.config)
        return self.client

    def close(self) -> None:
        if self.client is not None:
            self.client.close()


app = typer.Typer(
    help="Utilities for querying the house sensor service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1, message="CLI state is uninitialized.")
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Sensor service base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="HTTP timeout in seconds.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    state = CLIState(config=config)
    ctx.obj = state
    ctx.call_on_close(state.close)


@app.command("latest")
def latest_command(ctx: typer.Context) -> None:
    """Show the latest value of every sensor."""
    state = _get_state(ctx)
    render_latest(state.api().get_latest())


@app.command("recent")
def recent_command(
    ctx: typer.Context,
    limit: Optional[int] = typer.Option(
        None,
        "--limit",
        "-n",
        min=1,
        help="Maximum number of updates to show.",
    ),
) -> None:
    """Show the most recent sensor updates, newest first."""
    state = _get_state(ctx)
    render_recent(state.api().get_recent(limit=limit))


@app.command("history")
def history_command(ctx: typer.Context) -> None:
    """List the dates for which archives exist."""
    state = _get_state(ctx)
    render_history(state.api().get_history())


@app.command("check-config")
def check_config_command(
    config_file: Path = typer.Argument(..., dir_okay=False, help="Sensor configuration file."),
) -> None:
    """Load a sensor configuration locally and print what it declares."""
    try:
        config = load_sensor_config(config_file)
    except ConfigError as exc:
        typer.secho(f"Invalid configuration: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc
    render_config(config)
