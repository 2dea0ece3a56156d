"""Command-line interface for the work timer."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import typer

from .client import InstanceClient
from .config import DEFAULT_HOST, DEFAULT_PORT, TimerSettings
from .errors import WorkLogError
from .paths import get_work_log_path
from .reporting import status_line

app = typer.Typer(help="Toggle between working and pausing, and log the time worked.")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logs."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    ctx.obj = {"verbose": verbose}
    if ctx.invoked_subcommand is None:
        run(ctx, log_path=None, host=DEFAULT_HOST, port=DEFAULT_PORT, quiet=False)


def _settings(host: str, port: int) -> TimerSettings:
    return TimerSettings.from_options(host=host, port=port)


def _fail(exc: Exception) -> None:
    typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


def _echo_status(payload: dict[str, Any]) -> None:
    typer.echo(
        status_line(payload["running"], payload["today_seconds"], payload.get("pause_seconds"))
    )


HostOption = typer.Option(DEFAULT_HOST, "--host", help="Interface of the control API.")
PortOption = typer.Option(DEFAULT_PORT, "--port", min=1, max=65535, help="TCP port of the control API.")


@app.command()
def run(
    ctx: typer.Context,
    log_path: Optional[Path] = typer.Option(
        None,
        "--log",
        path_type=Path,
        help="Location of the work log (defaults to work_times.csv in the user data dir).",
    ),
    host: str = HostOption,
    port: int = PortOption,
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Do not draw the status line."),
) -> None:
    """Start the timer, or toggle the one that is already running."""
    settings = _settings(host, port)
    client = InstanceClient.from_settings(settings)
    try:
        if client.is_available():
            _echo_status(client.toggle())
            return

        from .server_runner import run_timer

        run_timer(
            log_path=log_path or get_work_log_path(),
            settings=settings,
            quiet=quiet,
            log_level="info" if (ctx.obj or {}).get("verbose") else "warning",
        )
    except WorkLogError as exc:
        _fail(exc)


def _forward(command: str, host: str, port: int) -> None:
    client = InstanceClient.from_settings(_settings(host, port))
    try:
        payload = getattr(client, command)()
    except WorkLogError as exc:
        _fail(exc)
    else:
        _echo_status(payload)


@app.command()
def toggle(host: str = HostOption, port: int = PortOption) -> None:
    """Switch the running timer between working and pausing."""
    _forward("toggle", host, port)


@app.command()
def start(host: str = HostOption, port: int = PortOption) -> None:
    """Start working (no-op if already working)."""
    _forward("start", host, port)


@app.command()
def stop(host: str = HostOption, port: int = PortOption) -> None:
    """Stop working and record the session (no-op if pausing)."""
    _forward("stop", host, port)


@app.command()
def status(host: str = HostOption, port: int = PortOption) -> None:
    """Show the state of the running timer."""
    _forward("status", host, port)


@app.command("quit")
def quit_(
    force: bool = typer.Option(False, "--force", "-f", help="Close even while working."),
    host: str = HostOption,
    port: int = PortOption,
) -> None:
    """Close the running timer, recording the current session first."""
    client = InstanceClient.from_settings(_settings(host, port))
    try:
        if not force and not client.status()["can_exit"]:
            force = typer.confirm(
                "You're still working, really close this program?", default=False
            )
            if not force:
                raise typer.Exit(code=1)
        _echo_status(client.shutdown(force=force))
    except WorkLogError as exc:
        _fail(exc)


@app.command()
def summary(
    date: Optional[str] = typer.Option(
        None,
        "--date",
        help="Date (YYYY-MM-DD) to summarize. Defaults to today.",
    ),
    log_path: Optional[Path] = typer.Option(
        None,
        "--log",
        path_type=Path,
        help="Location of the work log.",
    ),
) -> None:
    """Print the sessions recorded for a specific day."""
    from .reporting import SummaryPrinter

    try:
        target = datetime.strptime(date, "%Y-%m-%d").date() if date else datetime.now().date()
    except ValueError as exc:
        raise typer.BadParameter("expected YYYY-MM-DD", param_hint="--date") from exc
    try:
        SummaryPrinter(log_path=log_path or get_work_log_path()).print_daily_summary(target)
    except WorkLogError as exc:
        _fail(exc)
