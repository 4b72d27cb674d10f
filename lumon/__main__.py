"""CLI entry point for lumon."""

import asyncio
import json
import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError

from lumon import __version__
from lumon.cli.generate import generate_app
from lumon.config import ConfigError, Settings
from lumon.models import BRIGHTNESS_STEP

app = typer.Typer(
    name="lumon",
    help="Adjust monitor brightness over DDC/CI",
    add_completion=True,
)

app.add_typer(generate_app, name="generate")


class BackendChoice(str, Enum):
    ddc = "ddc"
    memory = "memory"


def setup_logging(level: str) -> None:
    """Configure logging."""
    # stderr keeps stdout clean for rendered output and --json
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def load_settings(
    config: Optional[Path],
    backend: Optional[BackendChoice] = None,
    verbose: bool = False,
) -> Settings:
    """Load settings, apply CLI overrides and configure logging."""
    try:
        settings = Settings.load(config)
    except (ConfigError, ValidationError) as e:
        typer.echo(f"Error: Invalid configuration: {e}", err=True)
        raise typer.Exit(1)

    # CLI overrides
    if backend is not None:
        settings.backend = backend.value

    if verbose:
        settings.app.log_level = "DEBUG"

    setup_logging(settings.app.log_level)
    return settings


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"lumon {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Adjust monitor brightness over DDC/CI."""
    pass


ConfigOption = typer.Option(
    None,
    "--config",
    "-c",
    help="Path to YAML config file",
    exists=True,
    dir_okay=False,
)
BackendOption = typer.Option(
    None,
    "--backend",
    "-b",
    help="Display backend (overrides config)",
)


@app.command()
def run(
    config: Optional[Path] = ConfigOption,
    backend: Optional[BackendChoice] = BackendOption,
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
) -> None:
    """Adjust brightness interactively."""
    from lumon.backends import create_backend
    from lumon.console import ConsoleSurface, open_stdin
    from lumon.sync import DisplayStateSynchronizer

    settings = load_settings(config, backend, verbose)

    async def _run() -> None:
        async with DisplayStateSynchronizer(create_backend(settings)) as sync:
            surface = ConsoleSurface(sync, settings.ui)
            await surface.run(await open_stdin())

    try:
        asyncio.run(_run())

    except KeyboardInterrupt:
        pass


@app.command("list")
def list_displays(
    config: Optional[Path] = ConfigOption,
    backend: Optional[BackendChoice] = BackendOption,
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print displays as JSON",
    ),
) -> None:
    """List controllable displays."""
    from lumon.backends import create_backend
    from lumon.render import render
    from lumon.sync import DisplayStateSynchronizer

    settings = load_settings(config, backend)

    async def _list() -> None:
        async with DisplayStateSynchronizer(create_backend(settings)) as sync:
            if not await sync.load():
                typer.echo("Failed to list displays.", err=True)
                raise typer.Exit(1)

            assert sync.displays is not None
            if as_json:
                typer.echo(json.dumps([d.to_dict() for d in sync.displays], indent=2))
            else:
                typer.echo(render(sync.displays))

    asyncio.run(_list())


@app.command("set")
def set_brightness(
    display: str = typer.Argument(
        ...,
        help="Display id or its number from 'lumon list'",
    ),
    value: str = typer.Argument(
        ...,
        help="Brightness value (0-100 or 0%-100%, in steps of 5)",
    ),
    config: Optional[Path] = ConfigOption,
    backend: Optional[BackendChoice] = BackendOption,
) -> None:
    """Set display brightness.

    Examples:
        lumon set i2c-7 50
        lumon set 1 75%
    """
    from lumon.backends import create_backend
    from lumon.console import find_display
    from lumon.sync import DisplayStateSynchronizer

    # Parse value (strip % if present)
    try:
        brightness = int(value.rstrip("%"))
    except ValueError:
        typer.echo(f"Error: Invalid brightness value: {value}", err=True)
        raise typer.Exit(1)

    if not 0 <= brightness <= 100:
        typer.echo("Error: Brightness must be between 0 and 100", err=True)
        raise typer.Exit(1)

    if brightness % BRIGHTNESS_STEP:
        typer.echo(f"Error: Brightness must be a multiple of {BRIGHTNESS_STEP}", err=True)
        raise typer.Exit(1)

    settings = load_settings(config, backend)

    async def _set() -> None:
        async with DisplayStateSynchronizer(create_backend(settings)) as sync:
            if not await sync.load():
                typer.echo("Failed to list displays.", err=True)
                raise typer.Exit(1)

            assert sync.displays is not None
            target = find_display(sync.displays, display)
            if target is None:
                typer.echo(f"Display not found: {display}", err=True)
                raise typer.Exit(1)

            task = sync.change_brightness(target.id, brightness)
            if task is None or not await task:
                typer.echo(f"{target.name}: Failed to set brightness", err=True)
                raise typer.Exit(1)

            typer.echo(f"{target.name}: Set brightness to {brightness}%")

    asyncio.run(_set())


@app.command(hidden=True)
def help(ctx: typer.Context) -> None:
    """Show help message."""
    assert ctx.parent is not None
    typer.echo(ctx.parent.get_help())


if __name__ == "__main__":
    app()
