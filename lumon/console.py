"""Interactive console surface for adjusting display brightness."""

import asyncio
import logging
import os
import stat
import sys
from typing import Callable, Optional

import typer

from lumon.config import UISettings
from lumon.models import BRIGHTNESS_STEP, DisplayDescriptor, DisplayList
from lumon.render import render
from lumon.sync import DisplayStateSynchronizer

logger = logging.getLogger(__name__)

HELP = """\
Commands:
  <n|id> <value>   set brightness (0-100 in steps of 5, optional %)
  <n|id> + | -     nudge brightness by one step
  r                reload displays
  q                quit
  ?                show this help"""


def find_display(displays: DisplayList, token: str) -> Optional[DisplayDescriptor]:
    """Look a display up by id, or failing that by its 1-based list position."""
    for d in displays:
        if d.id == token:
            return d
    if token.isdigit() and 1 <= int(token) <= len(displays):
        return displays[int(token) - 1]
    return None


def nudge(current: int, step: int, up: bool) -> int:
    """Move one step up or down, landing on the step grid.

    A value off the grid (e.g. 37 read from hardware) moves to the
    neighbouring grid point, 40 up or 35 down.
    """
    if up:
        value = (current // step + 1) * step
    else:
        value = (-(-current // step) - 1) * step
    return max(0, min(100, value))


async def open_stdin() -> asyncio.StreamReader:
    """Wrap stdin in a StreamReader on the running loop.

    Terminals and pipes are read as they arrive. A regular file redirected to
    stdin cannot be registered with the loop, so its lines are fed up front.
    """
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader()

    if stat.S_ISREG(os.fstat(sys.stdin.fileno()).st_mode):
        reader.feed_data(sys.stdin.buffer.read())
        reader.feed_eof()
        return reader

    protocol = asyncio.StreamReaderProtocol(reader)
    await loop.connect_read_pipe(lambda: protocol, sys.stdin)
    return reader


class ConsoleSurface:
    """Reads commands line by line and redraws after every state change."""

    def __init__(
        self,
        sync: DisplayStateSynchronizer,
        settings: Optional[UISettings] = None,
        echo: Callable[[str], None] = typer.echo,
    ):
        self.sync = sync
        self.settings = settings or UISettings()
        self.echo = echo

    def redraw(self, displays: Optional[DisplayList]) -> None:
        self.echo(render(displays, self.settings.title))

    async def run(self, reader: asyncio.StreamReader) -> None:
        """Load displays, then process input until quit or EOF."""
        unsubscribe = self.sync.subscribe(self.redraw)
        try:
            self.redraw(self.sync.displays)
            await self.reload()

            while True:
                line = await reader.readline()
                if not line:
                    break
                if not await self.handle(line.decode().strip()):
                    break
        finally:
            unsubscribe()

    async def reload(self) -> None:
        if not await self.sync.load():
            self.echo("Displays unavailable, enter r to retry.")

    async def handle(self, line: str) -> bool:
        """Handle one input line.

        Returns:
            False when the user asked to quit
        """
        if not line:
            self.redraw(self.sync.displays)
            return True
        if line == "q":
            return False
        if line == "?":
            self.echo(HELP)
            return True
        if line == "r":
            await self.reload()
            return True

        parts = line.split()
        if len(parts) != 2:
            self.echo(f"Invalid command: {line} (enter ? for help)")
            return True

        displays = self.sync.displays
        if displays is None:
            self.echo("Displays are still loading.")
            return True

        target = find_display(displays, parts[0])
        if target is None:
            self.echo(f"Unknown display: {parts[0]}")
            return True

        value = self._parse_value(parts[1], target.brightness)
        if value is None:
            self.echo(f"Invalid brightness value: {parts[1]}")
            return True

        self.sync.on_brightness_input(target.id, value)
        return True

    def _parse_value(self, token: str, current: int) -> Optional[int]:
        if token in ("+", "-"):
            return nudge(current, self.settings.step, up=token == "+")

        try:
            value = int(token.rstrip("%"))
        except ValueError:
            return None

        if not 0 <= value <= 100 or value % BRIGHTNESS_STEP:
            return None
        return value
