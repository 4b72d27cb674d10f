"""In-process backend for running without DDC hardware."""

import logging
from typing import Iterable

from lumon.backends import BackendError
from lumon.config import MemorySettings
from lumon.models import DisplayDescriptor

logger = logging.getLogger(__name__)


class MemoryBackend:
    """Keeps brightness values in a dict instead of on a monitor."""

    def __init__(self, displays: Iterable[DisplayDescriptor] = ()):
        self._displays: dict[str, DisplayDescriptor] = {d.id: d for d in displays}

    @classmethod
    def from_settings(cls, settings: MemorySettings) -> "MemoryBackend":
        return cls(
            DisplayDescriptor(id=d.id, name=d.name, brightness=d.brightness)
            for d in settings.displays
        )

    async def list_displays(self) -> list[DisplayDescriptor]:
        return list(self._displays.values())

    async def set_brightness(self, display_id: str, value: int) -> None:
        display = self._displays.get(display_id)
        if display is None:
            raise BackendError(f"Display not found: {display_id}")

        self._displays[display_id] = DisplayDescriptor(
            id=display.id, name=display.name, brightness=value
        )
        logger.info(f"Brightness set to {value} for {display_id}")
