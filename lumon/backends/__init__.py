"""Backend collaborators that enumerate displays and apply brightness."""

from typing import TYPE_CHECKING, Protocol

from lumon.models import DisplayDescriptor

if TYPE_CHECKING:
    from lumon.config import Settings


class BackendError(RuntimeError):
    """A backend request failed."""


class DisplayBackend(Protocol):
    """What the synchronizer needs from a backend."""

    async def list_displays(self) -> list[DisplayDescriptor]: ...

    async def set_brightness(self, display_id: str, value: int) -> None: ...


def create_backend(settings: "Settings") -> DisplayBackend:
    """Build the backend selected in settings."""
    if settings.backend == "memory":
        from lumon.backends.memory import MemoryBackend

        return MemoryBackend.from_settings(settings.memory)

    from lumon.backends.ddc import DDCBackend

    return DDCBackend(
        ddcutil=settings.ddc.ddcutil,
        retries=settings.ddc.retries,
        command_timeout=settings.ddc.command_timeout,
        skip_models=settings.ddc.skip_models,
    )


__all__ = [
    "BackendError",
    "DisplayBackend",
    "create_backend",
]
