"""Shared fixtures for lumon tests."""

import asyncio
import os
from typing import Optional

import pytest

from lumon.backends import BackendError
from lumon.models import DisplayDescriptor


class GatedBackend:
    """Backend whose brightness calls finish only when a test releases them.

    Every ``set_brightness`` call parks on its own future in ``gates``;
    ``release(i)`` lets call ``i`` succeed and ``fail(i)`` makes it raise.
    """

    def __init__(self, displays: list[DisplayDescriptor]):
        self.displays = list(displays)
        self.list_error: Optional[Exception] = None
        self.calls: list[tuple[str, int]] = []
        self.gates: list[asyncio.Future] = []

    async def list_displays(self) -> list[DisplayDescriptor]:
        if self.list_error is not None:
            raise self.list_error
        return list(self.displays)

    async def set_brightness(self, display_id: str, value: int) -> None:
        self.calls.append((display_id, value))
        gate = asyncio.get_running_loop().create_future()
        self.gates.append(gate)
        await gate

    def release(self, index: int) -> None:
        self.gates[index].set_result(None)

    def fail(self, index: int, message: str = "request failed") -> None:
        self.gates[index].set_exception(BackendError(message))


@pytest.fixture
def descriptors() -> list[DisplayDescriptor]:
    return [
        DisplayDescriptor(id="d1", name="Main", brightness=50),
        DisplayDescriptor(id="d2", name="Side", brightness=30),
        DisplayDescriptor(id="d3", name="TV", brightness=100),
    ]


@pytest.fixture
def backend(descriptors: list[DisplayDescriptor]) -> GatedBackend:
    return GatedBackend(descriptors)


@pytest.fixture
def isolated_home(tmp_path, monkeypatch):
    """No user config, no LUMON_* variables from the outer environment."""
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)
    for name in list(os.environ):
        if name.startswith("LUMON_"):
            monkeypatch.delenv(name)
    return tmp_path
