"""Client-side display state with optimistic brightness updates."""

import asyncio
import logging
from dataclasses import replace
from typing import Callable, Optional

from lumon.backends import BackendError, DisplayBackend
from lumon.models import DisplayList

logger = logging.getLogger(__name__)

Listener = Callable[[Optional[DisplayList]], None]


class DisplayStateSynchronizer:
    """Owns the session's display list and keeps it in step with the backend.

    Local state changes first and the backend is told afterwards. Failed
    backend calls are logged but never rolled back, so the list always shows
    the last value the user asked for.
    """

    def __init__(self, backend: DisplayBackend):
        """Initialize with the backend collaborator.

        Args:
            backend: Anything implementing ``list_displays`` and ``set_brightness``
        """
        self.backend = backend

        # None means "still loading"
        self._displays: Optional[DisplayList] = None
        self._pending: set[asyncio.Task] = set()
        self._listeners: list[Listener] = []

    async def __aenter__(self) -> "DisplayStateSynchronizer":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    @property
    def displays(self) -> Optional[DisplayList]:
        """Current snapshot, or None until the first successful load."""
        return self._displays

    @property
    def loaded(self) -> bool:
        return self._displays is not None

    @property
    def pending(self) -> int:
        """Number of backend brightness calls still in flight."""
        return len(self._pending)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a callback for local state changes.

        Returns:
            A function that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def load(self) -> bool:
        """Replace the local list with the backend's current displays.

        Returns:
            True on success, False if the backend could not list displays
        """
        try:
            displays = await self.backend.list_displays()
        except BackendError as e:
            logger.error(f"Failed to list displays: {e}")
            return False
        except Exception as e:
            logger.exception(f"Error listing displays: {e}")
            return False

        self._set_displays(tuple(displays))
        logger.info(f"Loaded {len(self._displays)} display(s)")
        return True

    def change_brightness(self, display_id: str, value: int) -> Optional[asyncio.Task]:
        """Apply a brightness change locally, then push it to the backend.

        The local list is updated before this returns. The backend call runs
        as a separate task and its completion order relative to other calls
        is not guaranteed.

        Args:
            display_id: Backend id of the display
            value: New brightness, stored as given

        Returns:
            The task carrying the backend call (result True on success), or
            None if no display with that id is known
        """
        # Raises before any local change when called outside the event loop
        loop = asyncio.get_running_loop()
        displays = self._displays or ()

        for index, display in enumerate(displays):
            if display.id == display_id:
                break
        else:
            logger.debug(f"Ignoring brightness change for unknown display {display_id}")
            return None

        updated = list(displays)
        updated[index] = replace(display, brightness=value)
        self._set_displays(tuple(updated))

        task = loop.create_task(self._push(display_id, value))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    def on_brightness_input(self, display_id: str, value: int) -> None:
        """Input callback for rendering surfaces."""
        self.change_brightness(display_id, value)

    async def drain(self) -> None:
        """Wait for every in-flight backend call to finish."""
        while self._pending:
            await asyncio.gather(*self._pending)

    async def aclose(self) -> None:
        """End the session: let backend calls finish and drop listeners."""
        await self.drain()
        self._listeners.clear()

    async def _push(self, display_id: str, value: int) -> bool:
        try:
            await self.backend.set_brightness(display_id, value)
        except BackendError as e:
            logger.error(f"Failed to set brightness for {display_id} to {value}: {e}")
            return False
        except Exception as e:
            logger.exception(f"Error setting brightness for {display_id}: {e}")
            return False

        logger.debug(f"Backend confirmed brightness {value} for {display_id}")
        return True

    def _set_displays(self, displays: DisplayList) -> None:
        self._displays = displays
        for listener in list(self._listeners):
            try:
                listener(displays)
            except Exception as e:
                logger.exception(f"Error in display listener: {e}")
