"""Brightness control via ddcutil."""

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Iterable, Optional

from lumon.backends import BackendError
from lumon.models import DisplayDescriptor

logger = logging.getLogger(__name__)

# MCCS luminance; ddcutil reads feature codes as hex
VCP_BRIGHTNESS = "10"


@dataclass
class DDCDisplay:
    """Represents a ddcutil-detected display."""

    display_number: int  # ddcutil display number (1-based)
    i2c_bus: int  # e.g., 7 for /dev/i2c-7
    mfg_id: Optional[str] = None  # 3-letter code, e.g., "SAM"
    model: Optional[str] = None
    serial: Optional[str] = None

    @property
    def id(self) -> str:
        return f"i2c-{self.i2c_bus}"


def parse_detect_output(output: str) -> list[DDCDisplay]:
    """Parse ddcutil detect output into DDCDisplay objects.

    Example ddcutil detect output:
    Display 1
       I2C bus:  /dev/i2c-7
       DRM connector:           card1-HDMI-A-1
       EDID synopsis:
          Mfg id:               SAM - Samsung Electric Company
          Model:                LU28R55
          Serial number:        HNMNB00590
       ...
    Invalid display
       I2C bus:  /dev/i2c-4
       ...
    """
    displays = []
    current: Optional[DDCDisplay] = None

    for line in output.split("\n"):
        line_stripped = line.strip()

        if line and not line[0].isspace():
            if current and current.i2c_bus >= 0:
                displays.append(current)
            current = None

            # "Invalid display" and "Phantom display" blocks are skipped
            match = re.match(r"^Display (\d+)", line_stripped)
            if match:
                current = DDCDisplay(display_number=int(match.group(1)), i2c_bus=-1)
        elif current:
            if line_stripped.startswith("I2C bus:"):
                bus_match = re.search(r"/dev/i2c-(\d+)", line_stripped)
                if bus_match:
                    current.i2c_bus = int(bus_match.group(1))
            elif line_stripped.startswith("Mfg id:"):
                # "SAM - Samsung Electric Company" -> "SAM"
                mfg_match = re.match(r"Mfg id:\s*(\w+)", line_stripped)
                if mfg_match:
                    current.mfg_id = mfg_match.group(1)
            elif line_stripped.startswith("Model:"):
                current.model = line_stripped.split(":", 1)[1].strip()
            elif line_stripped.startswith("Serial number:"):
                current.serial = line_stripped.split(":", 1)[1].strip()

    if current and current.i2c_bus >= 0:
        displays.append(current)

    return displays


def parse_getvcp_brief(output: str) -> Optional[int]:
    """Extract the current value from ``ddcutil getvcp --brief`` output.

    Brief format is "VCP 10 C 60 100" (code, type, current, max), some
    monitors omit the max.
    """
    parts = output.strip().split()

    if len(parts) >= 4 and parts[0] == "VCP":
        try:
            return int(parts[3])
        except ValueError:
            return None

    for i, part in enumerate(parts):
        if part == "C" and i + 1 < len(parts):
            try:
                return int(parts[i + 1])
            except ValueError:
                return None

    return None


class DDCBackend:
    """Enumerate monitors and set their brightness through ddcutil."""

    def __init__(
        self,
        ddcutil: str = "ddcutil",
        retries: int = 2,
        command_timeout: float = 10.0,
        skip_models: Iterable[str] = ("Generic PnP Monitor",),
    ):
        """Initialize the backend.

        Args:
            ddcutil: ddcutil executable name or path
            retries: Number of retries for ddcutil commands
            command_timeout: Timeout for ddcutil commands in seconds
            skip_models: Model names that are never listed
        """
        self.ddcutil = ddcutil
        self.retries = retries
        self.command_timeout = command_timeout
        self.skip_models = set(skip_models)

        # display id -> i2c bus, from the last enumeration
        self._buses: dict[str, int] = {}

    async def _run(self, *args: str) -> tuple[int, str, str]:
        """Run one ddcutil command with timeout and retries.

        Returns:
            (returncode, stdout, stderr) of the last attempt

        Raises:
            BackendError: ddcutil is missing or every attempt timed out
        """
        returncode, stdout, stderr = -1, "", ""

        for attempt in range(self.retries + 1):
            try:
                proc = await asyncio.create_subprocess_exec(
                    self.ddcutil,
                    *args,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                )
            except FileNotFoundError as e:
                logger.error("ddcutil not found. Is it installed?")
                raise BackendError(f"{self.ddcutil} not found") from e

            try:
                out, err = await asyncio.wait_for(
                    proc.communicate(), timeout=self.command_timeout
                )
            except asyncio.TimeoutError:
                proc.kill()
                await proc.wait()
                logger.warning(f"ddcutil {args[0]} timed out (attempt {attempt + 1})")
                stderr = "timed out"
                continue

            returncode, stdout, stderr = proc.returncode, out.decode(), err.decode()
            if returncode == 0:
                return returncode, stdout, stderr

            if attempt < self.retries:
                logger.debug(f"ddcutil {args[0]} failed, retrying...")
                await asyncio.sleep(0.5)

        if returncode == -1:
            raise BackendError(f"ddcutil {args[0]} timed out")

        return returncode, stdout, stderr

    async def detect(self) -> list[DDCDisplay]:
        """Run ddcutil detect and parse the result."""
        returncode, stdout, _ = await self._run("detect")

        if returncode != 0:
            # ddcutil may return non-zero if no displays found
            logger.warning(f"ddcutil detect returned {returncode}")
            return []

        return parse_detect_output(stdout)

    async def get_brightness(self, i2c_bus: int) -> Optional[int]:
        """Get current brightness for a display via its I2C bus.

        Args:
            i2c_bus: The I2C bus number (e.g., 7 for /dev/i2c-7)

        Returns:
            Brightness value 0-100, or None on failure
        """
        returncode, stdout, stderr = await self._run(
            "getvcp", VCP_BRIGHTNESS, "--bus", str(i2c_bus), "--brief"
        )

        if returncode != 0:
            logger.warning(f"ddcutil getvcp failed on bus {i2c_bus}: {stderr.strip()}")
            return None

        value = parse_getvcp_brief(stdout)
        if value is None:
            logger.warning(f"Unexpected ddcutil output: {stdout.strip()}")
        return value

    async def list_displays(self) -> list[DisplayDescriptor]:
        """List displays that can be controlled, in ddcutil order."""
        displays = []
        buses = {}

        for ddc in await self.detect():
            if not ddc.model or not ddc.mfg_id or ddc.model in self.skip_models:
                logger.debug(f"Skipping display on bus {ddc.i2c_bus} ({ddc.model!r})")
                continue

            brightness = await self.get_brightness(ddc.i2c_bus)
            if brightness is None:
                continue

            buses[ddc.id] = ddc.i2c_bus
            displays.append(
                DisplayDescriptor(id=ddc.id, name=ddc.model, brightness=brightness)
            )

        self._buses = buses
        logger.info(f"Found {len(displays)} controllable display(s)")
        return displays

    async def _resolve_bus(self, display_id: str) -> int:
        if display_id not in self._buses:
            self._buses.update({d.id: d.i2c_bus for d in await self.detect()})

        try:
            return self._buses[display_id]
        except KeyError:
            raise BackendError(f"Display not found: {display_id}") from None

    async def set_brightness(self, display_id: str, value: int) -> None:
        """Set brightness for a display.

        Args:
            display_id: Id from list_displays, e.g. "i2c-7"
            value: Brightness value 0-100

        Raises:
            BackendError: The display is unknown or ddcutil failed
        """
        i2c_bus = await self._resolve_bus(display_id)

        # Clamp value to valid range
        value = max(0, min(100, value))

        returncode, _, stderr = await self._run(
            "setvcp", VCP_BRIGHTNESS, str(value), "--bus", str(i2c_bus)
        )

        if returncode != 0:
            logger.error(f"ddcutil setvcp failed on bus {i2c_bus}: {stderr.strip()}")
            raise BackendError(f"Failed to set brightness: {stderr.strip()}")

        logger.info(f"Brightness set to {value} for {display_id}")
