"""Data records shared by the synchronizer and its backends."""

from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class DisplayDescriptor:
    """One controllable display as reported by the backend."""

    id: str  # assigned by the backend, never generated locally
    name: str  # label only, not used for identity
    brightness: int  # percentage, 0-100

    def to_dict(self) -> dict:
        return asdict(self)


DisplayList = tuple[DisplayDescriptor, ...]

# Slider granularity; brightness values produced by input surfaces sit on this grid
BRIGHTNESS_STEP = 5
