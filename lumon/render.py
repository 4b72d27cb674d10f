"""Plain-text rendering of a display list snapshot."""

from typing import Optional

from lumon.models import DisplayList

BAR_WIDTH = 20


def brightness_bar(value: int, width: int = BAR_WIDTH) -> str:
    """Draw a slider-like bar, e.g. ``[#####-----]`` for 50."""
    filled = round(max(0, min(100, value)) * width / 100)
    return "[" + "#" * filled + "-" * (width - filled) + "]"


def render(displays: Optional[DisplayList], title: Optional[str] = None) -> str:
    lines = [title] if title else []

    if displays is None:
        lines.append("Loading...")
    elif not displays:
        lines.append("No displays found.")

    for i, d in enumerate(displays or ()):
        lines.append(f"{i + 1}. {d.name}")
        lines.append(f"   Brightness: {d.brightness}%  {brightness_bar(d.brightness)}")

    return "\n".join(lines)
