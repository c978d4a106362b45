"""Worst-case envelope across parts with the driving part for each axis."""

from typing import Callable, Optional, Sequence

from app.models.analytics import EnvelopeDriver, EnvelopeDrivers, EnvelopeResult
from app.models.parts import Part


def _find_max_driver(parts: Sequence[Part], get_value: Callable[[Part], float]) -> EnvelopeDriver:
    max_part = parts[0]
    max_value = get_value(max_part)

    for part in parts[1:]:
        value = get_value(part)
        # Strict comparison: the first part wins ties
        if value > max_value:
            max_value = value
            max_part = part

    return EnvelopeDriver(part_id=max_part.callout, part_callout=max_part.callout, value=max_value)


def calculate_envelope(parts: Sequence[Part]) -> Optional[EnvelopeResult]:
    """Maximum width, height and length of the set, or None when empty."""
    if not parts:
        return None

    max_width = _find_max_driver(parts, lambda p: p.width_mm)
    max_height = _find_max_driver(parts, lambda p: p.height_mm)
    max_length = _find_max_driver(parts, lambda p: p.length_mm)

    return EnvelopeResult(
        width_mm=max_width.value,
        height_mm=max_height.value,
        length_mm=max_length.value,
        drivers=EnvelopeDrivers(
            max_width=max_width,
            max_height=max_height,
            max_length=max_length,
        ),
    )
