"""Wind direction conversions and blending.

Directions are stored as Cartesian radians: 0 points east and angles grow
counter-clockwise. Weather files and the HTTP service use compass degrees
(0 = north, clockwise, direction the wind blows from).
"""

from __future__ import annotations

import math

TWO_PI = 2.0 * math.pi
CALM = 0.0001

_OPPOSED_LOW = math.radians(179.0)
_OPPOSED_HIGH = math.radians(181.0)


def normalize_angle(radians: float) -> float:
    """Map an angle into [0, 2*pi)."""
    return radians % TWO_PI


def compass_to_cartesian(degrees: float) -> float:
    return normalize_angle(math.radians(90.0 - degrees))


def cartesian_to_compass(radians: float) -> float:
    return (90.0 - math.degrees(radians)) % 360.0


def blend_wind(
    wd1: float, ws1: float, wd2: float, ws2: float, fraction: float
) -> tuple[float, float]:
    """Interpolate wind between two hourly readings.

    Args:
        wd1: Direction at the earlier hour (radians)
        ws1: Speed at the earlier hour
        wd2: Direction at the later hour (radians)
        ws2: Speed at the later hour
        fraction: Position between the hours, 0 at the earlier one

    Returns:
        (direction, speed). A calm side takes the other side's direction.
        Nearly opposite winds switch over at the midpoint instead of
        rotating through a direction neither hour reported.
    """
    calm1 = ws1 < CALM and wd1 < CALM
    calm2 = ws2 < CALM and wd2 < CALM
    diff = normalize_angle(wd2 - wd1)
    opposed = ws1 >= CALM and ws2 >= CALM and _OPPOSED_LOW < diff < _OPPOSED_HIGH
    first_half = fraction <= 0.5

    if opposed:
        speed = ws1 if first_half else ws2
    else:
        speed = ws1 * (1.0 - fraction) + ws2 * fraction

    if calm1:
        direction = wd2
    elif calm2:
        direction = wd1
    elif opposed:
        direction = wd1 if first_half else wd2
    else:
        if diff > math.pi:
            diff -= TWO_PI
        direction = normalize_angle(wd2 - (1.0 - fraction) * diff)
    return direction, speed


def direction_from_compass(degrees: float, speed: float) -> float:
    """Stored direction for a compass reading.

    Calm (no speed, no direction) stays 0. A moving wind whose direction
    maps to 0 radians is stored as 2*pi so it is not mistaken for calm.
    """
    if speed == 0.0 and degrees == 0.0:
        return 0.0
    radians = compass_to_cartesian(degrees)
    if speed > 0.0 and radians == 0.0:
        return TWO_PI
    return radians
