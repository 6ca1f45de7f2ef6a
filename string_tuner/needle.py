"""
Detune to needle angle mapping.

The needle uses a two-region curve: a linear inner region for the last few
cents, where resolution matters most, and a power-law compressed outer region
so that the full +/-100 cent range still fits the dial.
"""

from dataclasses import dataclass

import numpy as np

from .settings import DEFAULT_SETTINGS, TunerSettings

MAX_CENTS = 100.0


def cents_to_angle(cents: float, settings: TunerSettings = DEFAULT_SETTINGS) -> float:
    """
    Needle angle in radians for a cents deviation.

    Cents are clamped to [-100, 100]. The result is odd-symmetric, zero at
    zero, non-decreasing in magnitude and bounded by settings.max_angle.
    """
    clamped = float(np.clip(cents, -MAX_CENTS, MAX_CENTS))
    sign = -1.0 if clamped < 0 else 1.0
    magnitude = abs(clamped)

    inner = settings.inner_threshold_cents
    if magnitude <= inner:
        return sign * (magnitude / inner) * settings.inner_angle

    remainder = (magnitude - inner) / (MAX_CENTS - inner)
    outer_span = settings.max_angle - settings.inner_angle
    return sign * (settings.inner_angle + remainder ** settings.curve_exponent * outer_span)


@dataclass(frozen=True)
class GaugeTick:
    """A dial tick mark."""
    cents: float
    angle: float
    major: bool


def gauge_ticks(count: int = 20, settings: TunerSettings = DEFAULT_SETTINGS) -> list[GaugeTick]:
    """
    Tick marks across the +/-100 cent dial, placed with the needle curve.

    Args:
        count: Number of intervals (20 gives a tick every 10 cents)
        settings: Needle curve parameters

    Returns:
        count + 1 ticks from -100 to +100 cents, every fifth one major
    """
    if count < 1:
        raise ValueError(f"Tick count must be at least 1, got {count}")

    ticks = []
    for i in range(count + 1):
        cents = -MAX_CENTS + i * 2 * MAX_CENTS / count
        ticks.append(
            GaugeTick(cents=cents, angle=cents_to_angle(cents, settings), major=i % 5 == 0)
        )
    return ticks
