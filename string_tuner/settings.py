"""
Tunable parameters for the pitch tracking pipeline.

Every threshold, smoothing tier and needle curve parameter lives here so that
alternative tunings of the tracker can be tried without touching the
algorithms. The defaults are one documented set; see DESIGN.md.
"""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class SmoothingTier:
    """Smoothing coefficient used while time since onset is below `until`."""
    until: float  # seconds since last onset
    alpha: float


@dataclass(frozen=True)
class TunerSettings:
    """
    Parameters for the pitch tracker.

    Attributes:
        rms_threshold: Window RMS below which no pitch is reported
        trim_threshold: Amplitude used to trim quiet edges before autocorrelation
        onset_ratio: RMS growth ratio between frames that counts as an onset
        smoothing_tiers: Ordered (until, alpha) tiers applied after an onset
        sustained_alpha: Alpha once the last tier has elapsed
        deadzone_cents: Cents band treated as "in tune"
        hold_seconds: Time the detune must stay in the band before latching
        max_angle: Maximum needle deflection in radians
        inner_threshold_cents: Extent of the linear inner needle region
        inner_angle: Needle angle at the edge of the inner region
        curve_exponent: Power-law exponent for the outer needle region
        ui_interval_seconds: Minimum interval between text refreshes
    """
    rms_threshold: float = 0.01
    trim_threshold: float = 0.2
    onset_ratio: float = 1.3
    smoothing_tiers: tuple[SmoothingTier, ...] = (
        SmoothingTier(until=0.05, alpha=0.02),
        SmoothingTier(until=0.5, alpha=0.08),
    )
    sustained_alpha: float = 0.2
    deadzone_cents: float = 0.2
    hold_seconds: float = 0.2
    max_angle: float = math.pi / 3
    inner_threshold_cents: float = 2.0
    inner_angle: float = math.pi / 9
    curve_exponent: float = 0.3
    ui_interval_seconds: float = 0.25

    def __post_init__(self):
        for name in (
            "rms_threshold",
            "trim_threshold",
            "deadzone_cents",
            "max_angle",
            "inner_angle",
            "curve_exponent",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if self.onset_ratio <= 1.0:
            raise ValueError(f"onset_ratio must be above 1.0, got {self.onset_ratio}")
        if self.hold_seconds < 0 or self.ui_interval_seconds < 0:
            raise ValueError("hold_seconds and ui_interval_seconds must not be negative")
        if not 0 < self.inner_threshold_cents < 100:
            raise ValueError(
                f"inner_threshold_cents must be in (0, 100), got {self.inner_threshold_cents}"
            )
        if self.inner_angle >= self.max_angle:
            raise ValueError("inner_angle must be smaller than max_angle")

        alphas = [tier.alpha for tier in self.smoothing_tiers] + [self.sustained_alpha]
        times = [tier.until for tier in self.smoothing_tiers]
        if any(not 0 < a <= 1 for a in alphas):
            raise ValueError(f"Smoothing alphas must be in (0, 1], got {alphas}")
        if any(b <= a for a, b in zip(alphas, alphas[1:])):
            raise ValueError(f"Smoothing alphas must be strictly increasing, got {alphas}")
        if any(t <= 0 for t in times) or any(b <= a for a, b in zip(times, times[1:])):
            raise ValueError(f"Smoothing tier times must be positive and increasing, got {times}")


DEFAULT_SETTINGS = TunerSettings()
