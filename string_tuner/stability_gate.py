"""
Dead-zone and hold-time hysteresis for the "in tune" indication.

The smoothed detune keeps wobbling around zero from estimator noise. The gate
latches a tuned state only after the detune has stayed inside the dead zone
for the hold duration, and releases it the moment the detune leaves it.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from .settings import DEFAULT_SETTINGS, TunerSettings

logger = logging.getLogger(__name__)


class GateStatus(Enum):
    """State of the stability gate."""

    ACTIVE = "active"  # outside the dead zone
    SETTLING = "settling"  # inside the dead zone, hold time not reached
    TUNED = "tuned"  # inside the dead zone for at least the hold time


@dataclass
class StabilityState:
    """Per-session gate state."""
    deadzone_start: float | None = None  # monotonic seconds
    tuned: bool = False


@dataclass(frozen=True)
class GateReading:
    """Gate output for one frame."""
    detune: float  # semitones to display; exactly 0.0 when tuned
    status: GateStatus

    @property
    def tuned(self) -> bool:
        return self.status is GateStatus.TUNED


class StabilityGate:
    """Hysteresis gate over the smoothed detune."""

    def __init__(self, settings: TunerSettings = DEFAULT_SETTINGS):
        self.deadzone_cents = settings.deadzone_cents
        self.hold_seconds = settings.hold_seconds

    def update(self, state: StabilityState, smoothed_detune: float, now: float) -> GateReading:
        """
        Advance the gate with this frame's smoothed detune.

        Args:
            state: Gate state to advance
            smoothed_detune: Smoothed detune in semitones
            now: Monotonic time in seconds

        Returns:
            GateReading with the value to display and the gate status
        """
        cents = smoothed_detune * 100

        if abs(cents) >= self.deadzone_cents:
            if state.tuned:
                logger.debug("Left tuned state at %.2f cents", cents)
            state.deadzone_start = None
            state.tuned = False
            return GateReading(detune=smoothed_detune, status=GateStatus.ACTIVE)

        if state.deadzone_start is None:
            state.deadzone_start = now

        if now - state.deadzone_start >= self.hold_seconds:
            if not state.tuned:
                logger.debug("Latched tuned state after %.3fs", now - state.deadzone_start)
            state.tuned = True
            return GateReading(detune=0.0, status=GateStatus.TUNED)

        state.tuned = False
        return GateReading(detune=smoothed_detune, status=GateStatus.SETTLING)
