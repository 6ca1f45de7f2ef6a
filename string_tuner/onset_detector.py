"""
Energy-ratio onset detection.

Flags a pluck or attack whenever the window RMS jumps by more than a fixed
ratio over the previous window.
"""

import logging
import math
from dataclasses import dataclass

from .settings import DEFAULT_SETTINGS, TunerSettings

logger = logging.getLogger(__name__)


@dataclass
class OnsetState:
    """Per-session onset tracking state."""
    previous_rms: float = 0.0
    last_onset: float | None = None  # monotonic seconds


class OnsetDetector:
    """Ratio-based onset heuristic (not a full envelope follower)."""

    def __init__(self, settings: TunerSettings = DEFAULT_SETTINGS):
        self.ratio = settings.onset_ratio

    def update(self, state: OnsetState, level: float, now: float) -> bool:
        """
        Feed the RMS of the current window.

        Args:
            state: Onset state to advance
            level: RMS of the current window
            now: Monotonic time in seconds

        Returns:
            True if an onset was recorded for this window
        """
        onset = level > state.previous_rms * self.ratio
        if onset:
            state.last_onset = now
            logger.debug("Onset at %.3fs (rms %.4f -> %.4f)", now, state.previous_rms, level)
        state.previous_rms = level
        return onset

    @staticmethod
    def seconds_since_onset(state: OnsetState, now: float) -> float:
        """Time since the last onset; infinite if none has been seen."""
        if state.last_onset is None:
            return math.inf
        return max(0.0, now - state.last_onset)
