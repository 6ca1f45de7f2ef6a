"""
Onset-aware exponential smoothing of the detune.

Right after an attack the estimate is unstable, so the detune is smoothed
heavily; once the note sustains, the coefficient steps up so that real
intonation drift shows up promptly.
"""

from dataclasses import dataclass

import numpy as np

from .constants import A4_NOTE_NUMBER, A4_REFERENCE, OCTAVE
from .settings import DEFAULT_SETTINGS, TunerSettings


@dataclass
class SmoothingState:
    """Smoothed detune in signed semitones."""
    smoothed_detune: float = 0.0


def raw_detune(frequency: float, reference: float = A4_REFERENCE) -> float:
    """
    Fractional distance in semitones from the nearest equal-tempered note.

    Result lies in [-0.5, 0.5]; positive means sharp.
    """
    note_number = OCTAVE * np.log2(frequency / reference) + A4_NOTE_NUMBER
    return float(note_number - round(note_number))


class AdaptiveSmoother:
    """EMA filter whose coefficient is a step function of time since onset."""

    def __init__(self, settings: TunerSettings = DEFAULT_SETTINGS):
        self.tiers = settings.smoothing_tiers
        self.sustained_alpha = settings.sustained_alpha

    def alpha_for(self, elapsed: float) -> float:
        """Smoothing coefficient for the given seconds since the last onset."""
        for tier in self.tiers:
            if elapsed < tier.until:
                return tier.alpha
        return self.sustained_alpha

    def update(self, state: SmoothingState, detune: float, elapsed: float) -> float:
        """
        Blend a new raw detune into the smoothed value.

        Args:
            state: Smoothing state to advance
            detune: Raw detune in semitones
            elapsed: Seconds since the last onset

        Returns:
            The new smoothed detune
        """
        alpha = self.alpha_for(elapsed)
        state.smoothed_detune = alpha * detune + (1 - alpha) * state.smoothed_detune
        return state.smoothed_detune
