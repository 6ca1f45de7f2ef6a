"""
Autocorrelation pitch detector (ACF2+).

Estimates the fundamental frequency of a monophonic window by locating the
first major autocorrelation peak after the zero-lag lobe, refined with
parabolic interpolation for sub-sample period resolution.
"""

from dataclasses import dataclass

import numpy as np
from scipy.signal import correlate

from .constants import SAMPLE_RATE
from .settings import DEFAULT_SETTINGS, TunerSettings


@dataclass(frozen=True)
class SampleWindow:
    """A fixed block of mono samples and the rate it was captured at."""
    samples: np.ndarray
    sample_rate: float = SAMPLE_RATE

    @classmethod
    def from_array(cls, samples, sample_rate: float = SAMPLE_RATE) -> "SampleWindow":
        """
        Build a window from any array-like, copying into a read-only float64 array.

        Raises:
            ValueError: If the samples are not 1-D, empty, or the rate is not positive
        """
        data = np.array(samples, dtype=np.float64)
        if data.ndim != 1:
            raise ValueError(f"Sample window must be 1-D, got shape {data.shape}")
        if data.size == 0:
            raise ValueError("Sample window is empty")
        if sample_rate <= 0:
            raise ValueError(f"Sample rate must be positive, got {sample_rate}")
        data.setflags(write=False)
        return cls(samples=data, sample_rate=float(sample_rate))

    def __len__(self) -> int:
        return len(self.samples)


def rms(samples: np.ndarray) -> float:
    """Root mean square level of a block of samples."""
    if len(samples) == 0:
        return 0.0
    return float(np.sqrt(np.mean(np.square(samples))))


class AutocorrelationPitchDetector:
    """
    Single-pitch detector based on the time-domain autocorrelation.

    Returns a frequency in Hz, or None when the window holds no usable
    pitch (too quiet, too short after trimming, or a featureless
    autocorrelation). A missing pitch is an ordinary result, not an error.
    """

    def __init__(self, settings: TunerSettings = DEFAULT_SETTINGS):
        self.rms_threshold = settings.rms_threshold
        self.trim_threshold = settings.trim_threshold

    def set_rms_threshold(self, threshold: float):
        self.rms_threshold = threshold

    def set_trim_threshold(self, threshold: float):
        self.trim_threshold = threshold

    def process(self, window: SampleWindow) -> float | None:
        """
        Estimate the fundamental frequency of a window.

        Args:
            window: Sample window to analyze

        Returns:
            Frequency in Hz, or None if no pitch was found
        """
        samples = window.samples
        if rms(samples) < self.rms_threshold:
            return None

        trimmed = self._trim_edges(samples)
        if len(trimmed) < 3:
            return None

        period = self._find_period(trimmed)
        if period is None or period <= 0:
            return None

        return window.sample_rate / period

    def _trim_edges(self, samples: np.ndarray) -> np.ndarray:
        """
        Drop the quiet lead-in and tail of the window.

        The window is cut at the first sample reaching the trim threshold in
        the first half and the last such sample in the second half. A side
        without a crossing keeps its original boundary.
        """
        n = len(samples)
        half = n // 2
        loud = np.abs(samples) >= self.trim_threshold

        start = 0
        head = np.flatnonzero(loud[:half])
        if len(head):
            start = int(head[0])

        end = n
        tail = np.flatnonzero(loud[half:])
        if len(tail):
            end = half + int(tail[-1]) + 1

        return samples[start:end]

    def _find_period(self, samples: np.ndarray) -> float | None:
        """Locate the fundamental period in samples, with sub-sample refinement."""
        n = len(samples)
        # corr[i] = sum_j samples[j] * samples[j + i]
        corr = correlate(samples, samples, mode="full", method="direct")[n - 1 :]

        # Walk down the zero-lag lobe
        d = 0
        while d < n - 1 and corr[d] > corr[d + 1]:
            d += 1
        if d >= n - 1:
            return None

        max_pos = d + int(np.argmax(corr[d:]))
        if max_pos == 0:
            return None

        return self._refine_peak(corr, max_pos)

    @staticmethod
    def _refine_peak(corr: np.ndarray, max_pos: int) -> float:
        """
        Parabolic interpolation of a correlation peak.

        The integer lag is returned unchanged when the peak has no right-hand
        neighbour or the three points have zero curvature.
        """
        period = float(max_pos)
        if max_pos < 1 or max_pos >= len(corr) - 1:
            return period

        x1, x2, x3 = corr[max_pos - 1], corr[max_pos], corr[max_pos + 1]
        a = (x1 + x3 - 2 * x2) / 2
        b = (x3 - x1) / 2
        if a != 0:
            period -= b / (2 * a)
        return period
