"""
Tests for AutocorrelationPitchDetector using synthetic signals.

These tests generate sine waves at known frequencies and verify that the
detector reports the right frequency, or no pitch for unusable windows.
"""

import numpy as np
import pytest

from string_tuner import BUFFER_SIZE, SAMPLE_RATE, SampleWindow
from string_tuner.autocorrelation_detector import AutocorrelationPitchDetector, rms


def generate_sine_wave(
    frequency: float,
    duration_samples: int = BUFFER_SIZE,
    sample_rate: int = SAMPLE_RATE,
    amplitude: float = 0.8,
    phase: float = 0.0,
) -> np.ndarray:
    """Generate a sine wave at the given frequency."""
    t = np.arange(duration_samples) / sample_rate
    return (amplitude * np.sin(2 * np.pi * frequency * t + phase)).astype(np.float64)


def sine_window(frequency: float, amplitude: float = 0.8, phase: float = 0.0) -> SampleWindow:
    """A BUFFER_SIZE window of a pure sine."""
    return SampleWindow.from_array(
        generate_sine_wave(frequency, amplitude=amplitude, phase=phase), SAMPLE_RATE
    )


class TestAutocorrelationBasic:
    """Pitch detection with pure sine waves."""

    def setup_method(self):
        self.detector = AutocorrelationPitchDetector()

    def test_a4_440hz(self):
        """A 440 Hz sine is estimated within 1%."""
        freq = self.detector.process(sine_window(440.0))
        assert freq is not None
        assert freq == pytest.approx(440.0, rel=0.01)

    def test_a3_220hz(self):
        """A 220 Hz sine is estimated within 1%."""
        freq = self.detector.process(sine_window(220.0))
        assert freq is not None
        assert freq == pytest.approx(220.0, rel=0.01)

    def test_e4_329hz(self):
        """E4 at ~329.63 Hz is estimated within 1%."""
        freq = self.detector.process(sine_window(329.63))
        assert freq is not None
        assert freq == pytest.approx(329.63, rel=0.01)

    def test_low_e2(self):
        """Low E2 (~82.41 Hz) has under four periods per window but is still found."""
        freq = self.detector.process(sine_window(82.41))
        assert freq is not None
        assert freq == pytest.approx(82.41, rel=0.03)

    def test_reads_slightly_sharp(self):
        """The tapered correlation sum pulls the peak to a shorter lag."""
        freq = self.detector.process(sine_window(440.0))
        assert 440.0 < freq < 440.0 * 1.01

    def test_phase_does_not_matter(self):
        """Estimate is stable across starting phases."""
        estimates = [
            self.detector.process(sine_window(440.0, phase=p))
            for p in np.linspace(0, 2 * np.pi, 7)
        ]
        assert all(f is not None for f in estimates)
        assert max(estimates) - min(estimates) < 440.0 * 0.01

    def test_quiet_but_above_rms_threshold(self):
        """A signal that never reaches the trim threshold is analyzed untrimmed."""
        freq = self.detector.process(sine_window(440.0, amplitude=0.1))
        assert freq is not None
        assert freq == pytest.approx(440.0, rel=0.01)


class TestAutocorrelationNoPitch:
    """Windows that must yield no pitch rather than an error."""

    def setup_method(self):
        self.detector = AutocorrelationPitchDetector()

    def test_all_zero_window(self):
        window = SampleWindow.from_array(np.zeros(BUFFER_SIZE), SAMPLE_RATE)
        assert self.detector.process(window) is None

    def test_below_rms_threshold(self):
        """A very quiet sine is rejected."""
        window = sine_window(440.0, amplitude=0.005)
        assert rms(window.samples) < 0.01
        assert self.detector.process(window) is None

    def test_too_short_after_trim(self):
        """Fewer than 3 samples left after trimming yields no pitch."""
        window = SampleWindow.from_array([0.5, 0.5], SAMPLE_RATE)
        assert self.detector.process(window) is None

    def test_flat_autocorrelation(self):
        """A DC offset has a monotonically falling autocorrelation."""
        window = SampleWindow.from_array(np.full(2048, 0.5), SAMPLE_RATE)
        assert self.detector.process(window) is None

    def test_rms_threshold_setting(self):
        """Raising the RMS threshold rejects a normal signal."""
        self.detector.set_rms_threshold(0.9)
        assert self.detector.process(sine_window(440.0)) is None


class TestParabolicRefinement:
    """Tests for sub-sample peak refinement and its fallbacks."""

    def setup_method(self):
        self.detector = AutocorrelationPitchDetector()

    def use_correlation(self, monkeypatch, corr):
        """Make the detector see `corr` as the one-sided autocorrelation."""
        corr = np.asarray(corr, dtype=np.float64)

        def fake_correlate(in1, in2, mode="full", method="auto"):
            return np.concatenate([np.zeros(len(in1) - 1), corr])

        monkeypatch.setattr("string_tuner.autocorrelation_detector.correlate", fake_correlate)
        return np.zeros(len(corr))

    def test_refines_between_lags(self):
        corr = np.array([10.0, 0.0, 4.0, 6.0, 5.0, 0.0])
        period = self.detector._refine_peak(corr, 3)
        assert 3.0 < period < 3.5

    def test_zero_curvature_keeps_integer_lag(self):
        """Collinear neighbours leave the lag unrefined."""
        corr = np.array([1.0, 2.0, 3.0, 0.0])
        assert self.detector._refine_peak(corr, 1) == 1.0

    def test_zero_curvature_in_find_period(self, monkeypatch):
        """Curvature that rounds to exactly zero falls back to the integer lag."""
        big = 2.0 ** 53
        # (big - 1) + big rounds to 2 * big, so the curvature term is 0.0
        samples = self.use_correlation(
            monkeypatch, [4 * big, 1.0, big - 1, big, big, 0.0]
        )
        period = self.detector._find_period(samples)
        assert period == 3.0

    def test_peak_at_last_lag(self, monkeypatch):
        """A maximum at the final lag is returned without refinement."""
        samples = self.use_correlation(monkeypatch, [5.0, 1.0, 2.0, 3.0, 4.0])
        period = self.detector._find_period(samples)
        assert period == 4.0
        assert np.isfinite(period)

    def test_peak_at_first_lag(self):
        assert self.detector._refine_peak(np.array([3.0, 2.0, 1.0]), 0) == 0.0


class TestEdgeTrimming:
    """Tests for quiet edge trimming before autocorrelation."""

    def setup_method(self):
        self.detector = AutocorrelationPitchDetector()

    def test_trims_quiet_edges(self):
        samples = np.array([0.0, 0.0, 0.5, 0.1, 0.3, 0.0, 0.0])
        trimmed = self.detector._trim_edges(samples)
        np.testing.assert_array_equal(trimmed, [0.5, 0.1, 0.3])

    def test_no_crossing_keeps_boundaries(self):
        samples = np.full(8, 0.1)
        trimmed = self.detector._trim_edges(samples)
        assert len(trimmed) == 8

    def test_negative_amplitudes_count(self):
        samples = np.array([0.0, -0.4, 0.0, 0.0, 0.0, -0.3])
        trimmed = self.detector._trim_edges(samples)
        np.testing.assert_array_equal(trimmed, [-0.4, 0.0, 0.0, 0.0, -0.3])


class TestSampleWindow:
    """Tests for SampleWindow construction."""

    def test_from_list(self):
        window = SampleWindow.from_array([0.0, 0.5, -0.5], 48000)
        assert len(window) == 3
        assert window.sample_rate == 48000.0
        assert window.samples.dtype == np.float64

    def test_is_read_only(self):
        window = SampleWindow.from_array(np.zeros(4), SAMPLE_RATE)
        with pytest.raises(ValueError):
            window.samples[0] = 1.0

    def test_copies_input(self):
        source = np.zeros(4)
        window = SampleWindow.from_array(source, SAMPLE_RATE)
        source[0] = 1.0
        assert window.samples[0] == 0.0

    def test_empty_rejected(self):
        with pytest.raises(ValueError):
            SampleWindow.from_array([], SAMPLE_RATE)

    def test_two_dimensional_rejected(self):
        with pytest.raises(ValueError):
            SampleWindow.from_array(np.zeros((2, 4)), SAMPLE_RATE)

    def test_non_positive_rate_rejected(self):
        with pytest.raises(ValueError):
            SampleWindow.from_array(np.zeros(4), 0)
