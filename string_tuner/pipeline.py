"""
Frame-by-frame tuning pipeline.

Each call takes one sample window and produces the note, the stabilized
deviation and the needle angle for a renderer. All mutable tracking state
lives in a TunerState owned by the caller; the pipeline itself keeps only
configuration. Frames must be processed one at a time, in order.
"""

import logging
import time
from dataclasses import dataclass, field

from .adaptive_smoother import AdaptiveSmoother, SmoothingState, raw_detune
from .autocorrelation_detector import AutocorrelationPitchDetector, SampleWindow, rms
from .constants import BUFFER_SIZE, SAMPLE_RATE
from .needle import cents_to_angle
from .onset_detector import OnsetDetector, OnsetState
from .settings import DEFAULT_SETTINGS, TunerSettings
from .stability_gate import GateStatus, StabilityGate, StabilityState
from .tuning_presets import (
    TargetMatcher,
    TuningConfiguration,
    TuningTarget,
    neighbor_notes,
)

logger = logging.getLogger(__name__)


@dataclass
class TunerState:
    """Tracking state for one tuning session."""
    onset: OnsetState = field(default_factory=OnsetState)
    smoothing: SmoothingState = field(default_factory=SmoothingState)
    stability: StabilityState = field(default_factory=StabilityState)

    def reset(self):
        """Return to the state of a fresh session."""
        self.onset = OnsetState()
        self.smoothing = SmoothingState()
        self.stability = StabilityState()


@dataclass(frozen=True)
class PipelineOutput:
    """Result of processing one frame."""

    frequency: float | None = None  # Hz, None when no pitch was found
    note_name: str = ""  # e.g. "A"
    octave: int = 0
    note_number: int = 0  # A4 = 69
    cents: float = 0.0  # stabilized deviation; exactly 0 when tuned
    raw_cents: float = 0.0  # unsmoothed deviation of this frame
    tuned: bool = False
    status: GateStatus | None = None  # None when no pitch was found
    angle: float = 0.0  # needle deflection in radians
    target_index: int | None = None
    target: TuningTarget | None = None
    neighbors: tuple[str, ...] = ()  # note strip centred on the detected note
    onset: bool = False

    @classmethod
    def silent(cls, onset: bool = False) -> "PipelineOutput":
        """Output for a frame without a pitch; claims no gate state."""
        return cls(onset=onset)

    @property
    def valid(self) -> bool:
        """Whether a pitch was detected in this frame."""
        return self.frequency is not None

    @property
    def label(self) -> str:
        """Note label, e.g. 'A4'; empty when no pitch."""
        return f"{self.note_name}{self.octave}" if self.valid else ""


class TunerPipeline:
    """
    Pitch tracking and stabilization for a live monophonic signal.

    Combines the autocorrelation detector, onset detector, adaptive smoother,
    stability gate, target matcher and needle mapping.
    """

    def __init__(
        self,
        configuration: TuningConfiguration | None = None,
        settings: TunerSettings = DEFAULT_SETTINGS,
        state: TunerState | None = None,
    ):
        """
        Initialize the pipeline.

        Args:
            configuration: Reference pitch and targets (no targets by default)
            settings: Tracker parameters
            state: Session state to advance; a fresh one is created if omitted
        """
        self.configuration = configuration or TuningConfiguration()
        self.settings = settings
        self.state = state if state is not None else TunerState()

        self._detector = AutocorrelationPitchDetector(settings)
        self._onset = OnsetDetector(settings)
        self._smoother = AdaptiveSmoother(settings)
        self._gate = StabilityGate(settings)
        self._matcher = TargetMatcher()

    def set_configuration(self, configuration: TuningConfiguration):
        """Swap the tuning configuration (e.g. on preset change) between frames."""
        self.configuration = configuration
        logger.debug(
            "Tuning configuration set: A4=%.2f Hz, targets %s",
            configuration.reference,
            [t.label for t in configuration.targets],
        )

    def set_reference(self, freq: float):
        """Change the reference pitch, keeping the current targets."""
        self.set_configuration(self.configuration.with_reference(freq))

    def reset(self):
        """Clear all tracking state."""
        self.state.reset()

    def process(self, window: SampleWindow, now: float | None = None) -> PipelineOutput:
        """
        Process one sample window.

        Args:
            window: Sample window to analyze
            now: Monotonic capture time in seconds (defaults to time.monotonic())

        Returns:
            PipelineOutput for this frame; `valid` is False when no pitch was found
        """
        if now is None:
            now = time.monotonic()

        state = self.state
        # Onsets are tracked on every frame so an attack after silence is seen
        onset = self._onset.update(state.onset, rms(window.samples), now)

        frequency = self._detector.process(window)
        if frequency is None:
            return PipelineOutput.silent(onset=onset)

        reference = self.configuration.reference
        detune = raw_detune(frequency, reference)
        elapsed = self._onset.seconds_since_onset(state.onset, now)
        smoothed = self._smoother.update(state.smoothing, detune, elapsed)
        reading = self._gate.update(state.stability, smoothed, now)

        cents = reading.detune * 100
        match = self._matcher.match(frequency, self.configuration)

        return PipelineOutput(
            frequency=frequency,
            note_name=match.note_name,
            octave=match.octave,
            note_number=match.note_number,
            cents=cents,
            raw_cents=detune * 100,
            tuned=reading.tuned,
            status=reading.status,
            angle=cents_to_angle(cents, self.settings),
            target_index=match.target_index,
            target=match.target,
            neighbors=tuple(neighbor_notes(match.note_number)),
            onset=onset,
        )


class RefreshThrottle:
    """
    Rate limit for slow-changing text (note strip, frequency readout).

    Independent of the detection state; it only decides when a renderer
    should redraw.
    """

    def __init__(self, interval: float = DEFAULT_SETTINGS.ui_interval_seconds):
        self.interval = interval
        self._last: float | None = None

    def ready(self, now: float | None = None) -> bool:
        """True if the interval has elapsed since the last accepted refresh."""
        if now is None:
            now = time.monotonic()
        if self._last is not None and now - self._last <= self.interval:
            return False
        self._last = now
        return True

    def reset(self):
        self._last = None


def iter_windows(
    audio,
    sample_rate: float = SAMPLE_RATE,
    size: int = BUFFER_SIZE,
    frame_rate: float = 60.0,
):
    """
    Cut a recording into the windows a live driver would deliver.

    Args:
        audio: Mono recording
        sample_rate: Sample rate of the recording
        size: Window length in samples
        frame_rate: Driver cadence in frames per second

    Yields:
        (timestamp in seconds, SampleWindow) for every full window
    """
    hop = max(1, int(sample_rate / frame_rate))
    for start in range(0, len(audio) - size + 1, hop):
        yield start / sample_rate, SampleWindow.from_array(audio[start:start + size], sample_rate)
