"""
string_tuner - Live monophonic pitch tracking for instrument tuning
"""

from .adaptive_smoother import AdaptiveSmoother, SmoothingState, raw_detune
from .autocorrelation_detector import AutocorrelationPitchDetector, SampleWindow, rms
from .constants import A4_REFERENCE, BUFFER_SIZE, NOTE_NAMES, SAMPLE_RATE
from .needle import GaugeTick, cents_to_angle, gauge_ticks
from .onset_detector import OnsetDetector, OnsetState
from .pipeline import PipelineOutput, RefreshThrottle, TunerPipeline, TunerState, iter_windows
from .settings import DEFAULT_SETTINGS, SmoothingTier, TunerSettings
from .stability_gate import GateReading, GateStatus, StabilityGate, StabilityState
from .tuning_presets import (
    DEFAULT_PRESETS,
    InvalidNoteError,
    PresetRegistry,
    TargetMatch,
    TargetMatcher,
    TuningConfiguration,
    TuningPreset,
    TuningTarget,
    default_registry,
    load_presets,
    parse_note,
)

__version__ = "0.1.0"
__all__ = [
    "TunerPipeline",
    "TunerState",
    "PipelineOutput",
    "RefreshThrottle",
    "iter_windows",
    "SampleWindow",
    "AutocorrelationPitchDetector",
    "rms",
    "OnsetDetector",
    "OnsetState",
    "AdaptiveSmoother",
    "SmoothingState",
    "raw_detune",
    "StabilityGate",
    "StabilityState",
    "GateReading",
    "GateStatus",
    "TargetMatcher",
    "TargetMatch",
    "TuningConfiguration",
    "TuningTarget",
    "TuningPreset",
    "PresetRegistry",
    "DEFAULT_PRESETS",
    "default_registry",
    "load_presets",
    "parse_note",
    "InvalidNoteError",
    "cents_to_angle",
    "gauge_ticks",
    "GaugeTick",
    "TunerSettings",
    "SmoothingTier",
    "DEFAULT_SETTINGS",
    "SAMPLE_RATE",
    "BUFFER_SIZE",
    "A4_REFERENCE",
    "NOTE_NAMES",
]
