"""
Replay a recording through the tuning pipeline frame by frame.

Simulates the live driver: a BUFFER_SIZE window is taken every 1/60 s of
audio and handed to the pipeline with the matching timestamp. Prints the
throttled readout a UI would show and plots the frequency, cents and tuned
traces.

Usage:
    python scripts/replay_recording.py recording.npy [preset name] [sample rate]

The recording is a 1-D float array saved with numpy.save (for example with
sounddevice.rec(...).flatten()).
"""

import sys
from pathlib import Path

import matplotlib
import numpy as np

matplotlib.use('Agg')
import matplotlib.pyplot as plt

from string_tuner import SAMPLE_RATE
from string_tuner.pipeline import RefreshThrottle, TunerPipeline, iter_windows
from string_tuner.tuning_presets import default_registry

FRAME_RATE = 60


def replay(audio: np.ndarray, preset: str, sample_rate: int = SAMPLE_RATE) -> dict:
    """Run the pipeline over a recording.

    Args:
        audio: Mono recording
        preset: Name of a built-in preset
        sample_rate: Sample rate of the recording

    Returns:
        Dict of per-frame traces
    """
    registry = default_registry()
    pipeline = TunerPipeline(registry.get(preset).configuration)
    throttle = RefreshThrottle()

    traces = {"time": [], "frequency": [], "cents": [], "raw_cents": [], "tuned": []}

    for now, window in iter_windows(audio, sample_rate, frame_rate=FRAME_RATE):
        out = pipeline.process(window, now=now)

        traces["time"].append(now)
        traces["frequency"].append(out.frequency if out.valid else np.nan)
        traces["cents"].append(out.cents if out.valid else np.nan)
        traces["raw_cents"].append(out.raw_cents if out.valid else np.nan)
        traces["tuned"].append(out.tuned)

        if out.valid and throttle.ready(now):
            target = out.target.label if out.target else "-"
            marker = " *" if out.tuned else ""
            print(
                f"{now:7.2f}s  {' '.join(out.neighbors):<22} {out.frequency:8.2f} Hz  "
                f"{out.cents:+7.2f} c  target {target}{marker}"
            )

    return traces


def plot_traces(traces: dict, output: str):
    """Plot frequency and cents traces."""
    t = np.array(traces["time"])
    tuned = np.array(traces["tuned"])

    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(14, 8), sharex=True)

    ax1.plot(t, traces["frequency"], color='blue')
    ax1.set_ylabel('Frequency (Hz)')
    ax1.grid(True, alpha=0.3)

    ax2.plot(t, traces["raw_cents"], color='gray', alpha=0.5, label='raw')
    ax2.plot(t, traces["cents"], color='red', label='stabilized')
    ax2.fill_between(t, -5, 5, where=tuned, color='green', alpha=0.2, label='tuned')
    ax2.set_ylim(-50, 50)
    ax2.set_xlabel('Time (s)')
    ax2.set_ylabel('Deviation (cents)')
    ax2.legend()
    ax2.grid(True, alpha=0.3)

    plt.tight_layout()
    plt.savefig(output, dpi=100)
    plt.close()
    print(f"Saved: {output}")


def main():
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    path = Path(sys.argv[1])
    preset = sys.argv[2] if len(sys.argv) > 2 else "6-String Standard"
    sample_rate = int(sys.argv[3]) if len(sys.argv) > 3 else SAMPLE_RATE

    audio = np.load(path).astype(np.float64).flatten()
    print(f"Replaying {path.name}: {len(audio) / sample_rate:.1f}s at {sample_rate}Hz, preset {preset!r}")

    traces = replay(audio, preset, sample_rate)
    plot_traces(traces, str(path.with_suffix('.png')))


if __name__ == "__main__":
    main()
