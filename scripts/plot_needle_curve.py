"""
Debug script: Plot the needle curve and dial ticks.

Shows how cents map to needle deflection, with the dial tick marks placed on
the same curve, so alternative curve settings can be compared side by side.

Usage:
    python scripts/plot_needle_curve.py [output.png]
"""

import math
import sys

import matplotlib
import numpy as np

matplotlib.use('Agg')
import matplotlib.pyplot as plt

from string_tuner.needle import cents_to_angle, gauge_ticks
from string_tuner.settings import DEFAULT_SETTINGS, TunerSettings

VARIANTS = {
    "default (exp 0.3)": DEFAULT_SETTINGS,
    "exp 0.5": TunerSettings(curve_exponent=0.5),
    "linear outer": TunerSettings(curve_exponent=1.0),
}


def plot_curves(output: str):
    """Plot angle vs cents for each variant, plus the default dial."""
    cents = np.linspace(-100, 100, 2001)

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(14, 6))

    for label, settings in VARIANTS.items():
        angles = [math.degrees(cents_to_angle(c, settings)) for c in cents]
        ax1.plot(cents, angles, label=label)

    inner = DEFAULT_SETTINGS.inner_threshold_cents
    ax1.axvspan(-inner, inner, color='green', alpha=0.15, label='linear region')
    ax1.set_xlabel('Deviation (cents)')
    ax1.set_ylabel('Needle angle (degrees)')
    ax1.set_title('Needle curve')
    ax1.legend()
    ax1.grid(True, alpha=0.3)

    # Dial, pivot at the bottom
    for tick in gauge_ticks():
        theta = math.pi / 2 - tick.angle
        r0, r1 = (0.6, 1.0) if tick.major else (0.75, 1.0)
        ax2.plot(
            [r0 * math.cos(theta), r1 * math.cos(theta)],
            [r0 * math.sin(theta), r1 * math.sin(theta)],
            color='black',
            linewidth=2 if tick.major else 1,
        )
        if tick.major:
            ax2.text(
                0.45 * math.cos(theta),
                0.45 * math.sin(theta),
                f"{tick.cents:+.0f}",
                ha='center',
                va='center',
            )
    ax2.set_aspect('equal')
    ax2.set_axis_off()
    ax2.set_title('Dial ticks (default curve)')

    plt.tight_layout()
    plt.savefig(output, dpi=100)
    plt.close()
    print(f"Saved: {output}")


def main():
    output = sys.argv[1] if len(sys.argv) > 1 else "needle_curve.png"
    plot_curves(output)


if __name__ == "__main__":
    main()
