"""
Tuning targets, presets and nearest-target matching.

A tuning configuration is a reference pitch plus an ordered list of target
notes (for example the open strings of a guitar). Note names are parsed and
validated when a configuration is built, so a malformed preset fails at load
time instead of producing bogus matches while tuning.
"""

import csv
import logging
import math
import re
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np

from .constants import A4_NOTE_NUMBER, A4_REFERENCE, FLAT_TO_SHARP, NOTE_NAMES, OCTAVE

logger = logging.getLogger(__name__)

# Pattern to match note names like "C2", "F#3", "Bb4", "e4"
NOTE_PATTERN = re.compile(r'^([A-Ga-g][#b]?)(-?\d+)$')


class InvalidNoteError(ValueError):
    """A note name that does not parse into a pitch class and octave."""


def parse_note(text: str) -> tuple[str, int]:
    """
    Parse a note name such as "E2", "F#3" or "Bb1".

    Flats are normalized to their sharp spelling.

    Returns:
        (pitch class name, octave)

    Raises:
        InvalidNoteError: If the text is not a valid note name
    """
    match = NOTE_PATTERN.match(text.strip())
    if not match:
        raise InvalidNoteError(f"Invalid note name: {text!r}")

    name = match.group(1).upper()
    # Handle lowercase 'b' for flat
    if len(name) > 1 and name[1] == 'B':
        name = name[0] + 'b'
    octave = int(match.group(2))
    if name == "Cb":
        octave -= 1  # Cb4 sounds as B3
    name = FLAT_TO_SHARP.get(name, name)
    if name not in NOTE_NAMES:
        raise InvalidNoteError(f"Invalid note name: {text!r}")

    return name, octave


def note_number(name: str, octave: int) -> int:
    """Note number of a pitch class and octave (A4 = 69, C4 = 60)."""
    return NOTE_NAMES.index(name) + (octave + 1) * OCTAVE


def note_frequency(name: str, octave: int, reference: float = A4_REFERENCE) -> float:
    """Equal-tempered frequency of a note."""
    return reference * 2 ** ((note_number(name, octave) - A4_NOTE_NUMBER) / OCTAVE)


def frequency_to_note_number(frequency: float, reference: float = A4_REFERENCE) -> float:
    """Fractional note number of a frequency."""
    return float(OCTAVE * np.log2(frequency / reference) + A4_NOTE_NUMBER)


def note_number_to_name(number: int) -> tuple[str, int]:
    """Convert note number to note name and octave."""
    return NOTE_NAMES[number % OCTAVE], number // OCTAVE - 1


def neighbor_notes(number: int, span: int = 2) -> list[str]:
    """Note labels from `span` semitones below to `span` above, e.g. G4 .. B4."""
    labels = []
    for n in range(number - span, number + span + 1):
        name, octave = note_number_to_name(n)
        labels.append(f"{name}{octave}")
    return labels


@dataclass(frozen=True)
class TuningTarget:
    """A single target pitch, e.g. one open string."""
    note_name: str
    octave: int
    frequency: float

    @property
    def label(self) -> str:
        return f"{self.note_name}{self.octave}"


@dataclass(frozen=True)
class TuningConfiguration:
    """Reference pitch plus the ordered target notes to tune against."""
    reference: float = A4_REFERENCE
    targets: tuple[TuningTarget, ...] = ()

    @classmethod
    def from_notes(cls, notes, reference: float = A4_REFERENCE) -> "TuningConfiguration":
        """
        Build a configuration from note names.

        Args:
            notes: Iterable of note names (e.g. ["E2", "A2", "D3"])
            reference: Frequency of A4 in Hz

        Raises:
            InvalidNoteError: If any note name is malformed
            ValueError: If the reference frequency is not positive
        """
        if not (reference > 0 and math.isfinite(reference)):
            raise ValueError(f"Reference frequency must be positive, got {reference}")

        targets = []
        for text in notes:
            name, octave = parse_note(text)
            targets.append(
                TuningTarget(
                    note_name=name,
                    octave=octave,
                    frequency=note_frequency(name, octave, reference),
                )
            )
        return cls(reference=float(reference), targets=tuple(targets))

    def with_reference(self, reference: float) -> "TuningConfiguration":
        """Same targets re-derived at a new reference pitch."""
        return TuningConfiguration.from_notes([t.label for t in self.targets], reference)


@dataclass(frozen=True)
class TargetMatch:
    """Nearest chromatic note and nearest configured target for a frequency."""
    note_name: str
    octave: int
    note_number: int
    target_index: int | None = None
    target: TuningTarget | None = None


class TargetMatcher:
    """Maps a frequency to the nearest note and nearest configured target."""

    def match(self, frequency: float, configuration: TuningConfiguration) -> TargetMatch:
        """
        Match a frequency against a tuning configuration.

        The nearest target is the one closest in absolute Hz; on a tie the
        first configured target wins.
        """
        number = int(round(frequency_to_note_number(frequency, configuration.reference)))
        name, octave = note_number_to_name(number)

        best_index = None
        best_distance = math.inf
        for i, target in enumerate(configuration.targets):
            distance = abs(target.frequency - frequency)
            if distance < best_distance:
                best_index = i
                best_distance = distance

        return TargetMatch(
            note_name=name,
            octave=octave,
            note_number=number,
            target_index=best_index,
            target=configuration.targets[best_index] if best_index is not None else None,
        )


@dataclass(frozen=True)
class TuningPreset:
    """A named tuning configuration as offered in a preset menu."""
    name: str
    notes: tuple[str, ...]
    configuration: TuningConfiguration
    description: str = ""


@dataclass
class PresetRegistry:
    """
    Ordered, validated collection of tuning presets.

    Attributes:
        reference: Frequency of A4 all presets are derived at
        presets: Mapping of preset name to preset, in insertion order
    """
    reference: float = A4_REFERENCE
    presets: dict[str, TuningPreset] = field(default_factory=dict)

    def add(self, name: str, notes, description: str = "") -> TuningPreset:
        """
        Validate and register a preset.

        Raises:
            InvalidNoteError: If any note name is malformed
            ValueError: If the name is empty or already registered
        """
        name = name.strip()
        if not name:
            raise ValueError("Preset name must not be empty")
        if name in self.presets:
            raise ValueError(f"Duplicate preset: {name!r}")

        notes = tuple(n.strip() for n in notes)
        preset = TuningPreset(
            name=name,
            notes=notes,
            configuration=TuningConfiguration.from_notes(notes, self.reference),
            description=description or f"{name}, Equal tempered",
        )
        self.presets[name] = preset
        return preset

    def get(self, name: str) -> TuningPreset:
        """
        Look up a preset by name.

        Raises:
            KeyError: If no preset has that name
        """
        if name not in self.presets:
            raise KeyError(f"Unknown preset: {name!r}")
        return self.presets[name]

    def with_reference(self, reference: float) -> "PresetRegistry":
        """Copy of the registry with all presets re-derived at a new reference."""
        registry = PresetRegistry(reference=reference)
        for preset in self.presets.values():
            registry.add(preset.name, preset.notes, preset.description)
        return registry

    @property
    def names(self) -> list[str]:
        return list(self.presets)

    def __contains__(self, name: str) -> bool:
        return name in self.presets

    def __len__(self) -> int:
        return len(self.presets)


def default_registry(reference: float = A4_REFERENCE) -> PresetRegistry:
    """Registry holding the built-in presets."""
    registry = PresetRegistry(reference=reference)
    for name, notes, description in DEFAULT_PRESETS:
        registry.add(name, notes, description)
    return registry


DEFAULT_PRESETS = [
    ("6-String Standard", ("E2", "A2", "D3", "G3", "B3", "E4"),
     "Guitar, 6-String Standard, Equal tempered"),
    ("6-String Drop D", ("D2", "A2", "D3", "G3", "B3", "E4"),
     "Guitar, 6-String Drop D, Equal tempered"),
    ("4-String Bass", ("E1", "A1", "D2", "G2"),
     "Bass, 4-String Standard, Equal tempered"),
]


def load_presets(path: str, reference: float = A4_REFERENCE) -> PresetRegistry:
    """
    Load tuning presets from a CSV or TSV file.

    File format: one preset per row, the preset name followed by its notes.
    Lines starting with # are treated as comments.

    Example:
        6-String Standard,E2,A2,D3,G3,B3,E4
        # Open G
        Open G,D2,G2,D3,G3,B3,D4

    Args:
        path: Path to the preset file
        reference: Frequency of A4 in Hz

    Returns:
        PresetRegistry with the loaded presets

    Raises:
        FileNotFoundError: If the file doesn't exist
        InvalidNoteError: If a note name is malformed
        ValueError: If the file holds no presets or a row is invalid
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Preset file not found: {path}")

    registry = PresetRegistry(reference=reference)

    with open(file_path, 'r', encoding='utf-8', newline='') as f:
        content = f.read()
        f.seek(0)

        # Determine delimiter: tab or comma
        delimiter = '\t' if '\t' in content else ','

        reader = csv.reader(f, delimiter=delimiter)
        for line_num, row in enumerate(reader, start=1):
            cells = [cell.strip() for cell in row if cell.strip()]
            if not cells or cells[0].startswith('#'):
                continue

            name, notes = cells[0], cells[1:]
            if not notes:
                raise ValueError(f"{path}:{line_num}: preset {name!r} has no notes")
            try:
                registry.add(name, notes)
            except InvalidNoteError as e:
                raise InvalidNoteError(f"{path}:{line_num}: {e}") from e
            except ValueError as e:
                raise ValueError(f"{path}:{line_num}: {e}") from e

    if not registry.presets:
        raise ValueError(f"No presets found in file: {path}")

    logger.info("Loaded %d presets from %s", len(registry), file_path)
    return registry
