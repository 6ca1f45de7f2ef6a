"""
Shared constants for pitch tracking and note naming.
"""

SAMPLE_RATE = 44100
BUFFER_SIZE = 2048

A4_REFERENCE = 440.0
A4_NOTE_NUMBER = 69
OCTAVE = 12

NOTE_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

# Enharmonic spellings accepted in tuning configuration
FLAT_TO_SHARP = {
    "Db": "C#", "Eb": "D#", "Fb": "E", "Gb": "F#",
    "Ab": "G#", "Bb": "A#", "Cb": "B",
}
