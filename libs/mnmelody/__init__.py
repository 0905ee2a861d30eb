"""Minuet Melody Generation

Pitches, rhythm tables, scale/progression libraries and randomized
practice melody strategies.
"""

__version__ = "0.1.0"

from .pitch import (
    Pitch,
    SHARP_NAMES,
    FLAT_NAMES,
    parse_pitch,
    pitch_from_midi,
    spelling_for_key,
    semitone_interval,
    transpose,
    easyscore_name,
)
from .rhythm import (
    Duration,
    BEATS_PER_MEASURE,
    SCALE_RHYTHM_PATTERNS,
    CHORD_RHYTHM_PATTERNS,
    pattern_beats,
    validate_rhythm_table,
)
from .scales import (
    ScaleEntry,
    SCALE_LIBRARY,
    ProgressionLibrary,
    PROGRESSION_LIBRARY,
    key_scale,
    triad,
    transpose_roots,
)
from .generator import (
    NoteEvent,
    GeneratedMelody,
    MelodyStrategy,
    ScaleMelodyStrategy,
    ChordMelodyStrategy,
    get_strategy,
    generate_scale_melody,
    generate_chord_melody,
)

__all__ = [
    # Pitches
    "Pitch",
    "SHARP_NAMES",
    "FLAT_NAMES",
    "parse_pitch",
    "pitch_from_midi",
    "spelling_for_key",
    "semitone_interval",
    "transpose",
    "easyscore_name",
    # Rhythm
    "Duration",
    "BEATS_PER_MEASURE",
    "SCALE_RHYTHM_PATTERNS",
    "CHORD_RHYTHM_PATTERNS",
    "pattern_beats",
    "validate_rhythm_table",
    # Tonal libraries
    "ScaleEntry",
    "SCALE_LIBRARY",
    "ProgressionLibrary",
    "PROGRESSION_LIBRARY",
    "key_scale",
    "triad",
    "transpose_roots",
    # Generation
    "NoteEvent",
    "GeneratedMelody",
    "MelodyStrategy",
    "ScaleMelodyStrategy",
    "ChordMelodyStrategy",
    "get_strategy",
    "generate_scale_melody",
    "generate_chord_melody",
]
