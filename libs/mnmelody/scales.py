"""Scale and chord progression libraries.

Provides the practice scale tables, diatonic scale spelling, triad stacking
and progression transposition between keys.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Sequence, Tuple

from .pitch import (
    LETTERS,
    NATURAL_CHROMA,
    Pitch,
    parse_name,
    parse_pitch,
    semitone_interval,
    spelling_for_key,
    transpose,
)


# Scale patterns (semitones from root)
SCALE_PATTERNS: Dict[str, Tuple[int, ...]] = {
    "major": (0, 2, 4, 5, 7, 9, 11),
    "minor": (0, 2, 3, 5, 7, 8, 10),
}

Triad = Tuple[Pitch, Pitch, Pitch]


@dataclass(frozen=True)
class ScaleEntry:
    """One practice scale: an octave of pitches plus its upper boundary."""

    name: str
    mode: str
    pitches: Tuple[Pitch, ...]

    @property
    def root(self) -> str:
        return self.pitches[0].name

    def __contains__(self, pitch: object) -> bool:
        return pitch in self.pitches


_SCALE_TABLE: Dict[str, Tuple[Tuple[str, ...], ...]] = {
    "major": (
        ("C4", "D4", "E4", "F4", "G4", "A4", "B4", "C5"),
        ("G4", "A4", "B4", "C5", "D5", "E5", "F#5", "G5"),
        ("D4", "E4", "F#4", "G4", "A4", "B4", "C#5", "D5"),
        ("A4", "B4", "C#5", "D5", "E5", "F#5", "G#5", "A5"),
        ("E4", "F#4", "G#4", "A4", "B4", "C#5", "D#5", "E5"),
        ("B4", "C#5", "D#5", "E5", "F#5", "G#5", "A#5", "B5"),
        ("F4", "G4", "A4", "Bb4", "C5", "D5", "E5", "F5"),
        ("Bb4", "C5", "D5", "Eb5", "F5", "G5", "A5", "Bb5"),
        ("Eb4", "F4", "G4", "Ab4", "Bb4", "C5", "D5", "Eb5"),
        ("Ab4", "Bb4", "C5", "Db5", "Eb5", "F5", "G5", "Ab5"),
        ("Db4", "Eb4", "F4", "Gb4", "Ab4", "Bb4", "C5", "Db5"),
        ("Gb4", "Ab4", "Bb4", "Cb5", "Db5", "Eb5", "F5", "Gb5"),
    ),
    "minor": (
        ("A4", "B4", "C5", "D5", "E5", "F5", "G5", "A5"),
        ("E4", "F#4", "G4", "A4", "B4", "C5", "D5", "E5"),
        ("B4", "C#5", "D5", "E5", "F#5", "G5", "A5", "B5"),
        ("F#4", "G#4", "A4", "B4", "C#5", "D5", "E5", "F#5"),
        ("C#4", "D#4", "E4", "F#4", "G#4", "A4", "B4", "C#5"),
        ("G#4", "A#4", "B4", "C#5", "D#5", "E5", "F#5", "G#5"),
        ("D4", "E4", "F4", "G4", "A4", "Bb4", "C5", "D5"),
        ("G4", "A4", "Bb4", "C5", "D5", "Eb5", "F5", "G5"),
        ("C4", "D4", "Eb4", "F4", "G4", "Ab4", "Bb4", "C5"),
        ("F4", "G4", "Ab4", "Bb4", "C5", "Db5", "Eb5", "F5"),
        ("Bb4", "C5", "Db5", "Eb5", "F5", "Gb5", "Ab5", "Bb5"),
        ("Eb4", "F4", "Gb4", "Ab4", "Bb4", "Cb5", "Db5", "Eb5"),
    ),
}


def _build_library(table: Mapping[str, Sequence[Sequence[str]]]) -> Dict[str, Tuple[ScaleEntry, ...]]:
    library: Dict[str, Tuple[ScaleEntry, ...]] = {}
    for mode, rows in table.items():
        entries = []
        for row in rows:
            pitches = tuple(parse_pitch(p) for p in row)
            entries.append(ScaleEntry(f"{pitches[0].name} {mode}", mode, pitches))
        library[mode] = tuple(entries)
    return library


SCALE_LIBRARY: Dict[str, Tuple[ScaleEntry, ...]] = _build_library(_SCALE_TABLE)


def key_scale(root: str, mode: str = "major", octave: int = 4) -> Tuple[Pitch, ...]:
    """Get the 7 ascending pitches of a key, each letter used once.

    Args:
        root: Key root name (e.g. 'D', 'Bb', 'F#')
        mode: 'major' or 'minor'
        octave: Octave of the root

    Raises:
        ValueError: for an unknown root or mode.
    """
    if mode not in SCALE_PATTERNS:
        raise ValueError(f"Unknown mode: {mode}")
    spelling_for_key(root, mode)  # rejects keys outside the circle of fifths

    letter, accidental = parse_name(root)
    tonic = Pitch(letter, accidental, octave)
    start = LETTERS.index(letter)

    pitches: List[Pitch] = []
    for degree, offset in enumerate(SCALE_PATTERNS[mode]):
        step = start + degree
        degree_letter = LETTERS[step % 7]
        degree_octave = octave + step // 7
        natural_midi = (degree_octave + 1) * 12 + NATURAL_CHROMA[degree_letter]
        alter = tonic.midi + offset - natural_midi
        symbol = "#" if alter > 0 else "b"
        pitches.append(Pitch(degree_letter, symbol * abs(alter), degree_octave))
    return tuple(pitches)


def _shift_octaves(pitch: Pitch, octaves: int) -> Pitch:
    return Pitch(pitch.letter, pitch.accidental, pitch.octave + octaves)


def triad(root: Pitch, scale: Sequence[Pitch]) -> Triad:
    """Stack the scale degrees two and four steps above ``root``.

    The members use the scale's spellings and climb octaves past the top of
    the scale.

    Raises:
        ValueError: if no scale degree matches the root's pitch class.
    """
    degrees = list(scale[:7])
    index = next((i for i, p in enumerate(degrees) if p.chroma == root.chroma), None)
    if index is None:
        raise ValueError(f"Chord root {root} is outside the scale")

    base = (root.midi - degrees[index].midi) // 12
    members = []
    for step in (0, 2, 4):
        position = index + step
        members.append(_shift_octaves(degrees[position % 7], base + position // 7))
    return tuple(members)  # type: ignore[return-value]


@dataclass(frozen=True)
class ProgressionLibrary:
    """Named chord-root sequences written in a home key."""

    home_root: str
    mode: str
    progressions: Mapping[str, Tuple[Pitch, ...]] = field(default_factory=dict)

    @property
    def names(self) -> List[str]:
        return sorted(self.progressions)


def _roots(*names: str) -> Tuple[Pitch, ...]:
    return tuple(parse_pitch(n) for n in names)


PROGRESSION_LIBRARY: Dict[str, ProgressionLibrary] = {
    "major": ProgressionLibrary(
        home_root="C",
        mode="major",
        progressions={
            "I-IV-V-I": _roots("C4", "F4", "G4", "C4"),
            "I-V-vi-IV": _roots("C4", "G4", "A4", "F4"),
            "I-vi-IV-V": _roots("C4", "A4", "F4", "G4"),
            "ii-V-I-I": _roots("D4", "G4", "C4", "C4"),
        },
    ),
    "minor": ProgressionLibrary(
        home_root="A",
        mode="minor",
        progressions={
            "i-iv-v-i": _roots("A3", "D4", "E4", "A3"),
            "i-VI-III-VII": _roots("A3", "F4", "C4", "G4"),
            "i-iv-VII-III": _roots("A3", "D4", "G4", "C4"),
        },
    ),
}


def transpose_roots(
    roots: Sequence[Pitch],
    home_root: str,
    target_root: str,
    mode: str = "major",
) -> Tuple[Pitch, ...]:
    """Move chord roots from the home key to the target key.

    Roots shift up by the forward semitone distance between the keys and are
    re-spelled with the target key's sharp/flat policy.
    """
    names = spelling_for_key(target_root, mode)
    interval = semitone_interval(home_root, target_root)
    return tuple(transpose(r, interval, names) for r in roots)


__all__ = [
    "SCALE_PATTERNS",
    "Triad",
    "ScaleEntry",
    "SCALE_LIBRARY",
    "key_scale",
    "triad",
    "ProgressionLibrary",
    "PROGRESSION_LIBRARY",
    "transpose_roots",
]
