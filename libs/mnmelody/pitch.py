"""Pitch values, enharmonic spelling policies and transposition.

Pitches use scientific pitch notation (C4 = MIDI 60). The octave number
follows the written letter, so Cb5 and B4 sound the same (MIDI 71).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import total_ordering
from typing import Dict, Sequence, Tuple


LETTERS: Tuple[str, ...] = ("C", "D", "E", "F", "G", "A", "B")

# Semitones above C for each natural letter
NATURAL_CHROMA: Dict[str, int] = {"C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11}

SHARP_NAMES: Tuple[str, ...] = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")
FLAT_NAMES: Tuple[str, ...] = ("C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B")

# Key roots on each side of the circle of fifths
SHARP_KEYS: Dict[str, Tuple[str, ...]] = {
    "major": ("C", "G", "D", "A", "E", "B", "F#", "C#"),
    "minor": ("A", "E", "B", "F#", "C#", "G#", "D#", "A#"),
}
FLAT_KEYS: Dict[str, Tuple[str, ...]] = {
    "major": ("F", "Bb", "Eb", "Ab", "Db", "Gb", "Cb"),
    "minor": ("D", "G", "C", "F", "Bb", "Eb", "Ab"),
}

_PITCH_RE = re.compile(r"^([A-Ga-g])(#{1,2}|b{1,2})?(\d)$")
_NAME_RE = re.compile(r"^([A-Ga-g])(#{1,2}|b{1,2})?$")


def _alteration(accidental: str) -> int:
    return accidental.count("#") - accidental.count("b")


@total_ordering
@dataclass(frozen=True)
class Pitch:
    """A written pitch: letter, accidental ('', '#', 'b', ...) and octave."""

    letter: str
    accidental: str
    octave: int

    def __post_init__(self) -> None:
        if self.letter not in NATURAL_CHROMA:
            raise ValueError(f"Invalid letter: {self.letter!r}")
        if self.accidental and not _NAME_RE.match("C" + self.accidental):
            raise ValueError(f"Invalid accidental: {self.accidental!r}")

    @property
    def midi(self) -> int:
        return (self.octave + 1) * 12 + NATURAL_CHROMA[self.letter] + _alteration(self.accidental)

    @property
    def chroma(self) -> int:
        return self.midi % 12

    @property
    def name(self) -> str:
        """Pitch name without octave (e.g. 'F#')."""
        return f"{self.letter}{self.accidental}"

    @property
    def frequency(self) -> float:
        """Equal-tempered frequency in Hz (A4 = 440)."""
        return 440.0 * (2.0 ** ((self.midi - 69) / 12.0))

    def respell(self, name: str) -> "Pitch":
        """Return the same sounding pitch written as ``name``.

        Raises:
            ValueError: if ``name`` is not enharmonic with this pitch.
        """
        letter, accidental = parse_name(name)
        if (NATURAL_CHROMA[letter] + _alteration(accidental)) % 12 != self.chroma:
            raise ValueError(f"{name} is not enharmonic with {self}")
        octave = (self.midi - NATURAL_CHROMA[letter] - _alteration(accidental)) // 12 - 1
        return Pitch(letter, accidental, octave)

    def _sort_key(self) -> Tuple[int, int, int, str]:
        # Sounding octave, not the written one: Cb5 sorts below Db5, B#4 above Cb5
        return (self.midi // 12 - 1, self.chroma, LETTERS.index(self.letter), self.accidental)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Pitch):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __str__(self) -> str:
        return f"{self.name}{self.octave}"


def parse_name(name: str) -> Tuple[str, str]:
    """Split a pitch name such as 'Bb' into (letter, accidental)."""
    match = _NAME_RE.match(name.strip())
    if not match:
        raise ValueError(f"Invalid pitch name: {name!r}")
    return match.group(1).upper(), match.group(2) or ""


def name_chroma(name: str) -> int:
    letter, accidental = parse_name(name)
    return (NATURAL_CHROMA[letter] + _alteration(accidental)) % 12


def parse_pitch(text: str) -> Pitch:
    """Parse 'C4', 'f#5', 'Bb3' or 'Cb5' into a Pitch.

    Raises:
        ValueError: on malformed text.
    """
    match = _PITCH_RE.match(text.strip()) if isinstance(text, str) else None
    if not match:
        raise ValueError(f"Invalid pitch: {text!r}")
    letter, accidental, octave = match.groups()
    return Pitch(letter.upper(), accidental or "", int(octave))


def pitch_from_midi(midi: int, names: Sequence[str] = SHARP_NAMES) -> Pitch:
    """Spell a MIDI note number with the given chroma -> name policy."""
    letter, accidental = parse_name(names[midi % 12])
    octave = (midi - NATURAL_CHROMA[letter] - _alteration(accidental)) // 12 - 1
    return Pitch(letter, accidental, octave)


def _normalize_root(root: str) -> str:
    letter, accidental = parse_name(root)
    return letter + accidental


def spelling_for_key(root: str, mode: str = "major") -> Tuple[str, ...]:
    """Return SHARP_NAMES or FLAT_NAMES for a key root.

    Minor keys take the side of their relative major.
    """
    if mode not in SHARP_KEYS:
        raise ValueError(f"Unknown mode: {mode}")
    key = _normalize_root(root)
    if key in SHARP_KEYS[mode]:
        return SHARP_NAMES
    if key in FLAT_KEYS[mode]:
        return FLAT_NAMES
    raise ValueError(f"Unknown key: {root} {mode}")


def semitone_interval(from_root: str, to_root: str) -> int:
    """Forward distance in semitones from one root to another (0-11)."""
    return (name_chroma(to_root) - name_chroma(from_root) + 12) % 12


def transpose(pitch: Pitch, semitones: int, names: Sequence[str] = SHARP_NAMES) -> Pitch:
    return pitch_from_midi(pitch.midi + semitones, names)


def easyscore_name(pitch: Pitch) -> str:
    """EasyScore pitch, e.g. 'c#4'."""
    return f"{pitch.letter.lower()}{pitch.accidental}{pitch.octave}"


__all__ = [
    "LETTERS",
    "NATURAL_CHROMA",
    "SHARP_NAMES",
    "FLAT_NAMES",
    "SHARP_KEYS",
    "FLAT_KEYS",
    "Pitch",
    "parse_name",
    "name_chroma",
    "parse_pitch",
    "pitch_from_midi",
    "spelling_for_key",
    "semitone_interval",
    "transpose",
    "easyscore_name",
]
