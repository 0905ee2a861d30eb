"""Note durations and rhythm pattern tables (4/4 time)."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, List, Sequence, Tuple


class Duration(str, Enum):
    """Note values, named by their transport notation."""
    WHOLE = "1n"
    HALF = "2n"
    QUARTER = "4n"
    EIGHTH = "8n"
    SIXTEENTH = "16n"

    @property
    def beats(self) -> float:
        return DURATION_BEATS[self]

    @property
    def notation_code(self) -> str:
        return NOTATION_CODES[self]

    def seconds(self, bpm: float) -> float:
        return self.beats * 60.0 / bpm


DURATION_BEATS: Dict[Duration, float] = {
    Duration.WHOLE: 4.0,
    Duration.HALF: 2.0,
    Duration.QUARTER: 1.0,
    Duration.EIGHTH: 0.5,
    Duration.SIXTEENTH: 0.25,
}

NOTATION_CODES: Dict[Duration, str] = {
    Duration.WHOLE: "w",
    Duration.HALF: "h",
    Duration.QUARTER: "q",
    Duration.EIGHTH: "8",
    Duration.SIXTEENTH: "16",
}

BEATS_PER_MEASURE = 4

Pattern = Tuple[Duration, ...]

_W = Duration.WHOLE
_H = Duration.HALF
_Q = Duration.QUARTER
_E = Duration.EIGHTH


# Scale melody rhythms keyed by measure count
SCALE_RHYTHM_PATTERNS: Dict[int, Tuple[Pattern, ...]] = {
    2: (
        (_Q, _Q, _Q, _Q, _Q, _Q, _Q, _Q),
        (_H, _H, _H, _H),
        (_H, _Q, _Q, _H, _Q, _Q),
        (_Q, _Q, _H, _Q, _Q, _H),
        (_E, _E, _Q, _Q, _Q, _E, _E, _Q, _Q, _Q),
        (_Q, _E, _E, _Q, _Q, _Q, _E, _E, _Q, _Q),
    ),
    4: (
        (_Q,) * 16,
        (_H,) * 8,
        (_H, _Q, _Q, _H, _H, _Q, _Q, _H, _Q, _Q, _H),
        (_E, _E, _Q, _Q, _Q) * 4,
    ),
}

# One-measure cells for chord melodies
CHORD_RHYTHM_PATTERNS: Tuple[Pattern, ...] = (
    (_Q, _Q, _Q, _Q),
    (_H, _H),
    (_H, _Q, _Q),
    (_Q, _Q, _H),
    (_E, _E, _Q, _Q, _Q),
    (_Q, _E, _E, _Q, _Q),
    (_W,),
)


def pattern_beats(pattern: Iterable[Duration]) -> float:
    return sum(Duration(d).beats for d in pattern)


def validate_rhythm_table(patterns: Sequence[Sequence[Duration]], beats: float) -> List[int]:
    """Return indices of patterns whose total differs from ``beats``.

    Configuration check only; generation does not call it.
    """
    return [i for i, pattern in enumerate(patterns) if pattern_beats(pattern) != beats]


__all__ = [
    "Duration",
    "DURATION_BEATS",
    "NOTATION_CODES",
    "BEATS_PER_MEASURE",
    "Pattern",
    "SCALE_RHYTHM_PATTERNS",
    "CHORD_RHYTHM_PATTERNS",
    "pattern_beats",
    "validate_rhythm_table",
]
