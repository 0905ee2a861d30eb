"""Randomized practice melody generation.

Two strategies share one interface: free melodies that roam a single scale,
and melodies constrained to the triads of a chord progression. Randomness is
always drawn from an injected ``random.Random`` so results are reproducible.
"""

from __future__ import annotations

import logging
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .pitch import Pitch, parse_name
from .rhythm import (
    CHORD_RHYTHM_PATTERNS,
    SCALE_RHYTHM_PATTERNS,
    Duration,
    Pattern,
)
from .scales import (
    PROGRESSION_LIBRARY,
    SCALE_LIBRARY,
    ProgressionLibrary,
    ScaleEntry,
    Triad,
    key_scale,
    transpose_roots,
    triad,
)

logger = logging.getLogger(__name__)

SCALE_MODES: Tuple[str, ...] = ("major", "minor")


@dataclass(frozen=True)
class NoteEvent:
    pitch: Pitch
    duration: Duration

    @property
    def beats(self) -> float:
        return self.duration.beats


@dataclass(frozen=True)
class GeneratedMelody:
    """An ordered melody plus the context it was drawn from.

    ``harmony`` holds, per event, the triad that was active when the event's
    pitch was drawn. It is empty for scale melodies.
    """

    events: Tuple[NoteEvent, ...]
    label: str
    mode: str
    measure_count: int
    harmony: Tuple[Triad, ...] = ()

    @property
    def total_beats(self) -> float:
        return sum(e.beats for e in self.events)

    @property
    def pitches(self) -> List[Pitch]:
        return [e.pitch for e in self.events]

    @property
    def durations(self) -> List[Duration]:
        return [e.duration for e in self.events]

    def __len__(self) -> int:
        return len(self.events)


def _resolve_rng(seed: Optional[int], rng: Optional[random.Random]) -> random.Random:
    if rng is not None:
        return rng
    return random.Random(seed)


class MelodyStrategy(ABC):
    """Produces a melody filling a number of 4/4 measures."""

    mode: str = ""

    @abstractmethod
    def generate(self, measure_count: int, rng: random.Random) -> GeneratedMelody:
        raise NotImplementedError


class ScaleMelodyStrategy(MelodyStrategy):
    """Random pitches from one randomly chosen practice scale."""

    mode = "scale"

    def __init__(
        self,
        scale_library: Mapping[str, Sequence[ScaleEntry]] = SCALE_LIBRARY,
        rhythm_patterns: Mapping[int, Sequence[Pattern]] = SCALE_RHYTHM_PATTERNS,
    ):
        self.scale_library = scale_library
        self.rhythm_patterns = rhythm_patterns

    def generate(self, measure_count: int, rng: random.Random) -> GeneratedMelody:
        if measure_count not in self.rhythm_patterns:
            raise ValueError(
                f"measure_count must be one of {sorted(self.rhythm_patterns)}, got {measure_count}"
            )

        key_mode = rng.choice([m for m in SCALE_MODES if self.scale_library.get(m)])
        scale = rng.choice(list(self.scale_library[key_mode]))
        rhythm = rng.choice(list(self.rhythm_patterns[measure_count]))

        events = tuple(NoteEvent(rng.choice(scale.pitches), d) for d in rhythm)
        logger.debug("Scale melody: %s, %d events", scale.name, len(events))
        return GeneratedMelody(
            events=events,
            label=scale.name,
            mode=self.mode,
            measure_count=measure_count,
        )


class ChordMelodyStrategy(MelodyStrategy):
    """Random triad members following a chord progression.

    Each one-measure rhythm cell is repeated for every measure. The chord
    index advances once a quarter note's worth (two eighth-note units) has
    been consumed inside the current chord.
    """

    mode = "chord"

    def __init__(
        self,
        progression_library: ProgressionLibrary = PROGRESSION_LIBRARY["major"],
        current_key_root: Optional[str] = None,
        rhythm_cells: Sequence[Pattern] = CHORD_RHYTHM_PATTERNS,
    ):
        self.library = progression_library
        self.key_root = "".join(parse_name(current_key_root or progression_library.home_root))
        self.rhythm_cells = rhythm_cells
        # Validates the key up front
        self.scale = key_scale(self.key_root, progression_library.mode)

    def progressions(self) -> Dict[str, Tuple[Pitch, ...]]:
        """Progressions moved into the current key."""
        if self.key_root == self.library.home_root:
            return dict(self.library.progressions)
        return {
            name: transpose_roots(roots, self.library.home_root, self.key_root, self.library.mode)
            for name, roots in self.library.progressions.items()
        }

    def generate(self, measure_count: int, rng: random.Random) -> GeneratedMelody:
        if measure_count < 1:
            raise ValueError(f"measure_count must be positive, got {measure_count}")

        progressions = self.progressions()
        name = rng.choice(sorted(progressions))
        roots = progressions[name]
        rhythm = list(rng.choice(list(self.rhythm_cells))) * measure_count

        unit = Duration.EIGHTH.beats
        chord_index = 0
        consumed_units = 0.0
        events: List[NoteEvent] = []
        harmony: List[Triad] = []
        for duration in rhythm:
            chord = triad(roots[chord_index], self.scale)
            events.append(NoteEvent(rng.choice(chord), duration))
            harmony.append(chord)

            consumed_units += duration.beats / unit
            if consumed_units >= 2:
                chord_index = (chord_index + 1) % len(roots)
                consumed_units = 0.0

        label = f"{self.key_root} {self.library.mode}: {name}"
        logger.debug("Chord melody: %s, %d events", label, len(events))
        return GeneratedMelody(
            events=tuple(events),
            label=label,
            mode=self.mode,
            measure_count=measure_count,
            harmony=tuple(harmony),
        )


def get_strategy(
    mode: str,
    *,
    progression_library: Optional[ProgressionLibrary] = None,
    current_key_root: Optional[str] = None,
) -> MelodyStrategy:
    """Select the strategy for a caller-chosen mode ('scale' or 'chord')."""
    if mode == "scale":
        return ScaleMelodyStrategy()
    if mode == "chord":
        return ChordMelodyStrategy(
            progression_library or PROGRESSION_LIBRARY["major"], current_key_root
        )
    raise ValueError(f"Unknown melody mode: {mode}")


def generate_scale_melody(
    measure_count: int,
    scale_library: Mapping[str, Sequence[ScaleEntry]] = SCALE_LIBRARY,
    *,
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> GeneratedMelody:
    """Convenience function for a free scale melody over 2 or 4 measures."""
    strategy = ScaleMelodyStrategy(scale_library)
    return strategy.generate(measure_count, _resolve_rng(seed, rng))


def generate_chord_melody(
    measure_count: int = 1,
    progression_library: ProgressionLibrary = PROGRESSION_LIBRARY["major"],
    current_key_root: Optional[str] = None,
    *,
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> GeneratedMelody:
    """Convenience function for a chord-constrained melody."""
    strategy = ChordMelodyStrategy(progression_library, current_key_root)
    return strategy.generate(measure_count, _resolve_rng(seed, rng))


__all__ = [
    "NoteEvent",
    "GeneratedMelody",
    "MelodyStrategy",
    "ScaleMelodyStrategy",
    "ChordMelodyStrategy",
    "get_strategy",
    "generate_scale_melody",
    "generate_chord_melody",
]
