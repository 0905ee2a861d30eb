"""Notation layout: melody events to measure-bounded notation tokens.

Events are packed greedily into 4/4 measures without ever splitting a note
across a barline. Short measures are padded with rests, largest first, and
each measure becomes one EasyScore token string such as ``c4/q, e4/8``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from mncore.logging import melody_context
from mnmelody.generator import GeneratedMelody, NoteEvent
from mnmelody.pitch import easyscore_name
from mnmelody.rhythm import BEATS_PER_MEASURE, Duration

logger = logging.getLogger(__name__)

REST_PITCH = "b4"
EMPTY_MEASURE_TOKEN = f"{REST_PITCH}/w/r"
TOKEN_SEPARATOR = ", "

# Largest first; a sixteenth closes gaps shorter than an eighth
REST_DURATIONS: Tuple[Duration, ...] = (
    Duration.HALF,
    Duration.QUARTER,
    Duration.EIGHTH,
    Duration.SIXTEENTH,
)


@dataclass(frozen=True)
class CanvasSize:
    width: int
    height: int


@dataclass(frozen=True)
class LaidOutMeasure:
    events: Tuple[NoteEvent, ...]
    rests: Tuple[Duration, ...]

    @property
    def beats_before_padding(self) -> float:
        return sum(e.beats for e in self.events)

    @property
    def beats_after_padding(self) -> float:
        return self.beats_before_padding + sum(r.beats for r in self.rests)

    @property
    def token(self) -> str:
        parts = [f"{easyscore_name(e.pitch)}/{e.duration.notation_code}" for e in self.events]
        parts += [rest_token(r) for r in self.rests]
        return TOKEN_SEPARATOR.join(parts) if parts else EMPTY_MEASURE_TOKEN


@dataclass(frozen=True)
class ScoreLayout:
    measures: Tuple[LaidOutMeasure, ...]
    tokens: Tuple[str, ...]
    canvas: CanvasSize
    clef: str = "treble"
    time_signature: str = "4/4"

    @property
    def measure_count(self) -> int:
        return len(self.tokens)


def rest_token(duration: Duration) -> str:
    return f"{REST_PITCH}/{duration.notation_code}/r"


def partition_measures(
    events: Sequence[NoteEvent],
    beats_per_measure: float = BEATS_PER_MEASURE,
) -> List[List[NoteEvent]]:
    """Pack events into measures, closing a measure when the next event
    would overflow it."""
    measures: List[List[NoteEvent]] = []
    current: List[NoteEvent] = []
    current_beats = 0.0
    for event in events:
        if current and current_beats + event.beats > beats_per_measure:
            measures.append(current)
            current, current_beats = [], 0.0
        current.append(event)
        current_beats += event.beats
    if current:
        measures.append(current)
    return measures


def rest_fill(remaining_beats: float) -> List[Duration]:
    """Rests covering ``remaining_beats``, largest value first."""
    rests: List[Duration] = []
    remaining = remaining_beats
    for duration in REST_DURATIONS:
        while remaining >= duration.beats:
            rests.append(duration)
            remaining -= duration.beats
    return rests


def canvas_for(measure_count: int) -> CanvasSize:
    if measure_count <= 2:
        return CanvasSize(800, 250)
    return CanvasSize(1200, 500)


def layout(melody: GeneratedMelody, measure_count: int) -> ScoreLayout:
    """Lay out a melody as exactly ``measure_count`` measures.

    Missing measures become whole rests; measures beyond ``measure_count``
    are dropped with a warning.
    """
    if measure_count < 1:
        raise ValueError(f"measure_count must be positive, got {measure_count}")

    groups = partition_measures(melody.events)
    if len(groups) > measure_count:
        logger.warning(
            "Melody spans %d measures, truncating to %d",
            len(groups),
            measure_count,
            extra=melody_context(melody),
        )
        groups = groups[:measure_count]

    measures = []
    for group in groups:
        beats = sum(e.beats for e in group)
        rests = rest_fill(BEATS_PER_MEASURE - beats) if beats < BEATS_PER_MEASURE else []
        measures.append(LaidOutMeasure(tuple(group), tuple(rests)))

    tokens = [m.token for m in measures]
    tokens += [EMPTY_MEASURE_TOKEN] * (measure_count - len(tokens))
    logger.debug("Laid out %d measures: %s", measure_count, tokens)

    return ScoreLayout(
        measures=tuple(measures),
        tokens=tuple(tokens),
        canvas=canvas_for(measure_count),
    )


__all__ = [
    "REST_PITCH",
    "EMPTY_MEASURE_TOKEN",
    "TOKEN_SEPARATOR",
    "REST_DURATIONS",
    "CanvasSize",
    "LaidOutMeasure",
    "ScoreLayout",
    "rest_token",
    "partition_measures",
    "rest_fill",
    "canvas_for",
    "layout",
]
