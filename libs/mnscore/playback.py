"""Playback scheduling at a fixed tempo.

The scheduler computes start/release offsets only. Honoring them in real
time is the job of the playback collaborator (a synth, a browser audio
engine, ...).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol

from mnmelody.generator import GeneratedMelody
from mnmelody.pitch import Pitch

logger = logging.getLogger(__name__)

DEFAULT_BPM = 120


class PlaybackCollaborator(Protocol):
    def schedule_note(
        self, pitch: Pitch, duration_seconds: float, at_offset_seconds: float
    ) -> None:
        ...


@dataclass(frozen=True)
class ScheduledNote:
    pitch: Pitch
    start: float
    release: float

    @property
    def duration(self) -> float:
        return self.release - self.start


def schedule(melody: GeneratedMelody, bpm: float = DEFAULT_BPM) -> List[ScheduledNote]:
    """Start and release offsets (seconds) for every event.

    Starts are running sums of the preceding durations, so they never
    decrease, and every release is later than its start.
    """
    if bpm <= 0:
        raise ValueError(f"bpm must be positive, got {bpm}")

    notes = []
    offset = 0.0
    for event in melody.events:
        length = event.duration.seconds(bpm)
        notes.append(ScheduledNote(event.pitch, offset, offset + length))
        offset += length
    return notes


def dispatch(
    melody: GeneratedMelody,
    player: Optional[PlaybackCollaborator],
    bpm: float = DEFAULT_BPM,
) -> List[ScheduledNote]:
    """Hand every scheduled note to ``player``. Without a player nothing happens."""
    if player is None:
        logger.debug("No playback collaborator, skipping %d events", len(melody.events))
        return []

    notes = schedule(melody, bpm)
    for note in notes:
        player.schedule_note(note.pitch, note.duration, note.start)
    return notes


def playback_length(melody: GeneratedMelody, bpm: float = DEFAULT_BPM) -> float:
    """Seconds until the last note is released."""
    notes = schedule(melody, bpm)
    return notes[-1].release if notes else 0.0


__all__ = [
    "DEFAULT_BPM",
    "PlaybackCollaborator",
    "ScheduledNote",
    "schedule",
    "dispatch",
    "playback_length",
]
