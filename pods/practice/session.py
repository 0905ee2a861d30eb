"""Caller-side practice state: toggles, last melody and the busy flag.

The melody and layout libraries are stateless; everything a practice widget
remembers between clicks lives here.
"""

from __future__ import annotations

import logging
import random
import time
from typing import Callable, Dict, List, Optional

from mncore.logging import melody_context
from mnmelody.generator import GeneratedMelody, get_strategy
from mnmelody.pitch import Pitch
from mnmelody.rhythm import Duration
from mnmelody.scales import PROGRESSION_LIBRARY
from mnscore.playback import (
    DEFAULT_BPM,
    PlaybackCollaborator,
    ScheduledNote,
    dispatch,
    playback_length,
)

logger = logging.getLogger(__name__)

MEASURE_CHOICES = (2, 4)
TOGGLES = ("measures", "score", "solfege")


class SessionBusyError(RuntimeError):
    """A playback cycle is still in flight."""


class NothingToReplayError(RuntimeError):
    """No melody has been generated yet."""


class PracticeSession:
    """State of one practice widget.

    Args:
        measure_count: Initial measure count (2 or 4)
        bpm: Playback tempo
        clock: Monotonic clock in seconds, injectable for tests
    """

    def __init__(
        self,
        measure_count: int = 4,
        bpm: float = DEFAULT_BPM,
        clock: Callable[[], float] = time.monotonic,
    ):
        if measure_count not in MEASURE_CHOICES:
            raise ValueError(f"measure_count must be one of {MEASURE_CHOICES}")
        self.measure_count = measure_count
        self.bpm = bpm
        self.clock = clock
        self.show_score = True
        self.show_solfege = False
        self.last_melody: Optional[GeneratedMelody] = None
        self._busy_until = 0.0

    @property
    def is_busy(self) -> bool:
        return self.clock() < self._busy_until

    @property
    def can_replay(self) -> bool:
        return self.last_melody is not None

    def toggle(self, name: str) -> None:
        """Flip one of the widget toggles: 'measures', 'score' or 'solfege'."""
        if name == "measures":
            self.measure_count = 2 if self.measure_count == 4 else 4
        elif name == "score":
            self.show_score = not self.show_score
        elif name == "solfege":
            self.show_solfege = not self.show_solfege
        else:
            raise ValueError(f"Unknown toggle: {name} (expected one of {TOGGLES})")
        logger.debug("Toggled %s", name)

    def _check_idle(self) -> None:
        if self.is_busy:
            raise SessionBusyError(
                f"Playback in progress for another {self._busy_until - self.clock():.2f}s"
            )

    def _play(self, melody: GeneratedMelody, player: Optional[PlaybackCollaborator]) -> List[ScheduledNote]:
        notes = dispatch(melody, player, self.bpm)
        self._busy_until = self.clock() + playback_length(melody, self.bpm)
        return notes

    def regenerate(
        self,
        mode: str = "scale",
        key_root: Optional[str] = None,
        key_mode: str = "major",
        seed: Optional[int] = None,
        player: Optional[PlaybackCollaborator] = None,
    ) -> GeneratedMelody:
        """Generate a new melody for the current measure count and play it.

        Raises:
            SessionBusyError: while the previous melody is still playing.
            ValueError: for an unknown mode or key.
        """
        self._check_idle()
        if key_mode not in PROGRESSION_LIBRARY:
            raise ValueError(f"Unknown key mode: {key_mode}")

        strategy = get_strategy(
            mode,
            progression_library=PROGRESSION_LIBRARY[key_mode],
            current_key_root=key_root,
        )
        melody = strategy.generate(self.measure_count, random.Random(seed))
        self.last_melody = melody
        self._play(melody, player)
        logger.info("Generated %s", melody.label, extra=melody_context(melody))
        return melody

    def replay(self, player: Optional[PlaybackCollaborator] = None) -> GeneratedMelody:
        """Play the last melody again.

        Raises:
            NothingToReplayError: before the first generation.
            SessionBusyError: while a melody is still playing.
        """
        if self.last_melody is None:
            raise NothingToReplayError("Nothing to replay yet")
        self._check_idle()
        self._play(self.last_melody, player)
        return self.last_melody

    def press_key(
        self,
        pitch: Pitch,
        duration: Duration = Duration.QUARTER,
        player: Optional[PlaybackCollaborator] = None,
    ) -> ScheduledNote:
        """Sound one key immediately; does not touch the busy flag."""
        note = ScheduledNote(pitch, 0.0, duration.seconds(self.bpm))
        if player is not None:
            player.schedule_note(pitch, note.duration, note.start)
        return note

    def snapshot(self) -> Dict[str, object]:
        return {
            "measure_count": self.measure_count,
            "show_score": self.show_score,
            "show_solfege": self.show_solfege,
            "busy": self.is_busy,
            "can_replay": self.can_replay,
            "label": self.last_melody.label if self.last_melody is not None else None,
        }


__all__ = [
    "MEASURE_CHOICES",
    "TOGGLES",
    "SessionBusyError",
    "NothingToReplayError",
    "PracticeSession",
]
