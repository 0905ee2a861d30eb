"""Fixed-do solfège captions for melody events."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Union

from mnmelody.generator import GeneratedMelody, NoteEvent
from mnmelody.rhythm import Duration

logger = logging.getLogger(__name__)

NOTE_TO_SOLFEGE: Dict[str, str] = {
    "C": "Do",
    "D": "Re",
    "E": "Mi",
    "F": "Fa",
    "G": "Sol",
    "A": "La",
    "B": "Si",
}


@dataclass(frozen=True)
class SolfegeCaption:
    syllable: Optional[str]
    duration: Duration


def syllable_for(name: str) -> Optional[str]:
    """Syllable for a pitch name such as 'F#5'; accidentals and octave are ignored."""
    letter = name.strip()[:1].upper()
    return NOTE_TO_SOLFEGE.get(letter)


def solfege_captions(
    melody: Union[GeneratedMelody, Iterable[NoteEvent]],
) -> List[SolfegeCaption]:
    """One caption per event, in order.

    Sharps and flats share the syllable of their natural letter. A name with
    no syllable produces a caption with ``syllable=None``.
    """
    events = melody.events if isinstance(melody, GeneratedMelody) else melody
    captions = []
    for event in events:
        syllable = syllable_for(str(event.pitch))
        if syllable is None:
            logger.debug("No solfege syllable for %s", event.pitch)
        captions.append(SolfegeCaption(syllable, event.duration))
    return captions


__all__ = ["NOTE_TO_SOLFEGE", "SolfegeCaption", "syllable_for", "solfege_captions"]
