"""Minuet Score

Notation layout, solfège captions, playback scheduling and score rendering
for generated practice melodies. The layout entry point is
``mnscore.layout.layout``.
"""

__version__ = "0.1.0"

from .layout import (
    CanvasSize,
    LaidOutMeasure,
    ScoreLayout,
    partition_measures,
    rest_fill,
)
from .solfege import SolfegeCaption, solfege_captions
from .playback import (
    PlaybackCollaborator,
    ScheduledNote,
    schedule,
    dispatch,
    playback_length,
)
from .render import ScoreRenderer, VexflowHtmlRenderer, render_score

__all__ = [
    # Layout
    "CanvasSize",
    "LaidOutMeasure",
    "ScoreLayout",
    "partition_measures",
    "rest_fill",
    # Captions
    "SolfegeCaption",
    "solfege_captions",
    # Playback
    "PlaybackCollaborator",
    "ScheduledNote",
    "schedule",
    "dispatch",
    "playback_length",
    # Rendering
    "ScoreRenderer",
    "VexflowHtmlRenderer",
    "render_score",
]
