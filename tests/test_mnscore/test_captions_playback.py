"""Tests for solfège captions, playback scheduling and score rendering."""

import json
import logging

import pytest

from mnmelody.generator import GeneratedMelody, NoteEvent, generate_scale_melody
from mnmelody.pitch import parse_pitch
from mnmelody.rhythm import Duration
from mnscore.layout import layout
from mnscore.playback import dispatch, playback_length, schedule
from mnscore.render import VexflowHtmlRenderer, render_score
from mnscore.solfege import solfege_captions, syllable_for


def make_melody(*notes, measure_count=1):
    events = tuple(NoteEvent(parse_pitch(p), d) for p, d in notes)
    return GeneratedMelody(events=events, label="test", mode="scale", measure_count=measure_count)


class RecordingPlayer:
    """Collects schedule_note calls."""

    def __init__(self):
        self.calls = []

    def schedule_note(self, pitch, duration_seconds, at_offset_seconds):
        self.calls.append((str(pitch), duration_seconds, at_offset_seconds))


class TestSolfege:
    """Tests for solfège captions."""

    def test_naturals(self):
        melody = make_melody(*[(p, Duration.QUARTER) for p in ("C4", "D4", "E4", "F4", "G4", "A4", "B4")])
        syllables = [c.syllable for c in solfege_captions(melody)]
        assert syllables == ["Do", "Re", "Mi", "Fa", "Sol", "La", "Si"]

    def test_accidentals_collapse_to_letter(self):
        melody = make_melody(("F#4", Duration.HALF), ("Bb3", Duration.EIGHTH))
        captions = solfege_captions(melody)
        assert [c.syllable for c in captions] == ["Fa", "Si"]
        assert [c.duration for c in captions] == [Duration.HALF, Duration.EIGHTH]

    def test_same_length_as_melody(self):
        melody = generate_scale_melody(4, seed=2)
        assert len(solfege_captions(melody)) == len(melody)

    def test_accepts_event_sequence(self):
        events = [NoteEvent(parse_pitch("G5"), Duration.QUARTER)]
        assert solfege_captions(events)[0].syllable == "Sol"

    def test_unknown_name(self):
        assert syllable_for("X4") is None
        assert syllable_for("") is None
        assert syllable_for("e5") == "Mi"


class TestPlayback:
    """Tests for scheduled playback."""

    def test_offsets_at_120(self):
        melody = make_melody(("C4", Duration.QUARTER), ("E4", Duration.HALF), ("G4", Duration.EIGHTH))
        notes = schedule(melody)
        assert [n.start for n in notes] == pytest.approx([0.0, 0.5, 1.5])
        assert [n.release for n in notes] == pytest.approx([0.5, 1.5, 1.75])

    def test_tempo_scales_offsets(self):
        melody = make_melody(("C4", Duration.QUARTER), ("E4", Duration.QUARTER))
        assert [n.start for n in schedule(melody, bpm=60)] == pytest.approx([0.0, 1.0])

    def test_monotonic_and_positive(self):
        for seed in range(30):
            notes = schedule(generate_scale_melody(4, seed=seed))
            starts = [n.start for n in notes]
            assert starts == sorted(starts)
            assert all(n.release > n.start for n in notes)

    def test_dispatch_without_player(self):
        assert dispatch(make_melody(("C4", Duration.QUARTER)), None) == []

    def test_dispatch_to_player(self):
        player = RecordingPlayer()
        melody = make_melody(("C4", Duration.QUARTER), ("D4", Duration.QUARTER))
        notes = dispatch(melody, player)
        assert len(notes) == 2
        assert player.calls == [("C4", 0.5, 0.0), ("D4", 0.5, 0.5)]

    def test_playback_length(self):
        assert playback_length(generate_scale_melody(4, seed=1)) == pytest.approx(8.0)
        assert playback_length(generate_scale_melody(2, seed=1)) == pytest.approx(4.0)
        assert playback_length(make_melody()) == 0.0

    def test_invalid_bpm(self):
        with pytest.raises(ValueError):
            schedule(make_melody(("C4", Duration.QUARTER)), bpm=0)


class TestRender:
    """Tests for score rendering."""

    def test_html_contains_layout(self):
        score = layout(make_melody(("C4", Duration.WHOLE)), 4)
        html = VexflowHtmlRenderer().render(score, title="C <major>")
        assert html.startswith("<!DOCTYPE html>")
        assert "C &lt;major&gt;" in html
        assert "EasyScore" in html
        start = html.index('type="application/json">') + len('type="application/json">')
        payload = json.loads(html[start:html.index("</script>", start)])
        assert payload["tokens"] == ["c4/w", "b4/w/r", "b4/w/r", "b4/w/r"]
        assert payload["width"] == 1200
        assert payload["clef"] == "treble"
        assert payload["time_signature"] == "4/4"

    def test_no_renderer(self, caplog):
        score = layout(make_melody(("C4", Duration.WHOLE)), 1)
        with caplog.at_level(logging.DEBUG, logger="mnscore.render"):
            assert render_score(score, None) is None

    def test_render_score_delegates(self):
        score = layout(make_melody(("C4", Duration.WHOLE)), 2)
        html = render_score(score, VexflowHtmlRenderer(), "Practice")
        assert "<h1>Practice</h1>" in html
        assert VexflowHtmlRenderer().media_type == "text/html"
