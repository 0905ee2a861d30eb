"""Tests for the practice session state and piano synth."""

import numpy as np
import pytest

from mnmelody.pitch import parse_pitch
from mnmelody.rhythm import Duration
from pods.practice.session import NothingToReplayError, PracticeSession, SessionBusyError
from pods.practice.synth import BufferPlayer, PianoSynth, to_wav_bytes


class FakeClock:
    """Manually advanced clock."""

    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session(clock):
    return PracticeSession(measure_count=4, clock=clock)


class TestPracticeSession:
    """Tests for PracticeSession."""

    def test_initial_state(self, session):
        state = session.snapshot()
        assert state == {
            "measure_count": 4,
            "show_score": True,
            "show_solfege": False,
            "busy": False,
            "can_replay": False,
            "label": None,
        }

    def test_invalid_measure_count(self, clock):
        with pytest.raises(ValueError):
            PracticeSession(measure_count=3, clock=clock)

    def test_toggles(self, session):
        session.toggle("measures")
        assert session.measure_count == 2
        session.toggle("measures")
        assert session.measure_count == 4
        session.toggle("score")
        session.toggle("solfege")
        assert session.show_score is False
        assert session.show_solfege is True

    def test_unknown_toggle(self, session):
        with pytest.raises(ValueError):
            session.toggle("tempo")

    def test_regenerate_marks_busy(self, session, clock):
        melody = session.regenerate(seed=3)
        assert melody.total_beats == 16
        assert session.is_busy
        assert session.can_replay

        with pytest.raises(SessionBusyError):
            session.regenerate(seed=4)

        clock.now += 8.0  # 16 beats at 120 bpm
        assert not session.is_busy
        session.regenerate(seed=4)

    def test_regenerate_follows_measure_toggle(self, session, clock):
        session.toggle("measures")
        assert session.regenerate(seed=1).total_beats == 8

    def test_regenerate_chord_mode(self, session):
        melody = session.regenerate(mode="chord", key_root="D", seed=2)
        assert melody.mode == "chord"
        assert melody.label.startswith("D major")
        assert melody.total_beats == 16

    def test_regenerate_rejects_unknown_key(self, session):
        with pytest.raises(ValueError):
            session.regenerate(mode="chord", key_root="H")
        with pytest.raises(ValueError):
            session.regenerate(key_mode="phrygian")
        assert not session.is_busy

    def test_replay(self, session, clock):
        with pytest.raises(NothingToReplayError):
            session.replay()

        melody = session.regenerate(seed=5)
        with pytest.raises(SessionBusyError):
            session.replay()

        clock.now += 10.0
        assert session.replay() == melody
        assert session.is_busy

    def test_replay_dispatches_to_player(self, session, clock):
        session.regenerate(seed=6)
        clock.now += 10.0
        player = BufferPlayer(PianoSynth(sample_rate=16_000))
        session.replay(player)
        assert len(player.render()) > 0

    def test_press_key(self, session):
        note = session.press_key(parse_pitch("C4"))
        assert note.start == 0.0
        assert note.release == pytest.approx(0.5)
        assert not session.is_busy

        note = session.press_key(parse_pitch("A4"), Duration.HALF)
        assert note.release == pytest.approx(1.0)


class TestPianoSynth:
    """Tests for the piano tone and buffer player."""

    def test_note_shape(self):
        synth = PianoSynth(sample_rate=48_000)
        note = synth.generate_note(parse_pitch("A4"), 0.5)
        assert note.dtype == np.float32
        assert len(note) == int((0.5 + synth.release) * 48_000)
        assert np.max(np.abs(note)) == pytest.approx(1.0, abs=1e-3)
        assert abs(note[0]) < 1e-3
        assert abs(note[-1]) < 1e-2

    def test_buffer_player_mixes_offsets(self):
        synth = PianoSynth(sample_rate=16_000)
        player = BufferPlayer(synth)
        player.schedule_note(parse_pitch("C4"), 0.5, 0.0)
        player.schedule_note(parse_pitch("G4"), 0.5, 0.5)
        audio = player.render()
        assert audio.dtype == np.float32
        assert len(audio) == int(round(0.5 * 16_000)) + int((0.5 + synth.release) * 16_000)
        assert np.max(np.abs(audio)) <= 1.0

    def test_empty_player(self):
        assert BufferPlayer().render().size == 0

    def test_wav_bytes(self):
        data = to_wav_bytes(np.zeros(4800, dtype=np.float32))
        assert data[:4] == b"RIFF"
