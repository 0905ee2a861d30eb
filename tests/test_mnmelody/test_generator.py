"""Tests for scale and chord melody strategies."""

import random

import pytest

from mnmelody.generator import (
    ChordMelodyStrategy,
    GeneratedMelody,
    ScaleMelodyStrategy,
    generate_chord_melody,
    generate_scale_melody,
    get_strategy,
)
from mnmelody.pitch import parse_pitch
from mnmelody.rhythm import Duration
from mnmelody.scales import (
    PROGRESSION_LIBRARY,
    SCALE_LIBRARY,
    ProgressionLibrary,
    ScaleEntry,
    key_scale,
)

Q, H, E, W = Duration.QUARTER, Duration.HALF, Duration.EIGHTH, Duration.WHOLE


def _one_progression(*roots, home="C", mode="major"):
    return ProgressionLibrary(home, mode, {"test": tuple(parse_pitch(r) for r in roots)})


def _harmony_roots(melody):
    return [str(chord[0]) for chord in melody.harmony]


class TestScaleMelody:
    """Tests for free scale melodies."""

    @pytest.mark.parametrize("measure_count", [2, 4])
    def test_fills_measures(self, measure_count):
        for seed in range(50):
            melody = generate_scale_melody(measure_count, seed=seed)
            assert melody.total_beats == measure_count * 4
            assert melody.measure_count == measure_count
            assert melody.mode == "scale"
            assert melody.harmony == ()

    def test_pitches_from_labelled_scale(self):
        for seed in range(50):
            melody = generate_scale_melody(4, seed=seed)
            key_mode = melody.label.split()[-1]
            entry = next(e for e in SCALE_LIBRARY[key_mode] if e.name == melody.label)
            assert all(p in entry for p in melody.pitches)

    def test_rejects_other_measure_counts(self):
        for count in (0, 1, 3, 8):
            with pytest.raises(ValueError):
                generate_scale_melody(count, seed=1)

    def test_seed_reproducible(self):
        assert generate_scale_melody(4, seed=7) == generate_scale_melody(4, seed=7)

    def test_rng_injection_matches_seed(self):
        by_seed = generate_scale_melody(2, seed=11)
        by_rng = generate_scale_melody(2, rng=random.Random(11))
        assert by_seed == by_rng

    def test_injected_scale_and_rhythm(self):
        """Eight quarters over C4..C5 give eight events from that scale."""
        c_major = ScaleEntry(
            "C major",
            "major",
            tuple(parse_pitch(t) for t in ("C4", "D4", "E4", "F4", "G4", "A4", "B4", "C5")),
        )
        strategy = ScaleMelodyStrategy(
            scale_library={"major": [c_major]},
            rhythm_patterns={2: [(Q,) * 8]},
        )
        for seed in range(20):
            melody = strategy.generate(2, random.Random(seed))
            assert len(melody) == 8
            assert melody.total_beats == 8
            assert melody.durations == [Q] * 8
            assert melody.label == "C major"
            assert set(melody.pitches) <= set(c_major.pitches)

    def test_both_modes_reachable(self):
        labels = {generate_scale_melody(2, seed=s).label.split()[-1] for s in range(100)}
        assert labels == {"major", "minor"}


class TestChordMelody:
    """Tests for chord-constrained melodies."""

    def test_quarter_notes_follow_each_chord(self):
        library = _one_progression("C4", "F4", "G4", "C4")
        strategy = ChordMelodyStrategy(library, rhythm_cells=((Q, Q, Q, Q),))
        expected = [
            {"C4", "E4", "G4"},
            {"F4", "A4", "C5"},
            {"G4", "B4", "D5"},
            {"C4", "E4", "G4"},
        ]
        for seed in range(20):
            melody = strategy.generate(1, random.Random(seed))
            assert len(melody) == 4
            for pitch, chord in zip(melody.pitches, expected):
                assert str(pitch) in chord

    def test_eighths_share_a_chord(self):
        library = _one_progression("C4", "F4", "G4", "C4")
        strategy = ChordMelodyStrategy(library, rhythm_cells=((E, E, Q, Q, Q),))
        melody = strategy.generate(1, random.Random(0))
        assert _harmony_roots(melody) == ["C4", "C4", "F4", "G4", "C4"]

    def test_half_notes_advance_immediately(self):
        library = _one_progression("C4", "F4", "G4", "C4")
        strategy = ChordMelodyStrategy(library, rhythm_cells=((H, H),))
        melody = strategy.generate(2, random.Random(0))
        assert _harmony_roots(melody) == ["C4", "F4", "G4", "C4"]

    def test_progression_cycles(self):
        library = _one_progression("C4", "G4")
        strategy = ChordMelodyStrategy(library, rhythm_cells=((W,),))
        melody = strategy.generate(3, random.Random(0))
        assert _harmony_roots(melody) == ["C4", "G4", "C4"]

    def test_pitch_belongs_to_active_triad(self):
        for seed in range(50):
            melody = generate_chord_melody(4, seed=seed)
            assert len(melody.harmony) == len(melody.events)
            for event, chord in zip(melody.events, melody.harmony):
                assert event.pitch in chord

    @pytest.mark.parametrize("measure_count", [1, 2, 4])
    def test_fills_measures(self, measure_count):
        for seed in range(30):
            melody = generate_chord_melody(measure_count, seed=seed)
            assert melody.total_beats == measure_count * 4

    def test_transposed_key(self):
        for seed in range(30):
            melody = generate_chord_melody(1, PROGRESSION_LIBRARY["major"], "D", seed=seed)
            assert melody.label.startswith("D major: ")
            d_major = {p.chroma for p in key_scale("D")}
            assert all(p.chroma in d_major for p in melody.pitches)

    def test_transposed_example(self):
        library = _one_progression("C4", "F4", "G4", "C4")
        strategy = ChordMelodyStrategy(library, "D", rhythm_cells=((Q, Q, Q, Q),))
        melody = strategy.generate(1, random.Random(3))
        assert _harmony_roots(melody) == ["D4", "G4", "A4", "D4"]

    def test_minor_library(self):
        melody = generate_chord_melody(1, PROGRESSION_LIBRARY["minor"], "E", seed=5)
        assert melody.label.startswith("E minor: ")
        e_minor = {p.chroma for p in key_scale("E", "minor")}
        assert all(p.chroma in e_minor for p in melody.pitches)

    def test_unknown_key(self):
        with pytest.raises(ValueError):
            generate_chord_melody(1, current_key_root="H", seed=1)
        with pytest.raises(ValueError):
            generate_chord_melody(1, current_key_root="Fb", seed=1)

    def test_seed_reproducible(self):
        assert generate_chord_melody(2, seed=4) == generate_chord_melody(2, seed=4)


class TestStrategySelection:
    """Tests for get_strategy."""

    def test_modes(self):
        assert isinstance(get_strategy("scale"), ScaleMelodyStrategy)
        chord = get_strategy("chord", current_key_root="A")
        assert isinstance(chord, ChordMelodyStrategy)
        assert chord.key_root == "A"

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            get_strategy("arpeggio")

    def test_generated_melody_shape(self):
        melody = get_strategy("scale").generate(2, random.Random(0))
        assert isinstance(melody, GeneratedMelody)
        assert melody.durations == [e.duration for e in melody.events]
