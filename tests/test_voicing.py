"""Tests for chordcraft/rules/voicing.py"""

import pytest

from chordcraft.data.schema import VoicingOptions, create_bar, create_chord_event
from chordcraft.rules.voicing import (
    apply_arpeggio_pattern,
    apply_block_pattern,
    apply_pad_pattern,
    apply_rhythmic_pattern,
    apply_strum_pattern,
    chord_symbol_to_midi_notes,
    generate_arrangement,
    generate_chord_voicing,
    humanize_events,
    parse_chord_symbol,
)

C_TRIAD = [60, 64, 67]


@pytest.fixture
def whole_bar_c():
    return create_chord_event(1, "C", 4)


class TestChordParsing:

    @pytest.mark.parametrize("symbol,root,intervals", [
        ("C", 0, (0, 4, 7)),
        ("Am7", 9, (0, 3, 7, 10)),
        ("Bm7b5", 11, (0, 3, 6, 10)),
        ("F#m", 6, (0, 3, 7)),
        ("Bb9", 10, (0, 4, 7, 10, 14)),
        ("Ebmaj7", 3, (0, 4, 7, 11)),
        ("Gsus4", 7, (0, 5, 7)),
        ("G/B", 7, (0, 4, 7)),
    ])
    def test_parse(self, symbol, root, intervals):
        assert parse_chord_symbol(symbol) == (root, intervals)

    @pytest.mark.parametrize("symbol", ["", "H7", "?"])
    def test_unparseable_gives_c_major(self, symbol):
        assert parse_chord_symbol(symbol) == (0, (0, 4, 7))


class TestMidiNotes:

    def test_c_major_middle_octave(self):
        assert chord_symbol_to_midi_notes("C") == C_TRIAD

    def test_minor_seventh(self):
        assert chord_symbol_to_midi_notes("Am7") == [69, 72, 76, 79]

    def test_major_seventh(self):
        assert chord_symbol_to_midi_notes("Cmaj7", octave_base=4, density="medium") == [60, 64, 67, 71]

    def test_half_diminished_keeps_flat_fifth(self):
        assert chord_symbol_to_midi_notes("Bm7b5") == [71, 74, 77, 81]

    def test_octave(self):
        assert chord_symbol_to_midi_notes("C", octave_base=3) == [48, 52, 55]

    def test_inversions(self):
        assert chord_symbol_to_midi_notes("C", inversion_preference="first") == [64, 67, 72]
        assert chord_symbol_to_midi_notes("C", inversion_preference="second") == [67, 72, 76]
        assert chord_symbol_to_midi_notes("C", inversion_preference="auto") == C_TRIAD

    def test_density_limits(self):
        assert chord_symbol_to_midi_notes("Cmaj9", density="simple") == C_TRIAD
        assert chord_symbol_to_midi_notes("Cmaj9", density="medium") == [60, 64, 67, 71]
        assert chord_symbol_to_midi_notes("Cmaj9", density="rich") == [60, 64, 67, 71, 74]


class TestPatterns:

    def test_block(self, whole_bar_c):
        events = apply_block_pattern(C_TRIAD, whole_bar_c)
        assert [e.midi_note for e in events] == C_TRIAD
        assert {(e.start_beat, e.duration_beats, e.velocity) for e in events} == {(1, 4, 80)}

    def test_arpeggio(self, whole_bar_c):
        events = apply_arpeggio_pattern(C_TRIAD, whole_bar_c)
        assert [e.start_beat for e in events] == pytest.approx([1, 1 + 4 / 3, 1 + 8 / 3])
        assert [e.velocity for e in events] == [65, 78, 90]

    def test_arpeggio_of_nothing(self, whole_bar_c):
        assert apply_arpeggio_pattern([], whole_bar_c) == []

    def test_pad_velocity_falls(self, whole_bar_c):
        assert [e.velocity for e in apply_pad_pattern(C_TRIAD, whole_bar_c)] == [72, 64, 56]

    def test_strum(self, whole_bar_c):
        events = apply_strum_pattern(C_TRIAD, whole_bar_c)
        assert [e.start_beat for e in events] == pytest.approx([1.0, 1.05, 1.1])
        assert [e.duration_beats for e in events] == pytest.approx([4.0, 3.95, 3.9])
        assert all(75 <= e.velocity <= 85 for e in events)
        assert events == apply_strum_pattern(C_TRIAD, whole_bar_c)

    def test_rhythmic_hits_fit_the_chord(self):
        assert len(apply_rhythmic_pattern(C_TRIAD, create_chord_event(1, "C", 4))) == 15
        short = apply_rhythmic_pattern(C_TRIAD, create_chord_event(3, "C", 2))
        assert len(short) == 9
        assert sorted({e.start_beat for e in short}) == [3, 4, 4.5]
        assert [e.velocity for e in short[:3]] == [82, 82, 82]


class TestHumanize:

    def test_zero_amount_is_identity(self, whole_bar_c):
        events = apply_block_pattern(C_TRIAD, whole_bar_c)
        assert humanize_events(events, 0.0, seed=5) == events

    def test_same_seed_same_result(self, whole_bar_c):
        events = apply_block_pattern(C_TRIAD, whole_bar_c)
        assert humanize_events(events, 1.0, seed=7) == humanize_events(events, 1.0, seed=7)

    def test_drift_is_bounded(self, whole_bar_c):
        events = apply_block_pattern(C_TRIAD, whole_bar_c)
        for before, after in zip(events, humanize_events(events, 1.0, seed=3)):
            assert abs(after.start_beat - before.start_beat) <= 0.06
            assert abs(after.velocity - before.velocity) <= 12
            assert after.midi_note == before.midi_note


class TestChordVoicing:

    def test_uses_options(self, whole_bar_c):
        events = generate_chord_voicing(whole_bar_c, VoicingOptions(pattern="pad", octave_base=3))
        assert [e.midi_note for e in events] == [48, 52, 55]

    def test_notes_above_midi_range_are_dropped(self):
        chord = create_chord_event(1, "Bmaj9", 4)
        events = generate_chord_voicing(chord, VoicingOptions(density="rich", octave_base=8))
        assert [e.midi_note for e in events] == [119, 123, 126]


class TestArrangement:

    def test_bar_arrangement(self):
        bar = create_bar(0, (4, 4), [create_chord_event(1, "C", 2), create_chord_event(3, "G7", 2)])
        result = generate_arrangement(bar, VoicingOptions())
        assert result.bar_id == bar.id
        assert result.pattern == "block"
        assert result.density == "medium"
        assert [e.midi_note for e in result.notes] == [60, 64, 67, 67, 71, 74, 77]

    def test_humanized_arrangement_is_repeatable(self):
        bar = create_bar(0, (4, 4), [create_chord_event(1, "Am7", 4)])
        options = VoicingOptions(humanize_amount=0.8, pattern="arpeggio")
        assert generate_arrangement(bar, options) == generate_arrangement(bar, options)
