"""Tests for chordcraft/rules/analysis.py"""

import pytest

from chordcraft.data.schema import KeyContext, create_bar, create_chord_event
from chordcraft.rules.analysis import (
    analyze_chord,
    analyze_section,
    parse_quality,
)
from chordcraft.rules.harmony import COMPLEXITY_TIERS, MODE_INTERVALS, degree_to_symbol


def chord(symbol):
    return create_chord_event(1, symbol, 4)


def bars_of(*symbols):
    return [create_bar(i, (4, 4), [chord(s)]) for i, s in enumerate(symbols)]


class TestParseQuality:

    @pytest.mark.parametrize("text,quality", [
        ("", "maj"),
        ("m", "min"),
        ("m7", "min7"),
        ("maj7", "maj7"),
        ("maj9", "maj7"),
        ("7", "dom7"),
        ("9", "dom9"),
        ("m7b5", "hdim7"),
        ("ø7", "hdim7"),
        ("dim", "dim"),
        ("dim7", "dim7"),
        ("aug", "aug"),
        ("sus4", "sus"),
    ])
    def test_quality_tags(self, text, quality):
        assert parse_quality(text) == quality


class TestAnalyzeChord:

    @pytest.mark.parametrize("symbol,numeral,function", [
        ("C", "I", "tonic"),
        ("Dm", "ii", "predominant"),
        ("G7", "V", "dominant"),
        ("Bdim", "vii°", "dominant"),
        ("Bm7b5", "vii°", "dominant"),
        ("Gsus4", "V", "dominant"),
    ])
    def test_diatonic_c_major(self, c_major, symbol, numeral, function):
        a = analyze_chord(chord(symbol), c_major)
        assert a.roman_numeral == numeral
        assert a.harmonic_function == function
        assert a.confidence == 1.0
        assert not a.uncertain
        assert not a.is_borrowed

    @pytest.mark.parametrize("symbol,target", [("D", "V"), ("E7", "vi"), ("A", "ii")])
    def test_secondary_dominants(self, c_major, symbol, target):
        a = analyze_chord(chord(symbol), c_major)
        assert a.roman_numeral == f"V/{target}"
        assert a.is_secondary_dominant
        assert a.secondary_target == target
        assert a.harmonic_function == "dominant"
        assert a.confidence == 0.85

    def test_borrowed_minor_subdominant(self, c_major):
        a = analyze_chord(chord("Fm"), c_major)
        assert a.roman_numeral == "iv"
        assert a.is_borrowed
        assert a.borrowed_from == "parallel minor"
        assert a.confidence == 0.8

    def test_borrowed_flat_seven(self, c_major):
        a = analyze_chord(chord("Bb"), c_major)
        assert a.roman_numeral == "VII"
        assert a.harmonic_function == "dominant"
        assert a.confidence == 0.75
        assert not a.uncertain

    def test_borrowed_flat_six(self, c_major):
        a = analyze_chord(chord("Ab"), c_major)
        assert a.roman_numeral == "VI"
        assert a.confidence == 0.75

    @pytest.mark.parametrize("symbol", ["F#", "Db"])
    def test_chromatic_is_uncertain(self, c_major, symbol):
        a = analyze_chord(chord(symbol), c_major)
        assert a.roman_numeral == f"?{symbol}"
        assert a.harmonic_function == "chromatic"
        assert a.confidence == 0.4
        assert a.uncertain

    @pytest.mark.parametrize("symbol,numeral", [
        ("Am", "i"), ("Dm", "iv"), ("E", "V"), ("F", "VI"), ("C", "III"),
    ])
    def test_a_minor(self, a_minor, symbol, numeral):
        assert analyze_chord(chord(symbol), a_minor).roman_numeral == numeral

    def test_a_minor_secondary_dominant(self, a_minor):
        assert analyze_chord(chord("G"), a_minor).roman_numeral == "V/III"

    def test_a_minor_borrowed_major_four(self, a_minor):
        a = analyze_chord(chord("D"), a_minor)
        assert a.roman_numeral == "IV"
        assert a.borrowed_from == "parallel major"

    def test_chord_id_is_kept(self, c_major):
        c = chord("C")
        assert analyze_chord(c, c_major).chord_id == c.id


class TestGeneratedChordsAreDiatonic:

    @pytest.mark.parametrize("mode", list(MODE_INTERVALS))
    @pytest.mark.parametrize("tier", COMPLEXITY_TIERS)
    def test_every_rendered_degree_analyses_cleanly(self, mode, tier):
        for root in ("C", "Eb", "F#", "A"):
            key = KeyContext(root=root, mode=mode)
            for degree in range(7):
                symbol = degree_to_symbol(degree, root, mode, tier)
                a = analyze_chord(chord(symbol), key)
                assert a.confidence == 1.0, (symbol, key)
                assert not a.uncertain


class TestCadences:

    @pytest.mark.parametrize("symbols,cadence", [
        (("G", "C"), "authentic"),
        (("C", "G"), "half"),
        (("F", "C"), "plagal"),
        (("G", "Am"), "deceptive"),
    ])
    def test_two_bar_cadences(self, c_major, symbols, cadence):
        result = analyze_section(bars_of(*symbols), c_major, "s1")
        assert [(c.bar_index, c.type) for c in result.cadences] == [(1, cadence)]

    def test_cadences_only_at_phrase_ends(self, c_major):
        result = analyze_section(bars_of("C", "G", "C", "G", "F", "C"), c_major, "s1")
        assert [(c.bar_index, c.type) for c in result.cadences] == [(3, "half"), (5, "plagal")]

    def test_two_chords_in_last_bar(self, c_major):
        bars = [
            create_bar(0, (4, 4), [chord("C")]),
            create_bar(1, (4, 4), [create_chord_event(1, "F", 2), create_chord_event(3, "G", 2)]),
        ]
        result = analyze_section(bars, c_major, "s1")
        assert [c.type for c in result.cadences] == ["half"]
        assert len(result.chord_analyses) == 3

    @pytest.mark.parametrize("symbols,cadence", [
        (("C", "F", "G", "C"), "authentic"),
        (("C", "F", "G", "Am"), "deceptive"),
        (("Dm", "G7", "C", "G7"), "half"),
    ])
    def test_four_bar_phrases(self, c_major, symbols, cadence):
        result = analyze_section(bars_of(*symbols), c_major, "s1")
        assert [(c.bar_index, c.type) for c in result.cadences] == [(3, cadence)]

    def test_single_chord_has_no_cadence(self, c_major):
        assert analyze_section(bars_of("G"), c_major, "s1").cadences == []


class TestSectionAnalysis:

    def test_pop_verse_tags(self, pop_song, c_major):
        verse = pop_song.sections[0]
        result = analyze_section(verse.bars, c_major, verse.id)
        assert result.section_id == verse.id
        assert result.rationale_tags == ["I-IV-V present", "I-V-vi pattern"]
        assert result.cadences == []

    def test_mixture_and_chromatic_tags(self, c_major):
        result = analyze_section(bars_of("C", "Fm", "F#", "D"), c_major, "s1")
        assert "modal mixture" in result.rationale_tags
        assert "secondary dominants" in result.rationale_tags
        assert "chromatic/ambiguous chords" in result.rationale_tags
