"""Tests for chordcraft/rules/generate_rule_based.py"""

from chordcraft.data.schema import KeyContext
from chordcraft.rules.generate_rule_based import (
    DREAMY_FORM,
    JAZZ_FORM,
    POP_FORM,
    choose_key,
    choose_song_form,
    choose_tempo,
    format_as_chord_sheet,
    generate_section_alternatives,
    generate_section_bars,
    generate_song,
    generate_title,
)
from chordcraft.rules.prompt_parser import PromptConstraints, parse_prompt


def symbols(bars):
    return [" ".join(c.symbol for c in bar.chords) for bar in bars]


def song_symbols(song):
    return [symbols(section.bars) for section in song.sections]


class TestSongLevelChoices:

    def test_dark_rock_is_e_minor(self):
        assert choose_key(parse_prompt("dark rock riff")) == KeyContext(root="E", mode="minor")

    def test_dreamy_is_lydian(self):
        c = parse_prompt("dreamy ambient track")
        assert choose_key(c) == KeyContext(root="C", mode="lydian")
        assert choose_tempo(c) == 72
        assert choose_song_form(c) == DREAMY_FORM

    def test_funk_is_mixolydian(self):
        assert choose_key(parse_prompt("funky groove")).mode == "mixolydian"

    def test_jazz_form_and_key(self):
        c = parse_prompt("smooth jazz")
        assert choose_key(c) == KeyContext(root="F", mode="major")
        assert choose_song_form(c) == JAZZ_FORM

    def test_default_form_is_pop(self):
        assert choose_song_form(PromptConstraints()) == POP_FORM

    def test_titles(self):
        assert generate_title(PromptConstraints()) == "Generated song (melody)"
        assert generate_title(parse_prompt("happy pop song")) == "Generated pop (happy)"


class TestSectionGeneration:

    def test_default_verse(self, c_major):
        bars = generate_section_bars("verse", 4, c_major, PromptConstraints())
        assert symbols(bars) == ["C", "G7", "Am", "F"]
        assert [b.index for b in bars] == [0, 1, 2, 3]
        assert all(b.chords[0].duration_beats == 4 for b in bars)

    def test_pattern_cycles(self, c_major):
        bars = generate_section_bars("verse", 6, c_major, PromptConstraints())
        assert symbols(bars)[4:] == ["C", "G7"]

    def test_variant_b(self, c_major):
        bars = generate_section_bars("verse", 4, c_major, PromptConstraints(), 1)
        assert symbols(bars) == ["C", "Am", "F", "G7"]

    def test_minor_verse(self, a_minor):
        bars = generate_section_bars("verse", 4, a_minor, PromptConstraints(complexity="simple"))
        assert symbols(bars) == ["Am", "Gdim", "C", "Gdim"]

    def test_unknown_variant_falls_back_to_a(self, c_major):
        a = generate_section_bars("chorus", 4, c_major, PromptConstraints(), 0)
        bad = generate_section_bars("chorus", 4, c_major, PromptConstraints(), 7)
        assert symbols(a) == symbols(bad)

    def test_section_alternatives(self, c_major):
        alternatives = generate_section_alternatives("chorus", 4, c_major, PromptConstraints(), "sec")
        assert [a.label for a in alternatives] == ["A", "B", "C"]
        assert all(len(a.bars) == 4 for a in alternatives)
        assert all(a.analysis.section_id == "sec" for a in alternatives)
        assert len({tuple(symbols(a.bars)) for a in alternatives}) == 3


    def test_section_bars_are_deterministic(self, a_minor):
        constraints = parse_prompt("dark jazz")
        runs = [generate_section_bars("bridge", 8, a_minor, constraints, v) for v in (0, 0, 1, 2)]
        assert symbols(runs[0]) == symbols(runs[1])
        assert len({tuple(symbols(bars)) for bars in runs[1:]}) == 3


class TestGenerateSong:

    def test_same_prompt_same_chords(self):
        first = generate_song(parse_prompt("upbeat pop song"))
        second = generate_song(parse_prompt("upbeat pop song"))
        assert song_symbols(first.song) == song_symbols(second.song)
        assert first.song.id != second.song.id

    def test_structure(self):
        result = generate_song(PromptConstraints())
        song = result.song
        assert song.title == "Generated song (melody)"
        assert song.key_context == KeyContext(root="C", mode="major")
        assert [s.type for s in song.sections] == [d.type for d in POP_FORM]
        assert [len(s.bars) for s in song.sections] == [d.bar_count for d in POP_FORM]
        assert [s.index for s in song.sections] == list(range(len(POP_FORM)))

    def test_alternatives_are_b_and_c(self):
        result = generate_song(PromptConstraints())
        assert [a.label for a in result.alternatives] == ["B", "C"]
        primary = song_symbols(result.song)
        for alternative in result.alternatives:
            assert song_symbols(alternative.song) != primary

    def test_analyses_follow_sections(self):
        result = generate_song(parse_prompt("dark rock riff"))
        assert [a.section_id for a in result.section_analyses] == [
            s.id for s in result.song.sections
        ]
        for analysis in result.section_analyses:
            assert not any(c.uncertain for c in analysis.chord_analyses)

    def test_existing_title_is_kept(self):
        assert generate_song(PromptConstraints(), existing_title="Mine").song.title == "Mine"

    def test_constraints_are_returned(self):
        c = parse_prompt("sad folk song")
        assert generate_song(c).constraints == c


class TestChordSheet:

    def test_sheet_contents(self, pop_song):
        sheet = format_as_chord_sheet(pop_song)
        assert "CHORD SHEET" in sheet
        assert "Title: Pop Test" in sheet
        assert "Key: C major" in sheet
        assert "| C | G | Am | F |" in sheet
        assert "| F | G | C | C |" in sheet

    def test_lines_have_equal_width(self, pop_song):
        lines = format_as_chord_sheet(pop_song).splitlines()
        assert len({len(line) for line in lines}) == 1
