"""Tests for chordcraft/rules/rewrite.py"""

from chordcraft.data.schema import KeyContext, song_from_chords
from chordcraft.rules.prompt_parser import PromptConstraints, parse_prompt
from chordcraft.rules.rewrite import (
    apply_alternative_to_bars,
    compute_diff,
    extract_selection_bars,
    iter_selection,
    rewrite_selection,
)


def symbols(bars):
    return [" ".join(c.symbol for c in bar.chords) for bar in bars]


class TestSelection:

    def test_single_section(self, pop_song, selection):
        assert list(iter_selection(pop_song, selection(0, 1, 0, 2))) == [(0, 1), (0, 2)]

    def test_across_sections(self, pop_song, selection):
        bars = extract_selection_bars(pop_song, selection(0, 2, 1, 1))
        assert symbols(bars) == ["Am", "F", "F", "G"]

    def test_missing_section_is_skipped(self, pop_song, selection):
        assert extract_selection_bars(pop_song, selection(1, 2, 5, 0))[-1].chords[0].symbol == "C"
        assert len(extract_selection_bars(pop_song, selection(1, 2, 5, 0))) == 2


class TestRewriteSelection:

    def test_alternatives_match_selection_length(self, pop_song, selection):
        result = rewrite_selection(pop_song, selection(0, 1, 1, 0), PromptConstraints())
        assert [a.label for a in result.alternatives] == ["A", "B", "C"]
        assert all(len(a.bars) == 4 for a in result.alternatives)
        assert result.changed_range == selection(0, 1, 1, 0)

    def test_intent_patterns_and_tags(self, pop_song, selection):
        result = rewrite_selection(pop_song, selection(0, 0, 0, 3), parse_prompt("add tension"))
        a = result.alternatives[0]
        assert symbols(a.bars) == ["Dm", "G7", "Dm", "G7"]
        assert a.metadata_tags == ["more tension", "dominant-heavy"]

    def test_without_intent_uses_section_patterns(self, pop_song, selection):
        result = rewrite_selection(pop_song, selection(1, 0, 1, 3), PromptConstraints())
        assert symbols(result.alternatives[0].bars) == ["F", "C", "G7", "Am"]
        assert result.alternatives[0].metadata_tags == ["standard", "reliable"]

    def test_minor_family_patterns(self, selection):
        song = song_from_chords([("verse", [["Am"], ["F"], ["C"], ["G"]])], KeyContext(root="A", mode="minor"))
        result = rewrite_selection(song, selection(0, 0, 0, 3), parse_prompt("brighten it"))
        assert symbols(result.alternatives[0].bars) == ["C", "F", "C", "E"]

    def test_section_key_override(self, selection, c_major):
        song = song_from_chords([("verse", [["C"], ["G"]]), ("bridge", [["Am"], ["E"]])], c_major)
        bridge = song.sections[1].model_copy(update={"key_context": KeyContext(root="A", mode="minor")})
        song = song.model_copy(update={"sections": [song.sections[0], bridge]})
        result = rewrite_selection(song, selection(1, 0, 1, 1), parse_prompt("darken"))
        assert result.alternatives[0].analysis.key_context == KeyContext(root="A", mode="minor")
        assert result.alternatives[0].analysis.section_id == bridge.id

    def test_generated_alternatives_are_not_uncertain(self, pop_song, selection):
        result = rewrite_selection(pop_song, selection(0, 0, 1, 3), parse_prompt("less predictable"))
        for alternative in result.alternatives:
            assert not any(c.uncertain for c in alternative.analysis.chord_analyses)

    def test_diff_lists_only_changed_bars(self, pop_song, selection):
        result = rewrite_selection(pop_song, selection(0, 0, 0, 3), parse_prompt("add tension"))
        # C G Am F → Dm G7 Dm G7: every bar changes
        assert [(d.section_index, d.bar_index) for d in result.diff] == [(0, 0), (0, 1), (0, 2), (0, 3)]
        assert symbols([result.alternatives[0].bars[0]]) == ["Dm"]
        assert [c.symbol for c in result.diff[0].before] == ["C"]

    def test_input_song_unchanged(self, pop_song, selection):
        before = pop_song.model_dump()
        rewrite_selection(pop_song, selection(0, 0, 1, 3), parse_prompt("darker"))
        assert pop_song.model_dump() == before


class TestComputeDiff:

    def test_identical_replacement_has_empty_diff(self, pop_song, selection):
        sel = selection(0, 0, 0, 3)
        assert compute_diff(pop_song, sel, pop_song.sections[0].bars) == []

    def test_single_change(self, pop_song, selection):
        sel = selection(1, 0, 1, 3)
        replacement = song_from_chords([("chorus", [["F"], ["G"], ["Am"], ["C"]])], pop_song.key_context)
        diff = compute_diff(pop_song, sel, replacement.sections[0].bars)
        assert [(d.section_index, d.bar_index) for d in diff] == [(1, 2)]


class TestApplyAlternative:

    def test_apply_replaces_chords_only(self, pop_song, selection):
        sel = selection(0, 2, 1, 1)
        result = rewrite_selection(pop_song, sel, parse_prompt("simplify"))
        chosen = result.alternatives[1]
        updated = apply_alternative_to_bars(pop_song, sel, chosen.bars)

        assert symbols(extract_selection_bars(updated, sel)) == symbols(chosen.bars)
        assert updated.sections[0].bars[2].id == pop_song.sections[0].bars[2].id
        assert updated.sections[1].bars[1].index == 1
        assert symbols(updated.sections[0].bars[:2]) == ["C", "G"]
        assert symbols(updated.sections[1].bars[2:]) == ["C", "C"]
        assert updated.id == pop_song.id

    def test_apply_is_idempotent(self, pop_song, selection):
        sel = selection(0, 0, 0, 3)
        bars = rewrite_selection(pop_song, sel, parse_prompt("darken")).alternatives[2].bars
        once = apply_alternative_to_bars(pop_song, sel, bars)
        twice = apply_alternative_to_bars(once, sel, bars)
        assert once == twice

    def test_apply_then_diff_is_empty(self, pop_song, selection):
        sel = selection(0, 0, 0, 3)
        bars = rewrite_selection(pop_song, sel, parse_prompt("add tension")).alternatives[0].bars
        updated = apply_alternative_to_bars(pop_song, sel, bars)
        assert compute_diff(updated, sel, bars) == []

    def test_original_is_not_mutated(self, pop_song, selection):
        sel = selection(0, 0, 0, 3)
        bars = rewrite_selection(pop_song, sel, parse_prompt("darken")).alternatives[0].bars
        apply_alternative_to_bars(pop_song, sel, bars)
        assert symbols(pop_song.sections[0].bars) == ["C", "G", "Am", "F"]
