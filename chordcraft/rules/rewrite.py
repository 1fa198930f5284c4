"""
Rewrite Module - Alternatives for a Selected Range of Bars

Given a song and an inclusive bar selection (possibly spanning sections),
this module:
    - builds three labelled A/B/C replacement bar sets, driven by the
      prompt's edit intent when there is one
    - diffs alternative A against the current bars
    - applies a chosen replacement, returning a new Song

The input song is never mutated.
"""

from typing import Dict, Iterator, List, Sequence, Tuple
import logging

from chordcraft.data.schema import (
    AlternativeOption,
    Bar,
    BarDiff,
    EditLocalResult,
    SelectionRange,
    Song,
    create_id,
)
from chordcraft.rules.analysis import analyze_section
from chordcraft.rules.generate_rule_based import (
    ALTERNATIVE_LABELS,
    Pattern,
    build_bars,
    get_patterns,
)
from chordcraft.rules.harmony import mode_family
from chordcraft.rules.prompt_parser import PromptConstraints

logger = logging.getLogger(__name__)


# =============================================================================
# INTENT PATTERNS
# =============================================================================

# intent → family → three degree patterns (A, B, C)
INTENT_PATTERNS: Dict[str, Dict[str, Tuple[Pattern, Pattern, Pattern]]] = {
    "add_tension": {
        "major": ((1, 4, 1, 4), (4, 4, 0, 4), (1, 1, 4, 4)),
        "minor": ((3, 4, 3, 4), (4, 4, 0, 4), (1, 4, 3, 4)),
    },
    "simplify": {
        "major": ((0, 3, 4, 0), (0, 4, 3, 0), (0, 0, 3, 4)),
        "minor": ((0, 3, 4, 0), (0, 4, 3, 0), (0, 0, 3, 4)),
    },
    "brighten": {
        "major": ((0, 3, 0, 4), (0, 0, 3, 4), (3, 0, 4, 0)),
        # relative-major chords
        "minor": ((2, 5, 2, 4), (5, 2, 6, 4), (2, 6, 5, 4)),
    },
    "darken": {
        "major": ((5, 3, 1, 4), (5, 5, 3, 4), (1, 5, 3, 4)),
        "minor": ((0, 3, 5, 4), (0, 0, 3, 4), (3, 5, 0, 4)),
    },
    "more_colorful": {
        "major": ((1, 4, 0, 5), (3, 1, 4, 5), (5, 1, 4, 0)),
        "minor": ((1, 4, 0, 5), (3, 1, 4, 5), (5, 1, 4, 0)),
    },
    "smoother_voice_leading": {
        "major": ((0, 1, 2, 3), (3, 4, 5, 0), (5, 4, 3, 0)),
        "minor": ((0, 1, 2, 3), (3, 4, 5, 0), (5, 4, 3, 0)),
    },
    "stronger_lift": {
        "major": ((0, 3, 1, 4), (3, 0, 1, 4), (5, 1, 1, 4)),
        "minor": ((0, 3, 1, 4), (3, 5, 1, 4), (5, 3, 1, 4)),
    },
    "less_predictable": {
        "major": ((0, 4, 5, 3), (5, 3, 4, 0), (1, 5, 4, 2)),
        "minor": ((0, 6, 5, 4), (5, 2, 0, 4), (2, 5, 6, 4)),
    },
}

INTENT_METADATA: Dict[str, Tuple[List[str], List[str], List[str]]] = {
    "add_tension": (
        ["more tension", "dominant-heavy"], ["V-chord build", "urgent"],
        ["pre-dominant push", "extended tension"]),
    "simplify": (
        ["simplified", "I-IV-V only"], ["stripped back", "clean"],
        ["minimal", "easy to follow"]),
    "brighten": (
        ["brighter", "major emphasis"], ["lifted", "open"], ["tonic-rich", "sunny"]),
    "darken": (
        ["darker", "minor emphasis"], ["submediant-heavy", "brooding"],
        ["modal darker", "moody"]),
    "more_colorful": (
        ["colorful", "ii chords added"], ["chromatic color", "interesting"],
        ["extended harmony", "lush"]),
    "smoother_voice_leading": (
        ["smooth", "stepwise roots"], ["common-tone move", "connected"],
        ["linear bass", "flowing"]),
    "stronger_lift": (
        ["strong lift", "V arrival"], ["dominant build", "momentum"],
        ["pre-chorus push", "energised"]),
    "less_predictable": (
        ["unexpected", "deceptive cadence"], ["surprising move", "non-cliché"],
        ["twist", "off-piste harmony"]),
}

DEFAULT_METADATA = (["standard", "reliable"], ["smooth variant"], ["colorful variant"])


# =============================================================================
# SELECTION HELPERS
# =============================================================================

def iter_selection(song: Song, selection: SelectionRange) -> Iterator[Tuple[int, int]]:
    """
    Yield (section_index, bar_index) for every position in the selection.

    Missing sections are skipped. Positions past the end of a section's bars
    are still yielded when the selection names them explicitly.
    """
    start, end = selection.start, selection.end
    for si in range(start.section_index, end.section_index + 1):
        if si >= len(song.sections):
            continue
        section = song.sections[si]
        first = start.bar_index if si == start.section_index else 0
        last = end.bar_index if si == end.section_index else len(section.bars) - 1
        for bi in range(first, last + 1):
            yield si, bi


def extract_selection_bars(song: Song, selection: SelectionRange) -> List[Bar]:
    """The bars inside the selection, flattened in song order."""
    bars = []
    for si, bi in iter_selection(song, selection):
        section_bars = song.sections[si].bars
        if bi < len(section_bars):
            bars.append(section_bars[bi])
    return bars


def _symbols(bar_chords) -> List[str]:
    return [chord.symbol for chord in bar_chords]


def compute_diff(song: Song, selection: SelectionRange, replacement_bars: Sequence[Bar]) -> List[BarDiff]:
    """
    Pair each selected position with the next replacement bar and report
    only the bars whose chord-symbol sequence would change.
    """
    diffs = []
    for offset, (si, bi) in enumerate(iter_selection(song, selection)):
        section_bars = song.sections[si].bars
        before = section_bars[bi].chords if bi < len(section_bars) else []
        after = replacement_bars[offset].chords if offset < len(replacement_bars) else []
        if _symbols(before) != _symbols(after):
            diffs.append(BarDiff(section_index=si, bar_index=bi, before=before, after=after))
    return diffs


# =============================================================================
# REWRITE
# =============================================================================

def rewrite_selection(
    song: Song,
    selection: SelectionRange,
    constraints: PromptConstraints
) -> EditLocalResult:
    """
    Produce three alternatives for the selected bars.

    The key is that of the section holding the selection start (falling back
    to the song key) and every alternative has exactly as many bars as the
    selection. With an edit intent the intent's patterns are used; without
    one, the section-type patterns of the starting section.
    """
    start_index = selection.start.section_index
    start_section = song.sections[start_index] if start_index < len(song.sections) else None
    key_context = song.key_for_section(start_index)
    section_type = start_section.type if start_section is not None else "custom"
    section_id = start_section.id if start_section is not None else create_id()
    time_signature = (
        start_section.bars[0].time_signature
        if start_section is not None and start_section.bars else (4, 4)
    )
    bar_count = len(extract_selection_bars(song, selection))

    intent = constraints.edit_intent
    if intent in INTENT_PATTERNS:
        patterns = INTENT_PATTERNS[intent][mode_family(key_context.mode)]
        tags = INTENT_METADATA.get(intent, DEFAULT_METADATA)
    else:
        patterns = get_patterns(section_type, key_context.mode)
        tags = DEFAULT_METADATA

    logger.debug(
        "Rewriting %d bars (intent=%s, key=%s %s)",
        bar_count, intent, key_context.root, key_context.mode
    )

    alternatives = []
    for variant, label in enumerate(ALTERNATIVE_LABELS):
        bars = build_bars(
            patterns[variant], bar_count, key_context, constraints.complexity, time_signature
        )
        alternatives.append(AlternativeOption(
            id=create_id(),
            label=label,
            bars=bars,
            metadata_tags=list(tags[variant]),
            analysis=analyze_section(bars, key_context, section_id),
        ))

    return EditLocalResult(
        alternatives=alternatives,
        changed_range=selection,
        diff=compute_diff(song, selection, alternatives[0].bars),
        constraints=constraints,
    )


def apply_alternative_to_bars(
    song: Song,
    selection: SelectionRange,
    replacement_bars: Sequence[Bar]
) -> Song:
    """
    Return a new Song with the selected bars' chords replaced.

    Each selected bar keeps its id and index and takes the chords of the
    next replacement bar; bars past the end of the replacements are left
    alone. Everything outside the selection is unchanged.
    """
    replacements = iter(replacement_bars)
    selected = set(iter_selection(song, selection))

    sections = []
    for si, section in enumerate(song.sections):
        bars = []
        for bi, bar in enumerate(section.bars):
            if (si, bi) in selected:
                replacement = next(replacements, None)
                if replacement is not None:
                    bar = bar.model_copy(update={
                        "chords": [c.model_copy() for c in replacement.chords]
                    })
            bars.append(bar)
        sections.append(section.model_copy(update={"bars": bars}))

    return song.model_copy(update={"sections": sections})
