"""
Pipeline - One Entry Point per User Action

Each function takes the user's prompt text plus the current document and
returns a plain result model:

    generate_from_prompt   → GenerateSongResult
    edit_selection         → EditLocalResult
    explain_song_selection → ExplanationResult
    arrange_song           → List[ArrangementResult]
"""

from typing import List, Optional
import logging

from chordcraft.data.schema import (
    ArrangementResult,
    EditLocalResult,
    ExplanationResult,
    GenerateSongResult,
    SelectionRange,
    Song,
    VoicingOptions,
)
from chordcraft.rules.explanation import explain_selection
from chordcraft.rules.generate_rule_based import generate_song
from chordcraft.rules.prompt_parser import parse_prompt
from chordcraft.rules.rewrite import extract_selection_bars, rewrite_selection
from chordcraft.rules.voicing import generate_arrangement

logger = logging.getLogger(__name__)


def generate_from_prompt(text: str, title: Optional[str] = None) -> GenerateSongResult:
    """Parse the prompt and generate a full song with two alternatives."""
    constraints = parse_prompt(text)
    logger.info("Generating song for prompt %r", text)
    return generate_song(constraints, existing_title=title)


def edit_selection(text: str, song: Song, selection: SelectionRange) -> EditLocalResult:
    """Rewrite the selected bars following the prompt (e.g. "add tension")."""
    constraints = parse_prompt(text)
    logger.info("Editing selection with intent %s", constraints.edit_intent)
    return rewrite_selection(song, selection, constraints)


def explain_song_selection(
    song: Song,
    selection: SelectionRange,
    text: Optional[str] = None
) -> ExplanationResult:
    """
    Explain the selected bars in the key of the section where the selection
    starts. A non-blank prompt adds a style-fit paragraph.
    """
    bars = extract_selection_bars(song, selection)
    start_index = selection.start.section_index
    if start_index < len(song.sections):
        section_id = song.sections[start_index].id
    else:
        section_id = song.id
    constraints = parse_prompt(text) if text and text.strip() else None
    return explain_selection(
        bars, song.key_for_section(start_index), section_id, selection, constraints
    )


def arrange_song(song: Song, options: VoicingOptions) -> List[ArrangementResult]:
    """Note events for every bar of the song, in song order."""
    return [
        generate_arrangement(bar, options)
        for section in song.sections
        for bar in section.bars
    ]
