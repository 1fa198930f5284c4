"""
Rule-Based Generator - Songs and Sections from Prompt Constraints

This module turns parsed PromptConstraints into chord content:
    - choose a key, tempo, title and song form from styles and moods
    - fill each section with a cycled scale-degree pattern
    - offer three labelled variants (A / B / C) per section or per song

Everything is deterministic: the same constraints always give the same
chords (only the generated ids differ).
"""

from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple
import logging

from chordcraft.data.schema import (
    AlternativeOption,
    Bar,
    GenerateSongResult,
    KeyContext,
    Song,
    SongAlternative,
    create_bar,
    create_chord_event,
    create_id,
    create_section,
    create_song,
)
from chordcraft.rules.analysis import analyze_section
from chordcraft.rules.harmony import degree_to_symbol, mode_family
from chordcraft.rules.prompt_parser import PromptConstraints

logger = logging.getLogger(__name__)

Pattern = Tuple[int, ...]


# =============================================================================
# DEGREE PATTERNS BY SECTION TYPE
# =============================================================================

# Three 0-indexed degree patterns (variants A, B, C) per section type
MAJOR_PATTERNS: Dict[str, Tuple[Pattern, Pattern, Pattern]] = {
    "intro":     ((0, 0, 3, 4), (0, 4, 3, 0), (0, 5, 3, 4)),
    "verse":     ((0, 4, 5, 3), (0, 5, 3, 4), (1, 4, 0, 5)),
    "prechorus": ((1, 4, 1, 4), (3, 4, 3, 4), (5, 1, 4, 4)),
    "chorus":    ((3, 0, 4, 5), (0, 4, 5, 3), (3, 4, 0, 0)),
    "bridge":    ((5, 3, 0, 4), (1, 4, 0, 3), (3, 1, 4, 5)),
    "outro":     ((0, 3, 0, 4), (0, 0, 3, 0), (5, 3, 4, 0)),
}
MAJOR_PATTERNS["solo"] = MAJOR_PATTERNS["verse"]
MAJOR_PATTERNS["custom"] = MAJOR_PATTERNS["verse"]

MINOR_PATTERNS: Dict[str, Tuple[Pattern, Pattern, Pattern]] = {
    "intro":     ((0, 0, 6, 4), (0, 6, 2, 4), (0, 3, 5, 4)),
    "verse":     ((0, 6, 2, 6), (0, 3, 5, 6), (0, 5, 2, 4)),
    "prechorus": ((3, 4, 3, 4), (5, 6, 3, 4), (1, 4, 1, 4)),
    "chorus":    ((5, 2, 0, 4), (0, 3, 5, 4), (5, 6, 2, 4)),
    "bridge":    ((3, 5, 0, 4), (0, 5, 6, 4), (2, 5, 4, 0)),
    "outro":     ((0, 3, 0, 4), (0, 0, 5, 0), (5, 3, 4, 0)),
}
MINOR_PATTERNS["solo"] = MINOR_PATTERNS["verse"]
MINOR_PATTERNS["custom"] = MINOR_PATTERNS["verse"]

ALTERNATIVE_LABELS = ("A", "B", "C")

ALTERNATIVE_TAGS = (
    ["standard", "reliable", "diatonic"],
    ["smoother", "classic-variant", "voice-leading"],
    ["colorful", "less-predictable", "tension"],
)


# =============================================================================
# SONG FORMS
# =============================================================================

class SectionDef(NamedTuple):
    type: str
    label: str
    bar_count: int


JAZZ_FORM = (
    SectionDef("intro", "Intro", 4),
    SectionDef("verse", "Verse A", 8),
    SectionDef("chorus", "Head Out", 4),
    SectionDef("bridge", "Bridge", 4),
    SectionDef("outro", "Outro", 4),
)

ROCK_FORM = (
    SectionDef("intro", "Intro", 4),
    SectionDef("verse", "Verse", 8),
    SectionDef("prechorus", "Pre-Chorus", 4),
    SectionDef("chorus", "Chorus", 8),
    SectionDef("bridge", "Bridge", 4),
    SectionDef("outro", "Outro", 4),
)

DREAMY_FORM = (
    SectionDef("intro", "Intro", 8),
    SectionDef("verse", "Verse", 8),
    SectionDef("chorus", "Chorus", 8),
    SectionDef("outro", "Outro", 8),
)

ENERGETIC_FORM = (
    SectionDef("intro", "Intro", 4),
    SectionDef("verse", "Verse", 8),
    SectionDef("prechorus", "Pre-Chorus", 4),
    SectionDef("chorus", "Chorus", 8),
    SectionDef("bridge", "Bridge", 4),
    SectionDef("chorus", "Chorus 2", 8),
    SectionDef("outro", "Outro", 4),
)

POP_FORM = (
    SectionDef("intro", "Intro", 4),
    SectionDef("verse", "Verse", 8),
    SectionDef("prechorus", "Pre-Chorus", 4),
    SectionDef("chorus", "Chorus", 8),
    SectionDef("verse", "Verse 2", 8),
    SectionDef("chorus", "Chorus 2", 8),
    SectionDef("bridge", "Bridge", 4),
    SectionDef("chorus", "Final Chorus", 8),
    SectionDef("outro", "Outro", 4),
)

# First matching style picks the key root
STYLE_KEY_ROOTS = (
    ("jazz", "F"),
    ("folk", "G"),
    ("rock", "E"),
    ("blues", "A"),
    ("country", "G"),
)


# =============================================================================
# SONG-LEVEL CHOICES
# =============================================================================

def choose_key(constraints: PromptConstraints) -> KeyContext:
    """
    Pick a key from style and mood.

    Minor when the prompt is dark (brightness < -0.1, or a dark/sad mood).
    Otherwise dreamy leans lydian and funk mixolydian.

    Example:
        "dark rock riff" → KeyContext(root='E', mode='minor')
    """
    styles, moods = constraints.styles, constraints.moods
    is_minor = constraints.brightness < -0.1 or "dark" in moods or "sad" in moods

    root = next((r for style, r in STYLE_KEY_ROOTS if style in styles), "C")

    mode = "minor" if is_minor else "major"
    if not is_minor:
        if "dreamy" in styles:
            mode = "lydian"
        if "funk" in styles:
            mode = "mixolydian"
    return KeyContext(root=root, mode=mode)


def choose_tempo(constraints: PromptConstraints) -> int:
    styles, moods = constraints.styles, constraints.moods
    if "calm" in moods or "dreamy" in styles:
        return 72
    if "energetic" in moods or "rock" in styles:
        return 140
    if "jazz" in styles:
        return 120
    if "folk" in styles:
        return 100
    return 120


def choose_song_form(constraints: PromptConstraints) -> Tuple[SectionDef, ...]:
    """Section layout: jazz, rock, dreamy, energetic, or the default pop form."""
    styles, moods = constraints.styles, constraints.moods
    if "jazz" in styles:
        return JAZZ_FORM
    if "rock" in styles:
        return ROCK_FORM
    if "calm" in moods or "dreamy" in styles:
        return DREAMY_FORM
    if "energetic" in moods:
        return ENERGETIC_FORM
    return POP_FORM


def generate_title(constraints: PromptConstraints) -> str:
    style = constraints.styles[0] if constraints.styles else "song"
    mood = constraints.moods[0] if constraints.moods else "melody"
    return f"Generated {style} ({mood})"


# =============================================================================
# BAR GENERATION
# =============================================================================

def get_patterns(section_type: str, mode: str) -> Tuple[Pattern, Pattern, Pattern]:
    table = MAJOR_PATTERNS if mode_family(mode) == "major" else MINOR_PATTERNS
    return table.get(section_type, table["custom"])


def build_bars(
    pattern: Sequence[int],
    bar_count: int,
    key_context: KeyContext,
    complexity: str,
    time_signature: Tuple[int, int] = (4, 4)
) -> List[Bar]:
    """One chord per bar, on beat 1 for the whole bar, cycling the pattern."""
    bars = []
    for i in range(bar_count):
        degree = pattern[i % len(pattern)]
        symbol = degree_to_symbol(degree, key_context.root, key_context.mode, complexity)
        chord = create_chord_event(1, symbol, time_signature[0])
        bars.append(create_bar(i, time_signature, [chord]))
    return bars


def generate_section_bars(
    section_type: str,
    bar_count: int,
    key_context: KeyContext,
    constraints: PromptConstraints,
    variant_index: int = 0
) -> List[Bar]:
    """
    Generate bars for one section using variant A, B or C (0, 1, 2).

    Example:
        >>> bars = generate_section_bars("verse", 4, KeyContext(root="C"), PromptConstraints())
        >>> [b.chords[0].symbol for b in bars]
        ['C', 'G7', 'Am', 'F']
    """
    patterns = get_patterns(section_type, key_context.mode)
    pattern = patterns[variant_index] if 0 <= variant_index < len(patterns) else patterns[0]
    return build_bars(pattern, bar_count, key_context, constraints.complexity)


def generate_section_alternatives(
    section_type: str,
    bar_count: int,
    key_context: KeyContext,
    constraints: PromptConstraints,
    section_id: str
) -> List[AlternativeOption]:
    """Three labelled bar sets (A, B, C) for a section, each analysed."""
    alternatives = []
    for variant, label in enumerate(ALTERNATIVE_LABELS):
        bars = generate_section_bars(section_type, bar_count, key_context, constraints, variant)
        alternatives.append(AlternativeOption(
            id=create_id(),
            label=label,
            bars=bars,
            metadata_tags=list(ALTERNATIVE_TAGS[variant]),
            analysis=analyze_section(bars, key_context, section_id),
        ))
    return alternatives


# =============================================================================
# MAIN GENERATOR FUNCTION
# =============================================================================

def generate_song(
    constraints: PromptConstraints,
    existing_title: Optional[str] = None
) -> GenerateSongResult:
    """
    Generate a complete song from constraints.

    Returns:
        GenerateSongResult with the primary song (variant A patterns),
        B and C as full-song alternatives, and one SectionAnalysis per
        primary section.
    """
    key_context = choose_key(constraints)
    tempo = choose_tempo(constraints)
    title = existing_title if existing_title is not None else generate_title(constraints)
    form = choose_song_form(constraints)

    logger.debug(
        "Generating %r: key=%s %s, tempo=%d, %d sections",
        title, key_context.root, key_context.mode, tempo, len(form)
    )

    def build_song(variant: int) -> Song:
        sections = []
        for i, section_def in enumerate(form):
            bars = generate_section_bars(
                section_def.type, section_def.bar_count, key_context, constraints, variant
            )
            sections.append(create_section(i, section_def.type, section_def.label, bars))
        return create_song(title, key_context, tempo, sections)

    song = build_song(0)
    section_analyses = [
        analyze_section(section.bars, key_context, section.id) for section in song.sections
    ]
    alternatives = [
        SongAlternative(
            id=create_id(),
            label=ALTERNATIVE_LABELS[variant],
            song=build_song(variant),
            metadata_tags=list(ALTERNATIVE_TAGS[variant]),
        )
        for variant in (1, 2)
    ]

    return GenerateSongResult(
        song=song,
        alternatives=alternatives,
        section_analyses=section_analyses,
        constraints=constraints,
    )


# =============================================================================
# OUTPUT FORMATTING
# =============================================================================

SHEET_WIDTH = 60


def _sheet_line(text: str) -> str:
    return f"║ {text}".ljust(SHEET_WIDTH + 1) + "║"


def format_as_chord_sheet(song: Song) -> str:
    """
    Format a Song as a human-readable chord sheet.

    Each section lists its bars as "| C | G7 | Am | F |", four bars per row.
    """
    lines = []
    lines.append("╔" + "═" * SHEET_WIDTH + "╗")
    lines.append("║" + " CHORD SHEET ".center(SHEET_WIDTH) + "║")
    lines.append("╠" + "═" * SHEET_WIDTH + "╣")

    title = song.title[:50] + "..." if len(song.title) > 50 else song.title
    lines.append(_sheet_line(f"Title: {title}"))
    lines.append(_sheet_line(f"Key: {song.key_context.root} {song.key_context.mode}"))
    numerator, denominator = song.time_signature
    lines.append(_sheet_line(f"Tempo: {song.tempo} BPM | Time: {numerator}/{denominator}"))

    for section in song.sections:
        lines.append("╠" + "─" * SHEET_WIDTH + "╣")
        key = section.key_context
        suffix = f"  [{key.root} {key.mode}]" if key is not None else ""
        lines.append(_sheet_line(f"{section.label or section.type.title()}{suffix}"))

        cells = [" ".join(c.symbol for c in bar.chords) or "-" for bar in section.bars]
        for start in range(0, len(cells), 4):
            row = cells[start:start + 4]
            lines.append(_sheet_line("  | " + " | ".join(row) + " |"))

    lines.append("╚" + "═" * SHEET_WIDTH + "╝")

    return "\n".join(lines)
