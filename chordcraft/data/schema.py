"""
Schema definitions for the chordcraft song document and pipeline results.

This module defines the Pydantic models that structure everything flowing
through the harmony pipeline: the song document supplied by the editor
(sections → bars → chord events), the analysis annotations, the generated and
rewritten alternatives, explanations and playback note events.

Every result is plain data: it can be dumped with ``model_dump_json()`` and
loaded back with ``model_validate_json()``.
"""

from typing import List, Optional, Tuple
import uuid

from pydantic import BaseModel, ConfigDict, Field, field_validator

from chordcraft.rules.prompt_parser import PromptConstraints


# =============================================================================
# VALID OPTIONS
# =============================================================================

VALID_NOTE_KEYS = [
    "C", "C#", "Db", "D", "D#", "Eb", "E", "F",
    "F#", "Gb", "G", "G#", "Ab", "A", "A#", "Bb", "B",
]

VALID_MODES = [
    "major", "minor", "dorian", "mixolydian", "phrygian", "lydian", "locrian",
]

VALID_SECTION_TYPES = [
    "verse", "chorus", "bridge", "intro", "outro", "prechorus", "solo", "custom",
]

VALID_HARMONIC_FUNCTIONS = ["tonic", "predominant", "dominant", "chromatic", "ambiguous"]

VALID_CADENCE_TYPES = ["authentic", "half", "plagal", "deceptive"]

VALID_SUBSTITUTION_TAGS = ["lighter", "richer", "smoother"]

VALID_DENSITIES = ["simple", "medium", "rich"]

VALID_INVERSIONS = ["root", "first", "second", "auto"]

VALID_PATTERNS = ["block", "arpeggio", "pad", "strum", "rhythmic"]


def _check_choice(value: str, choices: List[str], name: str) -> str:
    """Lower-case ``value`` and make sure it is one of ``choices``."""
    v_lower = value.lower()
    if v_lower not in choices:
        raise ValueError(f"{name} must be one of {choices}. Got: '{value}'")
    return v_lower


# =============================================================================
# SONG DOCUMENT
# =============================================================================

class KeyContext(BaseModel):
    """
    Tonal centre used to interpret chords.

    Attributes:
        root: Pitch-class name of the key root (e.g. 'C', 'F#', 'Bb')
        mode: One of VALID_MODES

    Example:
        >>> KeyContext(root="A", mode="minor")
    """

    model_config = ConfigDict(frozen=True)

    root: str = Field(
        ...,
        description="Pitch-class name of the key root",
        examples=["C", "F#", "Bb"]
    )

    mode: str = Field(
        default="major",
        description="Scale mode of the key",
        examples=["major", "minor", "dorian"]
    )

    @field_validator('root')
    @classmethod
    def validate_root(cls, v: str) -> str:
        """Ensure the root is a known note name"""
        if v not in VALID_NOTE_KEYS:
            raise ValueError(f"Key root must be one of {VALID_NOTE_KEYS}. Got: '{v}'")
        return v

    @field_validator('mode')
    @classmethod
    def validate_mode(cls, v: str) -> str:
        """Ensure mode is supported (case-insensitive)"""
        return _check_choice(v, VALID_MODES, "Mode")


class ChordEvent(BaseModel):
    """
    A single chord placed inside a bar.

    The symbol is free-form text ("Cmaj7", "F#m7b5", "G/B"); nothing here
    validates it, the harmony rules degrade gracefully on unknown text.
    """

    id: str = Field(..., min_length=1, description="Unique chord identifier")
    beat: float = Field(default=1, description="1-indexed beat position within the bar")
    duration_beats: float = Field(default=1, gt=0, description="Length of the chord in beats")
    symbol: str = Field(..., description="Chord symbol text", examples=["C", "Am7", "G/B"])


class Bar(BaseModel):
    """One bar of the song. Chord beats outside the time signature are accepted."""

    id: str = Field(..., min_length=1)
    index: int = Field(..., ge=0)
    time_signature: Tuple[int, int] = Field(default=(4, 4))
    chords: List[ChordEvent] = Field(default_factory=list)


class Section(BaseModel):
    """
    A labelled run of bars (verse, chorus, ...).

    Attributes:
        key_context: Optional override of the song key for this section
    """

    id: str = Field(..., min_length=1)
    index: int = Field(..., ge=0)
    type: str = Field(default="custom", examples=["verse", "chorus"])
    label: str = Field(default="")
    bars: List[Bar] = Field(default_factory=list)
    key_context: Optional[KeyContext] = None

    @field_validator('type')
    @classmethod
    def validate_type(cls, v: str) -> str:
        """Ensure section type is known (case-insensitive)"""
        return _check_choice(v, VALID_SECTION_TYPES, "Section type")


class Song(BaseModel):
    """The song document owned by the editor."""

    id: str = Field(..., min_length=1)
    title: str = Field(default="Untitled")
    tempo: int = Field(default=120, ge=20, le=300, description="Tempo in BPM")
    key_context: KeyContext
    time_signature: Tuple[int, int] = Field(default=(4, 4))
    sections: List[Section] = Field(default_factory=list)

    def key_for_section(self, section_index: int) -> KeyContext:
        """Analysis key for a section: its own override or the song key."""
        if 0 <= section_index < len(self.sections):
            section = self.sections[section_index]
            if section.key_context is not None:
                return section.key_context
        return self.key_context


class BarPosition(BaseModel):
    """Position of a bar inside a song."""

    section_index: int = Field(..., ge=0)
    bar_index: int = Field(..., ge=0)


class SelectionRange(BaseModel):
    """Inclusive range of bars, possibly spanning several sections."""

    start: BarPosition
    end: BarPosition


# =============================================================================
# ANALYSIS RESULTS
# =============================================================================

class ChordAnalysis(BaseModel):
    """Harmonic reading of one chord relative to a key."""

    chord_id: str
    roman_numeral: str
    quality: str
    harmonic_function: str
    is_borrowed: bool = False
    borrowed_from: Optional[str] = None
    is_secondary_dominant: bool = False
    secondary_target: Optional[str] = None
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)
    uncertain: bool = False

    @field_validator('harmonic_function')
    @classmethod
    def validate_function(cls, v: str) -> str:
        return _check_choice(v, VALID_HARMONIC_FUNCTIONS, "Harmonic function")


class Cadence(BaseModel):
    """A cadence found at the end of a phrase."""

    bar_index: int
    type: str

    @field_validator('type')
    @classmethod
    def validate_type(cls, v: str) -> str:
        return _check_choice(v, VALID_CADENCE_TYPES, "Cadence type")


class SectionAnalysis(BaseModel):
    """Per-chord analyses (parallel to the flattened chords) plus cadences."""

    section_id: str
    key_context: KeyContext
    chord_analyses: List[ChordAnalysis] = Field(default_factory=list)
    cadences: List[Cadence] = Field(default_factory=list)
    rationale_tags: List[str] = Field(default_factory=list)


# =============================================================================
# GENERATION / REWRITE RESULTS
# =============================================================================

class AlternativeOption(BaseModel):
    """A labelled set of replacement bars."""

    id: str
    label: str
    bars: List[Bar]
    metadata_tags: List[str] = Field(default_factory=list)
    analysis: Optional[SectionAnalysis] = None


class SongAlternative(BaseModel):
    """A labelled full-song alternative."""

    id: str
    label: str
    song: Song
    metadata_tags: List[str] = Field(default_factory=list)


class BarDiff(BaseModel):
    """Chords of one bar before and after a rewrite."""

    section_index: int
    bar_index: int
    before: List[ChordEvent]
    after: List[ChordEvent]


class GenerateSongResult(BaseModel):
    song: Song
    alternatives: List[SongAlternative]
    section_analyses: List[SectionAnalysis]
    constraints: PromptConstraints


class EditLocalResult(BaseModel):
    alternatives: List[AlternativeOption]
    changed_range: SelectionRange
    diff: List[BarDiff]
    constraints: PromptConstraints


# =============================================================================
# EXPLANATION RESULTS
# =============================================================================

class ExplanationBreakdownItem(BaseModel):
    """Explanation of one chord. Optional fields are None when not asserted."""

    chord_id: str
    symbol: str
    roman_numeral: str
    harmonic_function: str
    detail: str
    tension_role: Optional[str] = None
    connection_to_next: Optional[str] = None
    uncertain: bool = False
    confidence: float = 1.0


class SubstitutionOption(BaseModel):
    id: str
    original_chord_id: str
    substitute_symbol: str
    substitute_roman_numeral: str
    tag: str
    rationale: str
    tradeoff: str

    @field_validator('tag')
    @classmethod
    def validate_tag(cls, v: str) -> str:
        return _check_choice(v, VALID_SUBSTITUTION_TAGS, "Substitution tag")


class ExplanationResult(BaseModel):
    selection_range: SelectionRange
    summary: str
    breakdown: List[ExplanationBreakdownItem] = Field(default_factory=list)
    style_fit: Optional[str] = None
    cadence_explanation: Optional[str] = None
    substitutions: List[SubstitutionOption] = Field(default_factory=list)
    uncertainty_notices: List[str] = Field(default_factory=list)


# =============================================================================
# VOICING / PLAYBACK
# =============================================================================

class VoicingOptions(BaseModel):
    """
    How chords are turned into notes.

    Attributes:
        density: simple (3 notes), medium (4 notes) or rich (all tones)
        octave_base: Octave of the chord root (4 → middle C octave)
        humanize_amount: 0 = mechanical, 1 = maximum timing/velocity drift
        inversion_preference: root, first, second or auto (auto = root)
        pattern: block, arpeggio, pad, strum or rhythmic
    """

    density: str = Field(default="medium")
    octave_base: int = Field(default=4, ge=0, le=8)
    humanize_amount: float = Field(default=0.0, ge=0.0, le=1.0)
    inversion_preference: str = Field(default="root")
    pattern: str = Field(default="block")

    @field_validator('density')
    @classmethod
    def validate_density(cls, v: str) -> str:
        return _check_choice(v, VALID_DENSITIES, "Density")

    @field_validator('inversion_preference')
    @classmethod
    def validate_inversion(cls, v: str) -> str:
        return _check_choice(v, VALID_INVERSIONS, "Inversion preference")

    @field_validator('pattern')
    @classmethod
    def validate_pattern(cls, v: str) -> str:
        return _check_choice(v, VALID_PATTERNS, "Arrangement pattern")


class PlaybackNoteEvent(BaseModel):
    midi_note: int = Field(..., ge=0, le=127)
    start_beat: float
    duration_beats: float
    velocity: int = Field(..., ge=1, le=127)


class ArrangementResult(BaseModel):
    bar_id: str
    notes: List[PlaybackNoteEvent]
    pattern: str
    density: str


# =============================================================================
# FACTORIES
# =============================================================================

def create_id() -> str:
    """Short random identifier for songs, sections, bars and chords."""
    return uuid.uuid4().hex[:12]


def create_chord_event(beat: float, symbol: str, duration_beats: float = 1) -> ChordEvent:
    return ChordEvent(id=create_id(), beat=beat, duration_beats=duration_beats, symbol=symbol)


def create_bar(
    index: int,
    time_signature: Tuple[int, int] = (4, 4),
    chords: Optional[List[ChordEvent]] = None
) -> Bar:
    return Bar(id=create_id(), index=index, time_signature=time_signature, chords=chords or [])


def create_section(
    index: int,
    type: str,
    label: str,
    bars: Optional[List[Bar]] = None,
    key_context: Optional[KeyContext] = None
) -> Section:
    return Section(
        id=create_id(),
        index=index,
        type=type,
        label=label,
        bars=bars or [],
        key_context=key_context
    )


def create_song(
    title: str,
    key_context: KeyContext,
    tempo: int,
    sections: List[Section],
    time_signature: Tuple[int, int] = (4, 4)
) -> Song:
    """
    Convenience function to create a validated Song.

    Args:
        title: Song title
        key_context: Song-level key
        tempo: BPM
        sections: Ordered sections
        time_signature: Default (4, 4)

    Returns:
        Validated Song instance

    Raises:
        ValidationError: If any field fails validation
    """
    return Song(
        id=create_id(),
        title=title,
        tempo=tempo,
        key_context=key_context,
        time_signature=time_signature,
        sections=sections
    )


def song_from_chords(
    sections: List[Tuple[str, List[List[str]]]],
    key_context: KeyContext,
    title: str = "Untitled",
    tempo: int = 120
) -> Song:
    """
    Build a Song from plain chord lists, one list of symbols per bar.

    Each chord in a bar gets an equal share of a 4/4 bar.

    Example:
        >>> song_from_chords([("verse", [["C"], ["F", "G"]])], KeyContext(root="C"))
    """
    built = []
    for s_index, (section_type, bars) in enumerate(sections):
        bar_models = []
        for b_index, symbols in enumerate(bars):
            length = 4 / len(symbols) if symbols else 4
            chords = [
                create_chord_event(1 + i * length, symbol, length)
                for i, symbol in enumerate(symbols)
            ]
            bar_models.append(create_bar(b_index, chords=chords))
        built.append(create_section(s_index, section_type, section_type.title(), bar_models))
    return create_song(title, key_context, tempo, built)
