"""
Harmony Module - Key-Relative Pitch-Class Math

This module encodes the music theory shared by the analyzer, the generator,
the rewriter and the voicing engine. It can:
    1. Map note names to pitch classes and spell pitch classes in a key
    2. Build the 7-note scale of any of the seven church modes
    3. Classify a mode as major-family or minor-family
    4. Split chord symbols into root, quality text and bass
    5. Render a scale degree as a concrete chord symbol for a complexity tier

Every table here is read-only data; the functions are pure.
"""

from typing import List, NamedTuple, Optional, Sequence, Tuple
from types import MappingProxyType


# =============================================================================
# CONSTANTS: The Building Blocks of Music Theory
# =============================================================================

SHARP_NOTES = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")
FLAT_NOTES = ("C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B")

NOTE_SEMITONES = MappingProxyType({
    "C": 0, "C#": 1, "Db": 1, "D": 2, "D#": 3, "Eb": 3,
    "E": 4, "F": 5, "F#": 6, "Gb": 6, "G": 7, "G#": 8,
    "Ab": 8, "A": 9, "A#": 10, "Bb": 10, "B": 11,
})

# Key roots (by pitch class) conventionally spelled with sharps: G D A E B F# C#
SHARP_KEY_ROOTS = frozenset({7, 2, 9, 4, 11, 6, 1})

# Scale formulas as semitone offsets from the root
MODE_INTERVALS = MappingProxyType({
    "major":      (0, 2, 4, 5, 7, 9, 11),
    "minor":      (0, 2, 3, 5, 7, 8, 10),
    "dorian":     (0, 2, 3, 5, 7, 9, 10),
    "mixolydian": (0, 2, 4, 5, 7, 9, 10),
    "phrygian":   (0, 1, 3, 5, 7, 8, 10),
    "lydian":     (0, 2, 4, 6, 7, 9, 11),
    "locrian":    (0, 1, 3, 5, 6, 8, 10),
})

MAJOR_FAMILY_MODES = frozenset({"major", "lydian", "mixolydian"})

# Expected triad quality per degree. The minor family uses the harmonic-minor
# convention: V is major and the seventh degree is diminished.
TRIAD_QUALITIES = MappingProxyType({
    "major": ("maj", "min", "min", "maj", "maj", "min", "dim"),
    "minor": ("min", "dim", "maj", "min", "maj", "maj", "dim"),
})

ROMAN_NUMERALS = ("I", "II", "III", "IV", "V", "VI", "VII")

# Parallel family used for modal-mixture lookups
PARALLEL_FAMILY = MappingProxyType({"major": "minor", "minor": "major"})

COMPLEXITY_TIERS = ("simple", "moderate", "complex", "jazzy")

DOMINANT_DEGREE = 4


# =============================================================================
# NOTE HELPERS
# =============================================================================

def note_to_semitone(note: str) -> int:
    """Pitch class (0-11) of a note name; unknown names fall back to C (0)."""
    return NOTE_SEMITONES.get(note, 0)


def note_name(semitone: int, key_root: str) -> str:
    """Spell a pitch class with sharps or flats according to the key root."""
    pitch_class = semitone % 12
    if note_to_semitone(key_root) in SHARP_KEY_ROOTS:
        return SHARP_NOTES[pitch_class]
    return FLAT_NOTES[pitch_class]


def mode_family(mode: str) -> str:
    """
    Classify a mode as 'major' or 'minor' family.

    Major family: major, lydian, mixolydian (major third above the root).
    Minor family: minor, dorian, phrygian, locrian.
    """
    return "major" if mode in MAJOR_FAMILY_MODES else "minor"


def scale_intervals(mode: str) -> Tuple[int, ...]:
    """Interval set of a mode; unknown modes fall back to major."""
    return MODE_INTERVALS.get(mode, MODE_INTERVALS["major"])


def triad_quality(degree: int, mode: str) -> str:
    """Expected triad quality ('maj', 'min', 'dim') of a 0-indexed degree."""
    return TRIAD_QUALITIES[mode_family(mode)][degree]


def numeral_for(degree: int, quality: str) -> str:
    """
    Roman numeral for a degree, cased by quality.

    Examples:
        numeral_for(0, "maj") → 'I'
        numeral_for(6, "dim") → 'vii°'
        numeral_for(2, "aug") → 'III+'
    """
    numeral = ROMAN_NUMERALS[degree]
    if quality in ("min", "dim"):
        numeral = numeral.lower()
    if quality == "dim":
        numeral += "°"
    elif quality == "aug":
        numeral += "+"
    return numeral


def build_scale(root: str, mode: str = "major") -> List[str]:
    """Build a scale from a root note, spelled for that key."""
    root_index = note_to_semitone(root)
    return [note_name(root_index + interval, root) for interval in scale_intervals(mode)]


def get_diatonic_chords(key: str, mode: str = "major") -> List[str]:
    """Get all 7 diatonic triads for a given key."""
    return [degree_to_symbol(d, key, mode, "simple") for d in range(7)]


# =============================================================================
# CHORD SYMBOLS
# =============================================================================

class ChordSymbol(NamedTuple):
    """A chord symbol split into its parts."""
    root: str
    semitone: int
    quality_text: str
    bass: Optional[str]


def split_chord_symbol(symbol: str) -> ChordSymbol:
    """
    Split a chord symbol into root, quality text and optional slash bass.

    Two-character roots ("C#", "Bb") are tried before one-character roots.
    An unknown root keeps its first character and falls back to pitch class 0.

    Examples:
        split_chord_symbol("F#m7b5") → ChordSymbol('F#', 6, 'm7b5', None)
        split_chord_symbol("G/B")    → ChordSymbol('G', 7, '', 'B')
    """
    root = symbol[:1]
    semitone = 0
    for size in (2, 1):
        candidate = symbol[:size]
        if candidate in NOTE_SEMITONES:
            root = candidate
            semitone = NOTE_SEMITONES[candidate]
            break

    rest = symbol[len(root):]
    bass = None
    if "/" in rest:
        rest, bass = rest.split("/", 1)
    return ChordSymbol(root, semitone, rest, bass or None)


# Symbol suffix per complexity tier and triad quality
_SUFFIXES = MappingProxyType({
    "simple":   {"maj": "", "min": "m", "dim": "dim"},
    "moderate": {"maj": "", "min": "m", "dim": "dim"},
    "complex":  {"maj": "maj7", "min": "m7", "dim": "m7b5"},
    "jazzy":    {"maj": "maj9", "min": "m9", "dim": "m7b5"},
})

# Suffix of the dominant (degree index 4) in major-family keys
_DOMINANT_SUFFIXES = MappingProxyType({
    "simple": "", "moderate": "7", "complex": "maj7", "jazzy": "9",
})


def degree_to_symbol(degree: int, key_root: str, mode: str, complexity: str = "moderate") -> str:
    """
    Render a 0-indexed scale degree as a chord symbol.

    simple   → triads
    moderate → triads, dominant seventh on V (major-family keys only)
    complex  → sevenths everywhere (maj7 / m7 / m7b5)
    jazzy    → ninths (maj9 / m9 / 9 on V), m7b5 on diminished degrees

    In minor-family keys degree 4 is always a major chord (harmonic V).

    Example:
        degree_to_symbol(4, "C", "major", "moderate") → 'G7'
    """
    intervals = scale_intervals(mode)
    root = note_name(note_to_semitone(key_root) + intervals[degree], key_root)
    family = mode_family(mode)

    quality = TRIAD_QUALITIES[family][degree]
    if family == "minor" and degree == DOMINANT_DEGREE:
        quality = "maj"

    tier = complexity if complexity in COMPLEXITY_TIERS else "simple"
    if family == "major" and degree == DOMINANT_DEGREE:
        return root + _DOMINANT_SUFFIXES[tier]
    return root + _SUFFIXES[tier][quality]


def degrees_to_chords(
    key_root: str,
    mode: str,
    degrees: Sequence[int],
    complexity: str = "simple"
) -> List[str]:
    """Convert a list of 0-indexed scale degrees to chord symbols."""
    return [degree_to_symbol(d, key_root, mode, complexity) for d in degrees]


def relative_degree(semitone: int, key_root: str, mode: str) -> Optional[int]:
    """0-indexed scale degree of a pitch class in a key, or None if chromatic."""
    offset = (semitone - note_to_semitone(key_root)) % 12
    intervals = scale_intervals(mode)
    if offset in intervals:
        return intervals.index(offset)
    return None

