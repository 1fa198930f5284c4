"""
Analysis Module - Roman Numeral Analysis of Chords and Sections

Reads each chord relative to a key and labels it with:
    - A Roman numeral (cased by quality: 'I', 'ii', 'vii°', 'V/V', '?F#')
    - A harmonic function (tonic / predominant / dominant / chromatic)
    - Borrowed-chord and secondary-dominant tags
    - A confidence score; low-confidence readings are flagged uncertain

Sections are analysed chord by chord, then scanned for cadences at phrase
ends (every 4th bar and the final bar).
"""

from typing import List, Optional, Sequence
import logging

from chordcraft.data.schema import (
    Bar, Cadence, ChordAnalysis, ChordEvent, KeyContext, SectionAnalysis,
)
from chordcraft.rules.harmony import (
    MODE_INTERVALS,
    PARALLEL_FAMILY,
    mode_family,
    note_to_semitone,
    numeral_for,
    relative_degree,
    split_chord_symbol,
    triad_quality,
)

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

DEGREE_FUNCTIONS = {
    0: "tonic", 2: "tonic", 5: "tonic",
    1: "predominant", 3: "predominant",
    4: "dominant", 6: "dominant",
}

BORROWED_FROM = {"major": "parallel minor", "minor": "parallel major"}

CONFIDENCE_SECONDARY = 0.85
CONFIDENCE_BORROWED_DIATONIC = 0.8
CONFIDENCE_BORROWED_PARALLEL = 0.75
CONFIDENCE_CHROMATIC = 0.4
UNCERTAIN_BELOW = 0.6

PHRASE_LENGTH = 4

LEADING_TONE_DEGREE = 6

TONIC_NUMERALS = ("I", "i")
SUBDOMINANT_NUMERALS = ("IV", "iv")
SUBMEDIANT_NUMERALS = ("vi", "VI")


# =============================================================================
# QUALITY PARSING
# =============================================================================

def parse_quality(quality_text: str) -> str:
    """
    Classify the quality text of a chord symbol into a quality tag.

    Checks run in order, so 'maj7' is never read as minor and 'm7b5' is
    read as half-diminished before the generic minor-seventh rule.

    Examples:
        parse_quality("m7")   → 'min7'
        parse_quality("m7b5") → 'hdim7'
        parse_quality("maj9") → 'maj7'
        parse_quality("9")    → 'dom9'
    """
    rest = quality_text
    if rest.startswith("m7b5") or rest.startswith("ø"):
        return "hdim7"
    if rest.startswith("m") and not rest.startswith("maj"):
        return "min7" if "7" in rest else "min"
    if "dim" in rest or "°" in rest:
        return "dim7" if "7" in rest else "dim"
    if "aug" in rest or "+" in rest:
        return "aug"
    if "maj7" in rest or "maj9" in rest or "M7" in rest or "Δ" in rest:
        return "maj7"
    if "7" in rest:
        return "dom7"
    if "9" in rest:
        return "dom9"
    if "sus" in rest:
        return "sus"
    return "maj"


def base_quality(quality: str) -> str:
    """Reduce a quality tag to its triad: maj, min, dim, aug or sus."""
    if quality.startswith("min"):
        return "min"
    if quality.startswith("dim") or quality == "hdim7":
        return "dim"
    if quality in ("aug", "sus"):
        return quality
    return "maj"


def function_for_degree(degree: int) -> str:
    return DEGREE_FUNCTIONS.get(degree, "ambiguous")


# =============================================================================
# CHORD ANALYSIS
# =============================================================================

def _secondary_target(semitone: int, quality: str, key_context: KeyContext) -> Optional[str]:
    """
    Numeral of the degree this chord would tonicise as a secondary dominant.

    The chord must be major (or a dominant 7th/9th) and its root a perfect
    fifth above a diatonic degree other than the leading tone.
    """
    if base_quality(quality) != "maj" and quality not in ("dom7", "dom9"):
        return None
    target = relative_degree(semitone - 7, key_context.root, key_context.mode)
    if target is None or target == LEADING_TONE_DEGREE:
        return None
    expected = triad_quality(target, key_context.mode)
    return numeral_for(target, "min" if expected == "dim" else expected)


def analyze_chord(chord: ChordEvent, key_context: KeyContext) -> ChordAnalysis:
    """
    Analyse a single chord relative to a key.

    Diatonic roots whose quality matches the key are plain degrees. A quality
    mismatch is read as a secondary dominant when possible, otherwise as a
    chord borrowed from the parallel mode. Roots outside the scale try the
    same secondary-dominant test, then the parallel mode's scale, and are
    finally labelled chromatic ('?<root>') with low confidence.

    Args:
        chord: The chord event (only its id and symbol are used)
        key_context: Key to analyse against

    Returns:
        ChordAnalysis
    """
    parts = split_chord_symbol(chord.symbol)
    quality = parse_quality(parts.quality_text)
    bq = base_quality(quality)
    family = mode_family(key_context.mode)
    degree = relative_degree(parts.semitone, key_context.root, key_context.mode)

    fields = {
        "chord_id": chord.id,
        "quality": quality,
        "confidence": 1.0,
    }

    if degree is not None and (bq == triad_quality(degree, key_context.mode) or bq == "sus"):
        fields["roman_numeral"] = numeral_for(degree, bq)
        fields["harmonic_function"] = function_for_degree(degree)
        return _finish(fields)

    target = _secondary_target(parts.semitone, quality, key_context)
    if target is not None:
        fields.update(
            roman_numeral=f"V/{target}",
            harmonic_function="dominant",
            is_secondary_dominant=True,
            secondary_target=target,
            confidence=CONFIDENCE_SECONDARY,
        )
        return _finish(fields)

    if degree is not None:
        fields.update(
            roman_numeral=numeral_for(degree, bq),
            harmonic_function=function_for_degree(degree),
            is_borrowed=True,
            borrowed_from=BORROWED_FROM[family],
            confidence=CONFIDENCE_BORROWED_DIATONIC,
        )
        return _finish(fields)

    parallel = MODE_INTERVALS[PARALLEL_FAMILY[family]]
    offset = (parts.semitone - note_to_semitone(key_context.root)) % 12
    if offset in parallel:
        parallel_degree = parallel.index(offset)
        fields.update(
            roman_numeral=numeral_for(parallel_degree, bq),
            harmonic_function=function_for_degree(parallel_degree),
            is_borrowed=True,
            borrowed_from=BORROWED_FROM[family],
            confidence=CONFIDENCE_BORROWED_PARALLEL,
        )
        return _finish(fields)

    fields.update(
        roman_numeral=f"?{parts.root}",
        harmonic_function="chromatic",
        confidence=CONFIDENCE_CHROMATIC,
    )
    return _finish(fields, uncertain=True)


def _finish(fields: dict, uncertain: bool = False) -> ChordAnalysis:
    fields["uncertain"] = uncertain or fields["confidence"] < UNCERTAIN_BELOW
    return ChordAnalysis(**fields)


# =============================================================================
# CADENCES
# =============================================================================

def detect_cadence(analyses: Sequence[ChordAnalysis]) -> Optional[str]:
    """
    Cadence formed by the last two analysed chords, or None.

    Priority: authentic (dominant → I/i), half (ends on a dominant-function
    chord), plagal (IV/iv → I/i), deceptive (dominant → vi/VI).
    """
    if len(analyses) < 2:
        return None
    second_last, last = analyses[-2], analyses[-1]

    if second_last.harmonic_function == "dominant" and last.roman_numeral in TONIC_NUMERALS:
        return "authentic"
    if last.harmonic_function == "dominant":
        return "half"
    if second_last.roman_numeral in SUBDOMINANT_NUMERALS and last.roman_numeral in TONIC_NUMERALS:
        return "plagal"
    if second_last.harmonic_function == "dominant" and last.roman_numeral in SUBMEDIANT_NUMERALS:
        return "deceptive"
    return None


# =============================================================================
# SECTION ANALYSIS
# =============================================================================

def rationale_tags(analyses: List[ChordAnalysis], cadences: List[Cadence]) -> List[str]:
    """Short descriptive tags summarising what the analysis found."""
    numerals = {a.roman_numeral for a in analyses}
    cadence_types = {c.type for c in cadences}
    tags = []

    if {"I", "IV", "V"} <= numerals:
        tags.append("I-IV-V present")
    if {"I", "V", "vi"} <= numerals:
        tags.append("I-V-vi pattern")
    if any(a.is_borrowed for a in analyses):
        tags.append("modal mixture")
    if any(a.is_secondary_dominant for a in analyses):
        tags.append("secondary dominants")
    if "authentic" in cadence_types:
        tags.append("strong authentic cadence")
    if "half" in cadence_types:
        tags.append("open half cadence")
    if "deceptive" in cadence_types:
        tags.append("deceptive cadence")
    if any(a.uncertain for a in analyses):
        tags.append("chromatic/ambiguous chords")
    return tags


def analyze_section(bars: Sequence[Bar], key_context: KeyContext, section_id: str) -> SectionAnalysis:
    """
    Analyse every chord of a run of bars and find phrase-end cadences.

    chord_analyses is parallel to the bars' chords flattened in order.
    """
    analyses: List[ChordAnalysis] = []
    cadences: List[Cadence] = []

    for i, bar in enumerate(bars):
        analyses.extend(analyze_chord(chord, key_context) for chord in bar.chords)

        phrase_end = (i + 1) % PHRASE_LENGTH == 0 or i == len(bars) - 1
        if phrase_end and len(analyses) >= 2:
            cadence = detect_cadence(analyses)
            if cadence is not None:
                logger.debug("Section %s: %s cadence at bar %d", section_id, cadence, i)
                cadences.append(Cadence(bar_index=i, type=cadence))

    return SectionAnalysis(
        section_id=section_id,
        key_context=key_context,
        chord_analyses=analyses,
        cadences=cadences,
        rationale_tags=rationale_tags(analyses, cadences),
    )
