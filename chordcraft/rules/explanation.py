"""
Explanation Module - Plain-Language Explanations of a Bar Selection

Every sentence produced here is derived from the analysis computed by
analysis.analyze_section. When a chord is marked uncertain the text says so
and no functional relationship (tension role, connection to the next chord)
is asserted for it.
"""

from typing import Dict, List, Optional, Sequence
import logging

from chordcraft.data.schema import (
    Bar,
    Cadence,
    ChordAnalysis,
    ExplanationBreakdownItem,
    ExplanationResult,
    KeyContext,
    SelectionRange,
    SubstitutionOption,
    create_id,
)
from chordcraft.rules.analysis import analyze_section
from chordcraft.rules.harmony import (
    mode_family,
    note_name,
    note_to_semitone,
    scale_intervals,
    split_chord_symbol,
)
from chordcraft.rules.prompt_parser import PromptConstraints

logger = logging.getLogger(__name__)


# =============================================================================
# NUMERAL DESCRIPTIONS
# =============================================================================

NUMERAL_DETAIL = {
    "I":     "the tonic, the home chord of the key",
    "i":     "the tonic minor, the home chord of the minor key",
    "IV":    "the subdominant, warm and familiar, a step away from home",
    "iv":    "the minor subdominant, adds a melancholic tint to a major context",
    "V":     "the dominant, creates tension that pulls back to the tonic",
    "v":     "the minor dominant, a gentler tension than major V",
    "ii":    "the supertonic minor, a classic pre-dominant chord",
    "II":    "the major supertonic, carries a secondary-dominant quality",
    "vi":    "the submediant minor, relative minor with a reflective colour",
    "VI":    "the major submediant, borrowed brightness in a minor key",
    "iii":   "the mediant minor, adds harmonic colour without strong function",
    "III":   "the major mediant, often borrowed from the parallel minor",
    "vii°":  "the leading-tone diminished, intense pull toward the tonic",
    "V/V":   "a secondary dominant (V of V), adds momentum pushing toward the dominant",
    "V/vi":  "a secondary dominant (V of vi), briefly tonicises the submediant",
    "V/IV":  "a secondary dominant (V of IV), briefly tonicises the subdominant",
    "V/ii":  "a secondary dominant (V of ii), briefly tonicises the supertonic",
    "V/iii": "a secondary dominant (V of iii), briefly tonicises the mediant",
}

CADENCE_SENTENCES = {
    "authentic": "Authentic cadence (V→I): strong resolution, feels conclusive.",
    "half":      "Half cadence (ends on V): phrase left open, expects continuation.",
    "plagal":    "Plagal cadence (IV→I): a warmer \"amen\" resolution.",
    "deceptive": "Deceptive cadence (V→vi): the dominant sidesteps the tonic, creating surprise.",
}

DOMINANT_NUMERALS = ("V", "V7")
TONIC_NUMERALS = ("I", "i")
SUBMEDIANT_NUMERALS = ("vi", "VI")

TENSION_HEAVY_SHARE = 0.5
STABLE_SHARE = 0.6
REDUCED_CONFIDENCE = 0.7


def roman_detail(numeral: str) -> str:
    return NUMERAL_DETAIL.get(numeral, f"Roman numeral {numeral}")


def _plural(count: int, word: str = "chord") -> str:
    return f"{count} {word}{'s' if count > 1 else ''}"


# =============================================================================
# PER-CHORD RELATIONSHIPS
# =============================================================================

def tension_role(analysis: ChordAnalysis, next_analysis: Optional[ChordAnalysis]) -> Optional[str]:
    """
    How this chord contributes to tension and release.

    None when this chord or the next one is uncertain, since the role
    depends on both readings.
    """
    if analysis.uncertain or (next_analysis is not None and next_analysis.uncertain):
        return None
    function = analysis.harmonic_function
    next_function = next_analysis.harmonic_function if next_analysis else None
    next_numeral = next_analysis.roman_numeral if next_analysis else None

    if function == "dominant":
        if next_function == "tonic":
            return "creates tension that resolves to the next chord"
        if next_numeral in SUBMEDIANT_NUMERALS:
            return "dominant resolving deceptively to the submediant"
        if next_function == "dominant":
            return "intensifies tension with back-to-back dominant function"
        return "builds tension (dominant function)"
    if function == "tonic":
        if next_function in ("dominant", "predominant"):
            return "provides stability before the phrase moves to tension"
        return "provides rest and stability"
    if function == "predominant":
        return "prepares the ear for dominant tension"
    return None


def connection_to_next(analysis: ChordAnalysis, next_analysis: Optional[ChordAnalysis]) -> Optional[str]:
    if next_analysis is None or analysis.uncertain or next_analysis.uncertain:
        return None
    numeral = analysis.roman_numeral
    next_numeral = next_analysis.roman_numeral

    if numeral in DOMINANT_NUMERALS and next_numeral in TONIC_NUMERALS:
        return "authentic cadence: resolves strongly to tonic"
    if numeral == "IV" and next_numeral in TONIC_NUMERALS:
        return "plagal cadence: warm resolution to tonic"
    if numeral in DOMINANT_NUMERALS and next_numeral in SUBMEDIANT_NUMERALS:
        return "deceptive cadence: dominant resolves unexpectedly to submediant"
    if numeral in ("ii", "II") and next_numeral in DOMINANT_NUMERALS:
        return "ii → V (classic pre-dominant to dominant move)"
    if analysis.harmonic_function == "dominant" and next_analysis.harmonic_function == "dominant":
        return "tension intensifies over two consecutive dominant-function chords"
    return None


def build_breakdown(analyses: List[ChordAnalysis], bars: Sequence[Bar]) -> List[ExplanationBreakdownItem]:
    symbols = {chord.id: chord.symbol for bar in bars for chord in bar.chords}
    items = []
    for i, analysis in enumerate(analyses):
        next_analysis = analyses[i + 1] if i + 1 < len(analyses) else None

        detail = roman_detail(analysis.roman_numeral)
        if analysis.is_borrowed and analysis.borrowed_from:
            detail += f". Borrowed from {analysis.borrowed_from}, adds modal colour"
        if analysis.is_secondary_dominant and analysis.secondary_target:
            detail += f". Briefly tonicises {analysis.secondary_target}"
        if analysis.uncertain:
            detail += " (analysis uncertain: chromatic or unusual chord)"

        items.append(ExplanationBreakdownItem(
            chord_id=analysis.chord_id,
            symbol=symbols.get(analysis.chord_id, ""),
            roman_numeral=analysis.roman_numeral,
            harmonic_function=analysis.harmonic_function,
            detail=detail,
            tension_role=tension_role(analysis, next_analysis),
            connection_to_next=connection_to_next(analysis, next_analysis),
            uncertain=analysis.uncertain,
            confidence=analysis.confidence,
        ))
    return items


# =============================================================================
# SUMMARY / STYLE FIT / CADENCES
# =============================================================================

def build_summary(analyses: List[ChordAnalysis], key_context: KeyContext, tags: List[str]) -> str:
    """
    One-paragraph summary of the selection.

    Examples:
        "Single chord: V in C major, the dominant, ..."
        "Progression: I–V–vi–IV in C major. Stable and grounded: ..."
    """
    key_name = f"{key_context.root} {key_context.mode}"
    total = len(analyses)

    if total == 0:
        return "No chords in the selected range."

    if total == 1:
        only = analyses[0]
        certainty = " (analysis uncertain)" if only.uncertain else ""
        return (
            f"Single chord: {only.roman_numeral} in {key_name}, "
            f"{roman_detail(only.roman_numeral)}{certainty}."
        )

    numerals = "–".join(a.roman_numeral for a in analyses)
    parts = [f"Progression: {numerals} in {key_name}."]

    if "strong authentic cadence" in tags:
        parts.append("Ends with a strong authentic cadence (V→I).")
    elif "open half cadence" in tags:
        parts.append("Ends with a half cadence, leaving the phrase open and expecting continuation.")
    elif "deceptive cadence" in tags:
        parts.append("Contains a deceptive cadence: the dominant resolves to the submediant unexpectedly.")

    if "modal mixture" in tags:
        parts.append("Includes borrowed chords from the parallel mode (modal mixture).")
    if "secondary dominants" in tags:
        parts.append("Uses secondary dominants to temporarily tonicise other scale degrees.")

    counts: Dict[str, int] = {}
    for analysis in analyses:
        counts[analysis.harmonic_function] = counts.get(analysis.harmonic_function, 0) + 1

    if counts.get("dominant", 0) / total > TENSION_HEAVY_SHARE:
        parts.append("Tension-heavy: dominated by dominant-function chords.")
    elif counts.get("tonic", 0) / total > STABLE_SHARE:
        parts.append("Stable and grounded: mostly tonic-function chords.")

    return " ".join(parts)


def build_style_fit(tags: List[str], constraints: Optional[PromptConstraints]) -> Optional[str]:
    """How the analysed harmony matches the prompt's styles, moods and complexity."""
    if constraints is None:
        return None

    styles, moods = constraints.styles, constraints.moods
    has_mixture = "modal mixture" in tags
    has_secondary = "secondary dominants" in tags
    parts = []

    if "jazz" in styles and has_secondary:
        parts.append("Secondary dominants are idiomatic for jazz and fit your prompt well.")
    if "folk" in styles and "I-IV-V present" in tags:
        parts.append("The I–IV–V pattern is central to folk, a strong match for your style.")
    if "pop" in styles and "I-V-vi pattern" in tags:
        parts.append("The I–V–vi pattern is a pop staple that fits your pop-style prompt.")
    if "rock" in styles and "strong authentic cadence" in tags:
        parts.append("Strong cadences give this a rock-appropriate sense of finality.")
    if ("dreamy" in styles or "cinematic" in styles) and has_mixture:
        parts.append("Modal mixture chords add the dreamy/cinematic colour your prompt described.")
    if "tense" in moods and constraints.tension > 0.5:
        parts.append("The tension level matches the tense intent of your prompt.")
    if "calm" in moods and constraints.tension < 0.3:
        parts.append("Low harmonic tension suits the calm mood of your prompt.")
    if constraints.complexity == "simple" and not has_mixture and not has_secondary:
        parts.append("Clean diatonic progressions, aligned with your simple/beginner-friendly prompt.")
    if constraints.complexity == "jazzy" and (has_secondary or has_mixture):
        parts.append("Extended and chromatic harmonies align with your jazzy complexity preference.")

    return " ".join(parts) if parts else None


def build_cadence_explanation(cadences: List[Cadence]) -> Optional[str]:
    sentences = [
        f"Bar {c.bar_index + 1}: {CADENCE_SENTENCES[c.type]}"
        for c in cadences if c.type in CADENCE_SENTENCES
    ]
    return " ".join(sentences) if sentences else None


# =============================================================================
# SUBSTITUTIONS
# =============================================================================

def _diatonic_numeral(numeral: str, family: str) -> str:
    """The in-key form of a borrowed numeral: upper-case in major, lower-case in minor."""
    stripped = numeral.replace("°", "").replace("+", "")
    if family == "major":
        return stripped.upper()
    return stripped[:1].lower() + stripped[1:]


def build_substitutions(
    analyses: List[ChordAnalysis],
    key_context: KeyContext,
    bars: Sequence[Bar]
) -> List[SubstitutionOption]:
    """
    Up to three substitution ideas for the most interesting chord.

    The target is the first borrowed, secondary-dominant or uncertain chord,
    otherwise the last chord of the selection.
    """
    if not analyses:
        return []
    target = next(
        (a for a in analyses if a.is_borrowed or a.is_secondary_dominant or a.uncertain),
        analyses[-1],
    )
    symbol = next(
        (c.symbol for bar in bars for c in bar.chords if c.id == target.chord_id), ""
    )
    if not symbol:
        return []

    family = mode_family(key_context.mode)
    key_semitone = note_to_semitone(key_context.root)
    intervals = scale_intervals(key_context.mode)
    chord_root = split_chord_symbol(symbol).root
    subs = []

    def add(substitute: str, numeral: str, tag: str, rationale: str, tradeoff: str) -> None:
        subs.append(SubstitutionOption(
            id=create_id(),
            original_chord_id=target.chord_id,
            substitute_symbol=substitute,
            substitute_roman_numeral=numeral,
            tag=tag,
            rationale=rationale,
            tradeoff=tradeoff,
        ))

    if target.is_borrowed:
        diatonic = _diatonic_numeral(target.roman_numeral, family)
        add(
            f"(diatonic {diatonic})", diatonic, "lighter",
            f"Replace the borrowed {target.roman_numeral} with the diatonic {diatonic} "
            "for a straightforward, all-diatonic sound.",
            "Loses the modal-mixture colour that makes this progression distinctive.",
        )

    if target.harmonic_function == "dominant":
        add(
            f"{chord_root}9", target.roman_numeral, "richer",
            "Add a ninth to the dominant chord for a richer, jazzier tension.",
            "More dissonant; may not fit simpler or folk-adjacent styles.",
        )
    elif target.harmonic_function == "tonic":
        extended = f"{chord_root}maj7" if family == "major" else f"{chord_root}m7"
        add(
            extended, target.roman_numeral, "richer",
            f"Add a seventh ({extended}) for a lush, jazzy tonic colour.",
            "The added seventh softens the sense of resolution, so it feels less conclusive.",
        )

    if target.harmonic_function == "dominant":
        ii_symbol = note_name(key_semitone + intervals[1], key_context.root) + "m"
        add(
            ii_symbol, "ii", "smoother",
            f"Replace with ii ({ii_symbol}), a pre-dominant that creates smooth bass "
            "motion and gentler tension.",
            "Less tension than the dominant; it won't pull to resolve as strongly.",
        )
    elif target.harmonic_function == "predominant":
        iv_root = note_name(key_semitone + intervals[3], key_context.root)
        iv_symbol = iv_root if family == "major" else f"{iv_root}m"
        add(
            iv_symbol, "IV" if family == "major" else "iv", "smoother",
            f"Replace with IV ({iv_symbol}), a traditional pre-dominant with smooth voice leading.",
            "More predictable than the current chord, with less harmonic interest.",
        )

    return subs


# =============================================================================
# UNCERTAINTY
# =============================================================================

def build_uncertainty_notices(analyses: List[ChordAnalysis]) -> List[str]:
    notices = []
    uncertain = sum(1 for a in analyses if a.uncertain)
    if uncertain:
        notices.append(
            f"{_plural(uncertain)} could not be analysed with high confidence and "
            f"{'are' if uncertain > 1 else 'is'} marked uncertain. "
            "Interpretations may not be fully accurate."
        )
    reduced = sum(1 for a in analyses if not a.uncertain and a.confidence < REDUCED_CONFIDENCE)
    if reduced:
        notices.append(
            f"{_plural(reduced)} {'have' if reduced > 1 else 'has'} reduced confidence "
            "(possible secondary function or borrowed chord)."
        )
    return notices


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def explain_selection(
    bars: Sequence[Bar],
    key_context: KeyContext,
    section_id: str,
    selection_range: SelectionRange,
    constraints: Optional[PromptConstraints] = None
) -> ExplanationResult:
    """
    Explain a selection of bars in plain language.

    Args:
        bars: The selected bars, in song order
        key_context: Key the bars are read in
        section_id: Id recorded on the underlying analysis
        selection_range: Echoed back on the result
        constraints: Optional prompt constraints; enables the style-fit text

    Returns:
        ExplanationResult
    """
    analysis = analyze_section(bars, key_context, section_id)
    analyses, tags = analysis.chord_analyses, analysis.rationale_tags
    logger.debug("Explaining %d chords in %s (%s)", len(analyses), section_id, ", ".join(tags))

    return ExplanationResult(
        selection_range=selection_range,
        summary=build_summary(analyses, key_context, tags),
        breakdown=build_breakdown(analyses, bars),
        style_fit=build_style_fit(tags, constraints),
        cadence_explanation=build_cadence_explanation(analysis.cadences),
        substitutions=build_substitutions(analyses, key_context, bars),
        uncertainty_notices=build_uncertainty_notices(analyses),
    )
