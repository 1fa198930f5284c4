"""
Prompt Parser Module - Extract Generation Constraints from Natural Language

This module turns a free-text prompt into structured constraints:
    - Style and mood tags (e.g., "dreamy jazz ballad" → styles=('jazz', 'dreamy'))
    - Harmonic complexity tier (simple / moderate / complex / jazzy)
    - Brightness (-1 dark .. 1 bright) and tension (0 .. 1)
    - Cadence strength, colour vocabulary and edit intent
    - Per-section text hints ("make the chorus lift" → {'chorus': ...})

Matching is a plain case-insensitive substring test against fixed
vocabularies. Parsing never fails: a prompt with no known words yields
neutral defaults.
"""

from dataclasses import dataclass, asdict
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple
import logging

logger = logging.getLogger(__name__)


# =============================================================================
# PROMPT CONSTRAINTS DATA CLASS
# =============================================================================

@dataclass(frozen=True)
class PromptConstraints:
    """Container for the constraints extracted from a prompt."""
    raw: str = ""
    styles: Tuple[str, ...] = ()
    moods: Tuple[str, ...] = ()
    complexity: str = "moderate"
    brightness: float = 0.0
    tension: float = 0.3
    cadence_strength: str = "moderate"
    color_vocab: Tuple[str, ...] = ()
    edit_intent: Optional[str] = None
    section_hints: Optional[Dict[str, str]] = None
    beginner_friendly: bool = False

    def to_dict(self) -> Dict:
        return asdict(self)

    def __str__(self) -> str:
        parts = []
        if self.styles:
            parts.append(f"Styles: {', '.join(self.styles)}")
        if self.moods:
            parts.append(f"Moods: {', '.join(self.moods)}")
        parts.append(f"Complexity: {self.complexity}")
        parts.append(f"Brightness: {self.brightness:+.1f}")
        parts.append(f"Tension: {self.tension:.1f}")
        if self.edit_intent:
            parts.append(f"Intent: {self.edit_intent}")
        return " | ".join(parts)


# =============================================================================
# KEYWORD DICTIONARIES
# =============================================================================

STYLE_KEYWORDS = MappingProxyType({
    "pop":       ("pop", "popular", "catchy", "radio", "mainstream"),
    "rock":      ("rock", "guitar", "band", "riff", "heavy", "distorted", "grunge", "metal"),
    "jazz":      ("jazz", "jazzy", "swing", "bebop", "ii-v", "seventh", "7th chord"),
    "folk":      ("folk", "acoustic", "fingerpick", "singer-songwriter", "indie folk"),
    "dreamy":    ("dreamy", "dream", "floating", "hazy", "ethereal", "ambient"),
    "cinematic": ("cinematic", "film", "movie", "epic", "score", "orchestral"),
    "funk":      ("funk", "funky", "groove", "syncopated", "rhythm and blues"),
    "blues":     ("blues", "bluesy", "12 bar", "shuffle", "pentatonic"),
    "classical": ("classical", "baroque", "romantic", "symphony", "sonata"),
    "country":   ("country", "nashville", "twang", "southern", "bluegrass"),
})

MOOD_KEYWORDS = MappingProxyType({
    "happy":      ("happy", "joyful", "cheerful", "upbeat", "fun", "positive", "bubbly"),
    "sad":        ("sad", "melancholic", "melancholy", "somber", "grief", "sorrowful",
                   "wistful", "tearful"),
    "energetic":  ("energetic", "driving", "pumping", "intense", "powerful", "high energy"),
    "calm":       ("calm", "gentle", "soft", "relaxed", "peaceful", "serene", "chill", "quiet",
                   "ambient", "floating", "ethereal", "hazy"),
    "tense":      ("tense", "anxious", "unsettled", "nervous", "uneasy", "suspenseful", "urgent"),
    "uplifting":  ("uplifting", "inspiring", "soaring", "hopeful", "triumphant", "euphoric"),
    "dark":       ("dark", "ominous", "brooding", "heavy", "moody", "sinister", "gloomy"),
    "mysterious": ("mysterious", "enigmatic", "haunting", "eerie", "creepy", "otherworldly"),
    "romantic":   ("romantic", "love", "tender", "warm", "intimate", "longing", "sentimental"),
})

COMPLEXITY_KEYWORDS = MappingProxyType({
    "simple":   ("simple", "basic", "easy", "beginner", "plain", "straightforward", "stripped"),
    "moderate": ("moderate", "medium", "standard", "balanced"),
    "complex":  ("complex", "advanced", "intricate", "sophisticated", "chromatic"),
    "jazzy":    ("jazzy", "jazz", "extensions", "ninths", "ninth", "seventh", "lush", "altered"),
})

EDIT_INTENT_KEYWORDS = MappingProxyType({
    "add_tension":            ("add tension", "more tension", "tense it", "edgier", "suspense",
                               "build tension"),
    "simplify":               ("simplify", "simpler", "make simple", "strip down", "less complex"),
    "brighten":               ("brighten", "brighter", "happier", "lighter", "more major",
                               "make brighter"),
    "darken":                 ("darken", "darker", "sadder", "gloomier", "heavier", "more minor"),
    "more_colorful":          ("more colorful", "more colourful", "more interesting",
                               "more exotic", "add color", "richer"),
    "smoother_voice_leading": ("smoother", "smooth voice", "voice leading", "stepwise",
                               "common tones", "smoother transition"),
    "stronger_lift":          ("stronger lift", "bigger lift", "lift into chorus", "build into",
                               "stronger push", "more momentum"),
    "less_predictable":       ("less predictable", "surprising", "unexpected", "unpredictable",
                               "avoid cliché", "twist"),
})

COLOR_VOCAB_KEYWORDS = MappingProxyType({
    "diatonic":      ("diatonic", "in key", "clean", "pure", "no accidentals"),
    "modal_mixture": ("modal mixture", "modal", "borrowed", "parallel minor", "parallel major",
                      "mixture"),
    "lush":          ("lush", "rich", "dense", "full sound", "thick"),
    "jazzy":         ("jazzy", "jazz voicing", "bebop"),
    "colorful":      ("colorful", "colourful", "chromatic", "interesting chords"),
    "sparse":        ("sparse", "minimal", "bare", "stripped back", "few chords"),
})

# Complexity implied by style when the prompt names no complexity tier
STYLE_COMPLEXITY = (
    (("jazz", "funk", "dreamy"), "jazzy"),
    (("pop", "folk", "country"), "simple"),
    (("classical", "cinematic"), "moderate"),
)

# Brightness contributions: (mood tags, delta) then (raw words, delta)
MOOD_BRIGHTNESS = (
    (("happy", "uplifting"), 0.5),
    (("sad", "dark"), -0.5),
)
WORD_BRIGHTNESS = (
    ("bright", 0.3),
    ("major", 0.2),
    ("minor", -0.2),
    ("dark", -0.3),
)

# Tension overrides, applied in order (the last matching mood wins)
MOOD_TENSION = (
    ("tense", 0.8),
    ("energetic", 0.6),
    ("uplifting", 0.5),
    ("calm", 0.1),
    ("romantic", 0.2),
)

STRONG_CADENCE_PHRASES = ("strong cadence", "strong resolution", "clear resolution")
WEAK_CADENCE_PHRASES = ("open", "suspended", "ambiguous cadence")
BEGINNER_PHRASES = ("beginner", "beginner-friendly", "easy to play")

SECTION_HINT_TYPES = ("verse", "chorus", "bridge", "intro", "outro", "prechorus", "solo")
HINT_CHARS_BEFORE = 15
HINT_CHARS_AFTER = 40

DEFAULT_TENSION = 0.3


# =============================================================================
# PARSING FUNCTIONS
# =============================================================================

def match_keywords(text: str, vocabulary: Mapping[str, Tuple[str, ...]]) -> List[str]:
    """Return every tag of a vocabulary with at least one keyword in the text."""
    lower = text.lower()
    return [tag for tag, keywords in vocabulary.items()
            if any(keyword in lower for keyword in keywords)]


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def extract_complexity(text: str, styles: List[str]) -> str:
    """First matching complexity tier, else one implied by style, else moderate."""
    matches = match_keywords(text, COMPLEXITY_KEYWORDS)
    if matches:
        return matches[0]
    for style_tags, tier in STYLE_COMPLEXITY:
        if any(style in styles for style in style_tags):
            return tier
    return "moderate"


def extract_brightness(text: str, moods: List[str]) -> float:
    """Accumulate brightness from moods and colour words, clamped to [-1, 1]."""
    lower = text.lower()
    brightness = 0.0
    for mood_tags, delta in MOOD_BRIGHTNESS:
        if any(mood in moods for mood in mood_tags):
            brightness += delta
    for word, delta in WORD_BRIGHTNESS:
        if word in lower:
            brightness += delta
    return _clamp(round(brightness, 3), -1.0, 1.0)


def extract_tension(moods: List[str]) -> float:
    tension = DEFAULT_TENSION
    for mood, value in MOOD_TENSION:
        if mood in moods:
            tension = value
    return _clamp(tension, 0.0, 1.0)


def extract_cadence_strength(text: str, moods: List[str]) -> str:
    lower = text.lower()
    if any(phrase in lower for phrase in STRONG_CADENCE_PHRASES):
        return "strong"
    if any(phrase in lower for phrase in WEAK_CADENCE_PHRASES):
        return "weak"
    if "tense" in moods or "half cadence" in lower:
        return "weak"
    return "moderate"


def extract_section_hints(text: str) -> Optional[Dict[str, str]]:
    """
    Slice a window of text around each section word.

    This is a heuristic, not a parser: windows may overlap and may cut words.

    Example:
        "make the chorus lift more" → {'chorus': 'make the chorus lift more'}
    """
    lower = text.lower()
    hints = {}
    for section_type in SECTION_HINT_TYPES:
        idx = lower.find(section_type)
        if idx >= 0:
            start = max(0, idx - HINT_CHARS_BEFORE)
            end = idx + len(section_type) + HINT_CHARS_AFTER
            hints[section_type] = text[start:end].strip()
    return hints or None


# =============================================================================
# MAIN PARSING FUNCTION
# =============================================================================

def parse_prompt(text: str) -> PromptConstraints:
    """Parse a natural language prompt into generation constraints."""
    lower = text.lower()

    styles = match_keywords(text, STYLE_KEYWORDS)
    moods = match_keywords(text, MOOD_KEYWORDS)
    complexity = extract_complexity(text, styles)
    intents = match_keywords(text, EDIT_INTENT_KEYWORDS)

    constraints = PromptConstraints(
        raw=text,
        styles=tuple(styles),
        moods=tuple(moods),
        complexity=complexity,
        brightness=extract_brightness(text, moods),
        tension=extract_tension(moods),
        cadence_strength=extract_cadence_strength(text, moods),
        color_vocab=tuple(match_keywords(text, COLOR_VOCAB_KEYWORDS)),
        edit_intent=intents[0] if intents else None,
        section_hints=extract_section_hints(text),
        beginner_friendly=(
            any(phrase in lower for phrase in BEGINNER_PHRASES) or complexity == "simple"
        ),
    )
    logger.debug("Parsed prompt %r → %s", text, constraints)
    return constraints
