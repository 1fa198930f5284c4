"""
Voicing Module - Chord Symbols to Playback Note Events

This module turns symbolic chords into MIDI-style note events:
    - Parse a chord symbol into a root pitch class and an interval set
    - Stack the intervals into MIDI notes (with inversion and density)
    - Lay the notes out in time with an arrangement pattern
      (block, arpeggio, pad, strum, rhythmic)
    - Optionally humanize timing and velocity with a seeded RNG

MIDI numbering: C4 = 60, so a root in octave N sits at 12 * (N + 1) + pc.

With humanize_amount == 0 every function here is fully deterministic.
"""

from typing import List, NamedTuple, Sequence, Tuple
import logging

import numpy as np

from chordcraft.data.schema import (
    ArrangementResult,
    Bar,
    ChordEvent,
    PlaybackNoteEvent,
    VoicingOptions,
)
from chordcraft.rules.harmony import NOTE_SEMITONES

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

MAJOR_TRIAD = (0, 4, 7)

# Exact quality texts; checked after the prefix rules below
QUALITY_INTERVALS = {
    "": MAJOR_TRIAD, "maj": MAJOR_TRIAD, "M": MAJOR_TRIAD,
    "m7b5": (0, 3, 6, 10), "ø7": (0, 3, 6, 10), "ø": (0, 3, 6, 10),
    "-7": (0, 3, 7, 10),
    "m": (0, 3, 7), "min": (0, 3, 7), "-": (0, 3, 7),
    "dim7": (0, 3, 6, 9), "°7": (0, 3, 6, 9),
    "dim": (0, 3, 6), "°": (0, 3, 6),
    "aug": (0, 4, 8), "+": (0, 4, 8),
    "sus2": (0, 2, 7),
    "sus4": (0, 5, 7),
    "maj7": (0, 4, 7, 11), "M7": (0, 4, 7, 11), "Δ7": (0, 4, 7, 11), "Δ": (0, 4, 7, 11),
    "maj9": (0, 4, 7, 11, 14), "M9": (0, 4, 7, 11, 14),
    "add9": (0, 4, 7, 14),
    "9": (0, 4, 7, 10, 14),
    "7": (0, 4, 7, 10),
    "6": (0, 4, 7, 9),
}

# Minor-family prefixes, longest forms first
QUALITY_PREFIXES = (
    (("m7", "min7"), (0, 3, 7, 10)),
    (("m9", "min9"), (0, 3, 7, 10, 14)),
    (("m6", "min6"), (0, 3, 7, 9)),
)

DENSITY_NOTE_LIMITS = {"simple": 3, "medium": 4, "rich": None}

BLOCK_VELOCITY = 80
ARPEGGIO_VELOCITY_RANGE = (65, 25)        # base, spread
PAD_VELOCITY = (72, 8, 45)                # root, drop per note, floor
STRUM_OFFSET_BEATS = 0.05
STRUM_VELOCITY_RANGE = (75, 10)           # base, jitter
RHYTHMIC_OFFSETS = (0, 1, 1.5, 2.5, 3)
RHYTHMIC_NOTE_BEATS = 0.5
RHYTHMIC_VELOCITY = (82, 68)              # downbeat, other hits

MAX_TIMING_JITTER = 0.06
MAX_VELOCITY_JITTER = 12

CHORD_SEED_STEP = 100


# =============================================================================
# CHORD PARSING
# =============================================================================

class ParsedChord(NamedTuple):
    """Root pitch class (0-11) and semitone offsets from the root."""
    root: int
    intervals: Tuple[int, ...]


def quality_to_intervals(quality: str) -> Tuple[int, ...]:
    """
    Interval set for a quality text; unknown text gives a major triad.

    Half-diminished is matched exactly before the 'm7' prefix, so
    'm7b5' keeps its flat fifth.
    """
    q = quality.strip()
    if q in ("m7b5", "ø7", "ø"):
        return QUALITY_INTERVALS[q]
    for prefixes, intervals in QUALITY_PREFIXES:
        if q.startswith(prefixes):
            return intervals
    return QUALITY_INTERVALS.get(q, MAJOR_TRIAD)


def parse_chord_symbol(symbol: str) -> ParsedChord:
    """
    Parse a chord symbol such as "Cmaj7", "F#m7", "Bb9" or "G/B".

    The slash bass is ignored. An empty symbol or one that does not start
    with a note name gives C major.

    Example:
        parse_chord_symbol("Am7") → ParsedChord(root=9, intervals=(0, 3, 7, 10))
    """
    for size in (2, 1):
        root_name = symbol[:size]
        if root_name in NOTE_SEMITONES:
            quality = symbol[size:].split("/", 1)[0]
            return ParsedChord(NOTE_SEMITONES[root_name], quality_to_intervals(quality))
    return ParsedChord(0, MAJOR_TRIAD)


def chord_symbol_to_midi_notes(
    symbol: str,
    octave_base: int = 4,
    density: str = "medium",
    inversion_preference: str = "root"
) -> List[int]:
    """
    MIDI note numbers for a chord symbol.

    Inversions move the lowest one (first) or two (second) notes up an
    octave; 'auto' currently voices in root position. Density keeps the
    first 3 (simple), 4 (medium) or all (rich) notes.

    Example:
        chord_symbol_to_midi_notes("C") → [60, 64, 67]
    """
    parsed = parse_chord_symbol(symbol)
    base = 12 * (octave_base + 1) + parsed.root
    notes = [base + interval for interval in parsed.intervals]

    if inversion_preference == "first" and len(notes) >= 2:
        notes = notes[1:] + [notes[0] + 12]
    elif inversion_preference == "second" and len(notes) >= 3:
        notes = notes[2:] + [notes[0] + 12, notes[1] + 12]

    limit = DENSITY_NOTE_LIMITS.get(density)
    return notes if limit is None else notes[:limit]


# =============================================================================
# ARRANGEMENT PATTERNS
# =============================================================================

def _event(midi_note: int, start: float, duration: float, velocity: int) -> PlaybackNoteEvent:
    return PlaybackNoteEvent(
        midi_note=midi_note,
        start_beat=start,
        duration_beats=duration,
        velocity=velocity,
    )


def apply_block_pattern(notes: Sequence[int], chord: ChordEvent) -> List[PlaybackNoteEvent]:
    """All notes together for the whole chord."""
    return [_event(n, chord.beat, chord.duration_beats, BLOCK_VELOCITY) for n in notes]


def apply_arpeggio_pattern(notes: Sequence[int], chord: ChordEvent) -> List[PlaybackNoteEvent]:
    """Notes one after another in equal subdivisions, getting louder upwards."""
    if not notes:
        return []
    base, spread = ARPEGGIO_VELOCITY_RANGE
    step = chord.duration_beats / len(notes)
    last = max(len(notes) - 1, 1)
    return [
        _event(n, chord.beat + i * step, step, base + int(i / last * spread + 0.5))
        for i, n in enumerate(notes)
    ]


def apply_pad_pattern(notes: Sequence[int], chord: ChordEvent) -> List[PlaybackNoteEvent]:
    root, drop, floor = PAD_VELOCITY
    return [
        _event(n, chord.beat, chord.duration_beats, max(floor, root - i * drop))
        for i, n in enumerate(notes)
    ]


def apply_strum_pattern(notes: Sequence[int], chord: ChordEvent) -> List[PlaybackNoteEvent]:
    """
    Guitar-like strum: each note starts a little later and is shortened to
    end with the chord. Velocity jitter is seeded by the note's pitch.
    """
    base, jitter = STRUM_VELOCITY_RANGE
    events = []
    for i, n in enumerate(notes):
        offset = i * STRUM_OFFSET_BEATS
        velocity = base + round(np.random.default_rng(n).random() * jitter)
        events.append(_event(n, chord.beat + offset, chord.duration_beats - offset, velocity))
    return events


def apply_rhythmic_pattern(notes: Sequence[int], chord: ChordEvent) -> List[PlaybackNoteEvent]:
    """Repeated short hits at fixed offsets inside the chord, accented on the downbeat."""
    accent, normal = RHYTHMIC_VELOCITY
    return [
        _event(n, chord.beat + offset, RHYTHMIC_NOTE_BEATS, accent if offset == 0 else normal)
        for offset in RHYTHMIC_OFFSETS if offset < chord.duration_beats
        for n in notes
    ]


PATTERN_FUNCTIONS = {
    "block": apply_block_pattern,
    "arpeggio": apply_arpeggio_pattern,
    "pad": apply_pad_pattern,
    "strum": apply_strum_pattern,
    "rhythmic": apply_rhythmic_pattern,
}


# =============================================================================
# HUMANIZATION
# =============================================================================

def humanize_events(
    events: List[PlaybackNoteEvent],
    amount: float,
    seed: int = 0
) -> List[PlaybackNoteEvent]:
    """
    Add seeded timing and velocity drift to note events.

    Timing moves by up to ±0.06 * amount beats and velocity by up to
    ±12 * amount, clamped to [1, 127]. The same seed always gives the same
    result; amount <= 0 returns the events unchanged.
    """
    if amount <= 0 or not events:
        return events

    rng = np.random.default_rng(seed % 2 ** 32)
    drift = rng.uniform(-1.0, 1.0, size=(len(events), 2))
    timing = drift[:, 0] * MAX_TIMING_JITTER * amount
    velocity = drift[:, 1] * MAX_VELOCITY_JITTER * amount

    return [
        event.model_copy(update={
            "start_beat": event.start_beat + float(timing[i]),
            "velocity": int(np.clip(round(event.velocity + float(velocity[i])), 1, 127)),
        })
        for i, event in enumerate(events)
    ]


# =============================================================================
# MAIN API
# =============================================================================

def generate_chord_voicing(
    chord: ChordEvent,
    options: VoicingOptions,
    humanize_seed: int = 0
) -> List[PlaybackNoteEvent]:
    """Note events for one chord, using the options' pattern and density."""
    notes = chord_symbol_to_midi_notes(
        chord.symbol,
        options.octave_base,
        options.density,
        options.inversion_preference,
    )
    notes = [n for n in notes if 0 <= n <= 127]  # top octaves can overflow MIDI
    pattern = PATTERN_FUNCTIONS.get(options.pattern, apply_block_pattern)
    return humanize_events(pattern(notes, chord), options.humanize_amount, humanize_seed)


def bar_seed(bar_id: str) -> int:
    """Stable humanize seed for a bar: the sum of its id's character codes."""
    return sum(ord(ch) for ch in bar_id)


def generate_arrangement(bar: Bar, options: VoicingOptions) -> ArrangementResult:
    """
    Note events for every chord in a bar.

    The humanize seed comes from the bar id, so re-rendering the same bar
    gives the same notes.
    """
    seed = bar_seed(bar.id)
    notes = []
    for i, chord in enumerate(bar.chords):
        notes.extend(generate_chord_voicing(chord, options, seed + i * CHORD_SEED_STEP))
    logger.debug("Arranged bar %s: %d notes (%s)", bar.id, len(notes), options.pattern)
    return ArrangementResult(
        bar_id=bar.id,
        notes=notes,
        pattern=options.pattern,
        density=options.density,
    )
