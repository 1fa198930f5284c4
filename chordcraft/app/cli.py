"""
Command Line Interface for chordcraft
=====================================

Generate, edit, explain and voice chord progressions from the terminal.

Usage Examples:
    # Generate a song and print a chord sheet
    chordcraft generate "dreamy jazz ballad"

    # Save the generated song for later edits
    chordcraft generate "upbeat pop song" --out song.json

    # Rewrite bars 1-4 of the second section
    chordcraft edit song.json "add tension" --start 1:0 --end 1:3 --apply B --out song.json

    # Explain the first section's opening phrase
    chordcraft explain song.json --start 0:0 --end 0:3

    # Note events for a few chords
    chordcraft voice C Am7 F G7 --preset enhanced --json

Positions are written SECTION:BAR, both 0-indexed.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from chordcraft import __version__
from chordcraft.app.pipeline import (
    edit_selection,
    explain_song_selection,
    generate_from_prompt,
)
from chordcraft.config import get_voicing_preset, settings
from chordcraft.data.schema import (
    BarPosition,
    SelectionRange,
    Song,
    VALID_DENSITIES,
    VALID_PATTERNS,
    VoicingOptions,
    create_chord_event,
)
from chordcraft.logger_config import setup_logging
from chordcraft.rules.generate_rule_based import format_as_chord_sheet
from chordcraft.rules.rewrite import apply_alternative_to_bars
from chordcraft.rules.voicing import generate_chord_voicing


# =============================================================================
# PART 1: ARGUMENT PARSER SETUP
# =============================================================================

def parse_position(text: str) -> BarPosition:
    """Parse 'SECTION:BAR' into a BarPosition (argparse type)."""
    try:
        section, bar = text.split(":", 1)
        return BarPosition(section_index=int(section), bar_index=int(bar))
    except (ValueError, ValidationError):
        raise argparse.ArgumentTypeError(f"expected SECTION:BAR with non-negative integers, got '{text}'")


def _add_range_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--start", type=parse_position, required=True, help="First bar, SECTION:BAR")
    parser.add_argument("--end", type=parse_position, required=True, help="Last bar, SECTION:BAR")


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the command-line argument parser.

    Returns:
        Configured ArgumentParser with generate / explain / edit / voice
    """
    parser = argparse.ArgumentParser(
        prog="chordcraft",
        description="Prompt-driven chord progression generation, editing and explanation.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show detailed processing information"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # ─────────────────────────────────────────────────────────────────────────
    # generate
    # ─────────────────────────────────────────────────────────────────────────
    gen = subparsers.add_parser("generate", help="Generate a full song from a prompt")
    gen.add_argument("prompt", help="Natural language description of the song")
    gen.add_argument("--title", help="Song title (default: derived from the prompt)")
    gen.add_argument("--json", action="store_true", help="Print the full result as JSON")
    gen.add_argument("--out", type=Path, help="Save the primary song as JSON")

    # ─────────────────────────────────────────────────────────────────────────
    # explain
    # ─────────────────────────────────────────────────────────────────────────
    exp = subparsers.add_parser("explain", help="Explain a selection of bars")
    exp.add_argument("song_file", type=Path, help="Song JSON file")
    _add_range_arguments(exp)
    exp.add_argument("--prompt", help="Optional prompt used for the style-fit comment")
    exp.add_argument("--json", action="store_true", help="Print the result as JSON")

    # ─────────────────────────────────────────────────────────────────────────
    # edit
    # ─────────────────────────────────────────────────────────────────────────
    edit = subparsers.add_parser("edit", help="Rewrite a selection of bars")
    edit.add_argument("song_file", type=Path, help="Song JSON file")
    edit.add_argument("prompt", help="Edit instruction, e.g. 'add tension'")
    _add_range_arguments(edit)
    edit.add_argument("--apply", choices=["A", "B", "C"], help="Apply this alternative")
    edit.add_argument("--out", type=Path, help="Where to write the updated song (with --apply)")
    edit.add_argument("--json", action="store_true", help="Print the result as JSON")

    # ─────────────────────────────────────────────────────────────────────────
    # voice
    # ─────────────────────────────────────────────────────────────────────────
    voice = subparsers.add_parser("voice", help="Print note events for chord symbols")
    voice.add_argument("symbols", nargs="+", help="Chord symbols, one per bar")
    voice.add_argument("--preset", default=settings.default_preset, help="Voicing preset name")
    voice.add_argument("--pattern", choices=VALID_PATTERNS, help="Override the preset pattern")
    voice.add_argument("--density", choices=VALID_DENSITIES, help="Override the preset density")
    voice.add_argument("--octave", type=int, help="Octave of the chord root (0-8)")
    voice.add_argument("--humanize", type=float, help="Humanize amount (0-1)")
    voice.add_argument("--json", action="store_true", help="Print note events as JSON")

    return parser


# =============================================================================
# PART 2: FILE HELPERS
# =============================================================================

def load_song(path: Path) -> Song:
    """Read and validate a Song JSON file."""
    return Song.model_validate_json(path.read_text(encoding="utf-8"))


def save_song(song: Song, path: Path) -> None:
    path.write_text(song.model_dump_json(indent=2), encoding="utf-8")


# =============================================================================
# PART 3: COMMANDS
# =============================================================================

def run_generate(args: argparse.Namespace) -> int:
    result = generate_from_prompt(args.prompt, title=args.title)

    if args.json:
        print(result.model_dump_json(indent=2))
    else:
        print(format_as_chord_sheet(result.song))
        for analysis, section in zip(result.section_analyses, result.song.sections):
            if analysis.rationale_tags:
                print(f"  {section.label}: {', '.join(analysis.rationale_tags)}")
        for alternative in result.alternatives:
            print(f"  Alternative {alternative.label}: {', '.join(alternative.metadata_tags)}")

    if args.out:
        save_song(result.song, args.out)
        print(f"Saved song to {args.out}", file=sys.stderr)
    return 0


def run_explain(args: argparse.Namespace) -> int:
    song = load_song(args.song_file)
    selection = SelectionRange(start=args.start, end=args.end)
    result = explain_song_selection(song, selection, args.prompt)

    if args.json:
        print(result.model_dump_json(indent=2))
        return 0

    print(result.summary)
    print()
    for item in result.breakdown:
        line = f"  {item.symbol:<8} {item.roman_numeral:<7} {item.detail}"
        if item.connection_to_next:
            line += f" [{item.connection_to_next}]"
        print(line)
    for extra in (result.cadence_explanation, result.style_fit):
        if extra:
            print()
            print(extra)
    if result.substitutions:
        print()
        print("Substitutions:")
        for sub in result.substitutions:
            print(f"  ({sub.tag}) {sub.substitute_symbol}: {sub.rationale}")
    for notice in result.uncertainty_notices:
        print(f"Note: {notice}")
    return 0


def run_edit(args: argparse.Namespace) -> int:
    song = load_song(args.song_file)
    selection = SelectionRange(start=args.start, end=args.end)
    result = edit_selection(args.prompt, song, selection)

    if args.json:
        print(result.model_dump_json(indent=2))
    else:
        for alternative in result.alternatives:
            symbols = " | ".join(" ".join(c.symbol for c in bar.chords) for bar in alternative.bars)
            print(f"{alternative.label}: | {symbols} |  ({', '.join(alternative.metadata_tags)})")
        print(f"{len(result.diff)} bar(s) change with alternative A")
        for diff in result.diff:
            before = " ".join(c.symbol for c in diff.before) or "-"
            after = " ".join(c.symbol for c in diff.after) or "-"
            print(f"  {diff.section_index}:{diff.bar_index}  {before} → {after}")

    if args.apply:
        chosen = next(a for a in result.alternatives if a.label == args.apply)
        updated = apply_alternative_to_bars(song, selection, chosen.bars)
        out = args.out or args.song_file
        save_song(updated, out)
        print(f"Applied alternative {args.apply} to {out}", file=sys.stderr)
    return 0


def run_voice(args: argparse.Namespace) -> int:
    options = get_voicing_preset(args.preset)
    overrides = {
        "pattern": args.pattern,
        "density": args.density,
        "octave_base": args.octave,
        "humanize_amount": args.humanize,
    }
    options = VoicingOptions.model_validate({
        **options.model_dump(),
        **{k: v for k, v in overrides.items() if v is not None},
    })

    for i, symbol in enumerate(args.symbols):
        chord = create_chord_event(1, symbol, 4)
        events = generate_chord_voicing(chord, options, humanize_seed=i)
        if args.json:
            print(json.dumps({"symbol": symbol, "notes": [e.model_dump() for e in events]}))
        else:
            notes = ", ".join(
                f"{e.midi_note}@{e.start_beat:.2f} v{e.velocity}" for e in events
            )
            print(f"{symbol:<8} {notes}")
    return 0


COMMANDS = {
    "generate": run_generate,
    "explain": run_explain,
    "edit": run_edit,
    "voice": run_voice,
}


# =============================================================================
# PART 4: MAIN ENTRY POINT
# =============================================================================

def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Returns the process exit status: 0 on success, 1 when an input file is
    missing or does not hold a valid song, or an unknown preset is named.
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    setup_logging("DEBUG" if args.verbose else settings.log_level)

    try:
        return COMMANDS[args.command](args)
    except (OSError, ValidationError, ValueError, KeyError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
