"""
chordcraft - Harmony Reasoning Pipeline

Turns free-text musical intent into chord progressions, explains existing
progressions, rewrites selected bars and renders chords into note events.

Subpackages:
    - chordcraft.data: Song document and result schemas
    - chordcraft.rules: Parsing, analysis, generation, rewriting,
                        explanation and voicing rules
    - chordcraft.app: Pipeline facade and command-line interface

Example usage:
    from chordcraft.app.pipeline import generate_from_prompt

    result = generate_from_prompt("happy pop song, simple chords")
    print(result.song.sections[0].bars[0].chords[0].symbol)  # 'C'
"""

__version__ = "0.1.0"
