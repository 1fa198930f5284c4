"""
Rules Subpackage

This package contains the deterministic harmony engine:
    - harmony.py: Pitch-class math shared by every other module
                  (note spelling, modes, degree → chord symbol)
    - prompt_parser.py: Keyword extraction from prompts
    - analysis.py: Roman numeral analysis and cadence detection
    - generate_rule_based.py: Song and section generation from constraints
    - rewrite.py: Alternatives, diff and apply for a bar selection
    - explanation.py: Plain-language explanation of a selection
    - voicing.py: Chord symbols → MIDI note events

Nothing is imported here: data.schema depends on prompt_parser, so importing
the generator from this package would be circular.
"""

"""
INPUT:  "dreamy jazz ballad, make the chorus lift"
                              │
                              ▼
                    ┌─────────────────┐
                    │  prompt_parser  │ → styles=(jazz, dreamy), complexity=jazzy
                    └─────────────────┘
                              │
                              ▼
                    ┌─────────────────────┐
                    │ generate_rule_based │ → Song in F lydian, 3 variants
                    └─────────────────────┘
                              │
                              ▼
                    ┌─────────────────┐
                    │    analysis     │ → numerals, cadences, rationale tags
                    └─────────────────┘
"""
