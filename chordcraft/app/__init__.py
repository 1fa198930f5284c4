"""
App Subpackage

This package contains the user-facing layer:
    - pipeline.py: One function per user action (generate, edit, explain,
                   arrange), wiring the prompt parser to the harmony rules
    - cli.py: The `chordcraft` command-line interface

Usage options:
    - CLI: chordcraft generate "dreamy jazz ballad"
    - Python: from chordcraft.app.pipeline import generate_from_prompt
"""
