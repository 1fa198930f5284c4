"""
Test Package

Contains unit tests for all modules.
Run with: pytest tests/ -v

Test files follow the pattern:
    test_<module_name>.py

Example:
    tests/test_schema.py      - Tests for chordcraft/data/schema.py
    tests/test_harmony.py     - Tests for chordcraft/rules/harmony.py
    tests/test_voicing.py     - Tests for chordcraft/rules/voicing.py

Shared fixtures live in conftest.py.
"""
