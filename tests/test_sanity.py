"""
Test Suite - Basic Sanity Tests

These tests verify that the package structure is correct
and that basic imports work.

Run with: pytest tests/test_sanity.py -v
"""

import pytest


class TestPackageStructure:
    """Test that all packages can be imported."""

    def test_import_chordcraft(self):
        """Test that the main package can be imported."""
        import chordcraft
        assert hasattr(chordcraft, "__version__")
        assert chordcraft.__version__ == "0.1.0"

    def test_import_data_package(self):
        import chordcraft.data
        assert hasattr(chordcraft.data, "Song")

    def test_import_rules_modules(self):
        """Every rules module imports without circular-import errors."""
        from chordcraft.rules import (  # noqa: F401
            analysis,
            explanation,
            generate_rule_based,
            harmony,
            prompt_parser,
            rewrite,
            voicing,
        )

    def test_import_app_package(self):
        from chordcraft.app import cli, pipeline  # noqa: F401


class TestPackagedData:
    """The voicing presets file ships inside the package."""

    def test_presets_file_exists(self):
        from chordcraft.config import DEFAULT_PRESETS_PATH
        assert DEFAULT_PRESETS_PATH.exists()
        assert DEFAULT_PRESETS_PATH.suffix == ".yaml"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
