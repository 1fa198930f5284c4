"""
Application configuration.

Settings come from CHORDCRAFT_* environment variables. Voicing presets are
named VoicingOptions stored in a YAML file shipped with the package
(data/voicing_presets.yaml); a different file can be pointed to with
CHORDCRAFT_PRESETS_PATH.
"""

from pathlib import Path
from typing import Dict, Optional, Union

import yaml
from pydantic_settings import BaseSettings

from chordcraft.data.schema import VoicingOptions

DEFAULT_PRESETS_PATH = Path(__file__).parent / "data" / "voicing_presets.yaml"


class Settings(BaseSettings):
    """App settings with env var overrides."""

    # Logging
    log_level: str = "WARNING"

    # Voicing
    default_preset: str = "sketch"
    presets_path: Optional[Path] = None
    default_octave: int = 4

    model_config = {"env_prefix": "CHORDCRAFT_"}


settings = Settings()


def load_voicing_presets(path: Optional[Union[str, Path]] = None) -> Dict[str, VoicingOptions]:
    """
    Load named voicing presets from YAML.

    The file maps preset names to VoicingOptions fields; a preset without
    octave_base uses settings.default_octave:

        sketch:
          density: simple
          pattern: block

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the top level is not a mapping
        ValidationError: If a preset has invalid options
    """
    preset_file = Path(path) if path is not None else (settings.presets_path or DEFAULT_PRESETS_PATH)
    with open(preset_file, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Voicing presets in {preset_file} must be a mapping of name → options")
    return {
        name: VoicingOptions(**{"octave_base": settings.default_octave, **(options or {})})
        for name, options in raw.items()
    }


def get_voicing_preset(name: str, path: Optional[Union[str, Path]] = None) -> VoicingOptions:
    """
    Look up one preset by name.

    Raises:
        KeyError: If no preset has that name (the message lists the known ones)
    """
    presets = load_voicing_presets(path)
    if name not in presets:
        raise KeyError(f"Unknown voicing preset '{name}'. Available: {sorted(presets)}")
    return presets[name]
