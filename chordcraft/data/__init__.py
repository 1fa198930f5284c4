"""
Data Subpackage

    - schema.py: Pydantic models for the song document (sections → bars →
                 chord events) and for every pipeline result
    - voicing_presets.yaml: Named VoicingOptions presets
"""

from chordcraft.data.schema import Song, Section, Bar, ChordEvent, KeyContext, SelectionRange
