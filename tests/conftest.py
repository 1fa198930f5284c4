"""Shared fixtures: keys, small songs and selections."""

import pytest

from chordcraft.data.schema import (
    BarPosition,
    KeyContext,
    SelectionRange,
    song_from_chords,
)


def make_selection(start_section: int, start_bar: int, end_section: int, end_bar: int) -> SelectionRange:
    return SelectionRange(
        start=BarPosition(section_index=start_section, bar_index=start_bar),
        end=BarPosition(section_index=end_section, bar_index=end_bar),
    )


@pytest.fixture
def c_major():
    return KeyContext(root="C", mode="major")


@pytest.fixture
def a_minor():
    return KeyContext(root="A", mode="minor")


@pytest.fixture
def pop_song(c_major):
    """Two 4-bar sections in C major: I-V-vi-IV then IV-V-I-I."""
    return song_from_chords(
        [
            ("verse", [["C"], ["G"], ["Am"], ["F"]]),
            ("chorus", [["F"], ["G"], ["C"], ["C"]]),
        ],
        c_major,
        title="Pop Test",
    )


@pytest.fixture
def selection():
    """Factory for SelectionRange objects: selection(0, 0, 0, 3)."""
    return make_selection
