"""Tests for the scrollback buffer and the viewport grid."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from blockterm.terminal.grid import TextGrid, fit_lines
from blockterm.terminal.scrollback import DEFAULT_CAPACITY, ScrollbackBuffer


class TestScrollbackBuffer:
    def test_default_capacity(self):
        assert ScrollbackBuffer().capacity == DEFAULT_CAPACITY == 20_000

    def test_rejects_non_positive_capacity(self):
        with pytest.raises(ValueError):
            ScrollbackBuffer(0)

    def test_evicts_oldest_first(self):
        buffer = ScrollbackBuffer(3)
        buffer.extend(["a", "b", "c", "d"])
        assert list(buffer) == ["b", "c", "d"]
        assert len(buffer) == 3

    def test_tail_returns_most_recent_in_order(self):
        buffer = ScrollbackBuffer(10)
        buffer.extend(["1", "2", "3", "4"])
        assert buffer.tail(2) == ["3", "4"]
        assert buffer.tail(100) == ["1", "2", "3", "4"]
        assert buffer.tail(0) == []

    def test_tail_does_not_mutate(self):
        buffer = ScrollbackBuffer(5)
        buffer.extend(["x", "y"])
        buffer.tail(1)
        assert list(buffer) == ["x", "y"]

    def test_clear(self):
        buffer = ScrollbackBuffer(5)
        buffer.push_line("x")
        buffer.clear()
        assert len(buffer) == 0

    @given(
        capacity=st.integers(min_value=1, max_value=50),
        lines=st.lists(st.text(max_size=5), max_size=200),
    )
    def test_retains_exactly_last_capacity_lines(self, capacity, lines):
        buffer = ScrollbackBuffer(capacity)
        for line in lines:
            buffer.push_line(line)
        assert list(buffer) == lines[-capacity:]
        assert len(buffer) <= capacity


class TestTextGrid:
    def test_default_size(self):
        grid = TextGrid()
        assert (grid.width, grid.height) == (140, 120)

    def test_keeps_last_height_lines(self):
        grid = TextGrid(width=10, height=2)
        assert grid.set_lines(["one", "two", "three"]) == ["two", "three"]

    def test_fewer_lines_than_height(self):
        grid = TextGrid(width=10, height=5)
        assert grid.set_lines(["only"]) == ["only"]

    def test_truncates_instead_of_wrapping(self):
        grid = TextGrid(width=4, height=3)
        assert grid.set_lines(["abcdefgh"]) == ["abcd"]

    def test_truncation_counts_characters_not_bytes(self):
        assert fit_lines(["éééé"], 2, 1) == ["éé"]

    def test_recomputes_from_scratch(self):
        grid = TextGrid(width=10, height=2)
        grid.set_lines(["a", "b", "c"])
        assert grid.set_lines(["z"]) == ["z"]
        assert grid.lines == ["z"]

    def test_resize_applies_on_next_set_lines(self):
        grid = TextGrid(width=10, height=3)
        lines = ["first line", "second line", "third line"]
        grid.set_lines(lines)
        grid.resize(5, 1)
        assert grid.set_lines(lines) == ["third"]

    def test_zero_size_view_is_empty(self):
        assert fit_lines(["a"], 0, 5) == []
        assert fit_lines(["a"], 5, 0) == []
