"""Tests for formatting and comparison helpers."""

from symexec import Branch, HeapChunk, SymbolicState
from symexec.utils import format_branches, format_state, heap_equal, states_equivalent


def test_heap_equal_ignores_order(loc, other_loc):
    a = SymbolicState.of(heap=[HeapChunk(loc, 1), HeapChunk(other_loc, 2)])
    b = SymbolicState.of(heap=[HeapChunk(other_loc, 2), HeapChunk(loc, 1)])
    assert a != b
    assert heap_equal(a, b)
    assert states_equivalent(a, b)


def test_heap_equal_counts_duplicates(loc):
    once = SymbolicState.of(heap=[HeapChunk(loc, 1)])
    twice = SymbolicState.of(heap=[HeapChunk(loc, 1), HeapChunk(loc, 1)])
    assert not heap_equal(once, twice)


def test_states_equivalent_compares_locals():
    assert not states_equivalent(SymbolicState.of({"x": 1}), SymbolicState.of({"x": 2}))


def test_format_state(loc):
    text = format_state(SymbolicState.of({"x": 1}, [HeapChunk(loc, 4)]))
    assert text == "locals:\n  x = 1\nheap:\n  100.f -> 4"


def test_format_empty_state(empty_state):
    assert format_state(empty_state) == "locals:\n  (empty)\nheap:\n  (empty)"


def test_format_branches(empty_state):
    text = format_branches([Branch(empty_state, True), Branch(empty_state, "x" * 200)])
    assert text.startswith("branch 0: value=True\n")
    assert "branch 1: value='xxx" in text
    assert "..." in text


def test_format_no_branches():
    assert format_branches([]) == "no feasible branches"
