"""Tests for heap chunk primitives and compression."""

import contextvars

import pytest

from symexec import (
    ChunkNotFoundError,
    HeapChunk,
    HeapLocation,
    SymbolicInterpreter,
    SymbolicState,
    UnificationError,
    add_chunk,
    bind,
    combine,
    compress_heap,
    fuse_chunks,
    get_heap,
    nondeterministic_branch,
    put_heap,
    read_heap_value,
    set_default_policy,
    write_heap_value,
)
from symexec.utils import heap_equal


def test_add_chunk_prepends(loc, other_loc):
    state = SymbolicState.of(heap=[HeapChunk(other_loc, 1)])
    ((final, value),) = add_chunk(HeapChunk(loc, 2))(state)
    assert value is None
    assert final.heap == (HeapChunk(loc, 2), HeapChunk(other_loc, 1))


def test_add_chunk_allows_duplicates(empty_state, loc):
    comp = combine(add_chunk(HeapChunk(loc, 1)), add_chunk(HeapChunk(loc, 2)))
    ((final, _),) = comp(empty_state)
    assert len(final.chunks_at(loc)) == 2


class TestWriteHeapValue:
    def test_replaces_every_matching_chunk(self, loc, other_loc):
        state = SymbolicState.of(
            heap=[HeapChunk(loc, 1), HeapChunk(other_loc, 5), HeapChunk(loc, 2)]
        )
        ((final, _),) = write_heap_value(loc, 9)(state)
        assert final.heap == (HeapChunk(loc, 9), HeapChunk(other_loc, 5), HeapChunk(loc, 9))

    def test_absent_location_is_a_no_op(self, loc, other_loc):
        state = SymbolicState.of({"x": 1}, [HeapChunk(other_loc, 5)])
        ((final, value),) = write_heap_value(loc, 9)(state)
        assert value is None
        assert heap_equal(final, state)
        assert final == state


class TestCompressHeap:
    def test_one_chunk_per_location(self, loc, other_loc):
        state = SymbolicState.of(
            heap=[
                HeapChunk(loc, 3),
                HeapChunk(other_loc, 4),
                HeapChunk(loc, 7),
                HeapChunk(loc, 5),
            ]
        )
        ((final, _),) = compress_heap()(state)
        assert len(final.chunks_at(loc)) == 1
        assert final.chunks_at(loc)[0].value == 7
        assert final.chunks_at(other_loc) == (HeapChunk(other_loc, 4),)
        assert len(final.heap) == 2

    def test_single_chunks_pass_through(self, loc, other_loc):
        heap = (HeapChunk(loc, 1), HeapChunk(other_loc, 2))
        assert fuse_chunks(heap) == heap

    def test_explicit_policy(self, loc):
        heap = [HeapChunk(loc, 3), HeapChunk(loc, 7)]
        assert fuse_chunks(heap, policy=min) == (HeapChunk(loc, 3),)

    def test_default_policy_is_pluggable(self, loc):
        set_default_policy(lambda values: ("ite", tuple(values)))
        ((final, _),) = compress_heap()(SymbolicState.of(heap=[HeapChunk(loc, 3), HeapChunk(loc, 7)]))
        assert final.heap == (HeapChunk(loc, ("ite", (3, 7))),)

    def test_policy_sees_all_values(self, loc):
        seen = []

        def policy(values):
            seen.append(list(values))
            return sum(values)

        state = SymbolicState.of(heap=[HeapChunk(loc, 1), HeapChunk(loc, 2), HeapChunk(loc, 3)])
        ((final, _),) = compress_heap(policy)(state)
        assert seen == [[1, 2, 3]]
        assert final.heap == (HeapChunk(loc, 6),)

    def test_set_default_policy_rejects_non_callable(self):
        with pytest.raises(TypeError):
            set_default_policy(42)  # type: ignore[arg-type]

    def test_default_policy_is_context_local(self, loc):
        heap = [HeapChunk(loc, 3), HeapChunk(loc, 7)]

        def fuse_with_min():
            set_default_policy(min)
            return fuse_chunks(heap)

        assert contextvars.copy_context().run(fuse_with_min) == (HeapChunk(loc, 3),)
        assert fuse_chunks(heap) == (HeapChunk(loc, 7),)


class TestReadHeapValue:
    def test_single_chunk(self, loc):
        state = SymbolicState.of(heap=[HeapChunk(loc, 4)])
        assert read_heap_value(loc)(state) == [(state, 4)]

    def test_duplicates_converge_to_maximum(self, loc):
        state = SymbolicState.of(heap=[HeapChunk(loc, 3), HeapChunk(loc, 7)])
        ((final, value),) = read_heap_value(loc)(state)
        assert value == 7
        assert final.heap == (HeapChunk(loc, 7),)

    def test_compression_leaves_other_locations(self, loc, other_loc):
        state = SymbolicState.of(
            heap=[HeapChunk(loc, 3), HeapChunk(other_loc, 1), HeapChunk(loc, 7)]
        )
        ((final, _),) = read_heap_value(loc)(state)
        assert heap_equal(final, SymbolicState.of(heap=[HeapChunk(loc, 7), HeapChunk(other_loc, 1)]))

    def test_missing_chunk_yields_no_branches(self, empty_state, loc):
        assert read_heap_value(loc)(empty_state) == []

    def test_missing_chunk_error_is_recorded(self, empty_state, loc):
        result = SymbolicInterpreter().run(read_heap_value(loc), empty_state)
        (failure,) = result.failures
        assert isinstance(failure.error, ChunkNotFoundError)
        assert failure.error.location == loc
        assert failure.state == empty_state

    def test_missing_chunk_keeps_sibling_branches(self, empty_state, loc):
        comp = bind(
            nondeterministic_branch(),
            lambda b: combine(add_chunk(HeapChunk(loc, 1)), read_heap_value(loc))
            if b
            else read_heap_value(loc),
        )
        ((final, value),) = comp(empty_state)
        assert value == 1
        assert final.heap == (HeapChunk(loc, 1),)

    def test_non_reducing_compression_raises(self, loc, monkeypatch):
        from symexec import primitives

        original = primitives.fuse_chunks

        def leaky(heap, policy=None):
            return original(heap, policy) + (HeapChunk(loc, 0),)

        monkeypatch.setattr(primitives, "fuse_chunks", leaky)
        state = SymbolicState.of(heap=[HeapChunk(loc, 3), HeapChunk(loc, 7)])
        with pytest.raises(UnificationError) as excinfo:
            read_heap_value(loc)(state)
        assert excinfo.value.location == loc
        assert excinfo.value.remaining == 2
        assert excinfo.value.attempts == 1

    def test_heap_accessors(self, empty_state, loc):
        comp = combine(put_heap([HeapChunk(loc, 1)]), get_heap())
        ((final, heap),) = comp(empty_state)
        assert heap == (HeapChunk(loc, 1),)
        assert final.heap == heap


def test_heap_location_reference_can_be_any_term():
    location = HeapLocation(reference=("sym", 1), field="next")
    state = SymbolicState.of(heap=[HeapChunk(location, "v")])
    assert read_heap_value(location)(state)[0].value == "v"
