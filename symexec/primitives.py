"""
State and branching primitives.

These work on ``SymbolicState`` directly instead of going through the
combinators: each one inspects the incoming state and returns the branches
it continues with. From the caller's side they look like side effects on
the store or heap, but the new state is threaded through the branch list so
their effect stays predictable.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Iterable, Mapping
from typing import Any, NamedTuple

from symexec.errors import ChunkNotFoundError, UnboundVariableError, UnificationError
from symexec.program import SymComp, delimited_failures
from symexec.types import Branch, HeapChunk, HeapLocation, SymbolicState, Term
from symexec.unification import UnificationPolicy, get_default_policy

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Variable store
# ---------------------------------------------------------------------------


def read_var(name: str) -> SymComp[Term]:
    def read(state: SymbolicState) -> list[tuple[SymbolicState, Term]]:
        try:
            value = state.locals[name]
        except KeyError:
            raise UnboundVariableError(name) from None
        return [(state, value)]

    return SymComp(read, name=f"read_var({name})")


def store_var(name: str, value: Term) -> SymComp[None]:
    def store(state: SymbolicState) -> list[tuple[SymbolicState, None]]:
        return [(state.bind_local(name, value), None)]

    return SymComp(store, name=f"store_var({name})")


def get_locals() -> SymComp[Mapping[str, Term]]:
    return SymComp(lambda state: [(state, state.locals)], name="get_locals")


def put_locals(store: Mapping[str, Term]) -> SymComp[None]:
    """Replace the whole variable store."""

    return SymComp(lambda state: [(state.with_locals(store), None)], name="put_locals")


# ---------------------------------------------------------------------------
# Heap
# ---------------------------------------------------------------------------


def get_heap() -> SymComp[tuple[HeapChunk, ...]]:
    return SymComp(lambda state: [(state, state.heap)], name="get_heap")


def put_heap(chunks: Iterable[HeapChunk]) -> SymComp[None]:
    """Replace the whole heap."""

    fixed = tuple(chunks)
    return SymComp(lambda state: [(state.with_heap(fixed), None)], name="put_heap")


def add_chunk(chunk: HeapChunk) -> SymComp[None]:
    def add(state: SymbolicState) -> list[tuple[SymbolicState, None]]:
        return [(state.with_heap((chunk,) + state.heap), None)]

    return SymComp(add, name="add_chunk")


def write_heap_value(location: HeapLocation, new_value: Term) -> SymComp[None]:
    """Overwrite the value of every chunk at ``location``.

    Only the value changes; a location with no chunk leaves the heap as is.
    """

    def write(state: SymbolicState) -> list[tuple[SymbolicState, None]]:
        heap = tuple(
            chunk.with_value(new_value) if chunk.location == location else chunk
            for chunk in state.heap
        )
        return [(state.with_heap(heap), None)]

    return SymComp(write, name=f"write_heap_value({location!r})")


def fuse_chunks(
    heap: Iterable[HeapChunk], policy: UnificationPolicy | None = None
) -> tuple[HeapChunk, ...]:
    """Collapse chunks sharing a location into one chunk per location.

    Locations keep the order of their first occurrence; a location with a
    single chunk keeps that chunk as is.
    """

    unify = policy or get_default_policy()
    groups: dict[HeapLocation, list[HeapChunk]] = {}
    for chunk in heap:
        groups.setdefault(chunk.location, []).append(chunk)

    fused: list[HeapChunk] = []
    for location, chunks in groups.items():
        if len(chunks) == 1:
            fused.append(chunks[0])
            continue
        value = unify([chunk.value for chunk in chunks])
        logger.debug("Unified %d chunks at %r into %r", len(chunks), location, value)
        fused.append(HeapChunk(location=location, value=value))
    return tuple(fused)


def compress_heap(policy: UnificationPolicy | None = None) -> SymComp[None]:
    def compress(state: SymbolicState) -> list[tuple[SymbolicState, None]]:
        return [(state.with_heap(fuse_chunks(state.heap, policy)), None)]

    return SymComp(compress, name="compress_heap")


def read_heap_value(
    location: HeapLocation,
    policy: UnificationPolicy | None = None,
    *,
    _attempt: int = 0,
) -> SymComp[Term]:
    """
    Read the value held at ``location``.

    No chunk fails the branch with ``ChunkNotFoundError``. Several chunks
    trigger one heap compression and a single retry on the compressed state;
    if the policy still leaves more than one chunk, ``UnificationError`` is
    raised.
    """

    def read(state: SymbolicState) -> list[Branch]:
        matching = state.chunks_at(location)
        if not matching:
            raise ChunkNotFoundError(location)
        if len(matching) == 1:
            return [Branch(state, matching[0].value)]

        if _attempt >= 1:
            raise UnificationError(location, len(matching), _attempt)
        logger.debug(
            "Found %d chunks at %r, compressing heap before retrying", len(matching), location
        )
        retry = compress_heap(policy).then(
            read_heap_value(location, policy, _attempt=_attempt + 1)
        )
        return retry(state)

    return SymComp(read, name=f"read_heap_value({location!r})")


# ---------------------------------------------------------------------------
# Branching
# ---------------------------------------------------------------------------


def nondeterministic_branch() -> SymComp[bool]:
    """Fork like ``fork()``: continue once with ``True`` and once with ``False``."""

    return SymComp(lambda state: [(state, True), (state, False)], name="nondeterministic_branch")


class DelimitedBranches(NamedTuple):
    """Branch lists of two computations run against the same state."""

    left: list[Branch]
    right: list[Branch]

    def pairs(self) -> list[tuple[Branch, Branch]]:
        """Every left branch paired with every right branch."""

        return list(itertools.product(self.left, self.right))

    @property
    def is_empty(self) -> bool:
        return not self.left and not self.right


def branch(left: SymComp[Any], right: SymComp[Any]) -> SymComp[DelimitedBranches]:
    """
    Run ``left`` and ``right`` on the current state without forking the caller.

    The result is a single branch carrying the unchanged state and both raw
    branch lists; how to merge or compare them is up to the caller. A side
    that fails comes back as an empty list and is not reported as a failure
    of the enclosing run.
    """

    def delimited(state: SymbolicState) -> list[tuple[SymbolicState, DelimitedBranches]]:
        with delimited_failures():
            left_branches = left(state)
            right_branches = right(state)
        return [(state, DelimitedBranches(left_branches, right_branches))]

    return SymComp(delimited, name="branch")


__all__ = [
    "DelimitedBranches",
    "add_chunk",
    "branch",
    "compress_heap",
    "fuse_chunks",
    "get_heap",
    "get_locals",
    "nondeterministic_branch",
    "put_heap",
    "put_locals",
    "read_heap_value",
    "read_var",
    "store_var",
    "write_heap_value",
]
