"""
Symbolic state model for symexec.

A ``SymbolicState`` pairs a variable store with a collection of heap chunks.
All types here are immutable; every primitive builds a new state instead of
mutating the one it was given, so branches can share structure freely.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any, NamedTuple

from symexec._vendor import FrozenDict

# Terms are opaque: the core only compares them for equality and order.
Term = Any

VariableStore = FrozenDict


@dataclass(frozen=True)
class HeapLocation:
    """A field of a symbolic reference, used as the heap grouping key."""

    reference: Term
    field: str

    def __repr__(self) -> str:
        return f"{self.reference!r}.{self.field}"


@dataclass(frozen=True)
class HeapChunk:
    """Claim that ``location`` currently holds ``value``."""

    location: HeapLocation
    value: Term

    def with_value(self, value: Term) -> HeapChunk:
        return replace(self, value=value)


def _freeze_locals(store: Mapping[str, Term] | None) -> VariableStore:
    if store is None:
        return FrozenDict()
    if isinstance(store, FrozenDict):
        return store
    return FrozenDict(store)


@dataclass(frozen=True)
class SymbolicState:
    """
    Execution state of one symbolic path.

    Attributes:
        locals: Mapping from variable name to Term.
        heap: Heap chunks. Order carries no meaning and several chunks may
            share a location until the heap is compressed.
    """

    locals: VariableStore = field(default_factory=FrozenDict)
    heap: tuple[HeapChunk, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "locals", _freeze_locals(self.locals))
        object.__setattr__(self, "heap", tuple(self.heap))

    @classmethod
    def empty(cls) -> SymbolicState:
        return cls()

    @classmethod
    def of(
        cls,
        locals: Mapping[str, Term] | None = None,
        heap: Iterable[HeapChunk] = (),
    ) -> SymbolicState:
        """Build a state from plain Python containers."""

        return cls(locals=_freeze_locals(locals), heap=tuple(heap))

    def with_locals(self, locals: Mapping[str, Term]) -> SymbolicState:
        return replace(self, locals=_freeze_locals(locals))

    def with_heap(self, heap: Iterable[HeapChunk]) -> SymbolicState:
        return replace(self, heap=tuple(heap))

    def bind_local(self, name: str, value: Term) -> SymbolicState:
        return replace(self, locals=self.locals.set(name, value))

    def chunks_at(self, location: HeapLocation) -> tuple[HeapChunk, ...]:
        return tuple(chunk for chunk in self.heap if chunk.location == location)

    def heap_multiset(self) -> dict[HeapChunk, int]:
        """Chunk multiplicities, for order-insensitive heap comparison."""

        counts: dict[HeapChunk, int] = {}
        for chunk in self.heap:
            counts[chunk] = counts.get(chunk, 0) + 1
        return counts

    def __repr__(self) -> str:
        bindings = ", ".join(f"{name}={value!r}" for name, value in sorted(self.locals.items()))
        chunks = ", ".join(f"{chunk.location!r}->{chunk.value!r}" for chunk in self.heap)
        return f"SymbolicState(locals={{{bindings}}}, heap=[{chunks}])"


class Branch(NamedTuple):
    """One continuation of a computation: the state it ends in and its result."""

    state: SymbolicState
    value: Any


__all__ = [
    "Branch",
    "HeapChunk",
    "HeapLocation",
    "SymbolicState",
    "Term",
    "VariableStore",
]
