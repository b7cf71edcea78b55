"""
Sequencing and branching combinators.

These are the named operations every statement translator composes
primitives with. ``bind`` threads each branch of a computation into a
continuation, so one non-deterministic decision forks everything sequenced
after it; ``combine`` gives plain statement-sequence semantics.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TypeVar

from symexec.program import SymComp, ensure_symcomp
from symexec.types import SymbolicState

T = TypeVar("T")
U = TypeVar("U")


def bind(comp: SymComp[T], k: Callable[[T], SymComp[U]]) -> SymComp[U]:
    return ensure_symcomp(comp, "bind").flat_map(k)


def pure(value: T) -> SymComp[T]:
    return SymComp.pure(value)


def combine(first: SymComp[object], second: SymComp[U]) -> SymComp[U]:
    """Run ``first`` then ``second`` on each of its branches, keeping ``second``'s value."""

    return ensure_symcomp(first, "combine").then(second)


def zero() -> SymComp[None]:
    """The do-nothing computation, e.g. for the missing arm of an ``if``."""

    return SymComp(lambda state: [(state, None)], name="zero")


def delay(thunk: Callable[[], SymComp[T]]) -> SymComp[T]:
    return SymComp.defer(thunk)


def for_each(items: Iterable[T], body: Callable[[T], SymComp[object]]) -> SymComp[None]:
    """
    Unroll ``body`` over a sequence whose length is known up front.

    The items are fixed when the computation is built; each iteration runs
    on every branch left by the previous one. This is not a symbolic loop.
    """

    fixed = tuple(items)

    def unrolled(state: SymbolicState) -> list[tuple[SymbolicState, None]]:
        # One frontier per iteration keeps the call depth flat for long sequences.
        frontier: list[SymbolicState] = [state]
        for item in fixed:
            step = delay(lambda item=item: body(item))
            frontier = [next_state for current in frontier for next_state, _ in step(current)]
        return [(current, None) for current in frontier]

    return SymComp(unrolled, name="for_each")


class SymbolicExecutionBuilder:
    """Builder-style access to the combinators.

    Collaborators that translate statements one construct at a time can hold
    a builder and call ``return_``/``bind``/``combine``/``for_``/``zero``/
    ``delay`` on it instead of importing the functions.
    """

    def bind(self, comp: SymComp[T], k: Callable[[T], SymComp[U]]) -> SymComp[U]:
        return bind(comp, k)

    def return_(self, value: T) -> SymComp[T]:
        return pure(value)

    def combine(self, first: SymComp[object], second: SymComp[U]) -> SymComp[U]:
        return combine(first, second)

    def for_(self, items: Iterable[T], body: Callable[[T], SymComp[object]]) -> SymComp[None]:
        return for_each(items, body)

    def zero(self) -> SymComp[None]:
        return zero()

    def delay(self, thunk: Callable[[], SymComp[T]]) -> SymComp[T]:
        return delay(thunk)


symbolic = SymbolicExecutionBuilder()


__all__ = [
    "SymbolicExecutionBuilder",
    "bind",
    "combine",
    "delay",
    "for_each",
    "pure",
    "symbolic",
    "zero",
]
