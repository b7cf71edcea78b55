"""
SymComp class for symexec.

A ``SymComp`` is a lazy symbolic computation: a pure function from a
``SymbolicState`` to every branch that continues from it. Running the same
computation twice on the same state yields the same branch list.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from symexec.config import get_config
from symexec.errors import SymbolicExecutionError
from symexec.types import Branch, SymbolicState

T = TypeVar("T")
U = TypeVar("U")

logger = logging.getLogger(__name__)

FailureSink = Callable[[SymbolicState, SymbolicExecutionError], None]

_failure_sink: ContextVar[FailureSink | None] = ContextVar(
    "symexec_failure_sink", default=None
)
# Set while run_raw is active: guarded calls re-raise instead of dropping.
_propagate: ContextVar[bool] = ContextVar("symexec_propagate_failures", default=False)


@contextmanager
def collect_failures(sink: FailureSink) -> Iterator[None]:
    """Report every branch dropped inside the block to ``sink``."""

    token = _failure_sink.set(sink)
    try:
        yield
    finally:
        _failure_sink.reset(token)


@contextmanager
def delimited_failures(sink: FailureSink | None = None) -> Iterator[None]:
    """Keep failures inside the block away from the enclosing run.

    Branches dropped in the block go to ``sink`` only, and are dropped even
    under :meth:`SymComp.run_raw`.
    """

    sink_token = _failure_sink.set(sink)
    propagate_token = _propagate.set(False)
    try:
        yield
    finally:
        _propagate.reset(propagate_token)
        _failure_sink.reset(sink_token)


def propagating_failures() -> bool:
    return _propagate.get()


def report_failure(name: str, state: SymbolicState, error: SymbolicExecutionError) -> None:
    logger.debug("Dropping branch in %s: %s", name, error)
    sink = _failure_sink.get()
    if sink is not None:
        sink(state, error)


def ensure_symcomp(value: Any, context: str) -> SymComp[Any]:
    if not isinstance(value, SymComp):
        raise TypeError(f"{context} must return a SymComp; got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class SymComp(Generic[T]):
    """Computation over result type ``T``.

    Calling the computation with a state returns its branches. A
    ``SymbolicExecutionError`` raised while computing them terminates only
    this application: the caller sees no branches and the failure is reported
    to the active collector (see :func:`collect_failures`).
    """

    func: Callable[[SymbolicState], Iterable[tuple[SymbolicState, T]]]
    name: str = "<anonymous>"

    def _branches(self, state: SymbolicState) -> list[Branch]:
        return [Branch(next_state, value) for next_state, value in self.func(state)]

    def run_raw(self, state: SymbolicState) -> list[Branch]:
        """Run without the failure guard.

        The first branch-fatal error anywhere in the computation, including
        nested computations, propagates to the caller.
        """

        token = _propagate.set(True)
        try:
            return self._branches(state)
        finally:
            _propagate.reset(token)

    def __call__(self, state: SymbolicState) -> list[Branch]:
        if _propagate.get():
            return self._branches(state)
        try:
            branches = self._branches(state)
        except SymbolicExecutionError as exc:
            report_failure(self.name, state, exc)
            return []
        if get_config().debug:
            logger.debug("%s produced %d branch(es)", self.name, len(branches))
        return branches

    def __repr__(self) -> str:
        return f"SymComp({self.name})"

    def map(self, f: Callable[[T], U]) -> SymComp[U]:
        """Map a function over the result of every branch."""

        if not callable(f):
            raise TypeError("mapper must be callable")

        def mapped(state: SymbolicState) -> list[tuple[SymbolicState, U]]:
            return [(next_state, f(value)) for next_state, value in self(state)]

        return SymComp(mapped, name=f"map({self.name})")

    def flat_map(self, f: Callable[[T], SymComp[U]]) -> SymComp[U]:
        """Monadic bind: run ``f(value)`` on every branch and concatenate."""

        if not callable(f):
            raise TypeError("binder must be callable returning a SymComp")

        def bound(state: SymbolicState) -> list[Branch]:
            results: list[Branch] = []
            for next_state, value in self(state):
                # Each continuation is guarded on its own so that a failure
                # while building or running it drops only that branch.
                continuation = SymComp.defer(
                    lambda value=value: ensure_symcomp(f(value), "binder"),
                    name=f"{self.name} >>=",
                )
                results.extend(continuation(next_state))
            return results

        return SymComp(bound, name=f"bind({self.name})")

    def and_then_k(self, binder: Callable[[T], SymComp[U]]) -> SymComp[U]:
        """Alias for flat_map for Kleisli-style composition."""

        return self.flat_map(binder)

    def __rshift__(self, binder: Callable[[T], SymComp[U]]) -> SymComp[U]:
        return self.flat_map(binder)

    def then(self, other: SymComp[U]) -> SymComp[U]:
        """Sequence ``other`` after this computation, discarding its value."""

        ensure_symcomp(other, "then")
        return self.flat_map(lambda _: other)

    @staticmethod
    def pure(value: T) -> SymComp[T]:
        return SymComp(lambda state: [(state, value)], name="pure")

    @staticmethod
    def of(value: T) -> SymComp[T]:
        return SymComp.pure(value)

    @staticmethod
    def lift(value: SymComp[U] | U) -> SymComp[U]:
        if isinstance(value, SymComp):
            return value
        return SymComp.pure(value)

    @staticmethod
    def defer(thunk: Callable[[], SymComp[T]], name: str = "delay") -> SymComp[T]:
        """Build the computation only when it is run against a state."""

        def delayed(state: SymbolicState) -> list[Branch]:
            return ensure_symcomp(thunk(), "delayed thunk")(state)

        return SymComp(delayed, name=name)

    @staticmethod
    def sequence(comps: Iterable[SymComp[T]]) -> SymComp[list[T]]:
        """Run computations in order, collecting one result list per path."""

        steps = tuple(SymComp.lift(comp) for comp in comps)

        def collect(state: SymbolicState) -> list[tuple[SymbolicState, list[T]]]:
            # Breadth-wise over the steps so long sequences do not nest calls.
            frontier: list[tuple[SymbolicState, list[Any]]] = [(state, [])]
            for step in steps:
                frontier = [
                    (next_state, acc + [value])
                    for current, acc in frontier
                    for next_state, value in step(current)
                ]
            return frontier

        return SymComp(collect, name="sequence")

    @staticmethod
    def traverse(items: Iterable[T], func: Callable[[T], SymComp[U]]) -> SymComp[list[U]]:
        fixed = tuple(items)
        return SymComp.defer(
            lambda: SymComp.sequence(func(item) for item in fixed),
            name="traverse",
        )


__all__ = [
    "FailureSink",
    "SymComp",
    "collect_failures",
    "delimited_failures",
    "ensure_symcomp",
    "propagating_failures",
    "report_failure",
]
