"""
The do decorator for symexec.

This module provides the @do decorator that turns generator functions into
KleisliSymComps, giving do-notation for symbolic computations.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Generator
from functools import wraps
from typing import Any, ParamSpec, TypeVar

from symexec.errors import SymbolicExecutionError
from symexec.kleisli import KleisliSymComp
from symexec.program import SymComp, ensure_symcomp, propagating_failures, report_failure
from symexec.types import Branch, SymbolicState

P = ParamSpec("P")
T = TypeVar("T")

SymGenerator = Generator[SymComp[Any], Any, T]

# A path still to be explored: values sent so far and the state to resume in.
Pending = tuple[tuple[Any, ...], SymbolicState]


def generator_symcomp(factory: Callable[[], SymGenerator[T]], name: str) -> SymComp[T]:
    """
    Run a generator as a computation.

    Generators resume only once, but a yielded computation may return
    several branches. The first branch keeps driving the live generator;
    every other branch is queued and later replays a fresh generator with
    the values seen so far on its path, which requires the generator body
    to be deterministic and free of side effects. Paths are explored from a
    worklist, so long bodies do not grow the Python stack.
    """

    def drive(
        history: tuple[Any, ...],
        state: SymbolicState,
        pending: list[Pending],
        results: list[Branch],
    ) -> None:
        trail = list(history)
        gen = factory()
        try:
            yielded = next(gen)
            for value in history:
                yielded = gen.send(value)
            while True:
                comp = ensure_symcomp(yielded, "@do generator yield")
                branches = comp(state)
                if not branches:
                    return
                for next_state, value in reversed(branches[1:]):
                    pending.append((tuple(trail) + (value,), next_state))
                state, value = branches[0]
                trail.append(value)
                yielded = gen.send(value)
        except StopIteration as stop_exc:
            results.append(Branch(state, stop_exc.value))
        except SymbolicExecutionError as exc:
            if propagating_failures():
                raise
            report_failure(name, state, exc)
        finally:
            gen.close()

    def run(state: SymbolicState) -> list[Branch]:
        results: list[Branch] = []
        pending: list[Pending] = [((), state)]
        while pending:
            history, current = pending.pop()
            drive(history, current, pending, results)
        return results

    return SymComp(run, name=name)


class DoSymFunction(KleisliSymComp[P, T]):
    """Specialised KleisliSymComp for generator-based @do functions."""

    def __init__(self, func: Callable[P, SymGenerator[T]]) -> None:
        name = getattr(func, "__name__", "<do>")

        @wraps(func)
        def comp_factory(*args: P.args, **kwargs: P.kwargs) -> SymComp[T]:
            if not inspect.isgeneratorfunction(func):
                return SymComp.lift(func(*args, **kwargs))
            return generator_symcomp(lambda: func(*args, **kwargs), name)

        super().__init__(comp_factory)
        self.original_func = func

    @property
    def original_generator(self) -> Callable[P, SymGenerator[T]]:
        return self.original_func


def do(func: Callable[P, SymGenerator[T]]) -> KleisliSymComp[P, T]:
    """
    Decorator that converts a generator function into a KleisliSymComp.

    Every ``yield`` hands a SymComp to the engine and resumes with the value
    of one of its branches; the generator's ``return`` value becomes the
    branch result. A yield that branches continues the rest of the body once
    per branch, independently.

    Usage:
        @do
        def choose():
            yield store_var("x", 1)
            yield store_var("y", 2)
            b = yield nondeterministic_branch()
            source = "x" if b else "y"
            value = yield read_var(source)
            yield store_var("z", value)

        explore(choose())  # two branches: z == 1 and z == 2

    Side effects inside the body (printing, mutating outer objects) run once
    per replay and must be avoided.
    """

    return DoSymFunction(func)


__all__ = ["DoSymFunction", "SymGenerator", "do", "generator_symcomp"]
