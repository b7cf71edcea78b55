"""
Kleisli arrow implementation for symexec.

``KleisliSymComp`` wraps a callable ``args -> SymComp`` so that calling it
yields a computation that is only built when run, and so that arrows can be
chained with ``>>``.
"""

from __future__ import annotations

import inspect
import types
from collections.abc import Callable
from dataclasses import dataclass
from functools import wraps
from typing import Any, Generic, ParamSpec, TypeVar

from symexec.program import SymComp, ensure_symcomp

P = ParamSpec("P")
T = TypeVar("T")
U = TypeVar("U")


@dataclass
class KleisliSymComp(Generic[P, T]):
    """
    Thin wrapper around a callable representing a Kleisli arrow.

    The callable stored in ``func`` must return a ``SymComp`` when invoked.
    Invocation is deferred until the resulting computation runs against a
    state, which keeps recursive definitions from unfolding eagerly.
    """

    func: Callable[P, SymComp[T]]

    def __post_init__(self) -> None:
        wrapped = getattr(self.func, "__wrapped__", self.func)
        signature = _safe_signature(wrapped)
        if signature is not None:
            self.__signature__ = signature  # type: ignore[attr-defined]
        for attr in ("__name__", "__qualname__", "__doc__", "__module__"):
            value = getattr(wrapped, attr, None)
            if value is not None:
                setattr(self, attr, value)

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return types.MethodType(self, instance)

    def __call__(self, *args: P.args, **kwargs: P.kwargs) -> SymComp[T]:
        name = getattr(self, "__name__", "<kleisli>")
        return SymComp.defer(
            lambda: ensure_symcomp(self.func(*args, **kwargs), name),
            name=name,
        )

    def partial(self, /, *args: Any, **kwargs: Any) -> KleisliSymComp[..., T]:
        base = self

        @wraps(self.func)
        def applied(*more_args: Any, **more_kwargs: Any) -> SymComp[T]:
            return base(*args, *more_args, **{**kwargs, **more_kwargs})

        return KleisliSymComp(applied)

    def and_then_k(self, binder: Callable[[T], SymComp[U]]) -> KleisliSymComp[P, U]:
        if not callable(binder):
            raise TypeError("binder must be callable returning a SymComp")

        @wraps(self.func)
        def composed(*args: P.args, **kwargs: P.kwargs) -> SymComp[U]:
            return self(*args, **kwargs).flat_map(binder)

        return KleisliSymComp(composed)

    def __rshift__(self, binder: Callable[[T], SymComp[U]]) -> KleisliSymComp[P, U]:
        return self.and_then_k(binder)

    def fmap(self, mapper: Callable[[T], U]) -> KleisliSymComp[P, U]:
        if not callable(mapper):
            raise TypeError("mapper must be callable")

        @wraps(self.func)
        def mapped(*args: P.args, **kwargs: P.kwargs) -> SymComp[U]:
            return self(*args, **kwargs).map(mapper)

        return KleisliSymComp(mapped)


def _safe_signature(target: Any) -> inspect.Signature | None:
    try:
        return inspect.signature(target)
    except (TypeError, ValueError):
        return None


__all__ = ["KleisliSymComp"]
