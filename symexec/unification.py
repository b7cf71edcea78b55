"""
Unification policies used when fusing heap chunks that share a location.

A policy receives the values of every chunk at one location and returns the
single value the fused chunk holds. ``max_term`` is a placeholder: a real
verifier plugs in a term-unification service that, for instance, builds a
conditional term over the candidates.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from contextvars import ContextVar

from symexec.types import Term

UnificationPolicy = Callable[[Sequence[Term]], Term]


def max_term(values: Sequence[Term]) -> Term:
    if not values:
        raise ValueError("cannot unify an empty group of terms")
    return max(values)


_default_policy: ContextVar[UnificationPolicy] = ContextVar(
    "symexec_default_policy", default=max_term
)


def get_default_policy() -> UnificationPolicy:
    return _default_policy.get()


def set_default_policy(policy: UnificationPolicy) -> UnificationPolicy:
    """Install the policy used when none is passed explicitly; returns the old one.

    The setting is context-local, like :func:`symexec.config.set_config`.
    """

    if not callable(policy):
        raise TypeError("unification policy must be callable")
    previous = _default_policy.get()
    _default_policy.set(policy)
    return previous


__all__ = [
    "UnificationPolicy",
    "get_default_policy",
    "max_term",
    "set_default_policy",
]
