from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from symexec.types import HeapLocation


class SymbolicExecutionError(Exception):
    """Base class for failures that terminate the branch they occur in."""


class UnboundVariableError(SymbolicExecutionError, KeyError):
    """Raised when a variable read finds no binding in the current store."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Variable not bound in store: {name!r}")

    def __str__(self) -> str:
        return self.args[0]


class ChunkNotFoundError(SymbolicExecutionError, LookupError):
    """Raised when a heap read finds no chunk at the requested location."""

    def __init__(self, location: HeapLocation) -> None:
        self.location = location
        super().__init__(
            f"No heap chunk for {location.field!r} of reference {location.reference!r}"
        )


class UnificationError(RuntimeError):
    """Raised when heap compression leaves several chunks at one location.

    This signals a defective unification policy rather than an infeasible
    path, so it is not confined to the branch that observed it.
    """

    def __init__(self, location: HeapLocation, remaining: int, attempts: Any) -> None:
        self.location = location
        self.remaining = remaining
        self.attempts = attempts
        super().__init__(
            f"Unification left {remaining} chunks at {location!r} "
            f"after {attempts} compression attempt(s)"
        )


# Short names used in the execution-model vocabulary.
UnboundVariable = UnboundVariableError
ChunkNotFound = ChunkNotFoundError


__all__ = [
    "ChunkNotFound",
    "ChunkNotFoundError",
    "SymbolicExecutionError",
    "UnboundVariable",
    "UnboundVariableError",
    "UnificationError",
]
