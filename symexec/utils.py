"""
Utility functions for symexec.
"""

from collections.abc import Iterable
from typing import Any

from symexec.types import Branch, SymbolicState


def heap_equal(left: SymbolicState, right: SymbolicState) -> bool:
    """Compare two heaps as multisets of chunks, ignoring order."""

    return left.heap_multiset() == right.heap_multiset()


def states_equivalent(left: SymbolicState, right: SymbolicState) -> bool:
    return left.locals == right.locals and heap_equal(left, right)


def format_state(state: SymbolicState, indent: str = "") -> str:
    lines = [f"{indent}locals:"]
    if state.locals:
        for name, value in sorted(state.locals.items()):
            lines.append(f"{indent}  {name} = {value!r}")
    else:
        lines.append(f"{indent}  (empty)")
    lines.append(f"{indent}heap:")
    if state.heap:
        for chunk in state.heap:
            lines.append(f"{indent}  {chunk.location!r} -> {chunk.value!r}")
    else:
        lines.append(f"{indent}  (empty)")
    return "\n".join(lines)


def format_branches(branches: Iterable[Branch]) -> str:
    """Render branches one block per path, for logs and test failure output."""

    blocks: list[str] = []
    for index, (state, value) in enumerate(branches):
        blocks.append(f"branch {index}: value={_short(value)}\n{format_state(state, '  ')}")
    if not blocks:
        return "no feasible branches"
    return "\n".join(blocks)


def _short(value: Any, max_length: int = 80) -> str:
    text = repr(value)
    if len(text) > max_length:
        return text[: max_length - 3] + "..."
    return text


__all__ = ["format_branches", "format_state", "heap_equal", "states_equivalent"]
