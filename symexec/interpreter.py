"""
Exploration driver for symexec.

``SymbolicInterpreter`` runs a computation from an initial state and returns
every feasible path together with the branches that were dropped on the way.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from symexec.config import get_config
from symexec.errors import SymbolicExecutionError
from symexec.program import SymComp, collect_failures, ensure_symcomp
from symexec.types import Branch, SymbolicState
from symexec.utils import format_branches

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BranchFailure:
    """A branch dropped because of a branch-fatal error."""

    state: SymbolicState
    error: SymbolicExecutionError


@dataclass(frozen=True)
class ExplorationResult:
    branches: tuple[Branch, ...]
    failures: tuple[BranchFailure, ...] = ()
    truncated: bool = False

    @property
    def states(self) -> list[SymbolicState]:
        return [branch.state for branch in self.branches]

    @property
    def values(self) -> list[Any]:
        return [branch.value for branch in self.branches]

    @property
    def all_failed(self) -> bool:
        return not self.branches

    def __len__(self) -> int:
        return len(self.branches)


@dataclass
class SymbolicInterpreter:
    """
    Runs computations and collects their outcome.

    Attributes:
        max_branches: Cap on returned branches. ``None`` falls back to the
            configured ``SYMEXEC_MAX_BRANCHES``; unset means unlimited.
    """

    max_branches: int | None = None

    def run(self, comp: SymComp[Any], state: SymbolicState | None = None) -> ExplorationResult:
        ensure_symcomp(comp, "SymbolicInterpreter.run argument")
        initial = SymbolicState.empty() if state is None else state
        failures: list[BranchFailure] = []

        def record(failed_state: SymbolicState, error: SymbolicExecutionError) -> None:
            failures.append(BranchFailure(failed_state, error))

        with collect_failures(record):
            branches = comp(initial)

        cap = self.max_branches if self.max_branches is not None else get_config().max_branches
        truncated = cap is not None and len(branches) > cap
        if truncated:
            logger.warning(
                "Exploration of %s produced %d branches; keeping the first %d",
                comp.name,
                len(branches),
                cap,
            )
            branches = branches[:cap]

        logger.info(
            "Explored %s: %d branch(es), %d failed", comp.name, len(branches), len(failures)
        )
        if get_config().debug:
            logger.debug("Final branches of %s:\n%s", comp.name, format_branches(branches))
        return ExplorationResult(
            branches=tuple(branches),
            failures=tuple(failures),
            truncated=truncated,
        )


def explore(comp: SymComp[Any], state: SymbolicState | None = None) -> list[Branch]:
    """Run ``comp`` and return its feasible branches."""

    return list(SymbolicInterpreter().run(comp, state).branches)


__all__ = ["BranchFailure", "ExplorationResult", "SymbolicInterpreter", "explore"]
