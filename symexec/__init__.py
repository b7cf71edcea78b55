"""
symexec - execution core for symbolic program verification.

Computations (``SymComp``) map a symbolic state to every branch that follows
from it. Primitives read and update the variable store and heap; combinators
and the ``@do`` decorator sequence them so that a non-deterministic choice
forks everything after it.
"""

from symexec._vendor import FrozenDict
from symexec.combinators import (
    SymbolicExecutionBuilder,
    bind,
    combine,
    delay,
    for_each,
    pure,
    symbolic,
    zero,
)
from symexec.config import Config, get_config, set_config
from symexec.do import do
from symexec.errors import (
    ChunkNotFound,
    ChunkNotFoundError,
    SymbolicExecutionError,
    UnboundVariable,
    UnboundVariableError,
    UnificationError,
)
from symexec.interpreter import BranchFailure, ExplorationResult, SymbolicInterpreter, explore
from symexec.kleisli import KleisliSymComp
from symexec.primitives import (
    DelimitedBranches,
    add_chunk,
    branch,
    compress_heap,
    fuse_chunks,
    get_heap,
    get_locals,
    nondeterministic_branch,
    put_heap,
    put_locals,
    read_heap_value,
    read_var,
    store_var,
    write_heap_value,
)
from symexec.program import SymComp, collect_failures, delimited_failures
from symexec.types import Branch, HeapChunk, HeapLocation, SymbolicState, Term, VariableStore
from symexec.unification import (
    UnificationPolicy,
    get_default_policy,
    max_term,
    set_default_policy,
)

__version__ = "0.1.0"

__all__ = [
    # State model
    "Branch",
    "HeapChunk",
    "HeapLocation",
    "SymbolicState",
    "Term",
    "VariableStore",
    # Computations
    "KleisliSymComp",
    "SymComp",
    "collect_failures",
    "delimited_failures",
    "do",
    # Combinators
    "SymbolicExecutionBuilder",
    "bind",
    "combine",
    "delay",
    "for_each",
    "pure",
    "symbolic",
    "zero",
    # Primitives
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
    # Unification
    "UnificationPolicy",
    "get_default_policy",
    "max_term",
    "set_default_policy",
    # Driver
    "BranchFailure",
    "ExplorationResult",
    "SymbolicInterpreter",
    "explore",
    # Errors
    "ChunkNotFound",
    "ChunkNotFoundError",
    "SymbolicExecutionError",
    "UnboundVariable",
    "UnboundVariableError",
    "UnificationError",
    # Config
    "Config",
    "get_config",
    "set_config",
    # Vendored
    "FrozenDict",
]
