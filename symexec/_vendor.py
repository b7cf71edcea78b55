"""
Vendored minimal types shared across symexec.

``FrozenDict`` backs the variable store.
"""

from frozendict import frozendict

# =========================================================
# Frozen Dict
# =========================================================
FrozenDict = frozendict

__all__ = ["FrozenDict"]
