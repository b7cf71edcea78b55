"""
Shared fixtures for symexec tests.
"""

import pytest

from symexec import Config, HeapLocation, SymbolicState, set_config
from symexec.unification import max_term, set_default_policy


@pytest.fixture(autouse=True)
def default_config():
    """Run each test with default settings, independent of the environment."""

    previous = set_config(Config())
    previous_policy = set_default_policy(max_term)
    yield
    set_config(previous)
    set_default_policy(previous_policy)


@pytest.fixture
def empty_state() -> SymbolicState:
    return SymbolicState.empty()


@pytest.fixture
def loc() -> HeapLocation:
    return HeapLocation(reference=100, field="f")


@pytest.fixture
def other_loc() -> HeapLocation:
    return HeapLocation(reference=100, field="g")
