"""
Runtime configuration for symexec, read from environment variables.

    SYMEXEC_MAX_BRANCHES  cap on branches returned by the interpreter
    SYMEXEC_DEBUG         log every primitive step at DEBUG level

The active configuration is context-local: ``set_config`` in one thread or
task does not change what another one sees.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from contextvars import ContextVar
from dataclasses import dataclass

_TRUTHY = ("1", "true", "yes")


def _parse_optional_int(raw: str | None, name: str) -> int | None:
    if raw is None or not raw.strip():
        return None
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")
    return value


@dataclass(frozen=True)
class Config:
    max_branches: int | None = None
    debug: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Config:
        env = os.environ if environ is None else environ
        return cls(
            max_branches=_parse_optional_int(
                env.get("SYMEXEC_MAX_BRANCHES"), "SYMEXEC_MAX_BRANCHES"
            ),
            debug=env.get("SYMEXEC_DEBUG", "").lower() in _TRUTHY,
        )


_config: ContextVar[Config | None] = ContextVar("symexec_config", default=None)


def get_config() -> Config:
    config = _config.get()
    if config is None:
        config = Config.from_env()
        _config.set(config)
    return config


def set_config(config: Config | None) -> Config | None:
    """Install ``config`` (``None`` re-reads the environment lazily).

    Returns the previously installed configuration.
    """

    previous = _config.get()
    _config.set(config)
    return previous


__all__ = ["Config", "get_config", "set_config"]
