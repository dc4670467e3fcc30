"""
Compiler configuration.

Supports both camelCase and snake_case property names, and can be read from
the environment for hosts that configure the engine at deployment time.
"""

from __future__ import annotations

import os
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, ValidationError

ENV_VAR_POW_ASSOCIATIVITY = "ARITHEX_POW_ASSOCIATIVITY"
ENV_VAR_NATURAL_LOG = "ARITHEX_NATURAL_LOG"
ENV_VAR_OPTIMIZE = "ARITHEX_OPTIMIZE"

PowAssociativity = Literal["left_to_right", "right_to_left"]

_TRUTHY = ("1", "true", "yes", "on")
_FALSY = ("0", "false", "no", "off")


class CompilerConfig(BaseModel):
    """
    Configuration for expression compilation.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    # How chains of '^' group: a^b^c = a^(b^c) and -a^b = -(a^b) when
    # "right_to_left"; a^b^c = (a^b)^c and -a^b = (-a)^b when "left_to_right"
    pow_associativity: PowAssociativity = "right_to_left"

    # Resolve the "log" builtin to the natural logarithm instead of base 10
    natural_log: bool = False

    # Fold constant subtrees once parsing succeeds
    optimize: bool = True

    @classmethod
    def from_env(cls) -> "CompilerConfig":
        """Builds a configuration from ARITHEX_* environment variables."""
        candidate: dict[str, Any] = {}

        pow_associativity = os.getenv(ENV_VAR_POW_ASSOCIATIVITY)
        if pow_associativity:
            candidate["pow_associativity"] = pow_associativity.strip().lower()

        natural_log = os.getenv(ENV_VAR_NATURAL_LOG)
        if natural_log:
            candidate["natural_log"] = _parse_flag(ENV_VAR_NATURAL_LOG, natural_log)

        optimize = os.getenv(ENV_VAR_OPTIMIZE)
        if optimize:
            candidate["optimize"] = _parse_flag(ENV_VAR_OPTIMIZE, optimize)

        return normalize_config(candidate)


DEFAULT_COMPILER_CONFIG = CompilerConfig()


def _parse_flag(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ValueError(f'Invalid value "{raw}" for {name}. Expected a boolean flag')


def normalize_config(
    config: CompilerConfig | dict[str, Any] | None,
) -> CompilerConfig:
    """Normalize and validate configuration."""
    if config is None:
        return DEFAULT_COMPILER_CONFIG

    if isinstance(config, CompilerConfig):
        return config

    candidate = dict(config)

    # Support both camelCase and snake_case
    aliases = {
        "powAssociativity": "pow_associativity",
        "naturalLog": "natural_log",
    }
    for camel, snake in aliases.items():
        if camel in candidate:
            value = candidate.pop(camel)
            candidate.setdefault(snake, value)

    try:
        return CompilerConfig(**candidate)
    except ValidationError as e:
        raise ValueError(f"Invalid compiler configuration: {e}") from e
