"""
Compile and interpret entry points.

Compilation failures never raise: they are reported through
CompileResult.error, the 1-based offset of the token where parsing stopped
understanding the input. Zero means success.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple

from .ast import ExprNode, free
from .bindings import Binding
from .config import CompilerConfig, normalize_config
from .errors import ExpressionError
from .evaluator import evaluate
from .limits import DEFAULT_EXPRESSION_LIMITS, ExpressionLimits
from .optimizer import optimize
from .parser import parse

logger = logging.getLogger("arithex.compiler")


@dataclass
class CompileResult:
    """Result of compiling an expression."""

    expr: Optional[ExprNode]
    """The compiled tree, owned by the caller. None on failure."""

    error: int
    """0 on success, otherwise the 1-based offset of the failure."""

    message: Optional[str] = None
    """Formatted diagnostic if compilation failed."""

    @property
    def success(self) -> bool:
        return self.error == 0


def _error_offset(error: ExpressionError, source: str) -> int:
    position = error.position if error.position is not None else len(source)
    return max(position + 1, 1)


def compile_expression(
    source: str,
    variables: Optional[Sequence[Binding]] = (),
    config: Optional[CompilerConfig | dict[str, Any]] = None,
    limits: Optional[ExpressionLimits] = None,
) -> CompileResult:
    """
    Compiles an expression string into a tree.

    Args:
        source: The expression string
        variables: Host bindings; the first binding with a matching name wins
        config: Compiler configuration (model, dict or None for defaults)
        limits: Optional expression limits

    Returns:
        The compile result. On failure ``expr`` is None and ``error`` is the
        1-based offset of the offending token.
    """
    effective_config = normalize_config(config)

    try:
        root = parse(
            source,
            variables,
            effective_config,
            limits or DEFAULT_EXPRESSION_LIMITS,
        )
    except ExpressionError as error:
        offset = _error_offset(error, source)
        logger.debug(
            "expression_compile_failed",
            extra={"offset": offset, "reason": error.message},
        )
        return CompileResult(
            expr=None,
            error=offset,
            message=error.format_with_context(),
        )

    if effective_config.optimize:
        root = optimize(root)

    logger.debug(
        "expression_compiled",
        extra={"source_length": len(source), "optimized": effective_config.optimize},
    )
    return CompileResult(expr=root, error=0)


def interpret(
    source: str,
    config: Optional[CompilerConfig | dict[str, Any]] = None,
) -> Tuple[float, int]:
    """
    Compiles and evaluates an expression once, with builtins only.

    Args:
        source: The expression string
        config: Compiler configuration

    Returns:
        Tuple of (value, error). Value is NaN if compilation fails.
    """
    result = compile_expression(source, config=config)
    if result.expr is None:
        return (math.nan, result.error)

    value = evaluate(result.expr)
    free(result.expr)
    return (value, 0)
