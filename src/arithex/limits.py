"""
Resource limits for expression compilation.

The parser recurses once per nesting level, so nesting is bounded well
below the interpreter's recursion limit. Tree walks after parsing use
explicit stacks; node count and depth only bound the work per expression.
"""

from dataclasses import dataclass
from typing import Optional

from .errors import LimitExceededError


@dataclass(frozen=True)
class ExpressionLimits:
    """Expression limits configuration."""

    # Maximum expression string length in characters
    max_expression_length: int = 4096

    # Maximum nesting of parentheses, calls and unary operands
    max_nesting_depth: int = 64

    # Maximum number of tree nodes
    max_ast_nodes: int = 4096

    # Maximum tree depth (root counts as 1)
    max_ast_depth: int = 4096


DEFAULT_EXPRESSION_LIMITS = ExpressionLimits()


def check_expression_length(
    expression: str, limits: Optional[ExpressionLimits] = None
) -> None:
    """Validates that expression length is within limits."""
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    if len(expression) > limits.max_expression_length:
        raise LimitExceededError(
            "max_expression_length",
            limits.max_expression_length,
            len(expression),
            limits.max_expression_length,
            expression,
        )


def check_nesting_depth(
    depth: int,
    position: int,
    expression: str,
    limits: Optional[ExpressionLimits] = None,
) -> None:
    """Validates nesting depth while descending the grammar."""
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    if depth > limits.max_nesting_depth:
        raise LimitExceededError(
            "max_nesting_depth", limits.max_nesting_depth, depth, position, expression
        )


def check_ast_node_count(
    count: int, limits: Optional[ExpressionLimits] = None
) -> None:
    """Validates tree node count after parsing."""
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    if count > limits.max_ast_nodes:
        raise LimitExceededError("max_ast_nodes", limits.max_ast_nodes, count)


def check_ast_depth(depth: int, limits: Optional[ExpressionLimits] = None) -> None:
    """Validates tree depth after parsing."""
    limits = limits or DEFAULT_EXPRESSION_LIMITS
    if depth > limits.max_ast_depth:
        raise LimitExceededError("max_ast_depth", limits.max_ast_depth, depth)
