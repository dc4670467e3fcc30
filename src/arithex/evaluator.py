"""
Expression evaluator.

Walks a compiled tree and returns its floating-point value. Variables are
read from their cells on every evaluation. Runtime domain errors flow
through the arithmetic as NaN or infinity; evaluation never raises.
"""

import logging
import math
from typing import List, Optional, Tuple

from .ast import CallNode, ExprNode

logger = logging.getLogger("arithex.evaluator")

NAN = math.nan


class Evaluator:
    """Evaluates a tree node and returns the result."""

    def evaluate(self, node: Optional[ExprNode]) -> float:
        """
        Evaluates a node.

        Exceptions raised by host callables propagate; use the module-level
        ``evaluate`` for a total function.
        """
        if node is None:
            return NAN

        # Post-order walk with an explicit stack; results of evaluated
        # children accumulate on ``values`` left to right.
        values: List[float] = []
        stack: List[Tuple[ExprNode, bool]] = [(node, False)]

        while stack:
            current, expanded = stack.pop()
            node_type = current.type

            if node_type == "Constant":
                values.append(current.value)
            elif node_type == "Variable":
                values.append(float(current.cell.value))
            elif node_type != "Call":
                # Should never happen, but handle gracefully
                values.append(NAN)
            elif expanded:
                values.append(self._invoke(current, values))
            elif len(current.args) != current.callee.arity:
                # Released or hand-built inconsistent node
                values.append(NAN)
            else:
                stack.append((current, True))
                stack.extend((child, False) for child in reversed(current.args))

        return values[-1]

    def _invoke(self, node: CallNode, values: List[float]) -> float:
        """Pops the call's evaluated arguments and invokes the callee."""
        start = len(values) - node.callee.arity
        args = values[start:]
        del values[start:]
        return float(node.callee.invoke(args))


_EVALUATOR = Evaluator()


def evaluate(node: Optional[ExprNode]) -> float:
    """
    Evaluates a compiled tree.

    Args:
        node: The tree root; None evaluates to NaN

    Returns:
        The value. NaN if a host callable failed.
    """
    try:
        return _EVALUATOR.evaluate(node)
    except Exception as error:
        logger.warning(
            "host_callable_failed",
            extra={"error": str(error), "error_type": type(error).__name__},
        )
        return NAN
