"""
Constant folding.

A call is folded only when its callee is pure and every one of its
children is a constant after optimization; the whole node then becomes a
single constant. Nothing is ever folded partially.
"""

import logging
from typing import List, Tuple

from .ast import CallNode, ConstantNode, ExprNode, free
from .evaluator import evaluate

logger = logging.getLogger("arithex.optimizer")


def _fold(node: CallNode) -> ExprNode:
    """Folds a call whose children are already optimized."""
    known = all(child.type == "Constant" for child in node.args)
    if not (known and node.callee.pure):
        return node

    value = evaluate(node)
    free(node)
    logger.debug(
        "constant_folded", extra={"callee": node.callee.name, "value": value}
    )
    return ConstantNode(value)


def optimize(node: ExprNode) -> ExprNode:
    """
    Folds constant subtrees.

    Children are replaced in their parent's argument list. The return value
    is the node to keep as root: the same node, or a constant replacing it.
    """
    if node.type != "Call":
        return node

    # Calls are visited children first; each call folds its children once
    # their own subtrees are done.
    stack: List[Tuple[CallNode, bool]] = [(node, False)]
    while stack:
        current, expanded = stack.pop()
        if not expanded:
            stack.append((current, True))
            stack.extend(
                (child, False) for child in current.args if child.type == "Call"
            )
            continue

        for index, child in enumerate(current.args):
            if child.type == "Call":
                current.args[index] = _fold(child)

    return _fold(node)
