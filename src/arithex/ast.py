"""
Expression tree node types.

The tree is produced by the parser, rewritten by the optimizer and consumed
by the evaluator. Every call node exclusively owns its children; the tree is
acyclic and each node has exactly one parent.
"""

import logging
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Literal, Optional, TextIO, Union

logger = logging.getLogger("arithex.ast")

# Largest arity a function or closure may declare.
MAX_ARITY = 7


# ============================================================
# Callees
# ============================================================


class CalleeKind(Enum):
    """What a call node invokes."""

    BUILTIN = "builtin"
    FUNCTION = "function"
    CLOSURE = "closure"
    OPERATOR = "operator"


@dataclass(frozen=True)
class Callee:
    """
    A callable bound at parse time.

    Closures receive ``context`` as their first argument, ahead of the
    ``arity`` numeric arguments.
    """

    kind: CalleeKind
    name: str
    function: Callable[..., float]
    arity: int
    pure: bool = False
    context: Any = None

    def __post_init__(self) -> None:
        if not 0 <= self.arity <= MAX_ARITY:
            raise ValueError(
                f"{self.name}: arity must be between 0 and {MAX_ARITY}, got {self.arity}"
            )

    @property
    def is_closure(self) -> bool:
        return self.kind is CalleeKind.CLOSURE

    def invoke(self, args: List[float]) -> float:
        """Calls the underlying function with already evaluated arguments."""
        if self.kind is CalleeKind.CLOSURE:
            return self.function(self.context, *args)
        return self.function(*args)


# ============================================================
# Node Types
# ============================================================


@dataclass(eq=False)
class ConstantNode:
    """Constant node holding an immutable float."""

    value: float
    released: bool = field(default=False, repr=False)

    @property
    def type(self) -> Literal["Constant"]:
        return "Constant"


@dataclass(eq=False)
class VariableNode:
    """
    Variable node reading a caller-owned cell.

    The cell is never owned by the tree; it is read fresh on every evaluation.
    """

    name: str
    cell: Any
    released: bool = field(default=False, repr=False)

    @property
    def type(self) -> Literal["Variable"]:
        return "Variable"


@dataclass(eq=False)
class CallNode:
    """Call node: a callee applied to exactly ``callee.arity`` children."""

    callee: Callee
    args: List["ExprNode"]
    released: bool = field(default=False, repr=False)

    def __post_init__(self) -> None:
        if len(self.args) != self.callee.arity:
            raise ValueError(
                f"{self.callee.name}: expected {self.callee.arity} argument(s), "
                f"got {len(self.args)}"
            )

    @property
    def type(self) -> Literal["Call"]:
        return "Call"

    @property
    def arity(self) -> int:
        return self.callee.arity


# Union type for all tree nodes
ExprNode = Union[ConstantNode, VariableNode, CallNode]


# ============================================================
# Tree Utilities
# ============================================================


def _release(node: ExprNode) -> int:
    count = 0
    stack = [(node, False)]
    while stack:
        current, expanded = stack.pop()
        if current.released:
            continue

        if current.type == "Call" and not expanded:
            stack.append((current, True))
            stack.extend((child, False) for child in reversed(current.args))
            continue

        if current.type == "Call":
            current.args = []
        current.released = True
        count += 1
    return count


def free(node: Optional[ExprNode]) -> int:
    """
    Releases a tree depth-first, children before parents.

    Safe on None and on trees that were already released. Returns the number
    of nodes released by this call.
    """
    if node is None:
        return 0
    count = _release(node)
    if count:
        logger.debug("tree_released", extra={"nodes": count})
    return count


def count_nodes(node: ExprNode) -> int:
    """Counts the total number of nodes in a tree."""
    count = 0
    stack = [node]
    while stack:
        current = stack.pop()
        count += 1
        if current.type == "Call":
            stack.extend(current.args)
    return count


def tree_depth(node: ExprNode) -> int:
    """Calculates the maximum depth of a tree without recursing."""
    max_depth = 0
    stack = [(node, 1)]
    while stack:
        current, depth = stack.pop()
        max_depth = max(max_depth, depth)
        if current.type == "Call":
            stack.extend((child, depth + 1) for child in current.args)
    return max_depth


def _describe(node: Optional[ExprNode]) -> str:
    if node is None:
        return "<none>"

    if node.type == "Constant":
        return f"Constant: {node.value!r}"

    if node.type == "Variable":
        return f"Variable: {node.name} @ {id(node.cell):#x}"

    if node.type == "Call":
        callee = node.callee
        return f"Call[{callee.kind.value}/{callee.arity}]: {callee.name}"

    return f"Unknown: {node}"


def tree_to_string(node: Optional[ExprNode], indent: int = 0) -> str:
    """Returns a human-readable representation of a tree for debugging."""
    lines = []
    stack = [(node, indent)]
    while stack:
        current, level = stack.pop()
        lines.append("  " * level + _describe(current))
        if current is not None and current.type == "Call":
            stack.extend((child, level + 1) for child in reversed(current.args))
    return "\n".join(lines)


def print_tree(node: Optional[ExprNode], file: Optional[TextIO] = None) -> None:
    """Writes the debug rendering of a tree to ``file`` (stdout by default)."""
    print(tree_to_string(node), file=file or sys.stdout)
