"""
Host bindings: variables, functions and closures made visible to expressions.

Bindings are looked up by exact name with a linear scan, ahead of the
builtin registry, so a binding shadows a builtin of the same name.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Sequence

from .ast import MAX_ARITY, Callee, CalleeKind
from .errors import BindingError


@dataclass
class Cell:
    """
    Mutable storage for a variable.

    The caller owns the cell; compiled trees read ``value`` on every
    evaluation, so writes between evaluations are picked up.
    """

    value: float = 0.0


class BindingKind(Enum):
    """Kinds of host bindings."""

    VARIABLE = "variable"
    FUNCTION = "function"
    CLOSURE = "closure"


def _is_valid_name(name: str) -> bool:
    if not name or not name.isascii() or not name[0].isalpha():
        return False
    return all(ch.isalnum() or ch == "_" for ch in name)


@dataclass(frozen=True)
class Binding:
    """A single named host binding."""

    name: str
    kind: BindingKind
    target: Any
    arity: int = 0
    pure: bool = False
    context: Any = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not _is_valid_name(self.name):
            raise BindingError(
                str(self.name),
                "name must start with a letter and contain only letters, digits and '_'",
            )

        if self.kind is BindingKind.VARIABLE:
            if not hasattr(self.target, "value"):
                raise BindingError(self.name, "variable target must expose a 'value'")
            return

        if not callable(self.target):
            raise BindingError(self.name, "function target must be callable")
        if not isinstance(self.arity, int) or not 0 <= self.arity <= MAX_ARITY:
            raise BindingError(
                self.name, f"arity must be between 0 and {MAX_ARITY}, got {self.arity}"
            )

    def to_callee(self) -> Callee:
        """Returns the callee for a function or closure binding."""
        if self.kind is BindingKind.VARIABLE:
            raise BindingError(self.name, "variables cannot be called")
        return Callee(
            kind=(
                CalleeKind.CLOSURE
                if self.kind is BindingKind.CLOSURE
                else CalleeKind.FUNCTION
            ),
            name=self.name,
            function=self.target,
            arity=self.arity,
            pure=self.pure,
            context=self.context,
        )


def variable(name: str, cell: Any) -> Binding:
    """Binds ``name`` to a caller-owned cell."""
    return Binding(name, BindingKind.VARIABLE, cell)


def function(
    name: str, fn: Callable[..., float], arity: int, pure: bool = False
) -> Binding:
    """
    Binds ``name`` to a host function taking ``arity`` floats.

    Only pure functions (no side effects, no external state) are folded by
    the optimizer.
    """
    return Binding(name, BindingKind.FUNCTION, fn, arity=arity, pure=pure)


def closure(
    name: str,
    fn: Callable[..., float],
    context: Any,
    arity: int,
    pure: bool = False,
) -> Binding:
    """
    Binds ``name`` to a host function that receives ``context`` followed by
    ``arity`` floats.
    """
    return Binding(
        name, BindingKind.CLOSURE, fn, arity=arity, pure=pure, context=context
    )


def find_binding(bindings: Sequence[Binding], name: str) -> Optional[Binding]:
    """Finds the first binding named ``name``."""
    for binding in bindings:
        if binding.name == name:
            return binding
    return None
