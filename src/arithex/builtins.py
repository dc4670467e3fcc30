"""
Built-in functions and operators for the expression language.

All built-in functions are pure and deterministic, and follow IEEE 754 /
C99 math semantics instead of Python's:
- Domain errors (sqrt(-1), acos(2), x % 0) return NaN.
- Poles (1/0, ln(0)) return a signed infinity.
- Overflow returns a signed infinity.
None of them raise.

The registry is a tuple sorted by name and searched with bisect, so any new
entry must be inserted in alphabetical order.
"""

import math
from bisect import bisect_left
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from .ast import Callee, CalleeKind

NAN = float("nan")
INF = float("inf")

# Saturation bounds of the unsigned integer accumulators used by fac/ncr/npr.
UINT_MAX = 2**32 - 1
ULONG_MAX = 2**64 - 1


@dataclass(frozen=True)
class Builtin:
    """A named entry of the builtin registry."""

    name: str
    function: Callable[..., float]
    arity: int
    pure: bool = True

    def to_callee(self) -> Callee:
        return Callee(
            kind=CalleeKind.BUILTIN,
            name=self.name,
            function=self.function,
            arity=self.arity,
            pure=self.pure,
        )


def _nan_on_domain_error(fn: Callable[[float], float]) -> Callable[[float], float]:
    """Wraps a one-argument math function so domain errors yield NaN."""

    def wrapper(a: float) -> float:
        try:
            return fn(a)
        except ValueError:
            return NAN

    wrapper.__name__ = fn.__name__
    wrapper.__doc__ = fn.__doc__
    return wrapper


def _is_odd_integer(x: float) -> bool:
    return math.isfinite(x) and x == math.floor(x) and math.fmod(x, 2.0) != 0.0


# ============================================================
# Operators
# ============================================================


def add(a: float, b: float) -> float:
    return a + b


def sub(a: float, b: float) -> float:
    return a - b


def mul(a: float, b: float) -> float:
    return a * b


def divide(a: float, b: float) -> float:
    """a / b with IEEE results for a zero divisor."""
    if b == 0.0:
        if a == 0.0 or math.isnan(a):
            return NAN
        return math.copysign(INF, a) * math.copysign(1.0, b)
    return a / b


def fmod(a: float, b: float) -> float:
    """Remainder with the sign of the dividend, as C fmod."""
    try:
        return math.fmod(a, b)
    except ValueError:
        return NAN


def power(a: float, b: float) -> float:
    """C pow(): overflow saturates, 0 to a negative power is a pole."""
    try:
        return math.pow(a, b)
    except OverflowError:
        if a < 0.0 and _is_odd_integer(b):
            return -INF
        return INF
    except ValueError:
        if a == 0.0:
            # Only reached for negative exponents
            if _is_odd_integer(b):
                return math.copysign(INF, a)
            return INF
        return NAN


def negate(a: float) -> float:
    return -a


def comma(a: float, b: float) -> float:
    """Evaluates both sides and keeps the right one."""
    return b


ADD = Callee(CalleeKind.OPERATOR, "+", add, 2, pure=True)
SUB = Callee(CalleeKind.OPERATOR, "-", sub, 2, pure=True)
MUL = Callee(CalleeKind.OPERATOR, "*", mul, 2, pure=True)
DIV = Callee(CalleeKind.OPERATOR, "/", divide, 2, pure=True)
POW = Callee(CalleeKind.OPERATOR, "^", power, 2, pure=True)
MOD = Callee(CalleeKind.OPERATOR, "%", fmod, 2, pure=True)
NEGATE = Callee(CalleeKind.OPERATOR, "negate", negate, 1, pure=True)
COMMA = Callee(CalleeKind.OPERATOR, ",", comma, 2, pure=True)

# Operator callees by their source character
INFIX_OPERATORS = {
    "+": ADD,
    "-": SUB,
    "*": MUL,
    "/": DIV,
    "^": POW,
    "%": MOD,
}


# ============================================================
# Math Helpers
# ============================================================


def _pi() -> float:
    return math.pi


def _e() -> float:
    return math.e


def _exp(a: float) -> float:
    try:
        return math.exp(a)
    except OverflowError:
        return INF


def _cosh(a: float) -> float:
    try:
        return math.cosh(a)
    except OverflowError:
        return INF


def _sinh(a: float) -> float:
    try:
        return math.sinh(a)
    except OverflowError:
        return math.copysign(INF, a)


def _log_with(fn: Callable[[float], float]) -> Callable[[float], float]:
    def log(a: float) -> float:
        if math.isnan(a) or a < 0.0:
            return NAN
        if a == 0.0:
            return -INF
        return fn(a)

    return log


_ln = _log_with(math.log)
_log10 = _log_with(math.log10)


def _sqrt(a: float) -> float:
    if math.isnan(a) or a < 0.0:
        return NAN
    return math.sqrt(a)


def _floor(a: float) -> float:
    if not math.isfinite(a):
        return a
    return float(math.floor(a))


def _ceil(a: float) -> float:
    if not math.isfinite(a):
        return a
    return float(math.ceil(a))


def fac(a: float) -> float:
    """
    fac(n) -> n!

    Truncates n to an integer. Saturates to infinity once the product no
    longer fits an unsigned 64-bit accumulator (21! and up); negative or
    NaN input is NaN.
    """
    if math.isnan(a) or a < 0.0:
        return NAN
    if a > UINT_MAX:
        return INF
    n = int(a)
    result = 1
    for i in range(1, n + 1):
        if i > ULONG_MAX // result:
            return INF
        result *= i
    return float(result)


def ncr(n: float, r: float) -> float:
    """
    ncr(n, r) -> number of r-combinations of n items

    Same truncation and saturation rules as fac; n < r is NaN.
    """
    if math.isnan(n) or math.isnan(r) or n < 0.0 or r < 0.0 or n < r:
        return NAN
    if n > UINT_MAX or r > UINT_MAX:
        return INF
    un = int(n)
    ur = int(r)
    if ur > un // 2:
        ur = un - ur
    result = 1
    for i in range(1, ur + 1):
        if result > ULONG_MAX // (un - ur + i):
            return INF
        result *= un - ur + i
        result //= i
    return float(result)


def npr(n: float, r: float) -> float:
    """npr(n, r) -> number of r-permutations of n items"""
    return ncr(n, r) * fac(r)


# ============================================================
# Registry
# ============================================================

# Must stay in alphabetical order.
BUILTINS: Tuple[Builtin, ...] = (
    Builtin("abs", math.fabs, 1),
    Builtin("acos", _nan_on_domain_error(math.acos), 1),
    Builtin("asin", _nan_on_domain_error(math.asin), 1),
    Builtin("atan", math.atan, 1),
    Builtin("atan2", math.atan2, 2),
    Builtin("ceil", _ceil, 1),
    Builtin("cos", _nan_on_domain_error(math.cos), 1),
    Builtin("cosh", _cosh, 1),
    Builtin("e", _e, 0),
    Builtin("exp", _exp, 1),
    Builtin("fac", fac, 1),
    Builtin("floor", _floor, 1),
    Builtin("ln", _ln, 1),
    Builtin("log", _log10, 1),
    Builtin("log10", _log10, 1),
    Builtin("ncr", ncr, 2),
    Builtin("npr", npr, 2),
    Builtin("pi", _pi, 0),
    Builtin("pow", power, 2),
    Builtin("sin", _nan_on_domain_error(math.sin), 1),
    Builtin("sinh", _sinh, 1),
    Builtin("sqrt", _sqrt, 1),
    Builtin("tan", _nan_on_domain_error(math.tan), 1),
    Builtin("tanh", math.tanh, 1),
)

# Same table with "log" resolving to the natural logarithm.
BUILTINS_NATURAL_LOG: Tuple[Builtin, ...] = tuple(
    Builtin("log", _ln, 1) if entry.name == "log" else entry for entry in BUILTINS
)


def is_sorted(table: Tuple[Builtin, ...]) -> bool:
    """Checks that a registry is strictly ascending by name."""
    return all(a.name < b.name for a, b in zip(table, table[1:]))


if not is_sorted(BUILTINS):
    raise RuntimeError("BUILTINS must be sorted by name")

_NAMES = tuple(entry.name for entry in BUILTINS)


def find_builtin(name: str, natural_log: bool = False) -> Optional[Builtin]:
    """
    Looks up a builtin by exact name using binary search.

    Args:
        name: The identifier to resolve
        natural_log: Resolve "log" to the natural logarithm

    Returns:
        The registry entry, or None if the name is not a builtin
    """
    index = bisect_left(_NAMES, name)
    if index == len(_NAMES) or _NAMES[index] != name:
        return None
    table = BUILTINS_NATURAL_LOG if natural_log else BUILTINS
    return table[index]


def is_builtin_function(name: str) -> bool:
    """Checks if a name is a built-in function."""
    return find_builtin(name) is not None
