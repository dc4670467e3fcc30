"""
Tokenizer (lexer) for the expression language.

Produces one lookahead token at a time for the parser. Identifiers are
resolved while scanning: caller bindings first, then the builtin registry.
"""

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Sequence

from .ast import Callee
from .bindings import Binding, BindingKind, find_binding
from .builtins import INFIX_OPERATORS, find_builtin
from .limits import ExpressionLimits, check_expression_length


class TokenType(Enum):
    """Token types produced by the tokenizer."""

    # Literals and references
    NUMBER = "NUMBER"
    VARIABLE = "VARIABLE"
    CALL = "CALL"

    # Binary operators
    INFIX = "INFIX"

    # Delimiters
    OPEN = "OPEN"
    CLOSE = "CLOSE"
    SEP = "SEP"

    # Special
    END = "END"
    ERROR = "ERROR"


@dataclass
class Token:
    """A token produced by the tokenizer."""

    type: TokenType
    value: str
    position: int
    number: float = 0.0
    cell: Any = None
    callee: Optional[Callee] = None
    message: Optional[str] = None


# Longest numeric prefix: digits with an optional fraction, or a bare
# fraction, followed by an exponent only when it has digits.
_NUMBER_RE = re.compile(r"(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")

# Hexadecimal form with an optional binary exponent, e.g. 0x1A or 0x1.8p3.
# "0x" without hex digits scans as the number 0.
_HEX_NUMBER_RE = re.compile(
    r"0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)(?:[pP][+-]?[0-9]+)?"
)

_STRUCTURAL = {
    "(": TokenType.OPEN,
    ")": TokenType.CLOSE,
    ",": TokenType.SEP,
}


def _is_digit(ch: str) -> bool:
    """Checks if a character is a digit."""
    return "0" <= ch <= "9"


def _is_identifier_start(ch: str) -> bool:
    """Checks if a character can start an identifier."""
    return ("a" <= ch <= "z") or ("A" <= ch <= "Z")


def _is_identifier_part(ch: str) -> bool:
    """Checks if a character can continue an identifier."""
    return _is_identifier_start(ch) or _is_digit(ch) or ch == "_"


def _is_whitespace(ch: str) -> bool:
    """Checks if a character is whitespace."""
    return ch in (" ", "\t", "\n", "\r")


class Tokenizer:
    """Single-lookahead tokenizer over an expression string."""

    def __init__(
        self,
        source: str,
        variables: Optional[Sequence[Binding]] = (),
        natural_log: bool = False,
        limits: Optional[ExpressionLimits] = None,
    ):
        check_expression_length(source, limits)
        self._source = source
        self._variables = variables or ()
        self._natural_log = natural_log
        self._position = 0

    @property
    def source(self) -> str:
        return self._source

    @property
    def position(self) -> int:
        """Offset of the first character not yet consumed."""
        return self._position

    def next_token(self) -> Token:
        """Scans and returns the next token, skipping whitespace."""
        while not self._is_at_end() and _is_whitespace(self._peek()):
            self._position += 1

        start_position = self._position

        if self._is_at_end():
            return Token(TokenType.END, "", start_position)

        ch = self._peek()

        # Number literals
        if _is_digit(ch) or ch == ".":
            return self._scan_number(start_position)

        # Identifiers
        if _is_identifier_start(ch):
            return self._scan_identifier(start_position)

        self._position += 1

        if ch in INFIX_OPERATORS:
            return Token(
                TokenType.INFIX, ch, start_position, callee=INFIX_OPERATORS[ch]
            )

        if ch in _STRUCTURAL:
            return Token(_STRUCTURAL[ch], ch, start_position)

        return Token(
            TokenType.ERROR,
            ch,
            start_position,
            message=f"Unexpected character: '{ch}'",
        )

    def _is_at_end(self) -> bool:
        return self._position >= len(self._source)

    def _peek(self) -> str:
        if self._is_at_end():
            return "\0"
        return self._source[self._position]

    def _scan_number(self, start_position: int) -> Token:
        match = _HEX_NUMBER_RE.match(self._source, start_position)
        if match is not None:
            text = match.group()
            self._position = match.end()
            try:
                number = float.fromhex(text)
            except OverflowError:
                number = math.inf
            return Token(TokenType.NUMBER, text, start_position, number=number)

        match = _NUMBER_RE.match(self._source, start_position)
        if match is None:
            # A lone '.' with no digits
            self._position += 1
            return Token(
                TokenType.ERROR,
                ".",
                start_position,
                message="Invalid number: expected digits",
            )

        text = match.group()
        self._position = match.end()
        return Token(TokenType.NUMBER, text, start_position, number=float(text))

    def _scan_identifier(self, start_position: int) -> Token:
        while _is_identifier_part(self._peek()):
            self._position += 1

        name = self._source[start_position : self._position]

        binding = find_binding(self._variables, name)
        if binding is not None:
            if binding.kind is BindingKind.VARIABLE:
                return Token(
                    TokenType.VARIABLE, name, start_position, cell=binding.target
                )
            return Token(
                TokenType.CALL, name, start_position, callee=binding.to_callee()
            )

        builtin = find_builtin(name, self._natural_log)
        if builtin is not None:
            return Token(
                TokenType.CALL, name, start_position, callee=builtin.to_callee()
            )

        return Token(
            TokenType.ERROR,
            name,
            start_position,
            message=f"Unknown identifier: '{name}'",
        )


def tokenize(
    source: str,
    variables: Optional[Sequence[Binding]] = (),
    natural_log: bool = False,
    limits: Optional[ExpressionLimits] = None,
) -> List[Token]:
    """
    Tokenizes an expression string into tokens.

    Unlike the parser this does not stop at ERROR tokens; it scans through
    to the END token, which is always last.

    Args:
        source: The expression string to tokenize
        variables: Optional host bindings used to resolve identifiers
        natural_log: Resolve "log" to the natural logarithm
        limits: Optional expression limits

    Returns:
        List of tokens
    """
    tokenizer = Tokenizer(source, variables, natural_log, limits)
    tokens: List[Token] = []
    while True:
        token = tokenizer.next_token()
        tokens.append(token)
        if token.type == TokenType.END:
            return tokens
