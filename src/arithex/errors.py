"""
Error types for the arithmetic expression engine.

All compile-time errors extend ExpressionError for consistent handling.
Evaluation never raises: domain errors surface as NaN or infinity.
"""

from typing import Optional


class ExpressionError(Exception):
    """
    Base error class for all expression-related errors.
    """

    def __init__(
        self,
        message: str,
        position: Optional[int] = None,
        expression: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.position = position
        self.expression = expression

    def format_with_context(self) -> str:
        """
        Returns a formatted error message with position context.
        """
        if self.expression is None or self.position is None:
            return self.message

        pointer = " " * self.position + "^"
        return f"{self.message}\n  {self.expression}\n  {pointer}"


class TokenizerError(ExpressionError):
    """
    Error raised for lexical errors: unknown characters, malformed numbers
    and identifiers that resolve to neither a binding nor a builtin.
    """

    pass


class ParseError(ExpressionError):
    """
    Error raised during parsing (syntax analysis).
    """

    pass


class LimitExceededError(ExpressionError):
    """
    Error raised when expression limits are exceeded.
    """

    def __init__(
        self,
        limit_name: str,
        limit: int,
        actual: int,
        position: Optional[int] = None,
        expression: Optional[str] = None,
    ):
        message = f"Limit exceeded: {limit_name} (limit: {limit}, actual: {actual})"
        super().__init__(message, position, expression)
        self.limit_name = limit_name
        self.limit = limit
        self.actual = actual


class BindingError(ExpressionError):
    """
    Error raised when a host binding is malformed.
    """

    def __init__(self, name: str, message: str):
        super().__init__(f"{name}: {message}")
        self.name = name
