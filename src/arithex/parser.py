"""
Parser for the expression language.

Builds an expression tree from the tokenizer's single lookahead token using
recursive descent.

Grammar (precedence lowest to highest):
    list   := expr {"," expr}
    expr   := term {("+" | "-") term}
    term   := factor {("*" | "/" | "%") factor}
    factor := power {"^" power}
    power  := {("+" | "-")} base
    base   := number | variable | call0 ["(" ")"] | call1 power
            | callN "(" expr {"," expr} ")" | "(" list ")"
"""

from typing import NoReturn, Optional, Sequence

from .ast import CallNode, ConstantNode, ExprNode, VariableNode, count_nodes, tree_depth
from .bindings import Binding
from .builtins import ADD, COMMA, DIV, MOD, MUL, NEGATE, POW, SUB
from .config import CompilerConfig, DEFAULT_COMPILER_CONFIG
from .errors import ParseError, TokenizerError
from .limits import (
    DEFAULT_EXPRESSION_LIMITS,
    ExpressionLimits,
    check_ast_depth,
    check_ast_node_count,
    check_nesting_depth,
)
from .tokenizer import Token, Tokenizer, TokenType


class Parser:
    """Parser for expression strings."""

    def __init__(
        self,
        source: str,
        variables: Optional[Sequence[Binding]] = (),
        config: CompilerConfig = DEFAULT_COMPILER_CONFIG,
        limits: ExpressionLimits = DEFAULT_EXPRESSION_LIMITS,
    ):
        self._source = source
        self._config = config
        self._limits = limits
        self._tokenizer = Tokenizer(source, variables, config.natural_log, limits)
        self._token: Optional[Token] = None
        self._depth = 0

    def parse(self) -> ExprNode:
        """Parses the whole source into a tree."""
        self._advance()
        root = self._parse_list()

        if self._token.type != TokenType.END:
            self._fail("Unexpected token after end of expression")

        check_ast_node_count(count_nodes(root), self._limits)
        check_ast_depth(tree_depth(root), self._limits)

        return root

    # ============================================================
    # Token Helpers
    # ============================================================

    def _advance(self) -> Token:
        self._token = self._tokenizer.next_token()
        return self._token

    def _check_infix(self, *operators) -> bool:
        token = self._token
        return token.type == TokenType.INFIX and any(
            token.callee is operator for operator in operators
        )

    def _fail(self, message: str) -> NoReturn:
        token = self._token
        if token.type == TokenType.ERROR:
            raise TokenizerError(token.message or message, token.position, self._source)
        if token.type == TokenType.END:
            message = f"{message}: unexpected end of expression"
        else:
            message = f"{message}: '{token.value}'"
        raise ParseError(message, token.position, self._source)

    def _expect(self, token_type: TokenType, message: str) -> None:
        if self._token.type != token_type:
            self._fail(message)
        self._advance()

    # ============================================================
    # Expression Parsing (by precedence, lowest to highest)
    # ============================================================

    def _parse_list(self) -> ExprNode:
        """Parses comma lists: expr {"," expr}"""
        node = self._parse_expr()

        while self._token.type == TokenType.SEP:
            self._advance()
            right = self._parse_expr()
            node = CallNode(COMMA, [node, right])

        return node

    def _parse_expr(self) -> ExprNode:
        """Parses additive: +, -"""
        node = self._parse_term()

        while self._check_infix(ADD, SUB):
            operator = self._token.callee
            self._advance()
            right = self._parse_term()
            node = CallNode(operator, [node, right])

        return node

    def _parse_term(self) -> ExprNode:
        """Parses multiplicative: *, /, %"""
        node = self._parse_factor()

        while self._check_infix(MUL, DIV, MOD):
            operator = self._token.callee
            self._advance()
            right = self._parse_factor()
            node = CallNode(operator, [node, right])

        return node

    def _parse_factor(self) -> ExprNode:
        """Parses exponentiation: ^"""
        if self._config.pow_associativity == "right_to_left":
            return self._parse_factor_right()
        return self._parse_factor_left()

    def _parse_factor_left(self) -> ExprNode:
        node = self._parse_power()

        while self._check_infix(POW):
            self._advance()
            exponent = self._parse_power()
            node = CallNode(POW, [node, exponent])

        return node

    def _parse_factor_right(self) -> ExprNode:
        # A leading sign applies to the whole chain: -a^b = -(a^b).
        # A sign inside parentheses belongs to the base: (-a)^b.
        negated = self._parse_sign() == -1
        node = self._parse_base()

        # Right-most pow node of the chain; the next exponent is inserted
        # below it so that a^b^c = a^(b^c).
        insertion: Optional[CallNode] = None

        while self._check_infix(POW):
            self._advance()
            exponent = self._parse_power()

            if insertion is None:
                node = CallNode(POW, [node, exponent])
                insertion = node
            else:
                inserted = CallNode(POW, [insertion.args[1], exponent])
                insertion.args[1] = inserted
                insertion = inserted

        if negated:
            node = CallNode(NEGATE, [node])

        return node

    def _parse_sign(self) -> int:
        """Consumes a run of '+' and '-' and returns the net sign."""
        sign = 1
        while self._check_infix(ADD, SUB):
            if self._token.callee is SUB:
                sign = -sign
            self._advance()
        return sign

    def _parse_power(self) -> ExprNode:
        """Parses unary signs: {("+" | "-")} base"""
        sign = self._parse_sign()
        node = self._parse_base()
        if sign == -1:
            node = CallNode(NEGATE, [node])
        return node

    def _parse_base(self) -> ExprNode:
        """Parses numbers, variables, calls and parenthesized lists."""
        token = self._token

        self._depth += 1
        try:
            check_nesting_depth(self._depth, token.position, self._source, self._limits)

            if token.type == TokenType.NUMBER:
                self._advance()
                return ConstantNode(token.number)

            if token.type == TokenType.VARIABLE:
                self._advance()
                return VariableNode(token.value, token.cell)

            if token.type == TokenType.CALL:
                return self._parse_call(token)

            if token.type == TokenType.OPEN:
                self._advance()
                node = self._parse_list()
                self._expect(TokenType.CLOSE, "Expected ')' after expression")
                return node

            self._fail("Unexpected token")
        finally:
            self._depth -= 1

    def _parse_call(self, token: Token) -> ExprNode:
        """Parses a function or closure call (current token is its name)."""
        callee = token.callee
        arity = callee.arity
        self._advance()

        if arity == 0:
            # foo() is the same as foo
            if self._token.type == TokenType.OPEN:
                self._advance()
                self._expect(TokenType.CLOSE, f"Expected ')' after '{callee.name}('")
            return CallNode(callee, [])

        if arity == 1:
            return CallNode(callee, [self._parse_power()])

        if self._token.type != TokenType.OPEN:
            self._fail(f"Expected '(' after '{callee.name}'")

        args = []
        while True:
            self._advance()
            args.append(self._parse_expr())
            if self._token.type != TokenType.SEP or len(args) == arity:
                break

        if self._token.type != TokenType.CLOSE or len(args) != arity:
            self._fail(
                f"'{callee.name}' expects {arity} argument(s) in parentheses"
            )
        self._advance()

        return CallNode(callee, args)


def parse(
    source: str,
    variables: Optional[Sequence[Binding]] = (),
    config: CompilerConfig = DEFAULT_COMPILER_CONFIG,
    limits: ExpressionLimits = DEFAULT_EXPRESSION_LIMITS,
) -> ExprNode:
    """
    Parses an expression string into an unoptimized tree.

    Args:
        source: The expression string to parse
        variables: Host bindings, searched before builtins
        config: Compiler configuration
        limits: Optional expression limits

    Returns:
        The parsed tree

    Raises:
        TokenizerError: If the expression contains invalid tokens
        ParseError: If parsing fails
        LimitExceededError: If the expression exceeds the limits
    """
    parser = Parser(source, variables, config, limits)
    return parser.parse()
