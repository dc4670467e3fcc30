"""
Embeddable arithmetic expression engine.

Compiles formulas into expression trees once and evaluates them repeatedly
against live variable bindings.
"""

# Core types and utilities
from .ast import (
    MAX_ARITY,
    Callee,
    CalleeKind,
    CallNode,
    ConstantNode,
    ExprNode,
    VariableNode,
    count_nodes,
    free,
    print_tree,
    tree_depth,
    tree_to_string,
)

# Bindings
from .bindings import (
    Binding,
    BindingKind,
    Cell,
    closure,
    find_binding,
    function,
    variable,
)

# Builtins
from .builtins import (
    BUILTINS,
    Builtin,
    find_builtin,
    is_builtin_function,
)

# Compiler
from .compiler import (
    CompileResult,
    compile_expression,
    interpret,
)
from .config import (
    DEFAULT_COMPILER_CONFIG,
    CompilerConfig,
    normalize_config,
)
from .errors import (
    BindingError,
    ExpressionError,
    LimitExceededError,
    ParseError,
    TokenizerError,
)

# Evaluator
from .evaluator import (
    Evaluator,
    evaluate,
)
from .limits import (
    DEFAULT_EXPRESSION_LIMITS,
    ExpressionLimits,
)
from .optimizer import optimize

# Parser
from .parser import (
    Parser,
    parse,
)

# Tokenizer
from .tokenizer import (
    Token,
    Tokenizer,
    TokenType,
    tokenize,
)

__all__ = [
    # Tree types
    "ExprNode",
    "ConstantNode",
    "VariableNode",
    "CallNode",
    "Callee",
    "CalleeKind",
    "MAX_ARITY",
    "free",
    "count_nodes",
    "tree_depth",
    "tree_to_string",
    "print_tree",
    # Bindings
    "Binding",
    "BindingKind",
    "Cell",
    "variable",
    "function",
    "closure",
    "find_binding",
    # Builtins
    "Builtin",
    "BUILTINS",
    "find_builtin",
    "is_builtin_function",
    # Errors
    "ExpressionError",
    "TokenizerError",
    "ParseError",
    "LimitExceededError",
    "BindingError",
    # Configuration
    "CompilerConfig",
    "DEFAULT_COMPILER_CONFIG",
    "normalize_config",
    "ExpressionLimits",
    "DEFAULT_EXPRESSION_LIMITS",
    # Tokenizer
    "Token",
    "TokenType",
    "Tokenizer",
    "tokenize",
    # Parser
    "Parser",
    "parse",
    # Optimizer
    "optimize",
    # Evaluator
    "Evaluator",
    "evaluate",
    # Compiler
    "CompileResult",
    "compile_expression",
    "interpret",
]
