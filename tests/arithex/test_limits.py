"""
Tests for expression limits.
"""

import pytest

from arithex import DEFAULT_EXPRESSION_LIMITS, ExpressionLimits, LimitExceededError
from arithex.limits import (
    check_ast_depth,
    check_ast_node_count,
    check_expression_length,
    check_nesting_depth,
)


class TestDefaults:
    """Tests for default limits."""

    def test_default_values(self):
        assert DEFAULT_EXPRESSION_LIMITS.max_expression_length == 4096
        assert DEFAULT_EXPRESSION_LIMITS.max_nesting_depth == 64
        assert DEFAULT_EXPRESSION_LIMITS.max_ast_nodes == 4096
        assert DEFAULT_EXPRESSION_LIMITS.max_ast_depth == 4096


class TestChecks:
    """Tests for limit checks."""

    def test_expression_length(self):
        check_expression_length("x" * 4096)
        with pytest.raises(LimitExceededError) as exc_info:
            check_expression_length("x" * 4097)
        assert exc_info.value.limit == 4096
        assert exc_info.value.actual == 4097
        assert exc_info.value.position == 4096

    def test_expression_length_custom_limit(self):
        with pytest.raises(LimitExceededError):
            check_expression_length("abc", ExpressionLimits(max_expression_length=2))

    def test_nesting_depth(self):
        check_nesting_depth(64, 0, "")
        with pytest.raises(LimitExceededError) as exc_info:
            check_nesting_depth(65, 7, "source")
        assert exc_info.value.position == 7
        assert exc_info.value.expression == "source"

    def test_node_count(self):
        check_ast_node_count(4096)
        with pytest.raises(LimitExceededError, match="max_ast_nodes"):
            check_ast_node_count(4097)

    def test_tree_depth(self):
        check_ast_depth(4096)
        with pytest.raises(LimitExceededError, match="max_ast_depth"):
            check_ast_depth(4097)
