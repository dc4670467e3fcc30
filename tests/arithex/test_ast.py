"""
Tests for tree nodes and tree utilities.
"""

import io

import pytest

from arithex import (
    Callee,
    CalleeKind,
    CallNode,
    Cell,
    ConstantNode,
    VariableNode,
    closure,
    count_nodes,
    free,
    parse,
    print_tree,
    tree_depth,
    tree_to_string,
    variable,
)


def _callee(arity: int, kind: CalleeKind = CalleeKind.FUNCTION) -> Callee:
    return Callee(kind, f"f{arity}", lambda *args: 0.0, arity)


class TestNodes:
    """Tests for node construction."""

    def test_node_types(self):
        assert ConstantNode(1.0).type == "Constant"
        assert VariableNode("x", Cell()).type == "Variable"
        assert CallNode(_callee(0), []).type == "Call"

    def test_call_child_count_must_match_arity(self):
        with pytest.raises(ValueError):
            CallNode(_callee(2), [ConstantNode(1.0)])

    def test_callee_arity_range(self):
        with pytest.raises(ValueError):
            Callee(CalleeKind.FUNCTION, "f8", lambda *a: 0.0, 8)
        with pytest.raises(ValueError):
            Callee(CalleeKind.FUNCTION, "neg", lambda: 0.0, -1)

    def test_closure_invoke_prepends_context(self):
        callee = Callee(CalleeKind.CLOSURE, "c", lambda ctx, a: ctx - a, 1, context=10.0)
        assert callee.is_closure
        assert callee.invoke([4.0]) == 6.0


class TestFree:
    """Tests for tree release."""

    @pytest.mark.parametrize("arity", range(8))
    @pytest.mark.parametrize("kind", [CalleeKind.FUNCTION, CalleeKind.CLOSURE])
    def test_releases_every_arity(self, arity, kind):
        children = [ConstantNode(float(i)) for i in range(arity)]
        node = CallNode(_callee(arity, kind), list(children))
        assert free(node) == arity + 1
        assert node.released
        assert node.args == []
        assert all(child.released for child in children)

    def test_releases_children_before_parent(self):
        order = []

        class Tracked(ConstantNode):
            def __setattr__(self, key, value):
                if key == "released" and value:
                    order.append(self.value)
                super().__setattr__(key, value)

        inner = CallNode(_callee(1), [Tracked(1.0)])
        root = CallNode(_callee(2), [inner, Tracked(2.0)])
        free(root)
        assert order == [1.0, 2.0]
        assert root.released and inner.released

    def test_free_none_is_noop(self):
        assert free(None) == 0

    def test_double_free_releases_nothing(self):
        tree = parse("1 + 2 * 3")
        assert free(tree) == 5
        assert free(tree) == 0

    def test_free_does_not_touch_variable_cells(self):
        cell = Cell(5.0)
        tree = parse("x + 1", [variable("x", cell)])
        free(tree)
        assert cell.value == 5.0


class TestMetrics:
    """Tests for node count and depth."""

    def test_count_nodes(self):
        assert count_nodes(parse("1")) == 1
        assert count_nodes(parse("1 + 2 * 3")) == 5
        assert count_nodes(parse("pi")) == 1

    def test_tree_depth(self):
        assert tree_depth(parse("1")) == 1
        assert tree_depth(parse("1 + 2 * 3")) == 3
        assert tree_depth(parse("-(1 + 2)")) == 3

    def test_depth_of_very_deep_tree(self):
        node = ConstantNode(0.0)
        negate = _callee(1)
        for _ in range(5000):
            node = CallNode(negate, [node])
        assert tree_depth(node) == 5001
        assert count_nodes(node) == 5001

    def test_free_very_deep_tree(self):
        node = ConstantNode(0.0)
        negate = _callee(1)
        for _ in range(5000):
            node = CallNode(negate, [node])
        assert free(node) == 5001
        assert node.released


class TestDebugDump:
    """Tests for the tree printer."""

    def test_renders_kinds_and_indentation(self):
        cell = Cell(0.0)
        text = tree_to_string(parse("x + 2", [variable("x", cell)]))
        lines = text.splitlines()
        assert lines[0] == "Call[operator/2]: +"
        assert lines[1].startswith("  Variable: x @ ")
        assert lines[2] == "  Constant: 2.0"

    def test_renders_closures(self):
        binding = closure("c", lambda ctx: ctx, 1.0, 0)
        assert tree_to_string(parse("c", [binding])) == "Call[closure/0]: c"

    def test_renders_nested_calls_in_order(self):
        text = tree_to_string(parse("(1 + 2) * 3"))
        assert text.splitlines() == [
            "Call[operator/2]: *",
            "  Call[operator/2]: +",
            "    Constant: 1.0",
            "    Constant: 2.0",
            "  Constant: 3.0",
        ]

    def test_renders_very_deep_tree(self):
        node = ConstantNode(1.0)
        for _ in range(3000):
            node = CallNode(_callee(1), [node])
        lines = tree_to_string(node).splitlines()
        assert len(lines) == 3001
        assert lines[-1] == "  " * 3000 + "Constant: 1.0"

    def test_renders_none(self):
        assert tree_to_string(None) == "<none>"

    def test_print_tree_writes_to_file(self):
        out = io.StringIO()
        print_tree(parse("sqrt 4"), file=out)
        assert out.getvalue() == "Call[builtin/1]: sqrt\n  Constant: 4.0\n"
