import operator

import pytest
from hypothesis import given, strategies as st

from rquote import (
    Constant,
    IndexOutOfRange,
    MaxDepthExceeded,
    Name,
    NameNotFound,
    NotACall,
    WalkIssue,
    iter_nodes,
    make_call,
    node_at,
    parse,
    substitute,
    walk,
)
from rquote.walk.walker import children


def _count(node, path):
    return 1, True


def test_children_of_a_call():
    assert list(children(parse("f(a, 1)"))) == [(0, Name("f")), (1, Name("a")), (2, Constant(1))]


def test_children_of_formals_skip_missing_defaults():
    formals = parse("function(x, y = 1) x").args[0].value
    assert list(children(formals)) == [(1, Constant(1))]


@pytest.mark.parametrize("leaf", [Name("x"), Constant(1)])
def test_leaves_have_no_children(leaf):
    assert list(children(leaf)) == []


def test_iter_nodes_is_pre_order():
    expr = parse("f(x, g(y))")
    assert [path for path, _ in iter_nodes(expr)] == [(), (0,), (1,), (2,), (2, 0), (2, 1)]
    assert [node for _, node in iter_nodes(expr)][-1] == Name("y")


def test_iter_nodes_over_a_list():
    assert list(iter_nodes([Name("a"), Name("b")])) == [((0,), Name("a")), ((1,), Name("b"))]


def test_node_at_follows_iter_nodes():
    expr = parse("function(x, y = g(1)) f(x)[[2]]")
    for path, node in iter_nodes(expr):
        assert node_at(expr, path) is node


@pytest.mark.parametrize("path", [(5,), (0, 0), (1, 0), (-1,)])
def test_node_at_dangling_path(path):
    with pytest.raises(IndexOutOfRange):
        node_at(parse("f(x)"), path)


def test_node_at_list_root():
    assert node_at([Name("a"), parse("g(b)")], (1, 1)) == Name("b")
    with pytest.raises(IndexOutOfRange):
        node_at([Name("a")], (1,))


def test_walk_counts_every_node():
    assert walk(parse("f(x, g(y), function(z = 1) z)"), _count, operator.add, 0) == 11


def test_walk_without_recursion_visits_the_root_only():
    assert walk(parse("f(x, g(y))"), lambda node, path: (1, False), operator.add, 0) == 1


def test_walk_recurses_into_selected_children():
    seen = []

    def visit(node, path):
        seen.append(path)
        return None, [2] if path == () else True

    walk(parse("f(x, g(y), z)"), visit, lambda acc, _: acc, None)
    assert seen == [(), (2,), (2, 0), (2, 1)]


def test_walk_over_a_list_adds_a_leading_index():
    paths = walk([Name("a"), Name("b")], lambda node, path: ([path], True), operator.add, [])
    assert paths == [(0,), (1,)]


def test_walk_records_failing_branches(diagnostics):
    def visit(node, path):
        if node == Name("bad"):
            raise NotACall("bad node")
        return 1, True

    total = walk(parse("f(bad, g(bad, y))"), visit, operator.add, 0, diagnostics=diagnostics)
    assert total == 5
    assert [issue.path for issue in diagnostics] == [(1,), (2, 1)]
    assert len(diagnostics) == 2
    assert all(isinstance(issue.error, NotACall) for issue in diagnostics)


def test_walk_skips_the_whole_failing_branch(diagnostics):
    def visit(node, path):
        if path == (1,):
            raise NameNotFound("skip me")
        return [path], True

    paths = walk(parse("f(g(a), b)"), visit, operator.add, [], diagnostics=diagnostics)
    assert paths == [(), (0,), (2,)]


def test_walk_without_diagnostics_still_skips():
    def visit(node, path):
        if isinstance(node, Name):
            raise NotACall("leaf")
        return 1, True

    assert walk(parse("f(g(x))"), visit, operator.add, 0) == 2


def test_other_exceptions_propagate():
    def visit(node, path):
        raise ValueError("boom")

    with pytest.raises(ValueError):
        walk(Name("x"), visit, operator.add, 0)


def test_depth_limit_propagates(diagnostics):
    expr = Name("x")
    for _ in range(200):
        expr = make_call("f", [expr])
    with pytest.raises(MaxDepthExceeded):
        walk(expr, _count, operator.add, 0, diagnostics=diagnostics)
    assert len(diagnostics) == 0
    with pytest.raises(MaxDepthExceeded):
        list(iter_nodes(expr))
    assert walk(parse("f(g(x))"), _count, operator.add, 0, max_depth=2) == 5
    with pytest.raises(MaxDepthExceeded):
        walk(parse("f(g(x))"), _count, operator.add, 0, max_depth=1)


def test_depth_errors_from_visit_propagate(diagnostics):
    def visit(node, path):
        return substitute(node, {}, max_depth=1), True

    with pytest.raises(MaxDepthExceeded):
        walk(parse("f(g(h(x)))"), visit, lambda acc, _: acc, None, diagnostics=diagnostics)
    assert len(diagnostics) == 0


def test_diagnostics_of_type(diagnostics):
    diagnostics.record((1,), Name("a"), NotACall("a"))
    diagnostics.record((2, 1), Name("b"), IndexOutOfRange("b"))
    assert [i.path for i in diagnostics.of_type(IndexOutOfRange)] == [(2, 1)]
    assert len(diagnostics.of_type(Exception)) == 2


def test_walk_issue_str():
    assert str(WalkIssue((1, 2), Name("a"), NotACall("boom"))) == "1/2: NotACall: boom"
    assert str(WalkIssue((), Name("a"), NotACall("boom"))) == "<root>: NotACall: boom"


# -------------------------------
# Strategies
# -------------------------------
name_strat = st.sampled_from(["a", "b", "f", "g"]).map(Name)

expr_strat = st.recursive(
    st.one_of(name_strat, st.integers().map(Constant)),
    lambda inner: st.builds(make_call, name_strat, st.lists(inner, max_size=3)),
    max_leaves=15,
)


@given(expr_strat)
def test_walk_and_iter_nodes_agree(expr):
    paths = walk(expr, lambda node, path: ([path], True), operator.add, [])
    assert paths == [path for path, _ in iter_nodes(expr)]
