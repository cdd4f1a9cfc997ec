import pytest
from hypothesis import given, strategies as st

from rquote import (
    NA,
    Arg,
    BindingEnvironment,
    Call,
    Constant,
    InvalidReplacementType,
    MalformedVariadicBinding,
    MaxDepthExceeded,
    Name,
    argument_names,
    arity,
    iter_nodes,
    make_call,
    make_function,
    parse,
    render,
    substitute,
)

a, b, x, y = Name("a"), Name("b"), Name("x"), Name("y")


def test_empty_environment_returns_the_same_tree():
    expr = parse("f(x, g(y = 1), function(z = w) z)")
    assert substitute(expr) is expr
    assert substitute(expr, {}) is expr
    assert substitute(expr, {"unrelated": 1}) is expr


def test_unchanged_subtrees_are_shared():
    expr = parse("f(g(a), h(b))")
    out = substitute(expr, {"a": 1})
    assert out == parse("f(g(1), h(b))")
    assert out.args[1] is expr.args[1]


@pytest.mark.parametrize(
    "bindings,expected",
    [
        ({"x": 2}, "2 + 1"),
        ({"x": parse("f(y)")}, "f(y) + 1"),
        ({"x": "s"}, '"s" + 1'),
        ({"x": None}, "NULL + 1"),
        ({"x": NA}, "NA + 1"),
        ({"x": -1.5}, "-1.5 + 1"),
        ({"y": 2}, "x + 1"),
    ]
)
def test_substitute_values_and_expressions(bindings, expected):
    assert render(substitute(parse("x + 1"), bindings)) == expected


def test_value_and_expression_bindings_differ():
    as_value = BindingEnvironment().bind_value("x", "y")
    as_expression = BindingEnvironment().bind_expression("x", y)
    assert substitute(x, as_value) == Constant("y")
    assert substitute(x, as_expression) == y
    assert render(substitute(x, as_value)) == '"y"'
    assert render(substitute(x, as_expression)) == "y"


def test_substitution_is_a_single_pass():
    assert substitute(parse("f(x)"), {"x": y, "y": 1}) == parse("f(y)")


def test_substitution_is_idempotent_once_names_are_gone():
    once = substitute(parse("f(x, x)"), {"x": 1})
    assert substitute(once, {"x": 1}) == once


def test_callees_are_substituted():
    assert substitute(parse("f(x)"), {"f": Name("g")}) == parse("g(x)")
    assert substitute(parse("f(x)"), {"f": parse("h(1)")}) == parse("h(1)(x)")


def test_argument_and_parameter_names_are_kept():
    assert substitute(parse("f(x = x)"), {"x": 1}) == make_call("f", [("x", 1)])
    assert substitute(parse("function(x = y) x"), {"x": 3, "y": 2}) == parse("function(x = 2) 3")


def test_arity_is_preserved():
    expr = parse("f(a, b, c)")
    assert arity(substitute(expr, {"a": parse("g(1, 2)"), "b": 5})) == 3


def test_chained_environments():
    parent = BindingEnvironment({"x": 1, "y": 1})
    child = parent.child({"x": 2})
    assert substitute(parse("x + y"), child) == parse("2 + 1")
    assert substitute(parse("x + y"), parent) == parse("1 + 1")


def test_range_values_become_vectors():
    out = substitute(parse("mean(r)"), {"r": range(1, 11)})
    assert out == make_call("mean", [Constant(tuple(range(1, 11)))])
    assert render(out) == "mean(1:10)"
    assert out != parse("mean(1:10)")


def test_list_and_tuple_inputs_keep_their_type():
    out = substitute([x, y], {"x": 1})
    assert out == [Constant(1), y] and isinstance(out, list)
    out = substitute((x, y), {"y": 2})
    assert out == (x, Constant(2)) and isinstance(out, tuple)


# -------------------------------
# `...`
# -------------------------------

def test_dots_splice_in_place(env):
    assert substitute(parse("f(...)"), env) == make_call("f", [a, ("b", 2)])
    assert substitute(parse("f(x, ..., n)"), env) == make_call("f", [x, a, ("b", 2), 10])


def test_dots_only_splice_as_unnamed_arguments(env):
    assert substitute(parse("f(z = ...)"), env) == parse("f(z = ...)")
    assert substitute(parse("..."), env) == Name("...")


def test_unbound_dots_are_left_alone():
    expr = parse("f(x, ...)")
    assert substitute(expr, {"x": 1}) == parse("f(1, ...)")


def test_empty_dots_remove_the_argument():
    env = BindingEnvironment().bind_dots([])
    assert substitute(parse("f(...)"), env) == parse("f()")


def test_spliced_dots_are_not_substituted_again():
    env = BindingEnvironment({"x": 1}).bind_dots([(None, x)])
    assert substitute(parse("f(...)"), env) == parse("f(x)")


def test_dots_accept_args():
    env = BindingEnvironment().bind_dots([Arg(Constant(1), "n"), ("m", y)])
    assert substitute(parse("f(...)"), env) == parse("f(n = 1, m = y)")


@pytest.mark.parametrize(
    "payload",
    ["oops", [("a", 1)], [("", a)], [a], [(None, a, b)], 42],
)
def test_malformed_dots(payload):
    env = BindingEnvironment().bind_dots(payload)
    with pytest.raises(MalformedVariadicBinding) as err:
        substitute(parse("f(x, ...)"), env)
    assert err.value.path == (2,)


def test_dots_in_a_plain_mapping_must_be_pairs():
    with pytest.raises(MalformedVariadicBinding) as err:
        substitute(parse("f(a, ...)"), {"...": 5})
    assert err.value.path == (2,)


# -------------------------------
# Errors
# -------------------------------

def test_invalid_replacement_reports_the_path():
    env = BindingEnvironment().bind_value("x", object())
    with pytest.raises(InvalidReplacementType) as err:
        substitute(parse("f(y, g(x))"), env)
    assert err.value.path == (2, 1)


def test_unused_invalid_binding_is_harmless():
    env = BindingEnvironment().bind_value("x", object())
    expr = parse("f(y)")
    assert substitute(expr, env) is expr


def test_depth_limit():
    expr = x
    for _ in range(200):
        expr = make_call("f", [expr])
    with pytest.raises(MaxDepthExceeded):
        substitute(expr, {"x": 1})
    assert substitute(parse("f(g(x))"), {"x": 1}, max_depth=2) == parse("f(g(1))")
    with pytest.raises(MaxDepthExceeded):
        substitute(parse("f(g(x))"), {"x": 1}, max_depth=1)


@pytest.mark.parametrize("env", [42, "x", [("x", 1)]])
def test_environment_must_be_a_mapping(env):
    with pytest.raises(TypeError):
        substitute(x, env)


# -------------------------------
# Strategies
# -------------------------------
literal_strat = st.one_of(
    st.booleans(),
    st.integers(),
    st.floats(allow_nan=False),
    st.text(max_size=10),
    st.none(),
)


@given(literal_strat)
def test_any_literal_value_becomes_a_constant(value):
    assert substitute(parse("f(x)"), {"x": value}) == make_call("f", [Constant(value)])


name_strat = st.sampled_from(["a", "b", "x", "y", "f", "g", "T"])

leaf_strat = st.one_of(name_strat.map(Name), literal_strat.map(Constant))


@st.composite
def _calls(draw, children):
    fn = draw(st.one_of(name_strat, st.builds(make_call, name_strat, st.lists(children, max_size=2))))
    args = []
    seen = set()
    for value in draw(st.lists(children, max_size=3)):
        name = draw(st.one_of(st.none(), name_strat))
        if name in seen:
            name = None
        seen.add(name)
        args.append((name, value))
    return make_call(fn, args)


def _functions(children):
    params = st.lists(st.tuples(name_strat, st.one_of(st.none(), children)), unique_by=lambda p: p[0], max_size=3)
    return st.builds(make_function, params, children)


expr_strat = st.recursive(
    leaf_strat,
    lambda children: st.one_of(_calls(children), _functions(children)),
    max_leaves=20,
)

value_env_strat = st.dictionaries(name_strat, literal_strat, max_size=4)

mixed_env_strat = st.dictionaries(name_strat, st.one_of(literal_strat, expr_strat), max_size=4)


@given(expr_strat)
def test_empty_environment_is_the_identity(expr):
    assert substitute(expr, {}) is expr
    assert substitute(expr, BindingEnvironment()) == expr


@given(expr_strat, value_env_strat)
def test_value_substitution_is_idempotent(expr, env):
    once = substitute(expr, env)
    assert substitute(once, env) == once


@given(expr_strat, value_env_strat)
def test_value_substitution_keeps_the_shape(expr, env):
    before = list(iter_nodes(expr))
    after = list(iter_nodes(substitute(expr, env)))
    assert [path for path, _ in before] == [path for path, _ in after]
    for (_, old), (_, new) in zip(before, after):
        if isinstance(old, Call):
            assert argument_names(new) == argument_names(old)


@given(_calls(expr_strat), mixed_env_strat)
def test_arity_and_argument_order_are_kept(call, env):
    out = substitute(call, env)
    assert arity(out) == arity(call)
    assert argument_names(out) == argument_names(call)
    for old, new in zip(call.args, out.args):
        assert new.value == substitute(old.value, env)
