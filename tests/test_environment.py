import pytest

from rquote import (
    Arg,
    Binding,
    BindingEnvironment,
    Constant,
    Formals,
    InvalidIdentifier,
    MalformedVariadicBinding,
    Name,
    NameNotFound,
    parse,
)
from rquote.types.environment import DOTS, EXPRESSION, VALUE, as_environment, dots_to_args


def test_fixture_has_one_binding_of_each_kind(env):
    assert env.find("n").kind == VALUE
    assert env.find("expr").kind == EXPRESSION
    assert env.find("...").kind == DOTS
    assert env.find("missing") is None


@pytest.mark.parametrize(
    "obj,kind",
    [
        (1, VALUE),
        ("text", VALUE),
        (None, VALUE),
        (range(3), VALUE),
        (Name("y"), EXPRESSION),
        (Constant(1), EXPRESSION),
        (parse("f(x)"), EXPRESSION),
    ]
)
def test_define_infers_the_kind(obj, kind):
    env = BindingEnvironment().define("x", obj)
    assert env.lookup("x") == Binding(kind, obj)


def test_define_dots_and_explicit_bindings():
    env = BindingEnvironment()
    env.define("...", [(None, Name("a"))])
    env.define("x", Binding(VALUE, Name("y")))
    assert env.lookup("...") == Binding(DOTS, ((None, Name("a")),))
    assert env.lookup("x").kind == VALUE


def test_binders_chain():
    env = BindingEnvironment().bind_value("a", 1).bind_expression("b", Name("c"))
    assert env.names() == ["a", "b"]


def test_names_may_be_given_as_name_nodes():
    env = BindingEnvironment().bind_value(Name("x"), 1)
    assert "x" in env
    assert Name("x") in env
    assert env.lookup(Name("x")).payload == 1


@pytest.mark.parametrize("name", ["", 3, None])
def test_invalid_binding_names(name):
    with pytest.raises(InvalidIdentifier):
        BindingEnvironment().bind_value(name, 1)


@pytest.mark.parametrize("expr", [1, "x", Formals(())])
def test_bind_expression_requires_an_expression(expr):
    with pytest.raises(TypeError):
        BindingEnvironment().bind_expression("x", expr)


@pytest.mark.parametrize(
    "bind",
    [
        lambda env: env.bind_value("...", 5),
        lambda env: env.bind_value(Name("..."), 5),
        lambda env: env.bind_expression("...", parse("g(1)")),
    ]
)
def test_dots_only_bind_through_bind_dots(bind):
    env = BindingEnvironment()
    with pytest.raises(MalformedVariadicBinding):
        bind(env)
    assert "..." not in env


def test_lookup_missing_name():
    with pytest.raises(NameNotFound):
        BindingEnvironment({"x": 1}).lookup("y")


def test_child_scopes_shadow_their_parent():
    parent = BindingEnvironment({"x": 1, "y": 2})
    child = parent.child({"y": 3, "z": 4})
    assert child.lookup("y").payload == 3
    assert child.lookup("x").payload == 1
    assert "z" not in parent
    assert child.names() == ["y", "z", "x"]


def test_update():
    env = BindingEnvironment({"x": 1})
    env.update({"x": 2, "y": Name("q")})
    assert env.lookup("x").payload == 2
    assert env.lookup("y").kind == EXPRESSION


def test_str_and_repr():
    parent = BindingEnvironment({"x": 1})
    child = parent.child({"y": Name("z")})
    assert str(parent) == "{x: <value 1>}"
    assert str(child) == "{y: <expression Name('z')>} -> ..."
    assert repr(child) == "<BindingEnvironment chain: {y: <expression Name('z')>} -> {x: <value 1>}>"


def test_as_environment():
    env = BindingEnvironment()
    assert as_environment(env) is env
    assert as_environment(None).names() == []
    assert as_environment({"x": 1}).lookup("x").payload == 1
    with pytest.raises(TypeError):
        as_environment([("x", 1)])


def test_dots_to_args():
    args = dots_to_args([(None, Name("a")), ("b", Constant(2)), Arg(Name("c"), "c")])
    assert args == [Arg(Name("a")), Arg(Constant(2), "b"), Arg(Name("c"), "c")]
    assert dots_to_args(()) == []


@pytest.mark.parametrize(
    "pairs",
    ["ab", {"a": Name("a")}, [Name("a")], [("a", 1)], [(1, Name("a"))], [("", Name("a"))]],
)
def test_dots_to_args_rejects_malformed_pairs(pairs):
    with pytest.raises(MalformedVariadicBinding):
        dots_to_args(pairs)
