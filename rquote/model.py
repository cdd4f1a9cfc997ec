"""Constructors, predicates and accessors for expression trees.

These are the only entry points callers need to build trees by hand; the
parser builds trees through them as well, so every tree it emits satisfies the
same invariants (valid identifiers, unique argument names).
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from rquote.errors import IndexOutOfRange, NameNotFound, NotACall
from rquote.types.call import Arg, Call, Formals, Param, Expression, Node, EXPRESSION_TYPES, NODE_TYPES
from rquote.types.constant import Constant
from rquote.types.name import Name


def make_constant(value: Any) -> Constant:
    """Wrap a literal. Ranges and lists of scalars become atomic vectors."""
    if isinstance(value, Constant):
        return value
    if isinstance(value, (range, list)):
        value = tuple(value)
    return Constant(value)


def make_name(identifier: str) -> Name:
    if isinstance(identifier, Name):
        return identifier
    return Name(identifier)


def as_node(obj: Any) -> Node:
    """Nodes pass through, literals are wrapped in a Constant."""
    if isinstance(obj, NODE_TYPES):
        return obj
    return make_constant(obj)


def _as_arg(item: Any) -> Arg:
    if isinstance(item, Arg):
        return item
    if isinstance(item, tuple) and len(item) == 2 and (item[0] is None or isinstance(item[0], str)):
        name, value = item
        return Arg(as_node(value), name or None)
    return Arg(as_node(item))


def make_call(callee: Expression | str, args: Iterable = ()) -> Call:
    """Build a call.

    `callee` may be an expression or a string naming the function. Each entry
    of `args` is an Arg, a `(name, value)` pair (name may be None), a node, or
    a literal that becomes a Constant.
    """
    if isinstance(callee, str):
        callee = make_name(callee)
    return Call(callee, tuple(_as_arg(a) for a in args))


def _as_param(item: Any) -> Param:
    if isinstance(item, Param):
        return item
    if isinstance(item, str):
        return Param(item)
    name, default = item
    return Param(name, None if default is None else as_node(default))


def make_formals(params: Iterable | Mapping = ()) -> Formals:
    if isinstance(params, Formals):
        return params
    if isinstance(params, Mapping):
        params = params.items()
    return Formals(tuple(_as_param(p) for p in params))


def make_function(params: Iterable | Mapping, body: Any) -> Call:
    """`function(params) body`"""
    return Call(Name("function"), (Arg(make_formals(params)), Arg(as_node(body))))


# ----------------- Predicates -----------------

def is_constant(obj: Any) -> bool:
    return isinstance(obj, Constant)


def is_name(obj: Any) -> bool:
    return isinstance(obj, Name)


def is_call(obj: Any) -> bool:
    return isinstance(obj, Call)


def is_formals(obj: Any) -> bool:
    return isinstance(obj, Formals)


def is_expression(obj: Any) -> bool:
    return isinstance(obj, EXPRESSION_TYPES)


def is_call_to(obj: Any, identifier: str) -> bool:
    """True if `obj` is a call whose callee is the bare name `identifier`."""
    return isinstance(obj, Call) and isinstance(obj.callee, Name) and obj.callee.id == identifier


# ----------------- Accessors -----------------

def _require_call(obj: Any) -> Call:
    if not isinstance(obj, Call):
        raise NotACall(f"Expected a call, got {obj!r}")
    return obj


def arity(call: Call) -> int:
    return len(_require_call(call).args)


def nth_argument(call: Call, index: int) -> Node:
    """0-based positional access to an argument's value."""
    args = _require_call(call).args
    if not isinstance(index, int) or index < 0 or index >= len(args):
        raise IndexOutOfRange(f"Argument index {index} out of range for call with {len(args)} argument(s)")
    return args[index].value


def argument_by_name(call: Call, name: str) -> Node:
    for a in _require_call(call).args:
        if a.name == name:
            return a.value
    raise NameNotFound(f"Call has no argument named {name!r}")


def callee(call: Call) -> Expression:
    return _require_call(call).callee


def arguments(call: Call) -> list[Arg]:
    return list(_require_call(call).args)


def argument_names(call: Call) -> list[str | None]:
    return [a.name for a in _require_call(call).args]


def rebuild_call(fn: Expression | str, args: Iterable) -> Call:
    """Inverse of (callee, arguments): rebuild_call(callee(x), arguments(x)) == x."""
    return make_call(fn, args)


def with_arguments(call: Call, args: Iterable) -> Call:
    """A copy of `call` with its argument list replaced."""
    return make_call(_require_call(call).callee, args)


def equals(a: Any, b: Any) -> bool:
    """Structural, purely syntactic equality.

    Two trees are equal iff they have the same variant and recursively equal
    contents, argument names and order included. Nothing is evaluated, so
    `mean(1:10)` with a literal range argument and `mean(1:10)` with a `:`
    call are different trees.
    """
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        return len(a) == len(b) and all(equals(x, y) for x, y in zip(a, b))
    if not isinstance(a, NODE_TYPES) or not isinstance(b, NODE_TYPES):
        return False
    return a == b
