from __future__ import annotations

from typing import Optional

from rquote import model
from rquote.config import get_max_depth
from rquote.errors import InvalidIdentifier, InvalidReplacementType, MalformedVariadicBinding, MaxDepthExceeded
from rquote.transform.substitute import substitute
from rquote.types.call import Arg, Call, Formals, Param
from rquote.types.environment import BindingEnvironment, DOTS, EXPRESSION, as_environment, dots_to_args
from rquote.types.name import Name

UNQUOTE = "."
UNQUOTE_SPLICING = ".."


def _marker(node, marker: str):
    """The single unnamed argument of `.(x)` / `..(x)`, or None."""
    if (
        model.is_call_to(node, marker)
        and len(node.args) == 1
        and node.args[0].name is None
    ):
        return node.args[0].value
    return None


def _splice(inner, env: BindingEnvironment, path: tuple) -> list[Arg]:
    if not isinstance(inner, Name):
        raise MalformedVariadicBinding(f"..() expects a name, got {inner!r}", path)
    binding = env.find(inner.id)
    if binding is None or binding.kind == EXPRESSION:
        raise MalformedVariadicBinding(f"..({inner.id}) needs a sequence bound to {inner.id!r}", path)
    items = binding.payload
    if not isinstance(items, (list, tuple, range)):
        raise MalformedVariadicBinding(
            f"..({inner.id}) needs a sequence, {inner.id!r} is bound to {type(items).__name__}", path
        )
    if binding.kind == DOTS:
        try:
            return dots_to_args(items)
        except MalformedVariadicBinding as err:
            raise MalformedVariadicBinding(str(err), path) from err
    out = []
    for item in items:
        if isinstance(item, Arg):
            name, value = item.name, item.value
        elif isinstance(item, tuple) and len(item) == 2 and (item[0] is None or isinstance(item[0], str)):
            name, value = item
        else:
            name, value = None, item
        try:
            out.append(Arg(model.as_node(value), name))
        except (InvalidIdentifier, InvalidReplacementType, TypeError) as err:
            raise MalformedVariadicBinding(f"Cannot splice {item!r} from {inner.id!r}: {err}", path) from err
    return out


def bquote(expr, env=None, *, max_depth: Optional[int] = None):
    """Partial substitution: only `.(x)` and `..(x)` are replaced.

    `.(x)` becomes `substitute(x, env)`; `..(x)` in an argument slot splices
    the sequence bound to `x` as zero or more arguments. Everything else,
    bound names included, is left as is:

        bquote(parse("f(.(a), a, ..(xs))"), {"a": 1, "xs": [2, 3]})
        -> f(1, a, 2, 3)
    """
    env = as_environment(env)
    limit = get_max_depth(max_depth)

    def walk(node, path: tuple):
        if len(path) > limit:
            raise MaxDepthExceeded(f"Expression nests deeper than {limit} levels", path)
        if isinstance(node, Formals):
            params = []
            for i, p in enumerate(node.params):
                default = p.default if p.default is None else walk(p.default, path + (i,))
                params.append(p if default is p.default else Param(p.name, default))
            if all(new is old for new, old in zip(params, node.params)):
                return node
            return Formals(tuple(params))
        if not isinstance(node, Call):
            return node

        inner = _marker(node, UNQUOTE)
        if inner is not None:
            return substitute(inner, env, max_depth=limit)

        callee = walk(node.callee, path + (0,))
        args: list[Arg] = []
        changed = callee is not node.callee
        for i, arg in enumerate(node.args, start=1):
            spliced = _marker(arg.value, UNQUOTE_SPLICING) if arg.name is None else None
            if spliced is not None:
                args.extend(_splice(spliced, env, path + (i,)))
                changed = True
                continue
            value = walk(arg.value, path + (i,))
            if value is not arg.value:
                changed = True
                arg = Arg(value, arg.name)
            args.append(arg)
        if not changed:
            return node
        return Call(callee, tuple(args))

    if isinstance(expr, (list, tuple)):
        return type(expr)(walk(e, (i,)) for i, e in enumerate(expr))
    return walk(expr, ())
