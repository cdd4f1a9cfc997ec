"""Single-pass substitution of names by their bindings.

Rules, applied depth-first to every Name in the tree:

1. bound to a concrete value      -> Constant(value)
2. bound to a replacement expr    -> that expression, spliced as is
3. not bound at any level         -> left unchanged
4. an unnamed `...` argument whose binding is a sequence of
   (name, expression) pairs       -> zero or more arguments at that position

Spliced expressions are not substituted again. Subtrees that do not change
are returned as the very same objects, so callers can use `is` to detect a
no-op.
"""

from __future__ import annotations

import logging
from typing import Optional

from rquote import model
from rquote.config import get_max_depth
from rquote.errors import InvalidReplacementType, MalformedVariadicBinding, MaxDepthExceeded
from rquote.types.call import Arg, Call, Formals, Param
from rquote.types.constant import Constant
from rquote.types.environment import DOTS, DOTS_NAME, EXPRESSION, BindingEnvironment, as_environment, dots_to_args
from rquote.types.name import Name

logger = logging.getLogger(__name__)


class Substitution:
    """One substitution pass over a fixed environment."""

    def __init__(self, env: BindingEnvironment, max_depth: Optional[int] = None):
        self.env = env
        self.max_depth = get_max_depth(max_depth)

    def node(self, node, path: tuple = ()):
        if len(path) > self.max_depth:
            logger.debug("substitution aborted at %s", path)
            raise MaxDepthExceeded(f"Expression nests deeper than {self.max_depth} levels", path)
        if isinstance(node, Constant):
            return node
        if isinstance(node, Name):
            return self.name(node, path)
        if isinstance(node, Call):
            return self.call(node, path)
        if isinstance(node, Formals):
            return self.formals(node, path)
        raise TypeError(f"Cannot substitute into {node!r}")

    def name(self, node: Name, path: tuple):
        binding = self.env.find(node.id)
        if binding is None or binding.kind == DOTS:
            return node
        if binding.kind == EXPRESSION:
            return binding.payload
        try:
            return model.make_constant(binding.payload)
        except InvalidReplacementType as err:
            raise InvalidReplacementType(f"Value bound to {node.id!r} is not a literal: {err}", path) from err

    def call(self, node: Call, path: tuple):
        callee = self.node(node.callee, path + (0,))
        args = self.arguments(node.args, path)
        if callee is node.callee and args is None:
            return node
        return Call(callee, node.args if args is None else args)

    def arguments(self, args: tuple[Arg, ...], path: tuple) -> Optional[tuple[Arg, ...]]:
        """New argument tuple, or None when nothing changed."""
        out: list[Arg] = []
        changed = False
        for i, arg in enumerate(args, start=1):
            if arg.name is None and arg.value == DOTS_ARG:
                binding = self.env.find(DOTS_NAME)
                if binding is not None and binding.kind == DOTS:
                    try:
                        out.extend(dots_to_args(binding.payload))
                    except MalformedVariadicBinding as err:
                        raise MalformedVariadicBinding(str(err), path + (i,)) from err
                    changed = True
                    continue
            value = self.node(arg.value, path + (i,))
            if value is not arg.value:
                changed = True
                out.append(Arg(value, arg.name))
            else:
                out.append(arg)
        return tuple(out) if changed else None

    def formals(self, node: Formals, path: tuple):
        params = []
        changed = False
        for i, p in enumerate(node.params):
            if p.default is None:
                params.append(p)
                continue
            default = self.node(p.default, path + (i,))
            if default is not p.default:
                changed = True
                p = Param(p.name, default)
            params.append(p)
        return Formals(tuple(params)) if changed else node


DOTS_ARG = Name(DOTS_NAME)


def substitute(expr, env=None, *, max_depth: Optional[int] = None):
    """Substitute bindings from `env` into `expr`.

    `env` may be a BindingEnvironment, a plain mapping (auto-tagged, see
    BindingEnvironment.define) or None. `expr` may also be a list or tuple of
    nodes; the same container type is returned.

    >>> render(substitute(parse("a + b"), {"a": 1, "b": parse("f(x)")}))
    '1 + f(x)'
    """
    sub = Substitution(as_environment(env), max_depth)
    if isinstance(expr, (list, tuple)):
        return type(expr)(sub.node(e, (i,)) for i, e in enumerate(expr))
    return sub.node(expr)
