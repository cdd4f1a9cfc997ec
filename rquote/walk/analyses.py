"""Static analyses built on the walker.

None of these evaluate anything: they look at the shape of the tree only,
so `assign("x", 1)` is not an assignment and `T` is just a name.
"""

from __future__ import annotations

from typing import Iterable, Optional

from rquote import config, model
from rquote.errors import IndexOutOfRange, MaxDepthExceeded
from rquote.printer.render import render
from rquote.types.call import Arg, Call, Formals, Param
from rquote.types.constant import Constant
from rquote.types.name import Name
from rquote.walk.walker import Diagnostics, walk

LOGICAL_ABBREVIATIONS = {"T": True, "F": False}


def _extend(acc: list, partial: list) -> list:
    acc.extend(partial)
    return acc


def find_assignment_targets(
    expr,
    *,
    operators: Optional[Iterable[str]] = None,
    unique: bool = False,
    diagnostics: Optional[Diagnostics] = None,
    max_depth: Optional[int] = None,
) -> list[str]:
    """Names assigned to with `<-` (or any of `operators`), in pre-order.

    Only a bare name on the left-hand side counts: `names(x) <- "a"` modifies
    `x` but is not recorded. The left-hand side is never searched, the
    right-hand side always is, so `x <- print(y <- 5)` gives ["x", "y"].
    An assignment call without two arguments is recorded in `diagnostics`
    and skipped.
    """
    ops = frozenset(config.ASSIGNMENT_OPERATORS if operators is None else operators)

    def visit(node, path):
        if not (isinstance(node, Call) and isinstance(node.callee, Name) and node.callee.id in ops):
            return [], True
        if len(node.args) < 2:
            raise IndexOutOfRange(
                f"Assignment with {node.callee.id!r} needs two arguments, got {len(node.args)}", path
            )
        target = node.args[0].value
        found = [target.id] if isinstance(target, Name) else []
        return found, range(2, len(node.args) + 1)

    targets = walk(expr, visit, _extend, [], max_depth=max_depth, diagnostics=diagnostics)
    if unique:
        return list(dict.fromkeys(targets))
    return targets


def find_calls(expr, *, max_depth: Optional[int] = None) -> list[str]:
    """Rendered callee of every call, in pre-order.

    Callees themselves are not searched: `f(x)(y)` gives ["f(x)"].
    """

    def visit(node, path):
        if not isinstance(node, Call):
            return [], isinstance(node, Formals)
        fn = node.callee
        label = fn.id if isinstance(fn, Name) else render(fn)
        return [label], range(1, len(node.args) + 1)

    return walk(expr, visit, _extend, [], max_depth=max_depth)


def block_depth(expr, *, max_depth: Optional[int] = None) -> int:
    """Deepest nesting of `{` blocks.

    Only arguments are searched: callees and parameter defaults do not count,
    and neither does an empty `{}`. `function(x) { if (x) { y } }` gives 2.
    """
    limit = config.get_max_depth(max_depth)

    def depth(node, path: tuple, blocks: int) -> int:
        if len(path) > limit:
            raise MaxDepthExceeded(f"Expression nests deeper than {limit} levels", path)
        if not isinstance(node, Call) or not node.args:
            return blocks
        if model.is_call_to(node, "{"):
            blocks += 1
        deepest = blocks
        for i, arg in enumerate(node.args, start=1):
            deepest = max(deepest, depth(arg.value, path + (i,), blocks))
        return deepest

    if isinstance(expr, (list, tuple)):
        return max((depth(e, (i,), 0) for i, e in enumerate(expr)), default=0)
    return depth(expr, (), 0)


def contains_name(expr, identifier: str, *, max_depth: Optional[int] = None) -> bool:
    """True if `Name(identifier)` appears anywhere, callee positions included."""

    def visit(node, path):
        return isinstance(node, Name) and node.id == identifier, True

    return walk(expr, visit, lambda acc, hit: acc or hit, False, max_depth=max_depth)


def find_logical_abbr(expr, *, max_depth: Optional[int] = None) -> bool:
    """True if `T` or `F` is used as a value anywhere in the tree."""

    def visit(node, path):
        if isinstance(node, Call):
            # A bare-name callee is a function reference, not a value
            keep = range(1, len(node.args) + 1) if isinstance(node.callee, Name) else True
            return False, keep
        return isinstance(node, Name) and node.id in LOGICAL_ABBREVIATIONS, True

    return walk(expr, visit, lambda acc, hit: acc or hit, False, max_depth=max_depth)


class LeafReplacer:
    """Rewrites leaf names in value positions, sharing every unchanged subtree.

    A Name in callee position is never replaced, but a Call callee is
    rewritten like any other subtree. Parameter names are kept, defaults are
    rewritten.
    """

    def __init__(self, replacements: dict[str, Constant], max_depth: Optional[int] = None):
        self.replacements = replacements
        self.max_depth = config.get_max_depth(max_depth)

    def __call__(self, expr):
        if isinstance(expr, (list, tuple)):
            return type(expr)(self.node(e, (i,)) for i, e in enumerate(expr))
        return self.node(expr)

    def node(self, node, path: tuple = ()):
        if len(path) > self.max_depth:
            raise MaxDepthExceeded(f"Expression nests deeper than {self.max_depth} levels", path)
        if isinstance(node, Name):
            return self.replacements.get(node.id, node)
        if isinstance(node, Call):
            callee = node.callee if isinstance(node.callee, Name) else self.node(node.callee, path + (0,))
            args = [self.arg(a, path + (i,)) for i, a in enumerate(node.args, start=1)]
            if callee is node.callee and all(new is old for new, old in zip(args, node.args)):
                return node
            return Call(callee, tuple(args))
        if isinstance(node, Formals):
            params = [
                p if p.default is None else Param(p.name, self.node(p.default, path + (i,)))
                for i, p in enumerate(node.params)
            ]
            if all(new.default is old.default for new, old in zip(params, node.params)):
                return node
            return Formals(tuple(params))
        return node

    def arg(self, arg: Arg, path: tuple) -> Arg:
        value = self.node(arg.value, path)
        return arg if value is arg.value else Arg(value, arg.name)


def replace_literal_name(expr, from_identifier: str, to_constant, *, max_depth: Optional[int] = None):
    """Replace every `Name(from_identifier)` in a value position with a Constant.

    Matching is on the whole identifier: replacing `T` leaves `Team` alone.
    """
    replacement = model.make_constant(to_constant)
    return LeafReplacer({from_identifier: replacement}, max_depth)(expr)


def fix_logical_abbr(expr, *, max_depth: Optional[int] = None):
    """`T` -> `TRUE` and `F` -> `FALSE` wherever they are used as values."""
    replacements = {k: Constant(v) for k, v in LOGICAL_ABBREVIATIONS.items()}
    return LeafReplacer(replacements, max_depth)(expr)
