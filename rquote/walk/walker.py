"""Generic pre-order traversal over expression trees.

Paths address nodes from the root: for a Call, index 0 is the callee and
1..n are the arguments; for Formals, index i is the default of parameter i.
A list or tuple of expressions at the root adds one leading index.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Collection, Iterator, Optional, Union

from rquote.config import get_max_depth
from rquote.errors import IndexOutOfRange, MaxDepthExceeded, RQuoteError
from rquote.types.call import Call, Formals

logger = logging.getLogger(__name__)

Path = tuple
Recurse = Union[bool, Collection[int]]
Visit = Callable[[Any, Path], "tuple[Any, Recurse]"]


@dataclass(frozen=True)
class WalkIssue:
    path: Path
    node: Any
    error: RQuoteError

    def __str__(self):
        return f"{'/'.join(map(str, self.path)) or '<root>'}: {type(self.error).__name__}: {self.error}"


@dataclass
class Diagnostics:
    """Collects the branches a walk had to skip."""
    issues: list[WalkIssue] = field(default_factory=list)

    def record(self, path: Path, node, error: RQuoteError) -> None:
        logger.debug("skipping branch at %s: %s", path, error)
        self.issues.append(WalkIssue(tuple(path), node, error))

    def of_type(self, kind: type) -> list[WalkIssue]:
        return [i for i in self.issues if isinstance(i.error, kind)]

    def __len__(self) -> int:
        return len(self.issues)

    def __iter__(self) -> Iterator[WalkIssue]:
        return iter(self.issues)


def children(node) -> Iterator[tuple[int, Any]]:
    """(index, child) pairs in traversal order."""
    if isinstance(node, Call):
        yield 0, node.callee
        for i, arg in enumerate(node.args, start=1):
            yield i, arg.value
    elif isinstance(node, Formals):
        for i, p in enumerate(node.params):
            if p.default is not None:
                yield i, p.default


def _roots(expr) -> list[tuple[Path, Any]]:
    if isinstance(expr, (list, tuple)):
        return [((i,), e) for i, e in enumerate(expr)]
    return [((), expr)]


def walk(
    expr,
    visit: Visit,
    combine: Callable[[Any, Any], Any],
    initial: Any,
    *,
    max_depth: Optional[int] = None,
    diagnostics: Optional[Diagnostics] = None,
):
    """Pre-order fold.

    `visit(node, path)` returns `(partial, recurse)`. `partial` is folded into
    the accumulator with `combine(acc, partial)`; `recurse` is a bool, or a
    collection of child indices to descend into (the rest are skipped).

    When `visit` raises an RQuoteError the error is recorded in
    `diagnostics` and that branch is skipped; the walk carries on with its
    siblings. Going deeper than `max_depth` raises MaxDepthExceeded, as does
    a MaxDepthExceeded raised by `visit` itself.
    """
    limit = get_max_depth(max_depth)
    if diagnostics is None:
        diagnostics = Diagnostics()
    acc = initial

    def go(node, path: Path) -> None:
        nonlocal acc
        if len(path) > limit:
            logger.debug("walk aborted at %s", path)
            raise MaxDepthExceeded(f"Expression nests deeper than {limit} levels", path)
        try:
            partial, recurse = visit(node, path)
        except MaxDepthExceeded:
            raise
        except RQuoteError as err:
            diagnostics.record(path, node, err)
            return
        acc = combine(acc, partial)
        if not recurse:
            return
        for index, child in children(node):
            if recurse is True or index in recurse:
                go(child, path + (index,))

    for path, root in _roots(expr):
        go(root, path)
    return acc


def iter_nodes(expr, *, max_depth: Optional[int] = None) -> Iterator[tuple[Path, Any]]:
    """Pre-order generator of (path, node)."""
    limit = get_max_depth(max_depth)
    stack = list(reversed(_roots(expr)))
    while stack:
        path, node = stack.pop()
        if len(path) > limit:
            raise MaxDepthExceeded(f"Expression nests deeper than {limit} levels", path)
        yield path, node
        stack.extend(reversed([(path + (i,), child) for i, child in children(node)]))


def node_at(expr, path: Path):
    """The node a path points at; raises IndexOutOfRange for a dangling path."""
    node = expr
    for depth, index in enumerate(path):
        if isinstance(node, (list, tuple)):
            if 0 <= index < len(node):
                node = node[index]
                continue
        else:
            found = dict(children(node)).get(index)
            if found is not None:
                node = found
                continue
        raise IndexOutOfRange(f"No node at {path[:depth + 1]}", path)
    return node
