from __future__ import annotations

from typing import Optional

from rquote.config import DEFAULT_TREE_OPTIONS, get_max_depth
from rquote.errors import MaxDepthExceeded
from rquote.printer.render import render, render_name
from rquote.types.call import Call, Formals
from rquote.types.constant import Constant
from rquote.types.name import Name

# ----------------- ANSI colors -----------------
RESET = "\033[0m"
COLOR_CALL = "\033[91m"
COLOR_NAME = "\033[94m"
COLOR_CONSTANT = "\033[90m"
COLOR_FORMALS = "\033[92m"

BRANCH = "\\- "


def truncate(label: str, width: int) -> str:
    if len(label) <= width:
        return label
    return label[:max(width - 3, 0)] + "..."


def colorize(label: str, node, options: dict) -> str:
    if not options.get("colour", False):
        return label
    if isinstance(node, Call) and options.get("colour_calls", True):
        return f"{COLOR_CALL}{label}{RESET}"
    if isinstance(node, Name) and options.get("colour_names", True):
        return f"{COLOR_NAME}{label}{RESET}"
    if isinstance(node, Constant) and options.get("colour_constants", True):
        return f"{COLOR_CONSTANT}{label}{RESET}"
    if isinstance(node, Formals) and options.get("colour_calls", True):
        return f"{COLOR_FORMALS}{label}{RESET}"
    return label


def label(node) -> str:
    """One-line label: calls as `f()`, everything else as rendered."""
    if isinstance(node, Call):
        fn = node.callee
        return (fn.id if isinstance(fn, Name) else render(fn)) + "()"
    if isinstance(node, Name):
        return node.id
    if isinstance(node, Formals):
        return "function args"
    return render(node)


def _lines(node, level: int, options: dict, limit: int, out: list[str], prefix: Optional[str] = None) -> None:
    if level > limit:
        raise MaxDepthExceeded(f"Expression nests deeper than {limit} levels")
    indent = options["indent"] * (level - 1) + BRANCH
    text = label(node) if prefix is None else prefix + label(node)
    out.append(indent + colorize(truncate(text, options["width"] - len(indent)), node, options))

    if isinstance(node, Call):
        for arg in node.args:
            name = None if arg.name is None else render_name(arg.name) + " = "
            _lines(arg.value, level + 1, options, limit, out, name)
    elif isinstance(node, Formals):
        for p in node.params:
            if p.default is None:
                param_indent = options["indent"] * level + BRANCH
                out.append(param_indent + truncate(render_name(p.name), options["width"] - len(param_indent)))
            else:
                _lines(p.default, level + 1, options, limit, out, render_name(p.name) + " = ")


def draw_tree(
    expr,
    *,
    colour: Optional[bool] = None,
    width: Optional[int] = None,
    options: Optional[dict] = None,
    max_depth: Optional[int] = None,
) -> str:
    """Draw an expression as an ASCII tree, one node per line.

    >>> print(draw_tree(parse("f(x, 1, g(), h(i()))")))
    \\- f()
       \\- x
       \\- 1
       \\- g()
       \\- h()
          \\- i()

    A list of expressions gives one tree each, separated by blank lines.
    `options` follows config.DEFAULT_TREE_OPTIONS; `colour` and `width`
    override it.
    """
    opts = dict(DEFAULT_TREE_OPTIONS if options is None else {**DEFAULT_TREE_OPTIONS, **options})
    if colour is not None:
        opts["colour"] = colour
    if width is not None:
        opts["width"] = width
    limit = get_max_depth(max_depth)

    roots = expr if isinstance(expr, (list, tuple)) else [expr]
    trees = []
    for root in roots:
        out: list[str] = []
        _lines(root, 1, opts, limit, out)
        trees.append("\n".join(out))
    return "\n\n".join(trees)
