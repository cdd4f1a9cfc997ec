"""Canonical one-line rendering of expression trees (R's deparse).

Every rendered fragment carries the weakest operator precedence exposed on
its left and right edges. When writing an operator in place would let the
parser group the text differently, the call is written in prefix form
instead (the operand if it is the culprit, otherwise its parent):

    Call(*, [Call(+, [a, b]), c])  ->  `+`(a, b) * c

so `parse(render(e)) == e` without inventing `(` calls. Two things cannot
be written that way and come back with an extra `(` call: a `function`
literal or a negative number used directly as a callee. Atomic vectors are
written as `c(...)` or `a:b` and read back as calls.
"""

from __future__ import annotations

import logging
import math
from typing import NamedTuple, Optional

from rquote.config import get_max_depth
from rquote.errors import MaxDepthExceeded
from rquote.reader.operators import (
    ARG, ATOM, LEFT, LOWEST, NAMESPACE, POSTFIX, RIGHT, TIGHT, UNARY, UNARY_MINUS, binary_info,
)
from rquote.types.call import Call, Formals
from rquote.types.constant import Constant
from rquote.types.na import NAType
from rquote.types.name import Name, is_syntactic_name

logger = logging.getLogger(__name__)

RANGE = binary_info(":")[0]

NAMED_ESCAPES = {
    "\\": "\\\\",
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\v": "\\v",
}


class Text(NamedTuple):
    text: str
    left: int = ATOM   # weakest precedence on the left edge
    right: int = ATOM  # weakest precedence on the right edge
    open_if: bool = False  # ends in an `if` without `else`


# ----------------- Leaves -----------------

def quote_string(value: str, quote: str = '"') -> str:
    out = [quote]
    for ch in value:
        if ch == quote:
            out.append("\\" + ch)
        elif ch in NAMED_ESCAPES:
            out.append(NAMED_ESCAPES[ch])
        elif ch.isprintable():
            out.append(ch)
        elif ord(ch) < 0x100:
            out.append(f"\\x{ord(ch):02x}")
        elif ord(ch) < 0x10000:
            out.append(f"\\u{{{ord(ch):04x}}}")
        else:
            out.append(f"\\U{{{ord(ch):08x}}}")
    out.append(quote)
    return "".join(out)


def render_name(identifier: str) -> str:
    if is_syntactic_name(identifier):
        return identifier
    return "`" + identifier.replace("\\", "\\\\").replace("`", "\\`") + "`"


def render_scalar(value) -> str:
    if value is True:
        return "TRUE"
    if value is False:
        return "FALSE"
    if value is None:
        return "NULL"
    if isinstance(value, NAType):
        return "NA"
    if isinstance(value, str):
        return quote_string(value)
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Inf" if value > 0 else "-Inf"
        return repr(value)
    return str(value)


def _is_int_run(values: tuple) -> bool:
    return len(values) > 1 and all(type(v) is int for v in values) and all(
        b - a == 1 for a, b in zip(values, values[1:])
    )


def render_vector(values: tuple) -> str:
    if _is_int_run(values):
        return f"{values[0]}:{values[-1]}"
    return "c(" + ", ".join(render_scalar(v) for v in values) + ")"


def _is_negative(value) -> bool:
    return type(value) in (int, float) and (value < 0 or (value == 0 and math.copysign(1, value) < 0))


# ----------------- Renderer -----------------

class Renderer:
    def __init__(self, max_depth: Optional[int] = None):
        self.max_depth = get_max_depth(max_depth)
        self.depth = 0

    def render(self, node, min_prec: int = LOWEST) -> Text:
        """Render `node`; `min_prec` is the weakest binary operator allowed at its top."""
        self.depth += 1
        try:
            if self.depth > self.max_depth:
                logger.debug("render aborted at depth %d", self.depth)
                raise MaxDepthExceeded(f"Expression nests deeper than {self.max_depth} levels")
            if isinstance(node, Constant):
                return self.constant(node)
            if isinstance(node, Name):
                return Text(render_name(node.id))
            if isinstance(node, Formals):
                return Text("pairlist(" + self.formals(node, empty="") + ")")
            if not isinstance(node, Call):
                raise TypeError(f"Cannot render {node!r}")
            # Kept inline: every level of nesting spends interpreter frames
            fn = node.callee
            special = None
            if isinstance(fn, Name) and all(a.name is None for a in node.args):
                special = self.special(node, fn.id, [a.value for a in node.args], min_prec)
            elif isinstance(fn, Name) and fn.id in ("[", "[["):
                special = self.index(node, fn.id)
            if special is not None:
                return special
            return self.prefix(node)
        finally:
            self.depth -= 1

    def constant(self, node: Constant) -> Text:
        value = node.value
        if node.is_vector:
            return Text(render_vector(value), right=RANGE if _is_int_run(value) else ATOM)
        if _is_negative(value):
            # A leading minus reads back as part of the literal, but only up to `^`
            return Text(render_scalar(value), right=UNARY_MINUS)
        return Text(render_scalar(value))

    def formals(self, formals: Formals, empty: Optional[str] = None) -> str:
        parts = []
        for p in formals.params:
            name = render_name(p.name)
            if p.default is not None:
                parts.append(f"{name} = {self.render(p.default, ARG).text}")
            elif empty is not None:
                parts.append(f"{name} = {empty}")
            else:
                parts.append(name)
        return ", ".join(parts)

    def arguments(self, args) -> str:
        parts = []
        for arg in args:
            value = self.render(arg.value, ARG).text
            parts.append(value if arg.name is None else f"{render_name(arg.name)} = {value}")
        return ", ".join(parts)

    # ----------------- Calls -----------------

    def prefix(self, node: Call) -> Text:
        """callee(args), with operator callees in backticks."""
        fn = node.callee
        if isinstance(fn, Name):
            head = Text(render_name(fn.id))
        else:
            head = self.render(fn)
            if head.right < POSTFIX:
                if isinstance(fn, Call) and not _is_function_literal(fn):
                    head = self.prefix(fn)
                else:
                    head = Text("(" + head.text + ")")
        return Text(f"{head.text}({self.arguments(node.args)})", left=min(POSTFIX, head.left), right=POSTFIX)

    def special(self, node: Call, op: str, values: list, min_prec: int) -> Optional[Text]:
        n = len(values)
        if n == 2:
            info = binary_info(op)
            if info is not None:
                return self.binary(node, op, info, values, min_prec)
        if n == 1 and op in UNARY:
            return self.unary(op, values[0])
        if op == "(" and n == 1:
            return Text("(" + self.render(values[0]).text + ")")
        if op == "{":
            if not values:
                return Text("{}")
            parts = []
            for v in values:
                parts.append(self.render(v).text)
            return Text("{ " + "; ".join(parts) + " }")
        if op in ("[", "[["):
            return self.index(node, op)
        if op == "if" and n in (2, 3):
            return self.if_else(values)
        if op == "for" and n == 3 and isinstance(values[0], Name):
            seq = self.render(values[1]).text
            return self.construct(f"for ({render_name(values[0].id)} in {seq}) ", values[2])
        if op == "while" and n == 2:
            return self.construct(f"while ({self.render(values[0]).text}) ", values[1])
        if op == "repeat" and n == 1:
            return self.construct("repeat ", values[0])
        if op in ("break", "next") and n == 0:
            return Text(op)
        if op == "function" and n == 2 and isinstance(values[0], Formals):
            return self.construct(f"function({self.formals(values[0])}) ", values[1])
        return None

    def binary(self, node: Call, op: str, info: tuple, values: list, min_prec: int) -> Optional[Text]:
        prec, assoc = info
        if prec < min_prec:
            return None
        lhs, rhs = values
        if op in ("$", "@", "::", ":::"):
            if not _is_member(rhs):
                return None
            if prec == NAMESPACE:
                if not _is_member(lhs):
                    return None
                left = self.render(lhs)
            else:
                left = self.render(lhs)
                if left.right < POSTFIX:
                    return None
            return Text(f"{left.text}{op}{self.render(rhs).text}", left=min(prec, left.left), right=prec)

        # An operand that would regroup switches itself to prefix form
        left = self.render(lhs, prec + 1 if assoc == RIGHT else prec)
        right = self.render(rhs, prec + 1 if assoc == LEFT else prec)
        if left.right < prec or (left.right == prec and assoc == RIGHT):
            return None
        if right.left < prec or (right.left == prec and assoc == LEFT):
            return None
        sep = op if op in TIGHT else f" {op} "
        return Text(
            f"{left.text}{sep}{right.text}",
            left=min(prec, left.left),
            right=min(prec, right.right),
            open_if=right.open_if,
        )

    def unary(self, op: str, value) -> Optional[Text]:
        prec = UNARY[op]
        operand = self.render(value, prec)
        if operand.left < prec:
            return None
        sep = ""
        if op == "-" and isinstance(value, Constant) and type(value.value) in (int, float):
            # `-1` would read back as a negative literal
            sep = " "
        # The operand is read at `prec`, so a binary operator at least as tight
        # written after it would be pulled inside
        return Text(f"{op}{sep}{operand.text}", right=min(prec - 1, operand.right), open_if=operand.open_if)

    def index(self, node: Call, op: str) -> Optional[Text]:
        args = node.args
        if not args or args[0].name is not None:
            return None
        target = self.render(args[0].value)
        if target.right < POSTFIX:
            return None
        close = "]" if op == "[" else "]]"
        return Text(f"{target.text}{op}{self.arguments(args[1:])}{close}", left=min(POSTFIX, target.left), right=POSTFIX)

    def construct(self, head: str, body) -> Text:
        """`if`, `for`, `while`, `repeat`, `function`: the body runs to the end of the expression."""
        inner = self.render(body)
        return Text(head + inner.text, right=LOWEST, open_if=inner.open_if)

    def if_else(self, values: list) -> Optional[Text]:
        head = f"if ({self.render(values[0]).text}) "
        if len(values) == 2:
            then = self.render(values[1])
            return Text(head + then.text, right=LOWEST, open_if=True)
        then = self.render(values[1])
        if then.open_if:
            # The `else` would attach to the inner `if`
            return None
        other = self.render(values[2])
        return Text(f"{head}{then.text} else {other.text}", right=LOWEST, open_if=other.open_if)


def _is_member(node) -> bool:
    return isinstance(node, Name) or (isinstance(node, Constant) and type(node.value) is str)


def _is_function_literal(node: Call) -> bool:
    return (
        isinstance(node.callee, Name)
        and node.callee.id == "function"
        and len(node.args) == 2
        and isinstance(node.args[0].value, Formals)
        and all(a.name is None for a in node.args)
    )


def render(expr, *, max_depth: Optional[int] = None) -> str:
    """Render an expression (or a list of them, one per line) as source text."""
    renderer = Renderer(max_depth)
    if isinstance(expr, (list, tuple)):
        return "\n".join(renderer.render(e).text for e in expr)
    return renderer.render(expr).text
