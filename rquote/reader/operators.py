"""Operator precedence shared by the parser and the renderer.

Higher numbers bind tighter. Both sides have to agree on this table: the
renderer only writes an operator without wrapping when the parser will
rebuild the same tree from the text.
"""

from __future__ import annotations

from typing import Optional

from rquote.types.name import INFIX_RE

LOWEST = 0
# Argument values and parameter defaults: `=` would read as a name binding
ARG = 3
UNARY_MINUS = 14
POSTFIX = 16
NAMESPACE = 17
ATOM = 100

LEFT = "left"
RIGHT = "right"

BINARY: dict[str, tuple[int, str]] = {
    "?": (1, LEFT),
    "=": (2, RIGHT),
    "<-": (3, RIGHT), "<<-": (3, RIGHT),
    "->": (4, LEFT), "->>": (4, LEFT),
    "~": (5, LEFT),
    "||": (6, LEFT), "|": (6, LEFT),
    "&&": (7, LEFT), "&": (7, LEFT),
    "==": (9, LEFT), "!=": (9, LEFT), "<": (9, LEFT), ">": (9, LEFT), "<=": (9, LEFT), ">=": (9, LEFT),
    "+": (10, LEFT), "-": (10, LEFT),
    "*": (11, LEFT), "/": (11, LEFT),
    "|>": (12, LEFT),
    ":": (13, LEFT),
    "^": (15, RIGHT),
    "$": (POSTFIX, LEFT), "@": (POSTFIX, LEFT),
    "::": (NAMESPACE, LEFT), ":::": (NAMESPACE, LEFT),
}

UNARY: dict[str, int] = {"-": UNARY_MINUS, "+": UNARY_MINUS, "!": 8, "~": 5, "?": 1}

# Right arrows never survive parsing: `a -> b` reads as `b <- a`
ARROWS = {"->": "<-", "->>": "<<-"}

# Written without surrounding spaces
TIGHT = frozenset({"^", ":", "$", "@", "::", ":::"})


def binary_info(op: str) -> Optional[tuple[int, str]]:
    """(precedence, associativity) for a binary operator, None otherwise."""
    info = BINARY.get(op)
    if info is None and INFIX_RE.fullmatch(op):
        return 12, LEFT
    return info
