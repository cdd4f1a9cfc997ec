from __future__ import annotations
import re
import sys

from rquote.errors import InvalidIdentifier

# Callee names for operators and syntax constructs. They are not syntactic
# names, so they render in backticks outside their operator position.
OPERATOR_NAMES = frozenset({
    "<-", "<<-", "=", "?", "~",
    "||", "|", "&&", "&", "!",
    "==", "!=", "<", ">", "<=", ">=",
    "+", "-", "*", "/", "^", ":", "|>",
    "::", ":::", "$", "@", "[", "[[", "(", "{",
})

KEYWORD_NAMES = frozenset({"if", "for", "while", "repeat", "function", "break", "next"})

# Words that are literals or pure syntax; they can never name anything.
RESERVED_WORDS = frozenset({
    "TRUE", "FALSE", "NULL", "NA", "Inf", "NaN",
    "NA_integer_", "NA_real_", "NA_character_", "else", "in",
})

INFIX_RE = re.compile(r"%[^%\n]*%")
# Shared with the lexer, so anything written bare reads back as the same name
SYNTACTIC_NAME_RE = re.compile(r"(?:[^\W\d_]|\.(?!\d))[\w.]*")


def is_syntactic_name(identifier: str) -> bool:
    """True for names that can be written bare in source text."""
    if not identifier or identifier in RESERVED_WORDS or identifier in KEYWORD_NAMES:
        return False
    return SYNTACTIC_NAME_RE.fullmatch(identifier) is not None


def is_valid_identifier(identifier) -> bool:
    if not isinstance(identifier, str) or not identifier:
        return False
    if identifier in OPERATOR_NAMES or identifier in KEYWORD_NAMES:
        return True
    if INFIX_RE.fullmatch(identifier):
        return True
    return is_syntactic_name(identifier)


class Name:
    __slots__ = ("id",)

    def __init__(self, identifier: str):
        if not is_valid_identifier(identifier):
            raise InvalidIdentifier(f"Not a valid identifier: {identifier!r}")
        # Intern to ensure fast equality/hash
        object.__setattr__(self, "id", sys.intern(identifier))

    def __setattr__(self, key, value):
        raise AttributeError("Name is immutable")

    def __eq__(self, other) -> bool:
        return isinstance(other, Name) and self.id == other.id

    def __hash__(self) -> int:
        return hash(("Name", self.id))

    def __reduce__(self):
        return Name, (self.id,)

    def __repr__(self):
        return f"Name({self.id!r})"

    def __str__(self):
        return self.id
