"""
  R-like Reader: Lexer and Pratt Parser

- Streaming lexer, precedence-climbing parser
- Emits rquote trees, always built through rquote.model:

    - numbers -> Constant(int | float)  (`1`, `1L`, `0x1F` are ints; `1.5`, `1e3` floats)
    - strings -> Constant(str)
    - TRUE/FALSE/NULL/NA/Inf/NaN -> Constant(True/False/None/NA/inf/nan)
    - names and `backtick` names -> Name
    - operators and constructs -> Call(Name(op), args)
    - ( e ) -> Call(Name("("), [e]), the parentheses are kept
    - a -> b -> Call(Name("<-"), [b, a])
    - function(x, y = 1) body, \\(x) body -> Call(Name("function"), [Formals, body])
    - -1 (no space after the minus) -> Constant(-1)

   n.b. there is no "missing argument" node, so `x[, 1]` is rejected.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Iterator, NamedTuple, Optional

from rquote import model
from rquote.config import get_max_depth
from rquote.errors import DuplicateArgumentName, InvalidIdentifier, MaxDepthExceeded, ParseError
from rquote.reader.operators import ARG, ARROWS, LEFT, LOWEST, UNARY, binary_info
from rquote.types.call import Expression, Param
from rquote.types.constant import Constant
from rquote.types.na import NA
from rquote.types.name import is_syntactic_name

logger = logging.getLogger(__name__)

TOKEN_RE = re.compile(
    r"(?P<space>[ \t\r\f\v]+)"
    r"|(?P<comment>#[^\n]*)"  # single-line comment
    r"|(?P<newline>\n)"
    r"|(?P<number>0[xX][0-9A-Fa-f]+L?|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?L?)"
    r'|(?P<string>"(?:\\.|[^\\"])*"|\'(?:\\.|[^\\\'])*\')'
    r"|(?P<backtick>`(?:\\.|[^\\`])*`)"
    r"|(?P<name>(?:[^\W\d_]|\.(?!\d))[\w.]*)"
    r"|(?P<op>%[^%\n]*%|<<-|->>|:::|\|>|<-|->|<=|>=|==|!=|&&|\|\||::|\[\["
    r"|[-+*/^<>!&|~?:=$@()\[\]{},;\\])",
    re.DOTALL,
)

_ESCAPE_RE = re.compile(
    r"\\(?:x([0-9A-Fa-f]{1,2})"
    r"|u\{([0-9A-Fa-f]{1,4})\}|u([0-9A-Fa-f]{1,4})"
    r"|U\{([0-9A-Fa-f]{1,8})\}|U([0-9A-Fa-f]{1,8})"
    r"|([0-7]{1,3})"
    r"|(.))",
    re.DOTALL,
)

SIMPLE_ESCAPES: dict[str, str] = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "\\": "\\",
    '"': '"',
    "'": "'",
    "`": "`",
    " ": " ",
}

LITERALS = {
    "TRUE": True,
    "FALSE": False,
    "NULL": None,
    "NA": NA,
    "NA_integer_": NA,
    "NA_real_": NA,
    "NA_character_": NA,
    "Inf": math.inf,
    "NaN": math.nan,
}


class Token(NamedTuple):
    kind: str
    value: str
    pos: int
    spaced: bool  # whitespace, a comment or a newline came right before it


def lex(source: str) -> Iterator[Token]:
    """Token generator. Whitespace and comments are dropped, newlines are kept."""
    pos = 0
    n = len(source)
    spaced = False
    while pos < n:
        m = TOKEN_RE.match(source, pos)
        if not m:
            if source[pos] in "\"'`":
                raise ParseError(f"Unterminated {source[pos]} quote at {pos}", pos)
            raise ParseError(f"Unexpected char at {pos}: {source[pos]!r}", pos)
        kind = m.lastgroup
        if kind in ("space", "comment"):
            spaced = True
        else:
            yield Token(kind, m.group(kind), pos, spaced)
            spaced = kind == "newline"
        pos = m.end()


def unescape(body: str, pos: int = 0) -> str:
    """Decode backslash escapes in the body of a string or backtick literal."""

    def replace(m: re.Match) -> str:
        for group in m.groups()[:5]:
            if group:
                return _code_point(int(group, 16), pos)
        if m.group(6):
            return _code_point(int(m.group(6), 8), pos)
        char = m.group(7)
        if char in SIMPLE_ESCAPES:
            return SIMPLE_ESCAPES[char]
        raise ParseError(f"Unknown escape '\\{char}' in literal at {pos}", pos)

    return _ESCAPE_RE.sub(replace, body)


def _code_point(value: int, pos: int) -> str:
    try:
        return chr(value)
    except (ValueError, OverflowError):
        raise ParseError(f"Invalid code point {value:#x} in literal at {pos}", pos) from None


def parse_number(text: str) -> int | float:
    if text[:2] in ("0x", "0X"):
        return int(text[2:].rstrip("L"), 16)
    if text.endswith("L"):
        body = text[:-1]
        if body.isdigit():
            return int(body)
        value = float(body)
        return int(value) if value.is_integer() else value
    if any(ch in text for ch in ".eE"):
        return float(text)
    return int(text)


def _is_op(tok: Token, *values: str) -> bool:
    return tok.kind == "op" and tok.value in values


def _describe(tok: Token) -> str:
    if tok.kind == "eof":
        return "end of input"
    if tok.kind == "newline":
        return "newline"
    return f"{tok.value!r}"


def _is_number(value) -> bool:
    return type(value) in (int, float)


class TokenStream:
    def __init__(self, source: str, max_depth: Optional[int] = None):
        self.tokens = lex(source)
        self.buffer: list[Token] = []
        self.end = Token("eof", "", len(source), False)
        # Innermost open bracket; newlines are insignificant inside ( and [
        self.nesting: list[str] = []
        self.depth = 0
        self.max_depth = get_max_depth(max_depth)

    # ----------------- Token access -----------------

    def _raw(self, index: int) -> Token:
        while len(self.buffer) <= index:
            self.buffer.append(next(self.tokens, self.end))
        return self.buffer[index]

    def _in_brackets(self) -> bool:
        return bool(self.nesting) and self.nesting[-1] != "{"

    def skip_newlines(self) -> None:
        while self._raw(0).kind == "newline":
            self.buffer.pop(0)

    def skip_separators(self) -> None:
        while self._raw(0).kind == "newline" or _is_op(self._raw(0), ";"):
            self.buffer.pop(0)

    def peek(self) -> Token:
        if self._in_brackets():
            self.skip_newlines()
        return self._raw(0)

    def peek_at(self, offset: int) -> Token:
        """The significant token `offset` places ahead of peek()."""
        self.peek()
        index = 0
        seen = 0
        while True:
            tok = self._raw(index)
            if tok.kind == "eof":
                return tok
            if tok.kind != "newline" or not self._in_brackets():
                if seen == offset:
                    return tok
                seen += 1
            index += 1

    def advance(self) -> Token:
        tok = self.peek()
        if tok.kind != "eof":
            self.buffer.pop(0)
        return tok

    def expect(self, value: str) -> Token:
        tok = self.advance()
        if not _is_op(tok, value):
            raise ParseError(f"Expected {value!r} at {tok.pos}, got {_describe(tok)}", tok.pos)
        return tok

    # ----------------- Tree building -----------------

    def _build(self, fn, pos: int, *args):
        try:
            return fn(*args)
        except (InvalidIdentifier, DuplicateArgumentName) as err:
            raise ParseError(f"{err} (at {pos})", pos) from err

    def _name(self, identifier: str, tok: Token):
        return self._build(model.make_name, tok.pos, identifier)

    def _call(self, fn, args, tok: Token):
        return self._build(model.make_call, tok.pos, fn, args)

    # ----------------- Expressions -----------------

    def parse_expr(self, min_prec: int = LOWEST) -> Expression:
        self.depth += 1
        try:
            if self.depth > self.max_depth:
                logger.debug("parse aborted at nesting depth %d", self.depth)
                raise MaxDepthExceeded(f"Expression nests deeper than {self.max_depth} levels")
            left = self.parse_prefix()
            while True:
                tok = self.peek()
                if tok.kind != "op":
                    break
                op = tok.value
                if op in ("(", "[", "[["):
                    left = self.parse_postfix(left)
                    continue
                info = binary_info(op)
                if info is None or info[0] < min_prec:
                    break
                prec, assoc = info
                self.advance()
                if op in ("$", "@"):
                    left = self._call(op, [left, self._member()], tok)
                elif op in ("::", ":::"):
                    left = self._namespace(left, tok)
                else:
                    right = self.parse_expr(prec + 1 if assoc == LEFT else prec)
                    if op in ARROWS:
                        left = self._call(ARROWS[op], [right, left], tok)
                    else:
                        left = self._call(op, [left, right], tok)
            return left
        finally:
            self.depth -= 1

    def parse_prefix(self) -> Expression:
        self.skip_newlines()
        tok = self.advance()
        kind, value = tok.kind, tok.value

        if kind == "number":
            return model.make_constant(parse_number(value))

        if kind == "string":
            return model.make_constant(unescape(value[1:-1], tok.pos))

        if kind == "backtick":
            return self._name(unescape(value[1:-1], tok.pos), tok)

        if kind == "name":
            if value in LITERALS:
                return model.make_constant(LITERALS[value])
            handler = self.KEYWORDS.get(value)
            if handler is not None:
                return handler(self, tok)
            if value in ("else", "in"):
                raise ParseError(f"Unexpected {value!r} at {tok.pos}", tok.pos)
            return self._name(value, tok)

        if kind == "op":
            if value == "(":
                self.nesting.append("(")
                inner = self.parse_expr(LOWEST)
                self.expect(")")
                self.nesting.pop()
                return self._call("(", [inner], tok)
            if value == "{":
                return self._block(tok)
            if value == "\\":
                return self._function(tok)
            if value in UNARY:
                return self._unary(tok)

        if kind == "eof":
            raise ParseError("Unexpected end of input", tok.pos)
        raise ParseError(f"Unexpected {_describe(tok)} at {tok.pos}", tok.pos)

    def _unary(self, tok: Token) -> Expression:
        nxt = self.peek()
        literal = tok.value == "-" and not nxt.spaced and (
            nxt.kind == "number" or (nxt.kind == "name" and nxt.value in ("Inf", "NaN"))
        )
        operand = self.parse_expr(UNARY[tok.value])
        # -1 is a negative literal, - 1 and -1^2 stay calls to `-`
        if literal and isinstance(operand, Constant) and _is_number(operand.value):
            return model.make_constant(-operand.value)
        return self._call(tok.value, [operand], tok)

    def parse_postfix(self, target: Expression) -> Expression:
        tok = self.advance()
        if tok.value == "(":
            return self._call(target, self._arguments(")"), tok)
        args = self._arguments("]")
        if tok.value == "[[":
            self.expect("]")
        return self._call(tok.value, [(None, target)] + args, tok)

    def _arguments(self, closer: str) -> list:
        self.nesting.append("(" if closer == ")" else "[")
        args = []
        if _is_op(self.peek(), closer):
            self.advance()
        else:
            while True:
                args.append(self._argument())
                tok = self.advance()
                if _is_op(tok, closer):
                    break
                if not _is_op(tok, ","):
                    raise ParseError(f"Expected ',' or {closer!r} at {tok.pos}, got {_describe(tok)}", tok.pos)
        self.nesting.pop()
        return args

    def _argument(self) -> tuple:
        tok = self.peek()
        if tok.kind in ("name", "backtick", "string") and _is_op(self.peek_at(1), "="):
            if tok.kind == "name" and not is_syntactic_name(tok.value):
                raise ParseError(f"Cannot use {tok.value!r} as an argument name at {tok.pos}", tok.pos)
            self.advance()
            self.advance()
            name = tok.value if tok.kind == "name" else unescape(tok.value[1:-1], tok.pos)
            return name, self.parse_expr(ARG)
        return None, self.parse_expr(ARG)

    def _member(self) -> Expression:
        """Right-hand side of `$` or `@`: a name or a string, never an expression."""
        self.skip_newlines()
        tok = self.advance()
        if tok.kind == "name" and is_syntactic_name(tok.value):
            return self._name(tok.value, tok)
        if tok.kind == "backtick":
            return self._name(unescape(tok.value[1:-1], tok.pos), tok)
        if tok.kind == "string":
            return model.make_constant(unescape(tok.value[1:-1], tok.pos))
        raise ParseError(f"Expected a name after '$' or '@' at {tok.pos}, got {_describe(tok)}", tok.pos)

    def _namespace(self, left: Expression, op_tok: Token) -> Expression:
        if not (model.is_name(left) or (model.is_constant(left) and type(left.value) is str)):
            raise ParseError(f"Expected a package name before {op_tok.value!r} at {op_tok.pos}", op_tok.pos)
        return self._call(op_tok.value, [left, self._member()], op_tok)

    # ----------------- Constructs -----------------

    def _block(self, tok: Token) -> Expression:
        self.nesting.append("{")
        body = []
        while True:
            self.skip_separators()
            nxt = self.peek()
            if _is_op(nxt, "}"):
                self.advance()
                break
            if nxt.kind == "eof":
                raise ParseError(f"Unmatched '{{' at {tok.pos}", tok.pos)
            body.append(self.parse_expr(LOWEST))
            nxt = self.peek()
            if not (nxt.kind == "newline" or _is_op(nxt, ";", "}")):
                raise ParseError(f"Unexpected {_describe(nxt)} at {nxt.pos}", nxt.pos)
        self.nesting.pop()
        return self._call("{", body, tok)

    def _condition(self) -> Expression:
        self.expect("(")
        self.nesting.append("(")
        cond = self.parse_expr(LOWEST)
        self.expect(")")
        self.nesting.pop()
        return cond

    def _at_else(self) -> bool:
        index = 0
        while self._raw(index).kind == "newline":
            index += 1
        tok = self._raw(index)
        if tok.kind == "name" and tok.value == "else":
            del self.buffer[:index + 1]
            return True
        return False

    def _if(self, tok: Token) -> Expression:
        cond = self._condition()
        then = self.parse_expr(LOWEST)
        if self._at_else():
            return self._call("if", [cond, then, self.parse_expr(LOWEST)], tok)
        return self._call("if", [cond, then], tok)

    def _for(self, tok: Token) -> Expression:
        self.expect("(")
        self.nesting.append("(")
        var_tok = self.advance()
        if var_tok.kind == "name" and is_syntactic_name(var_tok.value):
            var = self._name(var_tok.value, var_tok)
        elif var_tok.kind == "backtick":
            var = self._name(unescape(var_tok.value[1:-1], var_tok.pos), var_tok)
        else:
            raise ParseError(f"Expected a loop variable at {var_tok.pos}, got {_describe(var_tok)}", var_tok.pos)
        in_tok = self.advance()
        if in_tok.kind != "name" or in_tok.value != "in":
            raise ParseError(f"Expected 'in' at {in_tok.pos}, got {_describe(in_tok)}", in_tok.pos)
        seq = self.parse_expr(LOWEST)
        self.expect(")")
        self.nesting.pop()
        return self._call("for", [var, seq, self.parse_expr(LOWEST)], tok)

    def _while(self, tok: Token) -> Expression:
        cond = self._condition()
        return self._call("while", [cond, self.parse_expr(LOWEST)], tok)

    def _repeat(self, tok: Token) -> Expression:
        return self._call("repeat", [self.parse_expr(LOWEST)], tok)

    def _jump(self, tok: Token) -> Expression:
        return self._call(tok.value, [], tok)

    def _function(self, tok: Token) -> Expression:
        self.expect("(")
        self.nesting.append("(")
        params = []
        if _is_op(self.peek(), ")"):
            self.advance()
        else:
            while True:
                params.append(self._param())
                nxt = self.advance()
                if _is_op(nxt, ")"):
                    break
                if not _is_op(nxt, ","):
                    raise ParseError(f"Expected ',' or ')' at {nxt.pos}, got {_describe(nxt)}", nxt.pos)
        self.nesting.pop()
        formals = self._build(model.make_formals, tok.pos, params)
        body = self.parse_expr(LOWEST)
        return self._call("function", [formals, body], tok)

    def _param(self) -> Param:
        tok = self.advance()
        if tok.kind == "name" and is_syntactic_name(tok.value):
            name = tok.value
        elif tok.kind == "backtick":
            name = unescape(tok.value[1:-1], tok.pos)
        else:
            raise ParseError(f"Expected a parameter name at {tok.pos}, got {_describe(tok)}", tok.pos)
        if _is_op(self.peek(), "="):
            self.advance()
            return self._build(Param, tok.pos, name, self.parse_expr(ARG))
        return self._build(Param, tok.pos, name)

    KEYWORDS = {
        "if": _if,
        "for": _for,
        "while": _while,
        "repeat": _repeat,
        "function": _function,
        "break": _jump,
        "next": _jump,
    }

    # ----------------- Programs -----------------

    def parse_all(self) -> Iterator[Expression]:
        while True:
            self.skip_separators()
            if self.peek().kind == "eof":
                break
            yield self.parse_expr(LOWEST)
            tok = self.peek()
            if not (tok.kind in ("newline", "eof") or _is_op(tok, ";")):
                raise ParseError(f"Unexpected {_describe(tok)} at {tok.pos}", tok.pos)


def parse_all(text: str, *, max_depth: Optional[int] = None) -> list[Expression]:
    """Parse every top-level expression; they are separated by newlines or ';'."""
    return list(TokenStream(text, max_depth).parse_all())


def parse(text: str, *, max_depth: Optional[int] = None) -> Expression:
    """Parse text holding exactly one expression."""
    exprs = parse_all(text, max_depth=max_depth)
    if len(exprs) != 1:
        raise ParseError(f"Expected exactly one expression, found {len(exprs)}")
    return exprs[0]
