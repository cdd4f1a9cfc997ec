"""Binding environments for substitution.

A BindingEnvironment maps identifiers to tagged bindings and supports nested
scopes via a `parent` link. Callers populate an environment before handing it
to the substitution engine; the engine itself only ever reads from it.
"""

from __future__ import annotations

from dataclasses import dataclass
from io import StringIO
from typing import Any, Iterable, Mapping, Optional

from rquote.errors import InvalidIdentifier, MalformedVariadicBinding, NameNotFound
from rquote.types.call import Arg, EXPRESSION_TYPES, NODE_TYPES
from rquote.types.name import Name

VALUE = "value"
EXPRESSION = "expression"
DOTS = "dots"

DOTS_NAME = "..."


@dataclass(frozen=True)
class Binding:
    """A tagged binding: a concrete value, a replacement expression, or `...` pairs."""
    kind: str
    payload: Any

    def __repr__(self):
        return f"<{self.kind} {self.payload!r}>"


def _identifier(name) -> str:
    if isinstance(name, Name):
        return name.id
    if isinstance(name, str) and name:
        return name
    raise InvalidIdentifier(f"Cannot bind {name!r}: not an identifier")


def _not_dots(name, method: str) -> str:
    ident = _identifier(name)
    if ident == DOTS_NAME:
        raise MalformedVariadicBinding(f"{method} cannot bind `...`; use bind_dots")
    return ident


class BindingEnvironment:
    """Hierarchical mapping from identifiers to Bindings."""

    __slots__ = ("bindings", "parent")

    def __init__(self, bindings: Optional[Mapping] = None, parent: Optional[BindingEnvironment] = None):
        self.bindings: dict[str, Binding] = {}
        self.parent: BindingEnvironment | None = parent
        if bindings:
            for k, v in bindings.items():
                self.define(k, v)

    def bind_value(self, name, value) -> BindingEnvironment:
        """Bind `name` to a concrete value; substitution wraps it in a Constant."""
        ident = _not_dots(name, "bind_value")
        self.bindings[ident] = Binding(VALUE, value)
        return self

    def bind_expression(self, name, expr) -> BindingEnvironment:
        """Bind `name` to an expression spliced in place of the name."""
        ident = _not_dots(name, "bind_expression")
        if not isinstance(expr, EXPRESSION_TYPES):
            raise TypeError(f"bind_expression expects an expression, got {expr!r}")
        self.bindings[ident] = Binding(EXPRESSION, expr)
        return self

    def bind_dots(self, pairs) -> BindingEnvironment:
        """Bind `...` to a sequence of (name, expression) pairs or Args.

        The payload is checked when a substitution splices it, so a malformed
        binding only fails the passes that actually use it.
        """
        if isinstance(pairs, (list, tuple)):
            pairs = tuple(pairs)
        self.bindings[DOTS_NAME] = Binding(DOTS, pairs)
        return self

    def define(self, name, obj) -> BindingEnvironment:
        """Bind with the tag inferred from `obj`.

        - `...` is always a variadic binding
        - expressions become replacement expressions
        - anything else is a concrete value
        """
        ident = _identifier(name)
        if ident == DOTS_NAME:
            return self.bind_dots(obj)
        if isinstance(obj, Binding):
            self.bindings[ident] = obj
            return self
        if isinstance(obj, EXPRESSION_TYPES):
            return self.bind_expression(ident, obj)
        return self.bind_value(ident, obj)

    def update(self, mapping: Mapping) -> None:
        for k, v in mapping.items():
            self.define(k, v)

    def child(self, bindings: Optional[Mapping] = None) -> BindingEnvironment:
        return BindingEnvironment(bindings, parent=self)

    def find(self, name) -> Optional[Binding]:
        """Nearest binding for `name` along the parent chain, or None."""
        ident = name.id if isinstance(name, Name) else name
        env: Optional[BindingEnvironment] = self
        while env is not None:
            binding = env.bindings.get(ident)
            if binding is not None:
                return binding
            env = env.parent
        return None

    def lookup(self, name) -> Binding:
        binding = self.find(name)
        if binding is None:
            raise NameNotFound(f"No binding for {name}")
        return binding

    def __contains__(self, name) -> bool:
        return self.find(name) is not None

    def names(self) -> list[str]:
        """All visible identifiers, innermost scope first."""
        seen: dict[str, None] = {}
        env: Optional[BindingEnvironment] = self
        while env is not None:
            for k in env.bindings:
                seen.setdefault(k, None)
            env = env.parent
        return list(seen)

    def _write_bindings(self, buffer: StringIO) -> None:
        buffer.write("{")
        buffer.write(", ".join(f"{k}: {v!r}" for k, v in self.bindings.items()))
        buffer.write("}")

    def __str__(self) -> str:
        with StringIO() as buffer:
            self._write_bindings(buffer)
            if self.parent is not None:
                buffer.write(" -> ...")
            return buffer.getvalue()

    def __repr__(self) -> str:
        chain = []
        env: Optional[BindingEnvironment] = self
        while env is not None:
            with StringIO() as buffer:
                env._write_bindings(buffer)
                chain.append(buffer.getvalue())
            env = env.parent
        return "<BindingEnvironment chain: " + " -> ".join(chain) + ">"


def as_environment(env) -> BindingEnvironment:
    """Accept None, a mapping or a BindingEnvironment."""
    if env is None:
        return BindingEnvironment()
    if isinstance(env, BindingEnvironment):
        return env
    if isinstance(env, Mapping):
        return BindingEnvironment(env)
    raise TypeError(f"Expected a BindingEnvironment or mapping, got {type(env).__name__}")


def dots_to_args(pairs: Iterable) -> list[Arg]:
    """Normalise a `...` payload; raises MalformedVariadicBinding when it does not fit."""
    if not isinstance(pairs, (list, tuple)):
        raise MalformedVariadicBinding(
            f"`...` must be bound to a sequence of (name, expression) pairs, got {type(pairs).__name__}"
        )
    out: list[Arg] = []
    for item in pairs:
        if isinstance(item, Arg):
            out.append(item)
            continue
        if not isinstance(item, (tuple, list)) or len(item) != 2:
            raise MalformedVariadicBinding(f"`...` entry {item!r} is not a (name, expression) pair")
        name, value = item
        if name is not None and (not isinstance(name, str) or not name):
            raise MalformedVariadicBinding(f"`...` entry has invalid name {name!r}")
        if not isinstance(value, NODE_TYPES):
            raise MalformedVariadicBinding(f"`...` entry value {value!r} is not an expression")
        out.append(Arg(value, name))
    return out
