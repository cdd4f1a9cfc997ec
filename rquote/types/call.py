"""Call nodes and parameter lists.

A Call pairs a callee expression with an ordered tuple of (optionally named)
arguments. Formals is the parameter list of a `function` call; it is not an
Expression in its own right, it only ever sits in the first argument slot of
`function(...)`, but every walker treats it as its own recursive case.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from rquote.errors import DuplicateArgumentName, InvalidIdentifier
from rquote.types.constant import Constant
from rquote.types.name import Name


def _check_unique(names, what: str) -> None:
    seen: set[str] = set()
    for name in names:
        if name is None:
            continue
        if name in seen:
            raise DuplicateArgumentName(f"Duplicate {what} name {name!r}")
        seen.add(name)


@dataclass(frozen=True)
class Arg:
    value: "Node"
    name: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.value, NODE_TYPES):
            raise TypeError(f"Argument value must be an expression, got {self.value!r}")
        if self.name is not None and (not isinstance(self.name, str) or not self.name):
            raise InvalidIdentifier(f"Invalid argument name {self.name!r}")

    def __repr__(self):
        if self.name is None:
            return repr(self.value)
        return f"{self.name}={self.value!r}"


@dataclass(frozen=True)
class Call:
    callee: "Expression"
    args: tuple[Arg, ...] = ()

    def __post_init__(self):
        if not isinstance(self.callee, EXPRESSION_TYPES):
            raise TypeError(f"Callee must be an expression, got {self.callee!r}")
        args = tuple(self.args)
        for a in args:
            if not isinstance(a, Arg):
                raise TypeError(f"Call arguments must be Arg instances, got {a!r}")
        _check_unique((a.name for a in args), "argument")
        object.__setattr__(self, "args", args)

    def __len__(self) -> int:
        return len(self.args)

    def __repr__(self):
        inner = ", ".join(repr(a) for a in self.args)
        return f"Call({self.callee!r}, [{inner}])"


@dataclass(frozen=True)
class Param:
    name: str
    default: Optional["Expression"] = None

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name:
            raise InvalidIdentifier(f"Invalid parameter name {self.name!r}")
        if self.default is not None and not isinstance(self.default, EXPRESSION_TYPES):
            raise TypeError(f"Parameter default must be an expression, got {self.default!r}")

    def __repr__(self):
        if self.default is None:
            return self.name
        return f"{self.name}={self.default!r}"


@dataclass(frozen=True)
class Formals:
    params: tuple[Param, ...] = ()

    def __post_init__(self):
        params = tuple(self.params)
        for p in params:
            if not isinstance(p, Param):
                raise TypeError(f"Formals must hold Param instances, got {p!r}")
        _check_unique((p.name for p in params), "parameter")
        object.__setattr__(self, "params", params)

    def __len__(self) -> int:
        return len(self.params)

    def names(self) -> list[str]:
        return [p.name for p in self.params]

    def __repr__(self):
        return f"Formals([{', '.join(repr(p) for p in self.params)}])"


Expression = Union[Constant, Name, Call]
Node = Union[Constant, Name, Call, Formals]

EXPRESSION_TYPES = (Constant, Name, Call)
NODE_TYPES = (Constant, Name, Call, Formals)
