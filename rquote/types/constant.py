from __future__ import annotations
import math

from rquote.errors import InvalidReplacementType
from rquote.types.na import NAType

# None stands for NULL
SCALAR_TYPES = (bool, int, float, str, type(None), NAType)


def is_scalar_literal(value) -> bool:
    # Exact type match: bool must not pass as int, and arbitrary int/str
    # subclasses carry behaviour a Constant cannot represent.
    return type(value) in SCALAR_TYPES


def is_literal(value) -> bool:
    """Scalars, or a tuple of non-NULL scalars (an atomic vector such as 1:10)."""
    if type(value) is tuple:
        return all(is_scalar_literal(v) and v is not None for v in value)
    return is_scalar_literal(value)


def _is_nan(value) -> bool:
    return type(value) is float and math.isnan(value)


def _key(value):
    if _is_nan(value):
        return ("NaN",)
    if type(value) is tuple:
        return ("vector",) + tuple(_key(v) for v in value)
    return (type(value).__name__, value)


class Constant:
    __slots__ = ("value",)

    def __init__(self, value):
        if not is_literal(value):
            raise InvalidReplacementType(
                f"Cannot represent {type(value).__name__} value {value!r} as a Constant"
            )
        object.__setattr__(self, "value", value)

    def __setattr__(self, key, value):
        raise AttributeError("Constant is immutable")

    @property
    def is_vector(self) -> bool:
        return type(self.value) is tuple

    def __eq__(self, other) -> bool:
        # Type-strict and NaN-aware: TRUE is not 1, 1L is not 1.0, NaN is NaN
        return isinstance(other, Constant) and _key(self.value) == _key(other.value)

    def __hash__(self) -> int:
        return hash(("Constant", _key(self.value)))

    def __reduce__(self):
        return Constant, (self.value,)

    def __repr__(self):
        return f"Constant({self.value!r})"
