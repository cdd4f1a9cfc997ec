from __future__ import annotations


class NAType:
    """The missing-value literal. A single shared instance, `NA`."""

    __slots__ = ()

    def __repr__(self): return "NA"
    def __bool__(self): return False

    def __eq__(self, other):
        return isinstance(other, NAType)

    def __hash__(self):
        return hash("NA")

    def __reduce__(self):
        return "NA"


NA = NAType()
