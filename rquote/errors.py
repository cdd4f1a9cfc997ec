from __future__ import annotations


class RQuoteError(Exception):
    """ Base class for all rquote errors"""

    def __init__(self, message: str = "", path: tuple = ()):
        super().__init__(message)
        self.path = tuple(path)


class InvalidIdentifier(RQuoteError):
    """ Raised when a string is not a valid identifier for a Name"""
    pass


class DuplicateArgumentName(RQuoteError):
    """ Raised when two arguments (or parameters) share a name"""
    pass


class NotACall(RQuoteError):
    """ Raised when a call accessor is used on a constant or a name"""


class IndexOutOfRange(RQuoteError):
    """ Raised when a positional argument does not exist"""


class NameNotFound(RQuoteError):
    """ Raised when a named argument or binding does not exist"""


class MalformedVariadicBinding(RQuoteError):
    """ Raised when `...` is bound to something other than (name, expression) pairs"""


class InvalidReplacementType(RQuoteError):
    """ Raised when a value cannot be represented as a Constant"""


class MaxDepthExceeded(RQuoteError):
    """ Raised when a traversal goes deeper than the configured limit"""


class ParseError(RQuoteError):
    """ Raised when source text cannot be parsed"""

    def __init__(self, message: str = "", pos: int | None = None):
        super().__init__(message)
        self.pos = pos
