# Core data model for rquote: quoted R-like code as immutable Python trees.
#
# An Expression is exactly one of
# - Constant: an atomic literal (bool, int, float, str, None for NULL, NA, or a tuple of those)
# - Name:     an unevaluated reference
# - Call:     a callee expression applied to ordered, optionally named arguments
# Formals (the parameter list of `function`) only appears inside a `function` call.
#
# Trees are built with the constructors in rquote.model or read with
# rquote.reader.parser.parse, and turned back into text with render.

from typing import Union

from rquote.errors import (
    DuplicateArgumentName,
    IndexOutOfRange,
    InvalidIdentifier,
    InvalidReplacementType,
    MalformedVariadicBinding,
    MaxDepthExceeded,
    NameNotFound,
    NotACall,
    ParseError,
    RQuoteError,
)
from rquote.model import (
    argument_by_name,
    argument_names,
    arguments,
    arity,
    as_node,
    callee,
    equals,
    is_call,
    is_call_to,
    is_constant,
    is_expression,
    is_formals,
    is_name,
    make_call,
    make_constant,
    make_formals,
    make_function,
    make_name,
    nth_argument,
    rebuild_call,
    with_arguments,
)
from rquote.printer.render import render
from rquote.printer.tree import draw_tree
from rquote.reader.parser import lex, parse, parse_all
from rquote.transform.quasiquote import bquote
from rquote.transform.substitute import substitute
from rquote.types.call import Arg, Call, Formals, Param
from rquote.types.constant import Constant
from rquote.types.environment import Binding, BindingEnvironment
from rquote.types.na import NA
from rquote.types.name import Name
from rquote.walk.analyses import (
    block_depth,
    contains_name,
    find_assignment_targets,
    find_calls,
    find_logical_abbr,
    fix_logical_abbr,
    replace_literal_name,
)
from rquote.walk.walker import Diagnostics, WalkIssue, iter_nodes, node_at, walk

Expression = Union[Constant, Name, Call]
# Anything a walker can meet: expressions plus parameter lists
Node = Union[Constant, Name, Call, Formals]


def quote(text: str) -> Expression:
    """Shorthand for parse(): quote("f(x, y = 1)")."""
    return parse(text)
