from __future__ import annotations
import json


# Deepest tree any recursive operation will descend into before raising
# MaxDepthExceeded. Each level costs a few Python frames, so this stays well
# below the interpreter's own recursion limit.
DEFAULT_MAX_DEPTH = 150

# Callees recognised by find_assignment_targets
ASSIGNMENT_OPERATORS = ("<-",)

# Options for printer.tree.draw_tree
DEFAULT_TREE_OPTIONS = {
    "width": 80,
    "indent": "   ",
    "colour": False,
    "colour_calls": True,
    "colour_names": True,
    "colour_constants": True,
}


def get_max_depth(max_depth: int | None = None) -> int:
    return DEFAULT_MAX_DEPTH if max_depth is None else max_depth


def load_options_from_json(json_str: str, defaults: dict = DEFAULT_TREE_OPTIONS) -> dict:
    try:
        user_opts = json.loads(json_str)
        return {**defaults, **user_opts}
    except (ValueError, TypeError):
        return dict(defaults)
