import pytest

from rquote import config


def test_get_max_depth():
    assert config.get_max_depth() == config.DEFAULT_MAX_DEPTH
    assert config.get_max_depth(None) == config.DEFAULT_MAX_DEPTH
    assert config.get_max_depth(5) == 5


def test_default_assignment_operator():
    assert config.ASSIGNMENT_OPERATORS == ("<-",)


def test_load_options_from_json():
    opts = config.load_options_from_json('{"width": 40, "colour": true}')
    assert opts["width"] == 40
    assert opts["colour"] is True
    assert opts["indent"] == config.DEFAULT_TREE_OPTIONS["indent"]


@pytest.mark.parametrize("text", ["not json", "null", "[1, 2]", ""])
def test_load_options_falls_back_to_defaults(text):
    opts = config.load_options_from_json(text)
    assert opts == config.DEFAULT_TREE_OPTIONS
    assert opts is not config.DEFAULT_TREE_OPTIONS


def test_load_options_does_not_touch_defaults():
    config.load_options_from_json('{"width": 1}')
    assert config.DEFAULT_TREE_OPTIONS["width"] == 80
