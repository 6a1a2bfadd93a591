import pytest

from Services.common import (
    check_tree_depth,
    format_px,
    has_value,
    is_stroke_weights,
    parse,
    remove_empty_keys,
    stringify,
)
from Services.errors import SerializationError, TreeTooDeepError


def test_has_value():
    node = {"fills": [], "opacity": 0, "name": None}
    assert has_value("fills", node)
    assert has_value("opacity", node)
    assert not has_value("name", node)
    assert not has_value("strokes", node)
    assert not has_value("fills", node, lambda v: len(v) > 0)
    assert not has_value("fills", "not a node")


def test_is_stroke_weights():
    assert is_stroke_weights({"top": 1, "right": 0, "bottom": 2.5, "left": 1})
    assert not is_stroke_weights({"top": 1, "right": 0, "bottom": 2})
    assert not is_stroke_weights({"top": True, "right": 0, "bottom": 2, "left": 1})
    assert not is_stroke_weights(4)


def test_format_px():
    assert format_px(8) == "8px"
    assert format_px(8.0) == "8px"
    assert format_px(1.5) == "1.5px"


def test_remove_empty_keys_drops_empty_values():
    value = {
        "id": "1:1",
        "name": None,
        "children": [],
        "layout": {},
        "size": {"width": None, "height": None},
        "opacity": 0,
        "text": "",
        "nested": [{"a": None, "b": 1}],
    }
    assert remove_empty_keys(value) == {
        "id": "1:1",
        "opacity": 0,
        "text": "",
        "nested": [{"b": 1}],
    }


def test_remove_empty_keys_leaves_scalars():
    assert remove_empty_keys(3) == 3
    assert remove_empty_keys(None) is None
    assert remove_empty_keys("x") == "x"


@pytest.mark.parametrize(
    "value",
    [
        {"a": {"b": {"c": {}}}, "d": [1, {"e": []}]},
        [{"x": None}, {}, [], {"y": {"z": [None]}}],
        {"id": "1", "type": "FRAME", "children": [{"id": "2", "type": "TEXT", "fills": []}]},
    ],
)
def test_remove_empty_keys_is_idempotent(value):
    once = remove_empty_keys(value)
    assert remove_empty_keys(once) == once


def test_stringify_and_parse():
    text = stringify({"name": "Ünïcode", "nodes": []})
    assert "Ünïcode" in text
    assert parse(text) == {"name": "Ünïcode", "nodes": []}


def test_stringify_failure_is_wrapped():
    with pytest.raises(SerializationError):
        stringify({"bad": {1, 2}})


def test_parse_failure_is_wrapped():
    with pytest.raises(SerializationError):
        parse("{not json")


def test_check_tree_depth():
    tree = {"id": "1", "children": [{"id": "2", "children": [{"id": "3"}]}]}
    assert check_tree_depth(tree, 3) == 3
    with pytest.raises(TreeTooDeepError):
        check_tree_depth(tree, 2)
