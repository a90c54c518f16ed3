import math

import pytest

from cloud_categories.collection.json_value import (
    JSONValueError,
    as_array,
    as_number,
    as_object,
    as_string,
    dump_json_value,
    first_value,
    parse_json_value,
)


def test_parse_text_and_bytes():
    assert parse_json_value('{"a": [1, 2.5, null]}') == {"a": [1, 2.5, None]}
    assert parse_json_value(b'["x", true]') == ["x", True]


def test_parse_copies_python_values():
    source = {"items": [{"id": "1"}]}
    value = parse_json_value(source)
    source["items"].append({"id": "2"})
    assert value == {"items": [{"id": "1"}]}


def test_tuples_become_arrays():
    assert parse_json_value(("a", 1)) == ["a", 1]


@pytest.mark.parametrize(
    "raw",
    [
        "{not json",
        b"\xff\xfe",
        {"value": math.nan},
        {"value": math.inf},
        {1: "numeric key"},
        {"value": {1, 2}},
        object(),
    ],
)
def test_invalid_input_raises(raw):
    with pytest.raises(JSONValueError):
        parse_json_value(raw)


def test_invalid_input_is_value_error():
    with pytest.raises(ValueError):
        parse_json_value("[")


def test_projections():
    assert as_string("x") == "x"
    assert as_string(1) is None
    assert as_number(3) == 3
    assert as_number(1.5) == 1.5
    assert as_number(True) is None
    assert as_number("3") is None
    assert as_array([1]) == [1]
    assert as_array({"a": 1}) is None
    assert as_object({"a": 1}) == {"a": 1}
    assert as_object(None) is None


def test_first_value_follows_insertion_order():
    assert first_value({"listPosts": {"items": []}, "other": 1}) == {"items": []}
    assert first_value({}) is None
    assert first_value([1]) is None


def test_dump_is_compact():
    assert dump_json_value({"a": [1, None]}) == '{"a":[1,null]}'


@pytest.mark.parametrize("text", ["NaN", '{"limit": Infinity}', "[-Infinity]", '{"limit": 1e400}'])
def test_text_rejects_non_finite_numbers(text):
    with pytest.raises(JSONValueError):
        parse_json_value(text)


def test_text_nested_too_deeply():
    depth = 100000
    with pytest.raises(JSONValueError):
        parse_json_value("[" * depth + "]" * depth)


def test_python_value_nested_too_deeply():
    value = []
    for _ in range(100000):
        value = [value]
    with pytest.raises(JSONValueError):
        parse_json_value(value)
