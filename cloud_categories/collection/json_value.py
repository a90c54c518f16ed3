"""JSON value model used to sniff payloads before committing to a typed decode.

Values are plain Python objects (``dict``, ``list``, ``str``, ``int``,
``float``, ``bool`` and ``None``). The projection helpers return ``None``
when a value does not have the requested shape so callers can probe
payloads without try/except blocks.
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping, Sequence
from typing import Any, TypeAlias

JSONScalar: TypeAlias = str | int | float | bool | None
JSONValue: TypeAlias = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]
JSONObject: TypeAlias = dict[str, JSONValue]
JSONArray: TypeAlias = list[JSONValue]


class JSONValueError(ValueError):
    """Raised when raw input cannot be represented as a JSON value."""


def parse_json_value(raw: Any) -> JSONValue:
    """Return ``raw`` as a JSON value.

    Text and bytes are parsed with :mod:`json`; mappings and sequences are
    copied recursively so later mutation of the source does not leak in.
    Non-finite numbers and values nested beyond the interpreter's recursion
    limit are rejected on both paths.
    """

    if isinstance(raw, bytes | bytearray):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as err:
            raise JSONValueError(f"payload is not valid UTF-8: {err}") from err
    if isinstance(raw, str):
        try:
            return json.loads(raw, parse_constant=_reject_constant, parse_float=_finite_float)
        except JSONValueError:
            raise
        except ValueError as err:
            raise JSONValueError(f"payload is not valid JSON: {err}") from err
        except RecursionError as err:
            raise JSONValueError("payload is nested too deeply") from err
    try:
        return _normalise(raw)
    except RecursionError as err:
        raise JSONValueError("payload is nested too deeply") from err


def _reject_constant(name: str) -> JSONValue:
    raise JSONValueError(f"{name} is not a JSON number")


def _finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise JSONValueError(f"number {text} is out of range")
    return value


def _normalise(value: Any) -> JSONValue:
    if value is None or isinstance(value, bool | str | int):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            raise JSONValueError(f"non-finite number {value!r} is not JSON")
        return value
    if isinstance(value, Mapping):
        result: JSONObject = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise JSONValueError(f"object key {key!r} is not a string")
            result[key] = _normalise(item)
        return result
    if isinstance(value, Sequence) and not isinstance(value, str | bytes | bytearray):
        return [_normalise(item) for item in value]
    raise JSONValueError(f"{type(value).__name__} is not a JSON value")


def dump_json_value(value: JSONValue) -> str:
    return json.dumps(value, separators=(",", ":"))


def as_string(value: JSONValue | None) -> str | None:
    return value if isinstance(value, str) else None


def as_number(value: JSONValue | None) -> int | float | None:
    # bool is an int subclass but never a JSON number
    if isinstance(value, bool):
        return None
    return value if isinstance(value, int | float) else None


def as_array(value: JSONValue | None) -> JSONArray | None:
    return value if isinstance(value, list) else None


def as_object(value: JSONValue | None) -> JSONObject | None:
    return value if isinstance(value, dict) else None


def first_value(value: JSONValue | None) -> JSONValue | None:
    """Return the first member of an object in insertion order."""

    obj = as_object(value)
    if not obj:
        return None
    return next(iter(obj.values()))


__all__ = [
    "JSONArray",
    "JSONObject",
    "JSONScalar",
    "JSONValue",
    "JSONValueError",
    "as_array",
    "as_number",
    "as_object",
    "as_string",
    "dump_json_value",
    "first_value",
    "parse_json_value",
]
