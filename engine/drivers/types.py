"""Semantic parameter types shared by every driver language."""

import json
import math
from typing import Any

from engine.errors import InvalidTestCase, UnsupportedType

SCALARS = ("int", "long", "double", "boolean", "string")
ARRAYS = ("int[]", "long[]", "double[]", "boolean[]", "string[]")
NODES = ("ListNode", "TreeNode")
MATRICES = ("int[][]",)

TYPES = SCALARS + ARRAYS + MATRICES + NODES

# helper-function suffix, e.g. show_int_array / to_tree_node
SUFFIX = {
    "int": "int",
    "long": "long",
    "double": "double",
    "boolean": "bool",
    "string": "string",
    "int[]": "int_array",
    "long[]": "long_array",
    "double[]": "double_array",
    "boolean[]": "bool_array",
    "string[]": "string_array",
    "int[][]": "int_matrix",
    "ListNode": "list_node",
    "TreeNode": "tree_node",
}

_ALIASES = {
    "integer": "int",
    "bool": "boolean",
    "float": "double",
    "str": "string",
    "list<integer>": "int[]",
    "list<int>": "int[]",
    "list[int]": "int[]",
    "vector<int>": "int[]",
    "ilist<int>": "int[]",
    "list<long>": "long[]",
    "vector<long>": "long[]",
    "vector<longlong>": "long[]",
    "list<double>": "double[]",
    "list[float]": "double[]",
    "vector<double>": "double[]",
    "list<boolean>": "boolean[]",
    "list<bool>": "boolean[]",
    "list[bool]": "boolean[]",
    "vector<bool>": "boolean[]",
    "bool[]": "boolean[]",
    "list<string>": "string[]",
    "list[str]": "string[]",
    "vector<string>": "string[]",
    "ilist<string>": "string[]",
    "list<list<integer>>": "int[][]",
    "list<list<int>>": "int[][]",
    "list[list[int]]": "int[][]",
    "vector<vector<int>>": "int[][]",
    "ilist<ilist<int>>": "int[][]",
    "listnode": "ListNode",
    "treenode": "TreeNode",
}


def normalize_type(name: str) -> str:
    key = "".join(name.split())
    if key in TYPES:
        return key
    lowered = key.lower()
    if lowered in TYPES:
        return lowered
    if lowered in _ALIASES:
        return _ALIASES[lowered]
    raise UnsupportedType(name)


def element_type(type_name: str) -> str:
    return type_name[:-2]


def _scalar(type_name: str, value: Any) -> Any:
    if value is None:
        return {"int": 0, "long": 0, "double": 0.0, "boolean": False, "string": ""}[type_name]
    if type_name in ("int", "long"):
        return int(value)
    if type_name == "double":
        return float(value)
    if type_name == "boolean":
        if isinstance(value, str):
            return value.strip().lower() == "true"
        return bool(value)
    return value if isinstance(value, str) else json.dumps(value)


def _coerce(type_name: str, value: Any) -> Any:
    if isinstance(value, str) and type_name != "string":
        text = value.strip()
        try:
            value = json.loads(text) if text else None
        except ValueError:
            if type_name not in SCALARS:
                raise InvalidTestCase(f"cannot read {value!r} as {type_name}")
            value = text

    if type_name in SCALARS:
        return _scalar(type_name, value)
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        value = [value]
    if type_name == "int[][]":
        return [_coerce("int[]", row) for row in value]
    if type_name == "ListNode":
        return [int(v) for v in value if v is not None]
    if type_name == "TreeNode":
        return [None if v is None else int(v) for v in value]
    return [_coerce(element_type(type_name), v) for v in value]


def coerce(type_name: str, value: Any) -> Any:
    """Normalize a raw test-case value; None becomes the type's empty value."""
    try:
        return _coerce(type_name, value)
    except (TypeError, ValueError, OverflowError) as e:
        raise InvalidTestCase(f"cannot read {value!r} as {type_name}: {e}") from e


def float_repr(value: float) -> str | None:
    """repr() of a finite double, or None for inf/nan."""
    if math.isnan(value) or math.isinf(value):
        return None
    return repr(float(value))


def tree_is_empty(values: list) -> bool:
    return not values or values[0] is None
