"""Generic schema walker.

One function interprets every ``Schema``: type checks, required fields,
object and array nesting, optional coercion of text values. No side
effects; the same input always yields the same result.
"""

import math
import re
from collections.abc import Callable, Mapping
from typing import Any

from finch.schema.result import ValidationResult
from finch.schema.types import FieldViolation, Schema


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a number here
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


_TYPE_CHECKS: dict[str, Callable[[Any], bool]] = {
    "string": lambda v: isinstance(v, str),
    "number": _is_number,
    "integer": _is_integer,
    "boolean": lambda v: isinstance(v, bool),
    "object": lambda v: isinstance(v, Mapping),
    "array": lambda v: isinstance(v, (list, tuple)),
}


def type_name(value: Any) -> str:
    """Schema-vocabulary name of a Python value's type."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, (list, tuple)):
        return "array"
    return type(value).__name__


# -- Text coercion (path params and query strings arrive as text) --

# Plain ASCII decimals only: no "1_000", no padding, no "inf"/"nan"
_INTEGER_TEXT = re.compile(r"[+-]?[0-9]+")
_NUMBER_TEXT = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def _to_integer(text: str) -> int:
    if not _INTEGER_TEXT.fullmatch(text):
        msg = f"not an integer: {text!r}"
        raise ValueError(msg)
    return int(text)


def _to_number(text: str) -> int | float:
    if _INTEGER_TEXT.fullmatch(text):
        return int(text)
    if not _NUMBER_TEXT.fullmatch(text):
        msg = f"not a number: {text!r}"
        raise ValueError(msg)
    value = float(text)
    if not math.isfinite(value):
        msg = f"not a finite number: {text!r}"
        raise ValueError(msg)
    return value


_BOOLEANS = {"true": True, "1": True, "false": False, "0": False}


def _to_boolean(text: str) -> bool:
    try:
        return _BOOLEANS[text.lower()]
    except KeyError:
        msg = f"not a boolean: {text!r}"
        raise ValueError(msg) from None


_COERCERS: dict[str, Callable[[str], Any]] = {
    "integer": _to_integer,
    "number": _to_number,
    "boolean": _to_boolean,
}


def validate(value: Any, schema: Schema, *, coerce: bool = False) -> ValidationResult:
    """Validate *value* against *schema*.

    Args:
        value: The decoded value, a request part or a response body.
        schema: The declared shape.
        coerce: Convert text to ``integer``/``number``/``boolean`` where the
            schema asks for one. Used for path params and query strings.

    Returns:
        A ``ValidationResult``. Each missing required field and each type
        mismatch is exactly one violation; the fields of a mistyped value
        are not inspected. Extra fields are allowed unless the object
        schema is strict.

    Example::

        result = validate({"book": {}}, schema)
        if not result:
            # result.violations[0].path == "book.title"
            ...
    """
    violations: list[FieldViolation] = []
    data = _check(value, schema, "", coerce, violations)
    return ValidationResult(data=data, violations=tuple(violations))


def _check(
    value: Any,
    schema: Schema,
    path: str,
    coerce: bool,
    out: list[FieldViolation],
) -> Any:
    kind = schema.type
    if kind == "any":
        return value

    if coerce and isinstance(value, str) and kind in _COERCERS:
        try:
            return _COERCERS[kind](value)
        except ValueError:
            out.append(FieldViolation(path, "type", kind, "string"))
            return value

    if not _TYPE_CHECKS[kind](value):
        out.append(FieldViolation(path, "type", kind, type_name(value)))
        return value

    if kind == "object":
        return _check_object(value, schema, path, coerce, out)
    if kind == "array":
        return _check_array(value, schema, path, coerce, out)
    return value


def _check_object(
    value: Mapping[str, Any],
    schema: Schema,
    path: str,
    coerce: bool,
    out: list[FieldViolation],
) -> dict[str, Any]:
    cleaned: dict[str, Any] = {}

    for name in schema.required:
        if name not in value:
            prop = schema.properties.get(name)
            expected = prop.type if prop is not None else "any"
            out.append(FieldViolation(_join(path, name), "required", expected, "missing"))

    for name, item in value.items():
        prop = schema.properties.get(name)
        if prop is not None:
            cleaned[name] = _check(item, prop, _join(path, name), coerce, out)
        elif schema.strict:
            out.append(FieldViolation(_join(path, name), "unexpected", "absent", type_name(item)))
        else:
            cleaned[name] = item

    return cleaned


def _check_array(
    value: list[Any] | tuple[Any, ...],
    schema: Schema,
    path: str,
    coerce: bool,
    out: list[FieldViolation],
) -> list[Any]:
    if schema.items is None:
        return list(value)
    return [
        _check(item, schema.items, f"{path}[{index}]", coerce, out)
        for index, item in enumerate(value)
    ]


def _join(path: str, name: str) -> str:
    return f"{path}.{name}" if path else name
