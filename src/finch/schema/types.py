"""Schema and contract frozen dataclasses.

Schemas are plain data interpreted by ``finch.schema.validate``. There is
no per-field compiled validator: one generic walker handles every shape.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

# Type tags understood by validate()
TYPES: frozenset[str] = frozenset(
    {"string", "number", "integer", "boolean", "object", "array", "any"}
)


@dataclass(frozen=True, slots=True)
class Schema:
    """The declared shape of one value.

    ``properties`` and ``required`` apply to objects, ``items`` to arrays.
    Objects are lenient by default: fields not named in ``properties`` are
    allowed. Set ``strict=True`` to report them as violations.
    """

    type: str = "any"
    properties: Mapping[str, Schema] = field(default_factory=lambda: MappingProxyType({}))
    required: tuple[str, ...] = ()
    items: Schema | None = None
    strict: bool = False

    def __post_init__(self) -> None:
        if self.type not in TYPES:
            msg = f"Unknown schema type {self.type!r}. Expected one of: {', '.join(sorted(TYPES))}"
            raise ValueError(msg)
        # Freeze the property map so a shared schema can't be edited in place
        if not isinstance(self.properties, MappingProxyType):
            object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Schema:
        """Build a Schema from JSON-Schema-like plain data.

        Accepts the familiar shape::

            {
                "type": "object",
                "properties": {"lastname": {"type": "string"}},
                "required": ["lastname"],
            }

        A mapping with ``properties`` but no ``type`` is read as an object.
        ``additionalProperties: false`` turns on strict mode.
        """
        type_tag = data.get("type")
        if type_tag is None:
            type_tag = "object" if "properties" in data or "required" in data else "any"

        properties = {
            name: cls.from_dict(sub) for name, sub in (data.get("properties") or {}).items()
        }
        items_data = data.get("items")
        return cls(
            type=type_tag,
            properties=properties,
            required=tuple(data.get("required") or ()),
            items=cls.from_dict(items_data) if items_data is not None else None,
            strict=data.get("additionalProperties") is False,
        )

    def to_dict(self) -> dict[str, Any]:
        """Render back to JSON-Schema-like plain data (for introspection)."""
        result: dict[str, Any] = {"type": self.type}
        if self.properties:
            result["properties"] = {k: v.to_dict() for k, v in self.properties.items()}
        if self.required:
            result["required"] = list(self.required)
        if self.items is not None:
            result["items"] = self.items.to_dict()
        if self.strict:
            result["additionalProperties"] = False
        return result


@dataclass(frozen=True, slots=True)
class FieldViolation:
    """One reason a value failed its schema.

    ``kind`` is ``"required"`` (absent), ``"type"`` (wrong type) or
    ``"unexpected"`` (extra field under a strict object schema).
    ``actual`` is the actual value's type name, or ``"missing"``.
    """

    path: str
    kind: str
    expected: str
    actual: str

    @property
    def message(self) -> str:
        where = self.path or "value"
        if self.kind == "required":
            return f"{where} is required"
        if self.kind == "unexpected":
            return f"{where} is not an allowed field"
        return f"{where} must be {self.expected}, got {self.actual}"

    def to_dict(self) -> dict[str, str]:
        return {
            "path": self.path,
            "kind": self.kind,
            "expected": self.expected,
            "actual": self.actual,
            "message": self.message,
        }


@dataclass(frozen=True, slots=True)
class SchemaContract:
    """Declared shapes for one route: inbound parts plus responses by status.

    A part set to ``None`` is not validated.
    """

    params: Schema | None = None
    query: Schema | None = None
    body: Schema | None = None
    responses: Mapping[int, Schema] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        if not isinstance(self.responses, MappingProxyType):
            object.__setattr__(self, "responses", MappingProxyType(dict(self.responses)))

    def response_for(self, status: int) -> Schema | None:
        """Return the response schema declared for *status*, if any."""
        return self.responses.get(status)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SchemaContract:
        """Build a contract from plain data keyed by part name.

        ``querystring`` is accepted as an alias for ``query``. Response
        keys may be ints or numeric strings.
        """
        query = data.get("query", data.get("querystring"))
        return cls(
            params=Schema.from_dict(data["params"]) if "params" in data else None,
            query=Schema.from_dict(query) if query is not None else None,
            body=Schema.from_dict(data["body"]) if "body" in data else None,
            responses={
                int(status): Schema.from_dict(sub)
                for status, sub in (data.get("response") or {}).items()
            },
        )


# No contract: nothing validated in or out.
EMPTY_CONTRACT = SchemaContract()


# -- Builders --


def string() -> Schema:
    return Schema("string")


def number() -> Schema:
    return Schema("number")


def integer() -> Schema:
    return Schema("integer")


def boolean() -> Schema:
    return Schema("boolean")


def any_() -> Schema:
    return Schema("any")


def array(items: Schema | None = None) -> Schema:
    """An array, optionally with every item checked against *items*."""
    return Schema("array", items=items)


def obj(
    properties: Mapping[str, Schema] | None = None,
    *,
    required: tuple[str, ...] | list[str] = (),
    strict: bool = False,
) -> Schema:
    """An object with named properties.

    Usage::

        obj({"title": string(), "author": string()}, required=["title", "author"])
    """
    return Schema(
        "object",
        properties=dict(properties or {}),
        required=tuple(required),
        strict=strict,
    )
