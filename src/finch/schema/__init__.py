"""Schema contracts — declarative shapes, one generic validator.

Usage::

    from finch.schema import SchemaContract, obj, string, validate

    MESSAGE = SchemaContract(
        responses={200: obj({"message": string()}, required=["message"])},
    )

    result = validate({"message": "hi"}, MESSAGE.response_for(200))
    if not result:
        # result.violations -> (FieldViolation(path=..., kind=..., ...), ...)
        ...
"""

from finch.schema.result import ValidationResult
from finch.schema.types import (
    EMPTY_CONTRACT,
    FieldViolation,
    Schema,
    SchemaContract,
    any_,
    array,
    boolean,
    integer,
    number,
    obj,
    string,
)
from finch.schema.validate import type_name, validate

__all__ = [
    "EMPTY_CONTRACT",
    "FieldViolation",
    "Schema",
    "SchemaContract",
    "ValidationResult",
    "any_",
    "array",
    "boolean",
    "integer",
    "number",
    "obj",
    "string",
    "type_name",
    "validate",
]
