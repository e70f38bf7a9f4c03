"""Validation result — immutable container for validated data or violations."""

from dataclasses import dataclass
from typing import Any

from finch.schema.types import FieldViolation


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """The outcome of validating one value against a schema.

    The result is falsy when invalid, so you can write::

        result = validate(body, contract.body)
        if not result:
            raise ValidationError(part="body", violations=result.violations)

    ``data`` is the validated value. When validating with ``coerce=True``
    it holds the converted values (``"42"`` -> ``42`` for integers).
    """

    data: Any
    violations: tuple[FieldViolation, ...] = ()

    @property
    def ok(self) -> bool:
        """True if validation passed with no violations."""
        return not self.violations

    def __bool__(self) -> bool:
        """Falsy when invalid, so ``if not result:`` reads naturally."""
        return self.ok
