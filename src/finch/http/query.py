"""Query string access."""

from collections.abc import Iterator, Mapping
from typing import Any
from urllib.parse import parse_qs

from finch.schema.types import Schema


class QueryParams(Mapping[str, str]):
    """Parsed query string, read-only.

    Indexing gives the first value of a key; ``get_list`` gives all of
    them. Blank values are kept.
    """

    __slots__ = ("_raw", "_values")

    def __init__(self, query_string: bytes | str = b"") -> None:
        self._raw = query_string.encode("latin-1") if isinstance(query_string, str) else query_string
        self._values: dict[str, list[str]] = parse_qs(
            self._raw.decode("latin-1"), keep_blank_values=True
        )

    def __getitem__(self, key: str) -> str:
        return self._values[key][0]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"QueryParams({self._raw.decode('latin-1')!r})"

    @property
    def raw(self) -> bytes:
        return self._raw

    def get_list(self, key: str) -> list[str]:
        return list(self._values.get(key, ()))

    def to_dict(self, schema: Schema | None = None) -> dict[str, Any]:
        """Collapse to one value per key for validation.

        Keys that *schema* declares as arrays keep all their values.
        """
        multi = set()
        if schema is not None:
            multi = {name for name, prop in schema.properties.items() if prop.type == "array"}
        return {k: (list(v) if k in multi else v[0]) for k, v in self._values.items()}
