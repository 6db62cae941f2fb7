"""Parsed query string.

A read-only ``Mapping[str, str]`` over the first value of each key, with
``get_list`` for repeated keys. Blank values (``?flag=``) are kept.
"""

from collections.abc import Iterator, Mapping
from urllib.parse import parse_qsl


class QueryParams(Mapping[str, str]):
    """Read-only query parameters, in the order they first appear."""

    __slots__ = ("_index", "_raw")

    def __init__(self, query_string: bytes = b"") -> None:
        index: dict[str, list[str]] = {}
        for key, value in parse_qsl(query_string.decode("latin-1"), keep_blank_values=True):
            index.setdefault(key, []).append(value)
        object.__setattr__(self, "_raw", query_string)
        object.__setattr__(self, "_index", index)

    def __setattr__(self, name: str, value: object) -> None:
        msg = "QueryParams are immutable."
        raise AttributeError(msg)

    def __getitem__(self, key: str) -> str:
        return self._index[key][0]

    def __iter__(self) -> Iterator[str]:
        return iter(self._index)

    def __len__(self) -> int:
        return len(self._index)

    def __repr__(self) -> str:
        return f"QueryParams({self._raw.decode('latin-1')!r})"

    def get_list(self, key: str) -> list[str]:
        """Every value for *key*, in order; empty when absent."""
        return list(self._index.get(key, ()))

    @property
    def raw(self) -> bytes:
        """The undecoded query string."""
        return self._raw
