"""Query string and urlencoded form parameters.

Both ``ctx.query`` and ``await ctx.form()`` are ``QueryParams``: an
immutable mapping from name to its first value, keeping every
``(name, value)`` pair in the order it was sent.
"""

from collections.abc import Iterator, Mapping
from urllib.parse import parse_qsl


class QueryParams(Mapping[str, str]):
    """Immutable ``name -> first value`` mapping over the sent pairs."""

    __slots__ = ("_index", "_pairs", "_raw")

    def __init__(self, query_string: bytes = b"") -> None:
        pairs = tuple(parse_qsl(query_string.decode("latin-1"), keep_blank_values=True))
        index: dict[str, int] = {}
        for position, (name, _) in enumerate(pairs):
            index.setdefault(name, position)
        object.__setattr__(self, "_raw", query_string)
        object.__setattr__(self, "_pairs", pairs)
        object.__setattr__(self, "_index", index)

    def __getitem__(self, key: str) -> str:
        return self._pairs[self._index[key]][1]

    def __iter__(self) -> Iterator[str]:
        return iter(self._index)

    def __len__(self) -> int:
        return len(self._index)

    def __repr__(self) -> str:
        return f"QueryParams({self._raw.decode('latin-1')!r})"

    def get_list(self, key: str) -> list[str]:
        """Every value sent for *key*, in order."""
        return [value for name, value in self._pairs if name == key]

    def get_int(self, key: str, default: int | None = None) -> int | None:
        """The first value as an int; *default* if missing or not numeric."""
        value = self.get(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            return default

    @property
    def pairs(self) -> tuple[tuple[str, str], ...]:
        return self._pairs

    @property
    def raw(self) -> bytes:
        """The undecoded query string."""
        return self._raw
