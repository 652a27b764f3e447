"""Header and value stores owned by a RequestConfig.

HeaderStore keeps one value per header name. ValueStore keeps an ordered
list of values per name and serves as both query string and form/JSON body,
depending on which encoder consumes it.
"""

from __future__ import annotations

from typing import Iterator
from urllib.parse import parse_qsl, urlencode


class HeaderStore:
    """Header name -> value. Last write wins.

    Names match case-insensitively, as on the wire. The spelling of the
    most recent add() is the one sent.
    """

    def __init__(self, headers: dict[str, str] | None = None) -> None:
        # lowercase name -> (name as written, value)
        self._headers: dict[str, tuple[str, str]] = {}
        for name, value in (headers or {}).items():
            self.add(name, value)

    def add(self, name: str, value: str) -> None:
        self._headers[name.lower()] = (name, value)

    def get(self, name: str) -> str:
        """Return the header value, or "" if absent."""
        entry = self._headers.get(name.lower())
        return entry[1] if entry else ""

    def delete(self, name: str) -> None:
        self._headers.pop(name.lower(), None)

    def clear(self) -> None:
        self._headers.clear()

    def copy(self) -> HeaderStore:
        return HeaderStore(dict(self.items()))

    def items(self) -> list[tuple[str, str]]:
        return list(self._headers.values())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._headers

    def __iter__(self) -> Iterator[str]:
        return (name for name, _ in self._headers.values())

    def __len__(self) -> int:
        return len(self._headers)

    def __repr__(self) -> str:
        return f"HeaderStore({dict(self.items())!r})"


class ValueStore:
    """Multi-valued mapping of parameter name to ordered values.

    Duplicate values under one name are kept in insertion order. encode()
    sorts by name so the same contents always produce the same query string.
    """

    def __init__(self, values: dict[str, list[str]] | None = None) -> None:
        self._values: dict[str, list[str]] = {
            key: list(items) for key, items in (values or {}).items()
        }

    def add(self, name: str, value: str) -> None:
        self._values.setdefault(name, []).append(value)

    def set(self, name: str, value: str) -> None:
        self._values[name] = [value]

    def get(self, name: str) -> str:
        """Return the first value for name, or "" if absent."""
        values = self._values.get(name)
        return values[0] if values else ""

    def get_all(self, name: str) -> list[str]:
        return list(self._values.get(name, []))

    def delete(self, name: str) -> None:
        self._values.pop(name, None)

    def extend(self, other: ValueStore) -> None:
        """Append every value of other, keeping duplicates."""
        for name, values in other.items():
            for value in values:
                self.add(name, value)

    def copy(self) -> ValueStore:
        return ValueStore(self._values)

    def items(self) -> list[tuple[str, list[str]]]:
        return [(key, list(values)) for key, values in self._values.items()]

    def pairs(self) -> list[tuple[str, str]]:
        """Flatten to (name, value) pairs, names sorted."""
        return [
            (key, value)
            for key in sorted(self._values)
            for value in self._values[key]
        ]

    def encode(self) -> str:
        """URL-encode as form data ("a=1&b=2"), names sorted."""
        return urlencode(self.pairs())

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ValueStore):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        return f"ValueStore({self._values!r})"


def parse_query(raw_query: str) -> ValueStore:
    """Parse a raw query string ("a=1&a=2&b=") into a ValueStore.

    Blank values are kept, so "flag=" round-trips.
    """
    store = ValueStore()
    for name, value in parse_qsl(raw_query, keep_blank_values=True):
        store.add(name, value)
    return store
