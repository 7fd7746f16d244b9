"""Case-insensitive HTTP header mapping."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, MutableMapping

from typing_extensions import override


HeaderSource = Mapping[str, str] | Iterable[tuple[str, str]] | None


class Headers(MutableMapping[str, str]):
    """
    HTTP headers keyed case-insensitively.

    Names keep the case they were first set with, so iteration yields
    ``"Content-Type"`` rather than ``"content-type"``. Setting a name that
    differs only in case replaces the value but keeps the original spelling.
    """

    __slots__ = ("_items",)

    def __init__(self, headers: HeaderSource = None):
        # lower-cased name -> (original name, value)
        self._items: dict[str, tuple[str, str]] = {}
        if headers is not None:
            self.update(headers)

    @override
    def __getitem__(self, name: str) -> str:
        return self._items[name.lower()][1]

    @override
    def __setitem__(self, name: str, value: str) -> None:
        key = name.lower()
        existing = self._items.get(key)
        self._items[key] = (existing[0] if existing else name, str(value))

    @override
    def __delitem__(self, name: str) -> None:
        del self._items[name.lower()]

    @override
    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._items

    @override
    def __iter__(self) -> Iterator[str]:
        return (original for original, _ in self._items.values())

    @override
    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"Headers({dict(self.items())!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Mapping):
            other = Headers(other)
        if not isinstance(other, Headers):
            return NotImplemented
        return {k: v for k, (_, v) in self._items.items()} == {
            k: v for k, (_, v) in other._items.items()
        }

    def raw(self) -> list[tuple[bytes, bytes]]:
        """Header pairs encoded for the wire (latin-1)."""
        return [
            (name.encode("latin-1"), value.encode("latin-1"))
            for name, value in self.items()
        ]
