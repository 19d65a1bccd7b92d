"""Key tables with a fixed comparison policy.

Both the option values and the alias table are stored in a
:class:`KeyTable`. The comparison policy (case-sensitive or
case-insensitive) is chosen at construction and never changes; a
different policy means building a new table.
"""

from __future__ import annotations

from collections.abc import Iterator, MutableMapping
from typing import Generic, TypeVar

V = TypeVar("V")


def _identity(key: str) -> str:
    return key


def _fold(key: str) -> str:
    return key.lower()


class KeyTable(MutableMapping[str, V], Generic[V]):
    """Mapping keyed by normalized string keys.

    The casing used by the first write of a key is kept for iteration;
    later writes through a differently-cased key overwrite the value
    only.
    """

    def __init__(self, *, case_insensitive: bool = True) -> None:
        self._case_insensitive = case_insensitive
        self._normalize = _fold if case_insensitive else _identity
        self._data: dict[str, tuple[str, V]] = {}

    @property
    def case_insensitive(self) -> bool:
        return self._case_insensitive

    def __getitem__(self, key: str) -> V:
        return self._data[self._normalize(key)][1]

    def __setitem__(self, key: str, value: V) -> None:
        normalized = self._normalize(key)
        existing = self._data.get(normalized)
        original = existing[0] if existing is not None else key
        self._data[normalized] = (original, value)

    def __delitem__(self, key: str) -> None:
        del self._data[self._normalize(key)]

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        return self._normalize(key) in self._data

    def __iter__(self) -> Iterator[str]:
        for original, _ in self._data.values():
            yield original

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        policy = "case_insensitive" if self._case_insensitive else "case_sensitive"
        return f"KeyTable({policy}, {dict(self.items())!r})"

    def lookup(self, key: str) -> tuple[bool, V | None]:
        """Return ``(found, value)`` without raising on a miss."""
        entry = self._data.get(self._normalize(key))
        if entry is None:
            return False, None
        return True, entry[1]

    def rebuilt(self, *, case_insensitive: bool) -> tuple[KeyTable[V], list[str]]:
        """Copy this table under a new comparison policy.

        Returns the new table plus the keys that collided with an
        earlier key under the new policy (the later key's value wins).
        """
        table: KeyTable[V] = KeyTable(case_insensitive=case_insensitive)
        collisions: list[str] = []
        for key, value in self.items():
            if key in table:
                collisions.append(key)
            table[key] = value
        return table, collisions
