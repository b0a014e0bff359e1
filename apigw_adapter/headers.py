from __future__ import annotations

import string
from typing import Iterable, Iterator, Mapping

TOKEN_CHARS = frozenset(string.ascii_letters + string.digits + "!#$%&'*+-.^_`|~")


def canonical_header_key(key: str) -> str:
    """Return the canonical form of a header name.

    The first letter and any letter following a hyphen are upper-cased, the
    rest lower-cased, so ``header-three`` becomes ``Header-Three``. Names
    holding a character that is not a header token character (a space, for
    instance) are returned unchanged.
    """
    if any(c not in TOKEN_CHARS for c in key):
        return key
    out = []
    upper = True
    for c in key:
        out.append(c.upper() if upper else c.lower())
        upper = c == "-"
    return "".join(out)


class Headers:
    """Ordered header multi-map keyed by canonical header name.

    Every insertion goes through :func:`canonical_header_key`, so keys that
    differ only by case share one value list. Keys keep first-insertion
    order and values keep the order they were added in.
    """

    def __init__(self, initial: Mapping | Iterable | None = None) -> None:
        self._values: dict[str, list[str]] = {}
        if initial is None:
            return
        if isinstance(initial, Headers):
            initial = initial.items()
        elif isinstance(initial, Mapping):
            initial = initial.items()
        for key, value in initial:
            if isinstance(value, (list, tuple)):
                for v in value:
                    self.add(key, v)
            else:
                self.add(key, value)

    def add(self, key: str, value: str) -> None:
        self._values.setdefault(canonical_header_key(key), []).append(value)

    def set(self, key: str, value: str) -> None:
        self._values[canonical_header_key(key)] = [value]

    def get(self, key: str, default: str | None = None) -> str | None:
        values = self._values.get(canonical_header_key(key))
        if not values:
            return default
        return values[0]

    def get_all(self, key: str) -> list[str]:
        return list(self._values.get(canonical_header_key(key), ()))

    def remove(self, key: str) -> None:
        self._values.pop(canonical_header_key(key), None)

    def items(self) -> list[tuple[str, list[str]]]:
        return [(k, list(v)) for k, v in self._values.items()]

    def keys(self) -> list[str]:
        return list(self._values)

    def to_dict(self) -> dict[str, list[str]]:
        return {k: list(v) for k, v in self._values.items()}

    def copy(self) -> "Headers":
        return Headers(self)

    def __getitem__(self, key: str) -> list[str]:
        return list(self._values[canonical_header_key(key)])

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and canonical_header_key(key) in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._values))

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Headers):
            return self._values == other._values
        if isinstance(other, Mapping):
            return self._values == {k: list(v) for k, v in other.items()}
        return NotImplemented

    def __repr__(self) -> str:
        return f"Headers({self._values!r})"
