from __future__ import annotations

from typing import Iterable, Iterator


class TypeFilter:
    """Selected span types, kept in selection order with set semantics.

    An empty filter means every type is shown.
    """

    def __init__(self, types: Iterable[str] = ()):
        self._types: list[str] = []
        self._version = 0
        self._assign(types)

    @property
    def version(self) -> int:
        return self._version

    @property
    def types(self) -> tuple[str, ...]:
        return tuple(self._types)

    def set(self, types: Iterable[str]) -> None:
        self._assign(types)

    def add(self, typ: str) -> None:
        if typ not in self._types:
            self._types.append(typ)
            self._version += 1

    def remove(self, typ: str) -> None:
        if typ in self._types:
            self._types.remove(typ)
            self._version += 1

    def toggle(self, typ: str) -> None:
        if typ in self._types:
            self.remove(typ)
        else:
            self.add(typ)

    def clear(self) -> None:
        self._assign(())

    def _assign(self, types: Iterable[str]) -> None:
        deduped = list(dict.fromkeys(types))
        if deduped != self._types:
            self._types = deduped
            self._version += 1

    def __contains__(self, typ: object) -> bool:
        return typ in self._types

    def __iter__(self) -> Iterator[str]:
        return iter(self._types)

    def __len__(self) -> int:
        return len(self._types)

    def __bool__(self) -> bool:
        return bool(self._types)

    def __repr__(self) -> str:
        return f"TypeFilter({self._types!r})"
