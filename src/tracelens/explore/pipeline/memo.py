from __future__ import annotations

from typing import Callable, Generic, Hashable, Optional, Tuple, TypeVar

T = TypeVar("T")

_UNSET = object()


class Memo(Generic[T]):
    """One node of the derivation graph.

    The node re-runs ``fn`` only when the dependency key differs from the key
    of the last run. Keys are tuples of upstream versions.
    """

    def __init__(self, name: str, fn: Callable[..., T]):
        self.name = name
        self._fn = fn
        self._key: object = _UNSET
        self._value: Optional[T] = None
        self.runs = 0

    def get(self, key: Tuple[Hashable, ...], *args) -> T:
        if key != self._key:
            self._value = self._fn(*args)
            self._key = key
            self.runs += 1
        return self._value  # type: ignore[return-value]
