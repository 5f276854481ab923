from __future__ import annotations

from typing import Optional

from tracelens.explore.schemas.explore import OrderConfig


class Order:
    """Current sort column and direction. ``column=None`` disables sorting."""

    def __init__(self, cfg: Optional[OrderConfig] = None):
        self._default = cfg or OrderConfig()
        self._column = self._default.column
        self._desc = self._default.desc
        self._version = 0

    @property
    def version(self) -> int:
        return self._version

    @property
    def column(self) -> Optional[str]:
        return self._column

    @column.setter
    def column(self, value: Optional[str]) -> None:
        if value != self._column:
            self._column = value
            self._version += 1

    @property
    def desc(self) -> bool:
        return self._desc

    @desc.setter
    def desc(self, value: bool) -> None:
        if value != self._desc:
            self._desc = value
            self._version += 1

    def change(self, column: str) -> None:
        """Sort by ``column``; selecting the current column flips the direction."""
        if column == self._column:
            self.desc = not self._desc
            return
        self.column = column
        self.desc = True

    def reset(self) -> None:
        self.column = self._default.column
        self.desc = self._default.desc

    def __repr__(self) -> str:
        return f"Order(column={self._column!r}, desc={self._desc})"
