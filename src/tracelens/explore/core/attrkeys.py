from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from tracelens.explore.core.config import Settings, settings


@dataclass(frozen=True)
class AttrKeys:
    """Well-known span attribute keys read from explore items."""

    span_system: str
    span_time: str
    span_count_per_min: str

    @classmethod
    def from_settings(cls, cfg: Optional[Settings] = None) -> "AttrKeys":
        cfg = cfg or settings
        return cls(
            span_system=cfg.span_system_key,
            span_time=cfg.span_time_key,
            span_count_per_min=cfg.span_count_per_min_key,
        )


xkey = AttrKeys.from_settings()
