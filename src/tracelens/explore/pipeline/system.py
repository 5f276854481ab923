from __future__ import annotations

import re
from functools import lru_cache
from typing import Optional, Tuple

from tracelens.explore.core.config import settings
from tracelens.explore.schemas.explore import ItemValue


@lru_cache(maxsize=16)
def _separator_re(separators: str) -> re.Pattern[str]:
    return re.compile("[" + re.escape(separators) + "]")


def split_type_system(
    system: str, separators: Optional[str] = None
) -> Tuple[str, str]:
    """Split a span system into its type and subsystem.

    ``"db:postgresql"`` -> ``("db", "postgresql")``,
    ``"http.client"`` -> ``("http", "client")``. A system without a
    separator is its own type and subsystem.
    """
    if separators is None:
        separators = settings.system_separators
    parts = _separator_re(separators).split(system, maxsplit=1)
    if len(parts) == 1:
        return system, system
    return parts[0], parts[1]


def classify(
    system: ItemValue, separators: Optional[str] = None
) -> Optional[str]:
    """Return the span type of a system value, or None when it is unclassified."""
    if not system:
        return None
    typ, _ = split_type_system(str(system), separators)
    return typ or None
