# explore/cli/utils.py
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence

import yaml

from tracelens.explore.schemas.explore import ExploreItem, ExploreResult


def load_yaml_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"YAML file does not exist: {path}")
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_result_file(path: Path) -> ExploreResult:
    """Load a saved span groups response (JSON or YAML)."""
    if not path.exists():
        raise FileNotFoundError(f"Result file does not exist: {path}")
    if path.suffix in (".yaml", ".yml"):
        return ExploreResult.model_validate(load_yaml_file(path))
    with path.open("r", encoding="utf-8") as f:
        return ExploreResult.model_validate(json.load(f))


def parse_params(pairs: Optional[Iterable[str]]) -> dict[str, str]:
    """Parse ``key=value`` pairs given on the command line."""
    params: dict[str, str] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Expected key=value, got '{pair}'")
        params[key] = value
    return params


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        return f"{value:.6g}"
    return str(value)


def render_table(columns: Sequence[str], rows: Iterable[ExploreItem]) -> str:
    header = list(columns)
    body: List[List[str]] = [[_cell(row.get(col)) for col in header] for row in rows]

    widths = [len(h) for h in header]
    for line in body:
        for i, cell in enumerate(line):
            widths[i] = max(widths[i], len(cell))

    def fmt(cells: Sequence[str]) -> str:
        return "  ".join(c.ljust(w) for c, w in zip(cells, widths)).rstrip()

    out = [fmt(header), fmt(["-" * w for w in widths])]
    out.extend(fmt(line) for line in body)
    return "\n".join(out)
