# explore/pipeline/errors.py
"""
Projection of a failed explorer query into display strings.

The error object is opaque: it may be an ``httpx.HTTPStatusError``, a nested
mapping shaped like ``{"response": {"data": {...}}}`` or any object exposing
the same path through attributes. Every missing step yields ``""``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import httpx
import sqlglot
import sqlglot.errors

from tracelens.explore.core.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ErrorInfo:
    message: str = ""
    code: str = ""
    query: str = ""


NO_ERROR = ErrorInfo()


def _lookup(obj: Any, key: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return obj.get(key)
    if key == "data" and isinstance(obj, httpx.Response):
        try:
            return obj.json()
        except ValueError:
            return None
    try:
        return getattr(obj, key, None)
    except RuntimeError:
        # httpx raises when .request/.response was never attached
        return None


def _scalar(value: Any) -> str:
    if value is None or isinstance(value, (Mapping, list, tuple)):
        return ""
    return str(value)


def error_data(error: Any) -> Any:
    """Return ``error.response.data`` or None."""
    return _lookup(_lookup(error, "response"), "data")


def format_query(sql: str, dialect: Optional[str] = None) -> str:
    """Pretty-print ``sql``; SQL that cannot be parsed is returned unchanged."""
    if not sql or not sql.strip():
        return ""

    dialect = dialect or settings.sql_dialect
    try:
        statements = sqlglot.transpile(sql, read=dialect, write=dialect, pretty=True)
    except (sqlglot.errors.SqlglotError, ValueError) as exc:
        logger.debug("Could not format query, passing it through: %s", exc)
        return sql

    return ";\n\n".join(statements) if statements else sql


def project_error(error: Any, dialect: Optional[str] = None) -> ErrorInfo:
    if error is None:
        return NO_ERROR

    data = error_data(error)
    return ErrorInfo(
        message=_scalar(_lookup(data, "message")),
        code=_scalar(_lookup(data, "code")),
        query=format_query(_scalar(_lookup(data, "query")), dialect),
    )
