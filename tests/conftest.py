# tests/conftest.py
import logging

import pytest

from tracelens.explore.core.attrkeys import xkey
from tracelens.explore.schemas.explore import ExploreResult


def group(name: str, system=None, **fields):
    item = {"name": name, **fields}
    if system is not None:
        item[xkey.span_system] = system
    return item


@pytest.fixture
def groups():
    return [
        group("A", "db:postgresql", latency=3, **{xkey.span_count_per_min: 10.0}),
        group("B", "http:checkout", latency=1, **{xkey.span_count_per_min: 30.0}),
        group("C", "db:mysql", latency=1, **{xkey.span_count_per_min: 20.0}),
        group("D", None, latency=2, **{xkey.span_count_per_min: 5.0}),
    ]


@pytest.fixture
def result_payload(groups):
    return {
        "groups": groups,
        "columns": [
            {"name": "name", "isNum": False, "isGroup": True},
            {"name": xkey.span_system, "isNum": False, "isGroup": True},
            {"name": "latency", "isNum": True, "isGroup": False},
            {"name": xkey.span_count_per_min, "isNum": True, "isGroup": False},
        ],
        "queryParts": [
            {"query": "group by span.system"},
            {"query": "where bad", "error": "unknown column", "disabled": True},
        ],
    }


@pytest.fixture
def result(result_payload):
    return ExploreResult.model_validate(result_payload)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    app_level = logging.getLogger("tracelens").level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("tracelens").setLevel(app_level)
