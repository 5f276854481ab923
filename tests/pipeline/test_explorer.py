import pytest
from hypothesis import given, strategies as st

from tracelens.explore.api.fetcher import FetchStatus, StaticResult
from tracelens.explore.core.attrkeys import xkey
from tracelens.explore.pipeline.explorer import SpanExplorer
from tracelens.explore.schemas.explore import (
    ExploreConfig,
    ExploreResult,
    OrderConfig,
    PagerConfig,
)

SYSTEM = xkey.span_system


def explorer_for(groups, *, per_page=10, column=None, desc=False, **result_fields):
    cfg = ExploreConfig(
        pager=PagerConfig(per_page=per_page),
        order=OrderConfig(column=column, desc=desc),
    )
    result = ExploreResult(groups=groups, **result_fields)
    return SpanExplorer(cfg=cfg, fetcher=StaticResult(data=result))


def names(items):
    return [item["name"] for item in items]


def test_requires_source_or_fetcher():
    with pytest.raises(ValueError):
        SpanExplorer()


def test_default_config():
    explorer = SpanExplorer(fetcher=StaticResult())
    assert explorer.pager.per_page == 10
    assert explorer.order.column == xkey.span_count_per_min
    assert explorer.order.desc is True


def test_default_order_sorts_by_rate(groups):
    explorer = SpanExplorer(fetcher=StaticResult(data=ExploreResult(groups=groups)))
    assert names(explorer.view().items) == ["B", "C", "A", "D"]


def test_filter_sort_page_scenario():
    explorer = explorer_for(
        [
            {"name": "A", SYSTEM: "db:postgresql", "n": 3},
            {"name": "B", SYSTEM: "http:api", "n": 1},
            {"name": "C", SYSTEM: "db:mysql", "n": 1},
        ],
        per_page=2,
        column="n",
    )
    explorer.type_filter.set(["db"])

    view = explorer.view()
    assert names(view.filtered_items) == ["A", "C"]
    assert names(view.items) == ["C", "A"]
    assert names(view.page_items) == ["C", "A"]
    assert view.num_item == 2
    assert explorer.pager.num_item == 2


def test_ties_keep_filtered_order():
    explorer = explorer_for(
        [
            {"name": "A", SYSTEM: "db:postgresql", "n": 1},
            {"name": "B", SYSTEM: "http:api", "n": 0},
            {"name": "C", SYSTEM: "db:mysql", "n": 1},
        ],
        column="n",
        desc=True,
    )
    assert names(explorer.view().items) == ["A", "C", "B"]


def test_unclassified_items_survive_any_filter(groups):
    explorer = explorer_for(groups, column="name")
    explorer.type_filter.set(["http"])
    assert names(explorer.view().items) == ["B", "D"]


def test_pager_count_follows_filtered_items(groups):
    explorer = explorer_for(groups, per_page=2, column="name")
    assert explorer.view().num_item == 4

    explorer.type_filter.set(["db"])
    view = explorer.view()
    assert view.num_item == 3
    assert explorer.pager.num_page == 2

    explorer.pager.page = 2
    assert names(explorer.view().page_items) == ["D"]


def test_page_past_end_is_empty(groups):
    explorer = explorer_for(groups, per_page=2, column="name")
    explorer.pager.page = 2
    explorer.type_filter.set(["http"])

    view = explorer.view()
    assert view.page_items == ()
    assert explorer.pager.page == 2


def test_types_come_from_unfiltered_items(groups):
    explorer = explorer_for(groups)
    explorer.type_filter.set(["http"])
    types = explorer.view().types
    assert [(t.type, t.num_group) for t in types] == [("db", 2), ("http", 1)]


def test_columns_and_query_parts(result):
    explorer = SpanExplorer(fetcher=StaticResult(data=result))
    view = explorer.view()
    assert [c.name for c in view.columns] == [
        "name",
        SYSTEM,
        "latency",
        xkey.span_count_per_min,
    ]
    assert [c.name for c in view.group_columns] == ["name", SYSTEM]
    assert [c.name for c in view.plot_columns] == ["latency", xkey.span_count_per_min]
    assert view.query_parts[1].disabled is True
    assert view.query_parts[1].error == "unknown column"


def test_idle_view_is_empty():
    view = SpanExplorer(fetcher=StaticResult()).view()
    assert view.status is FetchStatus.IDLE
    assert not view.loading
    assert view.items == ()
    assert view.page_items == ()
    assert view.types == ()
    assert view.columns == ()
    assert view.error is None
    assert (view.error_message, view.error_code, view.query) == ("", "", "")


def test_failed_view_projects_error():
    error = {
        "response": {
            "data": {
                "message": "unknown column foo",
                "code": "bad_query",
                "query": "select foo from spans",
            }
        }
    }
    view = SpanExplorer(fetcher=StaticResult(error=error)).view()
    assert view.status is FetchStatus.FAILED
    assert view.items == ()
    assert view.error is error
    assert view.error_message == "unknown column foo"
    assert view.error_code == "bad_query"
    assert view.query.startswith("SELECT")


# ---------------------------------------------------------------------------
# Recomputation
# ---------------------------------------------------------------------------


def test_unchanged_inputs_reuse_the_snapshot(groups):
    explorer = explorer_for(groups, column="name")
    first = explorer.view()
    counts = explorer.recompute_counts

    assert explorer.view() is first
    assert explorer.recompute_counts == counts


def test_order_change_recomputes_sort_onward(groups):
    explorer = explorer_for(groups, column="name")
    explorer.view()
    before = explorer.recompute_counts

    explorer.order.change("latency")
    explorer.view()
    after = explorer.recompute_counts

    changed = {k for k in after if after[k] != before[k]}
    assert changed == {"sorted_items", "page_items"}


def test_filter_change_recomputes_filter_onward(groups):
    explorer = explorer_for(groups, column="name")
    explorer.view()
    before = explorer.recompute_counts

    explorer.type_filter.toggle("db")
    explorer.view()
    after = explorer.recompute_counts

    changed = {k for k in after if after[k] != before[k]}
    assert changed == {"filtered_items", "sorted_items", "page_items"}


def test_page_change_recomputes_page_only(groups):
    explorer = explorer_for(groups, per_page=1, column="name")
    explorer.view()
    before = explorer.recompute_counts

    explorer.pager.page = 3
    view = explorer.view()
    after = explorer.recompute_counts

    changed = {k for k in after if after[k] != before[k]}
    assert changed == {"page_items"}
    assert names(view.page_items) == ["C"]


def test_snapshots_are_independent(groups):
    explorer = explorer_for(groups, per_page=2, column="name")
    first = explorer.view()
    explorer.pager.page = 2
    second = explorer.view()

    assert names(first.page_items) == ["A", "B"]
    assert names(second.page_items) == ["C", "D"]


@pytest.mark.parametrize("attr", ["fetcher", "pager", "order", "type_filter"])
def test_state_objects_cannot_be_replaced(groups, attr):
    explorer = explorer_for(groups, column="name")
    with pytest.raises(AttributeError):
        setattr(explorer, attr, getattr(explorer, attr))


def test_in_place_changes_reach_the_view(groups):
    explorer = explorer_for(groups, per_page=1, column="name")
    first = explorer.view()

    explorer.type_filter.set(["http"])
    explorer.order.desc = True
    explorer.pager.page = 2
    view = explorer.view()

    assert view is not first
    assert names(view.filtered_items) == ["B", "D"]
    assert names(view.page_items) == ["B"]


# ---------------------------------------------------------------------------
# Consistency of derived views
# ---------------------------------------------------------------------------

item_strategy = st.fixed_dictionaries(
    {"n": st.integers(min_value=0, max_value=3)},
    optional={
        SYSTEM: st.sampled_from(["", "db:pg", "db:mysql", "http:api", "rpc.grpc"])
    },
)


@given(
    items=st.lists(item_strategy, max_size=25),
    selected=st.lists(st.sampled_from(["db", "http", "rpc", "queue"]), max_size=3),
    column=st.sampled_from([None, "n", "missing"]),
    desc=st.booleans(),
    per_page=st.integers(min_value=1, max_value=7),
    page=st.integers(min_value=1, max_value=6),
)
def test_derived_views_are_consistent(items, selected, column, desc, per_page, page):
    explorer = explorer_for(items, per_page=per_page, column=column, desc=desc)
    explorer.type_filter.set(selected)
    explorer.pager.page = page
    view = explorer.view()

    raw_ids = [id(item) for item in explorer.fetcher.state.data.groups]
    filtered_ids = [id(item) for item in view.filtered_items]
    sorted_ids = [id(item) for item in view.items]
    page_ids = [id(item) for item in view.page_items]

    assert set(filtered_ids) <= set(raw_ids)
    assert sorted(sorted_ids) == sorted(filtered_ids)
    assert view.num_item == len(view.filtered_items)

    start, end = view.pos
    assert page_ids == sorted_ids[start:end]
    assert len(page_ids) <= per_page
