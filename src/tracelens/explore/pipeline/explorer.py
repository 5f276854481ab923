# explore/pipeline/explorer.py
"""
Span explorer: derived views over one span groups query.

The dependency graph is explicit. Every node is a ``Memo`` keyed by the
versions of its inputs::

    data ──> items ──> filtered ──> sorted ──> page_items
      │                   ▲            ▲           ▲
      │          type_filter        order        pager
      ├──> types
      └──> columns ──> group_columns / plot_columns
    error ──> error_info

``view()`` evaluates the graph in dependency order, pushes the filtered count
into the pager before slicing and returns every derived field as one frozen
``ExploreView``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

import httpx

from tracelens.explore.api.fetcher import (
    FetchState,
    FetchStatus,
    RequestSource,
    ResultFetcher,
    ResultProvider,
)
from tracelens.explore.core.attrkeys import AttrKeys, xkey
from tracelens.explore.pipeline.errors import ErrorInfo, project_error
from tracelens.explore.pipeline.memo import Memo
from tracelens.explore.pipeline.order import Order
from tracelens.explore.pipeline.pager import PagePos, Pager
from tracelens.explore.pipeline.steps import (
    aggregate_types,
    filter_items,
    group_columns,
    plot_columns,
    sort_items,
)
from tracelens.explore.pipeline.type_filter import TypeFilter
from tracelens.explore.schemas.explore import (
    ColumnInfo,
    ExploreConfig,
    ExploreItem,
    QueryPart,
    TypeItem,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExploreView:
    """Read-only snapshot of every derived field."""

    status: FetchStatus
    items: Tuple[ExploreItem, ...]
    filtered_items: Tuple[ExploreItem, ...]
    page_items: Tuple[ExploreItem, ...]
    pos: PagePos
    num_item: int
    types: Tuple[TypeItem, ...]
    query_parts: Tuple[QueryPart, ...]
    columns: Tuple[ColumnInfo, ...]
    group_columns: Tuple[ColumnInfo, ...]
    plot_columns: Tuple[ColumnInfo, ...]
    error: Any
    error_message: str
    error_code: str
    query: str

    @property
    def loading(self) -> bool:
        return self.status is FetchStatus.LOADING


class SpanExplorer:
    def __init__(
        self,
        source: Optional[RequestSource] = None,
        cfg: Optional[ExploreConfig] = None,
        *,
        fetcher: Optional[ResultProvider] = None,
        client: Optional[httpx.AsyncClient] = None,
        keys: Optional[AttrKeys] = None,
        separators: Optional[str] = None,
        dialect: Optional[str] = None,
    ):
        cfg = cfg or ExploreConfig()

        if fetcher is None:
            if source is None:
                raise ValueError("SpanExplorer needs a request source or a fetcher")
            # errors are projected locally, keep them out of the error log
            fetcher = ResultFetcher(source, client=client, ignore_errors=True)

        self._fetcher = fetcher
        self._pager = Pager(cfg.pager)
        self._order = Order(cfg.order)
        self._type_filter = TypeFilter()

        self._keys = keys or xkey
        self._separators = separators
        self._dialect = dialect

        self._items = Memo("items", self._compute_items)
        self._filtered = Memo("filtered_items", self._compute_filtered)
        self._sorted = Memo("sorted_items", self._compute_sorted)
        self._page_items = Memo("page_items", self._compute_page_items)
        self._types = Memo("types", self._compute_types)
        self._columns = Memo("columns", self._compute_columns)
        self._error = Memo("error", self._compute_error)
        self._view = Memo("view", ExploreView)

    # --------------------------------------------------------
    # Public surface
    # --------------------------------------------------------

    # Mutated in place by the caller, never replaced
    @property
    def fetcher(self) -> ResultProvider:
        return self._fetcher

    @property
    def pager(self) -> Pager:
        return self._pager

    @property
    def order(self) -> Order:
        return self._order

    @property
    def type_filter(self) -> TypeFilter:
        return self._type_filter

    async def refresh(self, force: bool = False) -> ExploreView:
        await self.fetcher.refresh(force=force)
        return self.view()

    def view(self) -> ExploreView:
        state = self.fetcher.state
        dv = state.data_version
        fv = self.type_filter.version
        ov = self.order.version
        pv = self.pager.version

        items = self._items.get((dv,), state)
        filtered = self._filtered.get((dv, fv), items)
        self.pager.set_count(len(filtered))
        sorted_items = self._sorted.get((dv, fv, ov), filtered)
        page_items = self._page_items.get((dv, fv, ov, pv), sorted_items)

        types = self._types.get((dv,), items)
        columns, groups, plots, parts = self._columns.get((dv,), state)
        err = self._error.get((state.error_version,), state.error)

        return self._view.get(
            (state.status, dv, fv, ov, pv, state.error_version),
            state.status,
            sorted_items,
            filtered,
            page_items,
            self.pager.pos,
            self.pager.num_item,
            types,
            parts,
            columns,
            groups,
            plots,
            state.error,
            err.message,
            err.code,
            err.query,
        )

    @property
    def recompute_counts(self) -> Dict[str, int]:
        nodes = (
            self._items,
            self._filtered,
            self._sorted,
            self._page_items,
            self._types,
            self._columns,
            self._error,
        )
        return {node.name: node.runs for node in nodes}

    # --------------------------------------------------------
    # Graph nodes
    # --------------------------------------------------------

    def _compute_items(self, state: FetchState) -> Tuple[ExploreItem, ...]:
        if state.data is None:
            return ()
        return tuple(state.data.groups)

    def _compute_filtered(
        self, items: Tuple[ExploreItem, ...]
    ) -> Tuple[ExploreItem, ...]:
        filtered = tuple(
            filter_items(
                items, self.type_filter, self._keys.span_system, self._separators
            )
        )
        logger.debug(
            "Filtered %d of %d groups by types %s",
            len(filtered),
            len(items),
            self.type_filter.types,
        )
        return filtered

    def _compute_sorted(
        self, filtered: Tuple[ExploreItem, ...]
    ) -> Tuple[ExploreItem, ...]:
        return tuple(sort_items(filtered, self.order, self._keys.span_time))

    def _compute_page_items(
        self, sorted_items: Sequence[ExploreItem]
    ) -> Tuple[ExploreItem, ...]:
        return tuple(self.pager.page_slice(sorted_items))

    def _compute_types(
        self, items: Tuple[ExploreItem, ...]
    ) -> Tuple[TypeItem, ...]:
        return tuple(aggregate_types(items, self._keys.span_system, self._separators))

    def _compute_columns(self, state: FetchState):
        if state.data is None:
            return (), (), (), ()
        columns = tuple(state.data.columns)
        return (
            columns,
            tuple(group_columns(columns)),
            tuple(plot_columns(columns)),
            tuple(state.data.query_parts),
        )

    def _compute_error(self, error: Any) -> ErrorInfo:
        info = project_error(error, self._dialect)
        if error is not None:
            logger.debug("Query error code=%r message=%r", info.code, info.message)
        return info
