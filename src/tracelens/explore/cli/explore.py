# explore/cli/explore.py
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, List, Optional

import typer
from pydantic import ValidationError

from tracelens.explore.api.fetcher import RequestSpec, ResultFetcher, StaticResult
from tracelens.explore.cli.utils import (
    load_result_file,
    load_yaml_file,
    parse_params,
    render_table,
)
from tracelens.explore.core.config import settings
from tracelens.explore.core.logging import setup_logging
from tracelens.explore.pipeline.explorer import ExploreView, SpanExplorer
from tracelens.explore.schemas.explore import ExploreConfig

logger = logging.getLogger(__name__)

# Shared options
TypeOpt = typer.Option(
    None,
    "--type",
    "-t",
    help="Only show span types (can be passed multiple times).",
)
SortOpt = typer.Option(
    None, "--sort", "-s", help="Column to sort by. Defaults to the span rate."
)
NoSortOpt = typer.Option(False, "--no-sort", help="Keep the result order.")
AscOpt = typer.Option(False, "--asc", help="Sort in ascending order.")
PageOpt = typer.Option(1, "--page", "-p", help="Page to show (1-based).")
PerPageOpt = typer.Option(None, "--per-page", help="Groups per page.")
ConfigOpt = typer.Option(
    None, "--config", "-c", help="YAML file with pager/order defaults."
)
VerboseOpt = typer.Option(False, "--verbose", "-v")


def build_config(
    config_path: Optional[Path],
    *,
    page: int,
    per_page: Optional[int],
    sort: Optional[str],
    no_sort: bool,
    asc: bool,
) -> ExploreConfig:
    raw: dict[str, Any] = load_yaml_file(config_path) if config_path else {}

    pager = dict(raw.get("pager") or {})
    pager["page"] = page
    if per_page is not None:
        pager["per_page"] = per_page
    raw["pager"] = pager

    order = dict(raw.get("order") or {})
    if no_sort:
        order["column"] = None
    elif sort:
        order["column"] = sort
    if asc:
        order["desc"] = False
    raw["order"] = order

    return ExploreConfig.model_validate(raw)


def render_view(view: ExploreView, explorer: SpanExplorer) -> str:
    if view.columns:
        columns = [col.name for col in view.columns]
    else:
        columns = list(dict.fromkeys(k for item in view.page_items for k in item))

    lines = []
    if view.types:
        types = ", ".join(f"{t.type} ({t.num_group})" for t in view.types)
        lines.append(f"types: {types}")
    lines.append(render_table(columns, view.page_items))

    pager = explorer.pager
    start, end = view.pos
    lines.append(
        f"page {pager.page}/{max(pager.num_page, 1)} "
        f"(groups {start + 1 if end > start else start}-{end} of {view.num_item})"
    )
    return "\n".join(lines)


def _explorer_or_exit(explorer_factory) -> SpanExplorer:
    try:
        return explorer_factory()
    except (ValidationError, ValueError, FileNotFoundError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1)


def _echo_view(explorer: SpanExplorer, view: ExploreView) -> None:
    if view.error is not None:
        typer.echo(f"Query failed: {view.error_message or view.error}", err=True)
        if view.error_code:
            typer.echo(f"Code: {view.error_code}", err=True)
        if view.query:
            typer.echo(view.query, err=True)
        raise typer.Exit(code=1)

    typer.echo(render_view(view, explorer))


def view_cmd(
    result_file: Path = typer.Argument(..., help="Saved span groups response."),
    types: List[str] = TypeOpt,
    sort: Optional[str] = SortOpt,
    no_sort: bool = NoSortOpt,
    asc: bool = AscOpt,
    page: int = PageOpt,
    per_page: Optional[int] = PerPageOpt,
    config_path: Optional[Path] = ConfigOpt,
    verbose: bool = VerboseOpt,
):
    """
    Show one page of a saved span groups result.
    """
    setup_logging("DEBUG" if verbose else None)

    def factory() -> SpanExplorer:
        cfg = build_config(
            config_path,
            page=page,
            per_page=per_page,
            sort=sort,
            no_sort=no_sort,
            asc=asc,
        )
        explorer = SpanExplorer(
            cfg=cfg, fetcher=StaticResult(data=load_result_file(result_file))
        )
        explorer.type_filter.set(types or [])
        return explorer

    explorer = _explorer_or_exit(factory)
    _echo_view(explorer, explorer.view())


def fetch_cmd(
    url: Optional[str] = typer.Argument(
        None, help="Span groups endpoint. Defaults to settings.api_url."
    ),
    params: List[str] = typer.Option(
        None, "--param", "-q", help="Query parameter as key=value (repeatable)."
    ),
    types: List[str] = TypeOpt,
    sort: Optional[str] = SortOpt,
    no_sort: bool = NoSortOpt,
    asc: bool = AscOpt,
    page: int = PageOpt,
    per_page: Optional[int] = PerPageOpt,
    config_path: Optional[Path] = ConfigOpt,
    timeout: float = typer.Option(settings.request_timeout, "--timeout"),
    verbose: bool = VerboseOpt,
):
    """
    Query a span groups endpoint and show one page of the result.
    """
    setup_logging("DEBUG" if verbose else None)

    def factory() -> SpanExplorer:
        cfg = build_config(
            config_path,
            page=page,
            per_page=per_page,
            sort=sort,
            no_sort=no_sort,
            asc=asc,
        )
        req = RequestSpec(url=url or settings.api_url, params=parse_params(params))
        fetcher = ResultFetcher(lambda: req, ignore_errors=True, timeout=timeout)
        explorer = SpanExplorer(cfg=cfg, fetcher=fetcher)
        explorer.type_filter.set(types or [])
        return explorer

    explorer = _explorer_or_exit(factory)
    view = asyncio.run(explorer.refresh())
    logger.debug("Fetched %d groups", len(view.items))
    _echo_view(explorer, view)


def types_cmd(
    result_file: Path = typer.Argument(..., help="Saved span groups response."),
    verbose: bool = VerboseOpt,
):
    """
    List span types of a saved result with their group counts.
    """
    setup_logging("DEBUG" if verbose else None)

    explorer = _explorer_or_exit(
        lambda: SpanExplorer(
            fetcher=StaticResult(data=load_result_file(result_file))
        )
    )
    view = explorer.view()
    if not view.types:
        typer.echo("No typed groups found.")
        return
    for item in view.types:
        typer.echo(f"{item.type}\t{item.num_group}")
