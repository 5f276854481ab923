# explore/api/fetcher.py
"""
Asynchronous fetcher for explorer query results.

One request is in flight per fetcher. Starting a new request cancels the
previous one, and a response that arrives for a superseded request is
discarded: the last initiated request always wins.
"""
from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Optional, Protocol

import httpx
from pydantic import BaseModel, ConfigDict, Field

from tracelens.explore.core.config import settings
from tracelens.explore.schemas.explore import ExploreResult

logger = logging.getLogger(__name__)


class RequestSpec(BaseModel):
    url: str
    method: str = "GET"
    params: Dict[str, Any] = Field(default_factory=dict)
    body: Optional[Any] = None

    model_config = ConfigDict(frozen=True)


RequestSource = Callable[[], Optional[RequestSpec]]


class FetchStatus(str, enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class FetchState:
    """Snapshot of the fetcher.

    ``data_version`` and ``error_version`` change whenever ``data`` or
    ``error`` is replaced, so consumers can tell which side moved.
    """

    status: FetchStatus = FetchStatus.IDLE
    data: Optional[ExploreResult] = None
    error: Any = None
    data_version: int = 0
    error_version: int = 0

    @property
    def loading(self) -> bool:
        return self.status is FetchStatus.LOADING


class ResultProvider(Protocol):
    """What the explorer needs from a fetcher."""

    @property
    def state(self) -> FetchState: ...

    async def refresh(self, force: bool = False) -> FetchState: ...


class StaticResult:
    """Provider for a result (or error) that is already known, e.g. a saved file."""

    def __init__(
        self, data: Optional[ExploreResult] = None, error: Any = None
    ):
        if error is not None:
            self._state = FetchState(
                status=FetchStatus.FAILED, error=error, error_version=1
            )
        elif data is not None:
            self._state = FetchState(
                status=FetchStatus.READY, data=data, data_version=1
            )
        else:
            self._state = FetchState()

    @property
    def state(self) -> FetchState:
        return self._state

    async def refresh(self, force: bool = False) -> FetchState:
        return self._state


class ResultFetcher:
    def __init__(
        self,
        source: RequestSource,
        *,
        client: Optional[httpx.AsyncClient] = None,
        ignore_errors: bool = False,
        timeout: Optional[float] = None,
    ):
        self._source = source
        self._client = client
        self._ignore_errors = ignore_errors
        self._timeout = timeout if timeout is not None else settings.request_timeout

        self._state = FetchState()
        self._generation = 0
        self._task: Optional[asyncio.Task] = None
        self._last_req: Optional[RequestSpec] = None

    @property
    def state(self) -> FetchState:
        return self._state

    async def refresh(self, force: bool = False) -> FetchState:
        """Re-evaluate the request source and fetch its result.

        An unchanged request that already succeeded is not sent again unless
        ``force`` is set.
        """
        req = self._source()

        if (
            not force
            and req is not None
            and req == self._last_req
            and self._state.status is FetchStatus.READY
        ):
            return self._state

        self._generation += 1
        generation = self._generation
        self._cancel_inflight()
        self._last_req = req

        if req is None:
            self._set(status=FetchStatus.IDLE, data=None, error=None)
            return self._state

        self._set(status=FetchStatus.LOADING)

        task = asyncio.create_task(self._send(req))
        self._task = task
        try:
            result = await task
        except asyncio.CancelledError:
            if generation != self._generation:
                logger.debug("Request %s superseded, discarding", req.url)
                return self._state
            # cancelled by the caller: settle back on what was shown before
            logger.debug("Request %s cancelled", req.url)
            self._cancel_inflight()
            self._last_req = None
            self._set(status=self._settled_status())
            raise
        except (httpx.HTTPError, ValueError) as exc:
            if generation != self._generation:
                logger.debug("Stale failure for %s discarded: %s", req.url, exc)
                return self._state
            self._report(req, exc)
            self._set(status=FetchStatus.FAILED, data=None, error=exc)
            return self._state

        if generation != self._generation:
            logger.debug("Stale response for %s discarded", req.url)
            return self._state

        self._set(status=FetchStatus.READY, data=result, error=None)
        return self._state

    def _settled_status(self) -> FetchStatus:
        if self._state.error is not None:
            return FetchStatus.FAILED
        if self._state.data is not None:
            return FetchStatus.READY
        return FetchStatus.IDLE

    def _cancel_inflight(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _send(self, req: RequestSpec) -> ExploreResult:
        if self._client is not None:
            return await self._request(self._client, req)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await self._request(client, req)

    async def _request(
        self, client: httpx.AsyncClient, req: RequestSpec
    ) -> ExploreResult:
        logger.debug("%s %s params=%s", req.method, req.url, req.params)
        resp = await client.request(
            req.method,
            req.url,
            params=req.params or None,
            json=req.body,
        )
        resp.raise_for_status()
        return ExploreResult.model_validate(resp.json())

    def _report(self, req: RequestSpec, exc: Exception) -> None:
        if self._ignore_errors:
            logger.debug("Explore query %s failed: %s", req.url, exc)
        else:
            logger.error("Explore query %s failed: %s", req.url, exc)

    def _set(self, **changes: Any) -> None:
        cur = self._state
        if "data" in changes and changes["data"] is not cur.data:
            changes["data_version"] = cur.data_version + 1
        if "error" in changes and changes["error"] is not cur.error:
            changes["error_version"] = cur.error_version + 1
        self._state = replace(cur, **changes)
