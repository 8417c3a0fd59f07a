"""
Validated GET requests against the Places web-service API.

The executor classifies every failure into the RequestError taxonomy and
delivers completions through an ExecutionContext, so callers decide where
their callbacks run.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Coroutine, Mapping, Protocol

import httpx
from loguru import logger

from chained_autocomplete.exceptions import (
    ApiStatusError,
    HttpStatusError,
    MalformedPayloadError,
    NoResponseError,
    RequestError,
    TransportError,
)
from chained_autocomplete.infrastructure.trace_decorator import traced
from chained_autocomplete.utils.query import encode_query

CompletionCallback = Callable[[dict | None, RequestError | None], None]


class ExecutionContext(Protocol):
    def dispatch(self, fn: Callable[..., Any], *args: Any) -> None: ...


class ImmediateExecutionContext:
    """Runs callbacks inline on the loop that completed the request."""

    def dispatch(self, fn: Callable[..., Any], *args: Any) -> None:
        fn(*args)


class LoopExecutionContext:
    """Schedules callbacks on a designated event loop (safe from any thread)."""

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop

    def dispatch(self, fn: Callable[..., Any], *args: Any) -> None:
        self._loop.call_soon_threadsafe(fn, *args)


def build_url(base_url: str, params: Mapping[str, str | None]) -> str:
    return f"{base_url}?{encode_query(params)}"


class RequestExecutor:
    """Async executor for single GET requests."""

    def __init__(
        self,
        timeout: float = 10.0,
        context: ExecutionContext | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._context = context or ImmediateExecutionContext()
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)
        self._pending: set[asyncio.Task] = set()

    @property
    def context(self) -> ExecutionContext:
        return self._context

    @traced(span_name="places.http.get", handler_type="request")
    async def execute(self, base_url: str, params: Mapping[str, str | None]) -> dict:
        """Issue one GET and return the validated JSON object.

        Raises:
            TransportError: DNS, connection or timeout failure.
            NoResponseError: the transport produced no response.
            HttpStatusError: status code other than 200.
            MalformedPayloadError: body is not a JSON object.
            ApiStatusError: top-level ``status`` present and not ``OK``.
        """
        url = build_url(base_url, params)
        logger.debug(f"GET {base_url} params={sorted(params)}")

        try:
            response = await self._client.get(url)
        except httpx.TransportError as e:
            raise TransportError(str(e) or type(e).__name__) from e

        if response is None:
            raise NoResponseError()

        if response.status_code != 200:
            raise HttpStatusError(response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            raise MalformedPayloadError(f"Invalid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise MalformedPayloadError()

        status = payload.get("status")
        if status is not None and status != "OK":
            raise ApiStatusError(str(status), payload.get("error_message"))

        return payload

    @property
    def pending_tasks(self) -> frozenset[asyncio.Task]:
        return frozenset(self._pending)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.opt(exception=task.exception()).error("Background request task failed")

    def spawn(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task:
        """Schedule ``coro`` on the running loop, keeping a reference until it finishes."""
        task = asyncio.get_running_loop().create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    async def deliver(self, callback: Callable[..., Any], *args: Any) -> None:
        """Dispatch ``callback(*args)`` on the context and wait until it has run."""
        loop = asyncio.get_running_loop()
        delivered = loop.create_future()

        def _resolve() -> None:
            if not delivered.done():
                delivered.set_result(None)

        def _invoke() -> None:
            try:
                callback(*args)
            finally:
                loop.call_soon_threadsafe(_resolve)

        self._context.dispatch(_invoke)
        await delivered

    def submit(
        self,
        base_url: str,
        params: Mapping[str, str | None],
        callback: CompletionCallback,
    ) -> asyncio.Task:
        """Run ``execute`` in the background and deliver ``callback(payload, error)``.

        The returned task completes only after the callback has run on the
        execution context. Must be called with a running event loop.
        """

        async def _run() -> None:
            try:
                payload = await self.execute(base_url, params)
            except RequestError as e:
                await self.deliver(callback, None, e)
            else:
                await self.deliver(callback, payload, None)

        return self.spawn(_run())

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
