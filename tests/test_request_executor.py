import asyncio

import httpx
import pytest
from loguru import logger

from chained_autocomplete.clients.request_executor import (
    LoopExecutionContext,
    RequestExecutor,
    build_url,
)
from chained_autocomplete.exceptions import (
    ApiStatusError,
    HttpStatusError,
    MalformedPayloadError,
    NoResponseError,
    TransportError,
)

BASE_URL = "https://maps.googleapis.com/maps/api/place/autocomplete/json"


def _executor(handler, context=None) -> RequestExecutor:
    return RequestExecutor(context=context, transport=httpx.MockTransport(handler))


class RecordingContext:
    def __init__(self) -> None:
        self.dispatched = 0

    def dispatch(self, fn, *args) -> None:
        self.dispatched += 1
        fn(*args)


def test_build_url_appends_sorted_query():
    url = build_url(BASE_URL, {"key": "k", "input": "a b"})

    assert url == f"{BASE_URL}?input=a%20b&key=k"


@pytest.mark.asyncio
async def test_execute_returns_payload_and_sends_encoded_query():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"status": "OK", "predictions": []})

    payload = await _executor(handler).execute(BASE_URL, {"input": "São Paulo", "key": "k"})

    assert payload == {"status": "OK", "predictions": []}
    assert seen[0].method == "GET"
    assert str(seen[0].url) == f"{BASE_URL}?input=S%C3%A3o%20Paulo&key=k"


@pytest.mark.asyncio
async def test_payload_without_status_is_delivered():
    executor = _executor(lambda request: httpx.Response(200, json={"result": {}}))

    assert await executor.execute(BASE_URL, {}) == {"result": {}}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "exc",
    [
        httpx.ConnectError("connection refused"),
        httpx.ReadTimeout("timed out"),
    ],
)
async def test_transport_failures_are_classified(exc):
    def handler(request):
        raise exc

    with pytest.raises(TransportError) as info:
        await _executor(handler).execute(BASE_URL, {"input": "x"})

    assert info.value.kind == "transport"
    assert str(exc) in info.value.detail


@pytest.mark.asyncio
async def test_missing_response_is_classified(monkeypatch):
    executor = _executor(lambda request: httpx.Response(200, json={}))

    async def no_response(url):
        return None

    monkeypatch.setattr(executor._client, "get", no_response)

    with pytest.raises(NoResponseError):
        await executor.execute(BASE_URL, {})


@pytest.mark.asyncio
async def test_non_200_status_is_classified():
    executor = _executor(lambda request: httpx.Response(503, text="unavailable"))

    with pytest.raises(HttpStatusError) as info:
        await executor.execute(BASE_URL, {})

    assert info.value.status_code == 503


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [b"<html>not json</html>", b"[1, 2, 3]", b'"OK"'])
async def test_malformed_payloads_are_classified(body):
    executor = _executor(lambda request: httpx.Response(200, content=body))

    with pytest.raises(MalformedPayloadError):
        await executor.execute(BASE_URL, {})


@pytest.mark.asyncio
async def test_api_status_is_surfaced_with_message():
    payload = {"status": "REQUEST_DENIED", "error_message": "The provided API key is invalid."}
    executor = _executor(lambda request: httpx.Response(200, json=payload))

    with pytest.raises(ApiStatusError) as info:
        await executor.execute(BASE_URL, {"key": ""})

    assert info.value.status == "REQUEST_DENIED"
    assert info.value.error_message == "The provided API key is invalid."


@pytest.mark.asyncio
async def test_submit_delivers_success_through_context():
    context = RecordingContext()
    executor = _executor(lambda request: httpx.Response(200, json={"status": "OK"}), context)
    delivered = []

    await executor.submit(BASE_URL, {}, lambda payload, error: delivered.append((payload, error)))

    assert context.dispatched == 1
    assert delivered == [({"status": "OK"}, None)]


@pytest.mark.asyncio
async def test_submit_delivers_failure_through_context():
    context = RecordingContext()
    executor = _executor(lambda request: httpx.Response(404), context)
    delivered = []

    await executor.submit(BASE_URL, {}, lambda payload, error: delivered.append((payload, error)))

    assert context.dispatched == 1
    payload, error = delivered[0]
    assert payload is None
    assert isinstance(error, HttpStatusError)


@pytest.mark.asyncio
async def test_loop_context_runs_callback_on_next_loop_iteration():
    context = LoopExecutionContext(asyncio.get_running_loop())
    calls = []

    context.dispatch(calls.append, "done")
    assert calls == []

    await asyncio.sleep(0)
    assert calls == ["done"]


@pytest.mark.asyncio
async def test_submit_waits_for_callback_on_loop_context():
    context = LoopExecutionContext(asyncio.get_running_loop())
    executor = _executor(lambda request: httpx.Response(200, json={"status": "OK"}), context)
    delivered = []

    await executor.submit(BASE_URL, {}, lambda payload, error: delivered.append(payload))

    assert delivered == [{"status": "OK"}]


@pytest.mark.asyncio
async def test_submitted_tasks_are_tracked_until_done():
    executor = _executor(lambda request: httpx.Response(200, json={"status": "OK"}))

    executor.submit(BASE_URL, {}, lambda payload, error: None)
    (task,) = executor.pending_tasks
    await task
    await asyncio.sleep(0)

    assert executor.pending_tasks == frozenset()


@pytest.mark.asyncio
async def test_failing_callback_is_logged():
    executor = _executor(lambda request: httpx.Response(200, json={"status": "OK"}))
    messages = []
    sink_id = logger.add(messages.append, level="ERROR")

    def broken_callback(payload, error):
        raise RuntimeError("observer exploded")

    try:
        task = executor.submit(BASE_URL, {}, broken_callback)
        await asyncio.wait([task])
        await asyncio.sleep(0)
    finally:
        logger.remove(sink_id)

    assert isinstance(task.exception(), RuntimeError)
    assert any("Background request task failed" in m for m in messages)
    assert executor.pending_tasks == frozenset()
