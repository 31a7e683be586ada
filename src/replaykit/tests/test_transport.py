"""Tests for the httpx transports and response draining."""

from __future__ import annotations

from collections.abc import Iterator

import httpx
import pytest

from replaykit.foundation.config import HttpSettings
from replaykit.foundation.errors import ExhaustionError, TransportError
from replaykit.foundation.testing import AsyncFakeResponse, FakeResponse, ScriptedTransport
from replaykit.io import AsyncHttpxTransport, HttpxTransport, Response, adrain_body, drain_body, new_request
from replaykit.runtime.retry import AsyncRetryExecutor, ExecutorConfig, RetryExecutor

NO_WAIT = ExecutorConfig(retry_wait_min=0.0, retry_wait_max=0.0, retries_max=3)


def test_drain_reads_whole_small_body_and_closes() -> None:
    resp = FakeResponse(500, body=b"a" * 1000)
    assert drain_body(resp) == 1000
    assert resp.drained


def test_drain_stops_at_limit() -> None:
    resp = FakeResponse(500, body=b"a" * 10_000)
    drained = drain_body(resp, limit=1000)
    assert drained == 1000
    assert resp.closed
    assert resp.bytes_read == 1000


def test_drain_ignores_read_errors() -> None:
    resp = FakeResponse(500, body=b"a" * 200_000, fail_after=1)
    drain_body(resp)
    assert resp.closed


class _DecoderErrorResponse(FakeResponse):
    def iter_raw(self, chunk_size: int | None = None) -> Iterator[bytes]:
        raise ValueError("invalid chunk encoding")


class _CloseErrorResponse(FakeResponse):
    def close(self) -> None:
        self.closed = True
        raise RuntimeError("socket already released")


class _AsyncCloseErrorResponse(AsyncFakeResponse):
    async def aclose(self) -> None:
        self.closed = True
        raise RuntimeError("socket already released")


def test_drain_ignores_any_read_error() -> None:
    resp = _DecoderErrorResponse(503, body=b"x" * 10)
    assert drain_body(resp) == 0
    assert resp.closed


def test_drain_ignores_close_error() -> None:
    resp = _CloseErrorResponse(503, body=b"x" * 10)
    assert drain_body(resp) == 10
    assert resp.closed


@pytest.mark.asyncio
async def test_async_drain_ignores_close_error() -> None:
    resp = _AsyncCloseErrorResponse(503, body=b"x" * 10)
    assert await adrain_body(resp) == 10
    assert resp.closed


@pytest.mark.parametrize("broken", [_DecoderErrorResponse(503), _CloseErrorResponse(503)])
def test_drain_failure_does_not_stop_retries(broken: FakeResponse) -> None:
    """A discarded response that cannot be drained or closed is still retried past."""
    transport = ScriptedTransport([broken, 200])
    resp = RetryExecutor(transport, NO_WAIT).do(new_request("GET", "https://api.example.test/x"))
    assert resp.status_code == 200
    assert transport.call_count == 2
    assert broken.closed


@pytest.mark.asyncio
async def test_async_drain() -> None:
    resp = AsyncFakeResponse(500, body=b"b" * 300)
    assert await adrain_body(resp) == 300
    assert resp.closed


def test_httpx_response_satisfies_protocol() -> None:
    assert isinstance(httpx.Response(200), Response)


def test_httpx_transport_round_trip_with_retries() -> None:
    """MockTransport sees the replayed body on every attempt."""
    seen: list[bytes] = []
    statuses = iter([503, 500, 201])

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.read())
        return httpx.Response(next(statuses), content=b"ok")

    with HttpxTransport(httpx.Client(transport=httpx.MockTransport(handler))) as transport:
        executor = RetryExecutor(transport, NO_WAIT)
        resp = executor.do(new_request("POST", "https://api.example.test/items", b'{"a": 1}'))
        try:
            assert resp.status_code == 201
            assert resp.read() == b"ok"
        finally:
            resp.close()

    assert seen == [b'{"a": 1}'] * 3


def test_httpx_transport_wraps_connect_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    transport = HttpxTransport(httpx.Client(transport=httpx.MockTransport(handler)))
    with pytest.raises(TransportError, match="connection refused") as exc_info:
        transport.round_trip(httpx.Request("GET", "https://down.example.test/"))
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


def test_httpx_transport_errors_exhaust_budget() -> None:
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        raise httpx.ReadTimeout("timed out", request=request)

    transport = HttpxTransport(httpx.Client(transport=httpx.MockTransport(handler)))
    with pytest.raises(ExhaustionError) as exc_info:
        RetryExecutor(transport, NO_WAIT).do(new_request("GET", "https://slow.example.test/"))

    assert calls == 4
    assert isinstance(exc_info.value.__cause__, TransportError)


def test_owned_client_closed_but_borrowed_client_kept() -> None:
    borrowed = httpx.Client()
    HttpxTransport(borrowed).close()
    assert not borrowed.is_closed
    borrowed.close()

    owned = HttpxTransport(settings=HttpSettings(timeout=5.0, user_agent="tests/1.0"))
    assert owned.client.headers["User-Agent"] == "tests/1.0"
    assert owned.client.timeout.read == 5.0
    owned.close()
    assert owned.client.is_closed


@pytest.mark.asyncio
async def test_async_httpx_transport_round_trip() -> None:
    seen: list[bytes] = []
    statuses = iter([502, 200])

    async def handler(request: httpx.Request) -> httpx.Response:
        seen.append(await request.aread())
        return httpx.Response(next(statuses), content=b"done")

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    async with AsyncHttpxTransport(client) as transport:
        resp = await AsyncRetryExecutor(transport, NO_WAIT).do(
            new_request("PUT", "https://api.example.test/doc", b"payload"),
        )
        assert resp.status_code == 200
        assert await resp.aread() == b"done"
        await resp.aclose()
    await client.aclose()

    assert seen == [b"payload", b"payload"]
