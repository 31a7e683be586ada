"""Transport collaborators and response draining.

A transport performs exactly one request/response round trip. It knows
nothing about retries: the executors call it once per attempt.

Responses are returned with their body still open (httpx ``stream=True``).
The executor either hands that open response to the caller or drains and
closes it before the next attempt so the pooled connection can be reused.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterator
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import httpx

from replaykit.foundation.config import RESPONSE_READ_LIMIT, HttpSettings, get_settings
from replaykit.foundation.errors import TransportError

if TYPE_CHECKING:
    from types import TracebackType

logger = logging.getLogger("replaykit.transport")

_DRAIN_CHUNK = 64 * 1024


# ─────────────────────────────────────────────────────────────────────────────
# Protocols
# ─────────────────────────────────────────────────────────────────────────────


@runtime_checkable
class Response(Protocol):
    """What the sync executor needs from a response. ``httpx.Response`` satisfies it.

    A ``status_code`` of 0 means no response was actually obtained.
    """

    @property
    def status_code(self) -> int: ...
    def iter_raw(self, chunk_size: int | None = None) -> Iterator[bytes]: ...
    def close(self) -> None: ...


@runtime_checkable
class AsyncResponse(Protocol):
    """Async counterpart of Response."""

    @property
    def status_code(self) -> int: ...
    def aiter_raw(self, chunk_size: int | None = None) -> AsyncIterator[bytes]: ...
    async def aclose(self) -> None: ...


@runtime_checkable
class Transport(Protocol):
    """Performs one round trip; raises on transport failure."""

    def round_trip(self, request: httpx.Request) -> Response: ...


@runtime_checkable
class AsyncTransport(Protocol):
    async def round_trip(self, request: httpx.Request) -> AsyncResponse: ...


# ─────────────────────────────────────────────────────────────────────────────
# Draining
# ─────────────────────────────────────────────────────────────────────────────


def drain_body(response: Response, limit: int = RESPONSE_READ_LIMIT) -> int:
    """Read and discard up to ``limit`` bytes of the body, then close it.

    Read errors are ignored: a failed drain only costs the connection, it
    cannot change the retry outcome. Returns the number of bytes discarded.
    """
    drained = 0
    try:
        for chunk in response.iter_raw(min(_DRAIN_CHUNK, limit)):
            drained += len(chunk)
            if drained >= limit:
                break
    except Exception as e:
        logger.debug(f"Ignoring error while draining response body: {e}")
    try:
        response.close()
    except Exception as e:
        logger.debug(f"Ignoring error while closing response body: {e}")
    return drained


async def adrain_body(response: AsyncResponse, limit: int = RESPONSE_READ_LIMIT) -> int:
    """Async version of drain_body."""
    drained = 0
    try:
        async for chunk in response.aiter_raw(min(_DRAIN_CHUNK, limit)):
            drained += len(chunk)
            if drained >= limit:
                break
    except Exception as e:
        logger.debug(f"Ignoring error while draining response body: {e}")
    try:
        await response.aclose()
    except Exception as e:
        logger.debug(f"Ignoring error while closing response body: {e}")
    return drained


# ─────────────────────────────────────────────────────────────────────────────
# httpx adapters
# ─────────────────────────────────────────────────────────────────────────────


def _client_kwargs(settings: HttpSettings) -> dict[str, object]:
    return {
        "timeout": settings.timeout,
        "verify": settings.verify_ssl,
        "headers": {"User-Agent": settings.user_agent},
        "follow_redirects": False,
    }


class HttpxTransport:
    """Transport backed by ``httpx.Client``.

    Args:
        client: Existing client to send through. When omitted, one is built
            from ``HttpSettings`` and closed by ``close()``.
        settings: Overrides the global HTTP settings for an owned client.
    """

    __slots__ = ("_client", "_owns_client")

    def __init__(self, client: httpx.Client | None = None, *, settings: HttpSettings | None = None) -> None:
        self._owns_client = client is None
        self._client = client or httpx.Client(**_client_kwargs(settings or get_settings().http))

    @property
    def client(self) -> httpx.Client:
        return self._client

    def round_trip(self, request: httpx.Request) -> httpx.Response:
        try:
            return self._client.send(request, stream=True)
        except httpx.TransportError as e:
            raise TransportError(f"{request.method} {request.url}: {e}") from e

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> HttpxTransport:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()


class AsyncHttpxTransport:
    """Transport backed by ``httpx.AsyncClient``."""

    __slots__ = ("_client", "_owns_client")

    def __init__(self, client: httpx.AsyncClient | None = None, *, settings: HttpSettings | None = None) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(**_client_kwargs(settings or get_settings().http))

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    async def round_trip(self, request: httpx.Request) -> httpx.Response:
        try:
            return await self._client.send(request, stream=True)
        except httpx.TransportError as e:
            raise TransportError(f"{request.method} {request.url}: {e}") from e

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> AsyncHttpxTransport:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()
