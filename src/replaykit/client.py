"""Convenience clients: thin request builders over the retry executors.

Example:
    >>> with Client() as client:
    ...     resp = client.get("https://api.example.com/items")
    ...     created = client.post("https://api.example.com/items", "application/json", b'{"name": "x"}')
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from replaykit.io.request import new_request
from replaykit.io.transport import AsyncHttpxTransport, HttpxTransport
from replaykit.runtime.retry import AsyncRetryExecutor, ExecutorConfig, RetryExecutor

if TYPE_CHECKING:
    from types import TracebackType

    from replaykit.io.request import BodySource, ReplayableRequest, Seekable
    from replaykit.io.transport import AsyncResponse, AsyncTransport, Response, Transport
    from replaykit.runtime.concurrency import CancelToken

    Body = bytes | bytearray | BodySource | Seekable | None


class Client:
    """Retrying HTTP client.

    Args:
        transport: Round-trip collaborator (default: HttpxTransport owned by this client)
        config: Retry configuration (default: ExecutorConfig.from_settings())
    """

    __slots__ = ("_executor", "_owned")

    def __init__(self, transport: Transport | None = None, config: ExecutorConfig | None = None) -> None:
        self._owned = HttpxTransport() if transport is None else None
        self._executor = RetryExecutor(transport or self._owned, config or ExecutorConfig.from_settings())

    @property
    def executor(self) -> RetryExecutor:
        return self._executor

    def do(self, request: ReplayableRequest, *, cancel: CancelToken | None = None) -> Response:
        return self._executor.do(request, cancel=cancel)

    def get(self, url: str, *, headers: dict[str, str] | None = None, cancel: CancelToken | None = None) -> Response:
        """Bodyless GET."""
        return self.do(new_request("GET", url, headers=headers), cancel=cancel)

    def post(
        self,
        url: str,
        content_type: str,
        body: Body,
        *,
        headers: dict[str, str] | None = None,
        cancel: CancelToken | None = None,
    ) -> Response:
        """POST ``body`` with the given Content-Type."""
        request = new_request("POST", url, body, headers=headers).with_header("Content-Type", content_type)
        return self.do(request, cancel=cancel)

    def close(self) -> None:
        """Close the default transport if this client created it."""
        if self._owned is not None:
            self._owned.close()

    def __enter__(self) -> Client:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()


class AsyncClient:
    """Asyncio counterpart of Client."""

    __slots__ = ("_executor", "_owned")

    def __init__(self, transport: AsyncTransport | None = None, config: ExecutorConfig | None = None) -> None:
        self._owned = AsyncHttpxTransport() if transport is None else None
        self._executor = AsyncRetryExecutor(transport or self._owned, config or ExecutorConfig.from_settings())

    @property
    def executor(self) -> AsyncRetryExecutor:
        return self._executor

    async def do(self, request: ReplayableRequest) -> AsyncResponse:
        return await self._executor.do(request)

    async def get(self, url: str, *, headers: dict[str, str] | None = None) -> AsyncResponse:
        return await self.do(new_request("GET", url, headers=headers))

    async def post(
        self, url: str, content_type: str, body: Body, *, headers: dict[str, str] | None = None,
    ) -> AsyncResponse:
        request = new_request("POST", url, body, headers=headers).with_header("Content-Type", content_type)
        return await self.do(request)

    async def aclose(self) -> None:
        if self._owned is not None:
            await self._owned.aclose()

    async def __aenter__(self) -> AsyncClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()
