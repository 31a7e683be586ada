"""Scripted transports for testing code built on the retry executors.

Provides fake responses that record how their body was consumed and
transports that replay a scripted list of outcomes while recording every
request they receive.

Example:
    >>> transport = ScriptedTransport([503, 503, 200])
    >>> executor = RetryExecutor(transport, ExecutorConfig(retry_wait_min=0, retry_wait_max=0))
    >>> executor.do(new_request("GET", "https://example.test/")).status_code
    200
    >>> transport.call_count
    3
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator, Sequence
from dataclasses import dataclass, field

import httpx


@dataclass
class FakeResponse:
    """In-memory response recording reads and closes.

    Attributes:
        status_code: Status to report (0 = no status)
        body: Body bytes served by iter_raw/read
        headers: Response headers
        fail_after: Raise OSError after this many bytes were served
    """

    status_code: int = 200
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)
    fail_after: int | None = None
    bytes_read: int = 0
    closed: bool = False

    def _chunks(self, chunk_size: int | None) -> Iterator[bytes]:
        size = chunk_size or len(self.body) or 1
        for start in range(0, len(self.body), size):
            if self.fail_after is not None and self.bytes_read >= self.fail_after:
                raise OSError("connection reset while reading body")
            chunk = self.body[start:start + size]
            self.bytes_read += len(chunk)
            yield chunk

    def iter_raw(self, chunk_size: int | None = None) -> Iterator[bytes]:
        if self.closed:
            raise httpx.StreamClosed()
        yield from self._chunks(chunk_size)

    def read(self) -> bytes:
        return b"".join(self.iter_raw())

    def close(self) -> None:
        self.closed = True

    @property
    def drained(self) -> bool:
        return self.closed and self.bytes_read >= len(self.body)


@dataclass
class AsyncFakeResponse(FakeResponse):
    """FakeResponse with the async body interface."""

    async def aiter_raw(self, chunk_size: int | None = None) -> AsyncIterator[bytes]:
        if self.closed:
            raise httpx.StreamClosed()
        for chunk in self._chunks(chunk_size):
            yield chunk

    async def aread(self) -> bytes:
        return b"".join([c async for c in self.aiter_raw()])

    async def aclose(self) -> None:
        self.closed = True


@dataclass(slots=True)
class RecordedRequest:
    """What the transport observed for one attempt."""
    method: str
    url: str
    headers: dict[str, str]
    content: bytes
    open_responses: int  # previously served responses still open at call time


class _Script:
    """Shared bookkeeping for the sync and async scripted transports."""

    def __init__(self, outcomes: Sequence[int | FakeResponse | Exception], response_type: type[FakeResponse]) -> None:
        if not outcomes:
            raise ValueError("ScriptedTransport needs at least one outcome")
        self.outcomes = list(outcomes)
        self.response_type = response_type
        self.requests: list[RecordedRequest] = []
        self.responses: list[FakeResponse] = []
        self.in_flight = 0

    def _enter(self) -> None:
        if self.in_flight:
            raise AssertionError("concurrent round trip for the same transport script")
        self.in_flight += 1

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def _next(self, request: httpx.Request) -> FakeResponse:
        open_count = sum(1 for r in self.responses if not r.closed)
        self.requests.append(RecordedRequest(
            request.method, str(request.url), dict(request.headers), request.read(), open_count,
        ))
        # Past the end of the script, the last outcome repeats
        outcome = self.outcomes[min(len(self.requests), len(self.outcomes)) - 1]
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, int):
            outcome = self.response_type(status_code=outcome, body=f"status {outcome}".encode())
        elif any(outcome is r for r in self.responses):
            # Fresh copy so a repeated scripted response is not shared between attempts
            outcome = self.response_type(outcome.status_code, outcome.body, dict(outcome.headers), outcome.fail_after)
        self.responses.append(outcome)
        return outcome


class ScriptedTransport(_Script):
    """Sync transport replaying ``outcomes`` in order.

    Each outcome is a status code, a FakeResponse or an exception to raise.
    """

    def __init__(self, outcomes: Sequence[int | FakeResponse | Exception]) -> None:
        super().__init__(outcomes, FakeResponse)

    def round_trip(self, request: httpx.Request) -> FakeResponse:
        self._enter()
        try:
            return self._next(request)
        finally:
            self.in_flight -= 1


class AsyncScriptedTransport(_Script):
    """Async transport replaying ``outcomes`` in order."""

    def __init__(self, outcomes: Sequence[int | AsyncFakeResponse | Exception]) -> None:
        super().__init__(outcomes, AsyncFakeResponse)

    async def round_trip(self, request: httpx.Request) -> AsyncFakeResponse:
        self._enter()
        try:
            return self._next(request)  # type: ignore[return-value]
        finally:
            self.in_flight -= 1
