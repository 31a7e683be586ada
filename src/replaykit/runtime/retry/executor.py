"""Retry executors: replay a request until the policy stops or the budget runs out.

Per call, each attempt:

1. rewinds the request body (a failure aborts the call with ReplayError)
2. performs one transport round trip
3. asks the policy whether to retry
4. on retry, drains and closes the discarded response, computes the backoff
   and waits, unless the budget of ``retries_max + 1`` attempts is spent,
   in which case ExhaustionError is raised

Only the response that is finally returned keeps its body open.

Example:
    >>> executor = RetryExecutor(HttpxTransport(), ExecutorConfig(retries_max=3))
    >>> resp = executor.do(new_request("GET", "https://api.example.com/health"))
    >>> resp.status_code
    200
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Annotated, Callable

from pydantic import BaseModel, ConfigDict, Field, NonNegativeFloat, PositiveInt, model_validator

from replaykit.foundation.config import RESPONSE_READ_LIMIT, RetrySettings, get_settings
from replaykit.foundation.errors import CancelledError, ExhaustionError, PolicyOverrideError
from replaykit.io.transport import adrain_body, drain_body
from replaykit.runtime.observability import get_logger

from .backoff import Backoff, ExponentialBackoff
from .policy import RetryPolicy, default_retry_policy

if TYPE_CHECKING:
    from replaykit.io.request import ReplayableRequest
    from replaykit.io.transport import AsyncResponse, AsyncTransport, Response, Transport
    from replaykit.runtime.concurrency import CancelToken


log = get_logger("replaykit.retry")


@dataclass(frozen=True, slots=True)
class Attempt:
    """Outcome of one round trip, handed to ``on_retry`` before waiting."""

    index: int
    response: Response | AsyncResponse | None
    error: BaseException | None

    @property
    def status_code(self) -> int | None:
        return self.response.status_code if self.response is not None else None


class ExecutorConfig(BaseModel):
    """Immutable retry envelope configuration.

    Attributes:
        retry_wait_min: Minimum wait between attempts in seconds
        retry_wait_max: Maximum wait between attempts in seconds (>= retry_wait_min)
        retries_max: Retries after the first attempt (0 = single attempt)
        retry_policy: Decides whether an outcome is retried
        backoff: Computes the wait before the next attempt
        drain_limit: Max bytes read from a discarded response body
        on_retry: Optional callback invoked with the failed attempt and the delay
    """

    model_config = ConfigDict(
        frozen=True,
        arbitrary_types_allowed=True,  # For RetryPolicy/Backoff protocols
        extra="forbid",
        revalidate_instances="never",
    )

    retry_wait_min: NonNegativeFloat = 0.05
    retry_wait_max: NonNegativeFloat = 0.2
    retries_max: Annotated[int, Field(ge=0)] = 5
    retry_policy: RetryPolicy = Field(default=default_retry_policy, repr=False)
    backoff: Backoff = Field(default_factory=ExponentialBackoff, repr=False)
    drain_limit: PositiveInt = RESPONSE_READ_LIMIT
    on_retry: Callable[[Attempt, float], None] | None = Field(default=None, exclude=True, repr=False)

    @model_validator(mode="after")
    def _check_wait_bounds(self) -> ExecutorConfig:
        if self.retry_wait_min > self.retry_wait_max:
            raise ValueError(
                f"retry_wait_min ({self.retry_wait_min}) must not exceed retry_wait_max ({self.retry_wait_max})"
            )
        return self

    @classmethod
    def from_settings(cls, settings: RetrySettings | None = None, **overrides: object) -> ExecutorConfig:
        """Build from ``REPLAYKIT_RETRY_*`` settings; keyword overrides win."""
        s = settings or get_settings().retry
        values: dict[str, object] = {
            "retry_wait_min": s.wait_min,
            "retry_wait_max": s.wait_max,
            "retries_max": s.retries_max,
            "drain_limit": int(s.drain_limit),
        }
        return cls(**{**values, **overrides})

    def delay(self, attempt: int, response: Response | AsyncResponse | None = None) -> float:
        """Backoff delay after the given 0-indexed attempt, clamped to [0, retry_wait_max]."""
        wait = self.backoff(self.retry_wait_min, self.retry_wait_max, attempt, response)
        return min(max(wait, 0.0), self.retry_wait_max)


def _stop(
    response: Response | AsyncResponse | None,
    error: BaseException | None,
    override: BaseException | None,
) -> Response | AsyncResponse | None:
    """Surface the policy's stop decision: override first, then error, else the response."""
    if override is not None:
        raise override
    if error is not None:
        raise error
    return response


class RetryExecutor:
    """Synchronous retry executor.

    Holds no per-call state, so one executor may serve concurrent ``do``
    calls as long as the policy, backoff and transport tolerate it (the
    defaults do).

    Args:
        transport: Performs one round trip per attempt
        config: Retry configuration (defaults match ExecutorConfig())
        sleep: Blocking sleep used between attempts when no CancelToken is given
    """

    __slots__ = ("_transport", "_config", "_sleep")

    def __init__(
        self,
        transport: Transport,
        config: ExecutorConfig | None = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._transport = transport
        self._config = config or ExecutorConfig()
        self._sleep = sleep

    @property
    def config(self) -> ExecutorConfig:
        return self._config

    @property
    def transport(self) -> Transport:
        return self._transport

    def do(self, request: ReplayableRequest, *, cancel: CancelToken | None = None) -> Response:
        """Execute ``request`` with retries.

        Returns:
            The response the policy accepted, body still open for the caller

        Raises:
            ReplayError: the body could not be rewound (never retried)
            ExhaustionError: every attempt was retryable
            CancelledError: ``cancel`` fired before an attempt or during a wait
            Exception: the policy's override, or the last transport error when
                the policy stopped on it
        """
        cfg = self._config
        rlog = log.bind(method=request.method, url=request.url)
        attempt = 0
        while True:
            if cancel is not None:
                cancel.raise_if_cancelled()
            request.rewind()
            outgoing = request.build()

            response: Response | None = None
            error: Exception | None = None
            try:
                response = self._transport.round_trip(outgoing)
            except Exception as e:
                error = e

            retry, override = cfg.retry_policy(response, error)
            if not retry:
                if isinstance(override, PolicyOverrideError):
                    override.response = response
                elif override is not None and response is not None:
                    drain_body(response, cfg.drain_limit)
                return _stop(response, error, override)  # type: ignore[return-value]

            if response is not None:
                drain_body(response, cfg.drain_limit)

            status = response.status_code if response is not None else None
            if attempt >= cfg.retries_max:
                rlog.warning("giving up", attempts=attempt + 1, status=status, error=_describe(error))
                raise ExhaustionError(request.method, request.url, attempt + 1, last_status=status) from error

            delay = cfg.delay(attempt, response)
            rlog.info("retrying", attempt=attempt + 1, retries_max=cfg.retries_max,
                      status=status, error=_describe(error), delay=round(delay, 4))
            if cfg.on_retry is not None:
                cfg.on_retry(Attempt(attempt, response, error), delay)
            self._wait(delay, cancel)
            attempt += 1

    def _wait(self, delay: float, cancel: CancelToken | None) -> None:
        if cancel is None:
            self._sleep(delay)
        elif cancel.wait(delay):
            raise CancelledError(cancel.reason)


class AsyncRetryExecutor:
    """Asyncio retry executor.

    Same algorithm as RetryExecutor. Cancelling the calling task aborts both
    an in-flight round trip and a backoff wait.
    """

    __slots__ = ("_transport", "_config", "_sleep")

    def __init__(
        self,
        transport: AsyncTransport,
        config: ExecutorConfig | None = None,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._transport = transport
        self._config = config or ExecutorConfig()
        self._sleep = sleep

    @property
    def config(self) -> ExecutorConfig:
        return self._config

    @property
    def transport(self) -> AsyncTransport:
        return self._transport

    async def do(self, request: ReplayableRequest) -> AsyncResponse:
        """Execute ``request`` with retries. See RetryExecutor.do."""
        cfg = self._config
        rlog = log.bind(method=request.method, url=request.url)
        attempt = 0
        while True:
            request.rewind()
            outgoing = request.build()

            response: AsyncResponse | None = None
            error: Exception | None = None
            try:
                response = await self._transport.round_trip(outgoing)
            except Exception as e:
                error = e

            retry, override = cfg.retry_policy(response, error)
            if not retry:
                if isinstance(override, PolicyOverrideError):
                    override.response = response  # type: ignore[assignment]
                elif override is not None and response is not None:
                    await adrain_body(response, cfg.drain_limit)
                return _stop(response, error, override)  # type: ignore[return-value]

            if response is not None:
                await adrain_body(response, cfg.drain_limit)

            status = response.status_code if response is not None else None
            if attempt >= cfg.retries_max:
                rlog.warning("giving up", attempts=attempt + 1, status=status, error=_describe(error))
                raise ExhaustionError(request.method, request.url, attempt + 1, last_status=status) from error

            delay = cfg.delay(attempt, response)
            rlog.info("retrying", attempt=attempt + 1, retries_max=cfg.retries_max,
                      status=status, error=_describe(error), delay=round(delay, 4))
            if cfg.on_retry is not None:
                cfg.on_retry(Attempt(attempt, response, error), delay)
            await self._sleep(delay)
            attempt += 1


def _describe(error: BaseException | None) -> str | None:
    return f"{type(error).__name__}: {error}" if error is not None else None
