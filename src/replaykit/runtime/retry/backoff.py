"""Backoff strategies for the retry executor.

A strategy computes the wait before the next attempt from the configured
bounds, the 0-indexed attempt that just failed, and its response (None when
the transport raised):

- ExponentialBackoff: min_wait * 2^attempt, capped (default)
- LinearBackoff: Linear growth with cap
- ConstantBackoff: Fixed delay
- JitteredBackoff: Full jitter over the exponential curve
- RetryAfterBackoff: Honors a numeric Retry-After header

Every result lies in [0, max_wait].
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from replaykit.io.transport import AsyncResponse, Response


@runtime_checkable
class Backoff(Protocol):
    """Protocol for backoff delay calculation."""

    def __call__(
        self, min_wait: float, max_wait: float, attempt: int, response: Response | AsyncResponse | None,
    ) -> float:
        """Return the delay in seconds before the next attempt.

        Args:
            min_wait: Configured minimum wait
            max_wait: Configured maximum wait
            attempt: 0-indexed attempt that just failed
            response: Response of that attempt, if any
        """
        ...


def _exponential(min_wait: float, max_wait: float, attempt: int) -> float:
    # Cap the exponent so huge attempt counts cannot overflow to inf
    return min(min_wait * (2 ** min(attempt, 62)), max_wait)


@dataclass(frozen=True, slots=True)
class ExponentialBackoff:
    """Delay = min(min_wait * 2^attempt, max_wait). Non-decreasing in attempt."""

    def __call__(self, min_wait: float, max_wait: float, attempt: int, response: object = None) -> float:
        return _exponential(min_wait, max_wait, attempt)


@dataclass(frozen=True, slots=True)
class LinearBackoff:
    """Delay = min(min_wait + increment * attempt, max_wait).

    Attributes:
        increment: Additional delay per attempt in seconds (default: min_wait)
    """

    increment: float | None = None

    def __call__(self, min_wait: float, max_wait: float, attempt: int, response: object = None) -> float:
        step = min_wait if self.increment is None else self.increment
        return min(min_wait + step * attempt, max_wait)


@dataclass(frozen=True, slots=True)
class ConstantBackoff:
    """Fixed delay between attempts (min_wait unless ``delay_seconds`` is set)."""

    delay_seconds: float | None = None

    def __call__(self, min_wait: float, max_wait: float, attempt: int, response: object = None) -> float:
        return min(min_wait if self.delay_seconds is None else self.delay_seconds, max_wait)


@dataclass(frozen=True, slots=True)
class JitteredBackoff:
    """Full jitter: uniform in [min_wait, exponential delay].

    Spreads out many clients retrying against the same recovering server.
    """

    def __call__(self, min_wait: float, max_wait: float, attempt: int, response: object = None) -> float:
        return random.uniform(min(min_wait, max_wait), _exponential(min_wait, max_wait, attempt))


@dataclass(frozen=True, slots=True)
class RetryAfterBackoff:
    """Use a numeric ``Retry-After`` header when present, else exponential.

    The header value is clamped to [min_wait, max_wait]. HTTP-date values are
    not parsed and fall back to the exponential delay.
    """

    def __call__(self, min_wait: float, max_wait: float, attempt: int, response: object = None) -> float:
        headers = getattr(response, "headers", None)
        raw = headers.get("Retry-After") if headers is not None else None
        if raw is not None:
            try:
                seconds = float(raw)
            except ValueError:
                seconds = math.nan
            if not math.isnan(seconds):
                return min(max(seconds, min_wait), max_wait)
        return _exponential(min_wait, max_wait, attempt)


DEFAULT_BACKOFF = ExponentialBackoff()
