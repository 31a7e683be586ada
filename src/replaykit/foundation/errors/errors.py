"""Error taxonomy for replayable request execution.

Every failure reaches the caller of ``RetryExecutor.do`` as one of these
exceptions (or as the exception a custom policy chose to surface).
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from replaykit.io.transport import Response


class ErrorCode(StrEnum):
    """Machine-readable classification of replaykit failures."""
    TRANSPORT = "TRANSPORT"
    REPLAY = "REPLAY"
    POLICY = "POLICY"
    EXHAUSTED = "EXHAUSTED"
    CANCELLED = "CANCELLED"


class ReplaykitError(Exception):
    """Base class for all replaykit errors."""

    code: ClassVar[ErrorCode]


class TransportError(ReplaykitError):
    """The round trip itself failed (connectivity, TLS, DNS, timeouts)."""

    code = ErrorCode.TRANSPORT


class ReplayError(ReplaykitError):
    """The request body could not be rewound, so it cannot be resent faithfully."""

    code = ErrorCode.REPLAY


class PolicyOverrideError(ReplaykitError):
    """Error a custom policy returns alongside a stop decision.

    The executor attaches the response that triggered the stop (if any) as
    ``response``. Its body is left open and belongs to the caller.
    """

    code = ErrorCode.POLICY

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response: Response | None = None

    def close(self) -> None:
        """Close the attached response, if any."""
        if self.response is not None:
            self.response.close()


class ExhaustionError(ReplaykitError):
    """Attempt budget consumed without a stop decision.

    Attributes:
        method: HTTP method of the request
        url: Target URL of the request
        attempts: Total attempts performed (retries + 1)
        last_status: Status of the last response, None if the last attempt errored
    """

    code = ErrorCode.EXHAUSTED

    def __init__(self, method: str, url: str, attempts: int, *, last_status: int | None = None) -> None:
        self.method, self.url, self.attempts, self.last_status = method, url, attempts, last_status
        super().__init__(f"{method} {url} giving up after {attempts} attempts")


class CancelledError(ReplaykitError):
    """Execution was cancelled before an attempt or during a backoff wait."""

    code = ErrorCode.CANCELLED

