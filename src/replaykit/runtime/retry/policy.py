"""Retry policies: decide, per attempt, whether an outcome warrants another try.

A policy is a pure callable ``(response, error) -> (retry, override)``:

- ``response``: the response obtained, or None when the transport raised
- ``error``: the exception the transport raised, or None
- ``override``: an exception to surface instead of the underlying one when
  the policy stops (ignored when it asks for a retry)

Policies never read or close the response body; the executor owns it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from replaykit.foundation.errors import PolicyOverrideError

if TYPE_CHECKING:
    from replaykit.io.transport import AsyncResponse, Response

RetryDecision = tuple[bool, BaseException | None]

# Status reported when no response was actually obtained
NO_STATUS = 0


@runtime_checkable
class RetryPolicy(Protocol):
    """Protocol for retry predicates."""

    def __call__(self, response: Response | AsyncResponse | None, error: BaseException | None) -> RetryDecision: ...


def default_retry_policy(response: Response | AsyncResponse | None, error: BaseException | None) -> RetryDecision:
    """Retry on any transport error, on a missing status and on 5xx; stop otherwise."""
    if error is not None:
        return True, None
    if response is None or response.status_code == NO_STATUS or response.status_code >= 500:
        return True, None
    return False, None


class StatusCodePolicy(BaseModel):
    """Configurable status-code policy.

    Attributes:
        retry_on: Extra statuses to retry besides the server-error range (e.g. 429)
        retry_server_errors: Retry on a missing status and on any status >= 500
        retry_errors: Retry when the transport raised
        fail_on: Statuses that stop immediately with a PolicyOverrideError

    Example:
        >>> policy = StatusCodePolicy(retry_on=frozenset({429}), fail_on=frozenset({401, 403}))
        >>> executor = RetryExecutor(transport, ExecutorConfig(retry_policy=policy))
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        revalidate_instances="never",
        json_schema_extra={
            "title": "Status Code Policy",
            "examples": [{"retry_on": [429], "fail_on": [401, 403]}],
        },
    )

    retry_on: frozenset[int] = frozenset()
    retry_server_errors: bool = True
    retry_errors: bool = True
    fail_on: frozenset[int] = Field(default=frozenset(), description="Statuses surfaced as PolicyOverrideError")

    @field_validator("retry_on", "fail_on", mode="before")
    @classmethod
    def _normalize_codes(cls, v: frozenset[int] | set[int] | list[int] | tuple[int, ...]) -> frozenset[int]:
        return frozenset(int(c) for c in v)

    @field_serializer("retry_on", "fail_on")
    def _serialize_codes(self, v: frozenset[int]) -> list[int]:
        return sorted(v)

    def __call__(self, response: Response | AsyncResponse | None, error: BaseException | None) -> RetryDecision:
        if error is not None:
            return self.retry_errors, None
        if response is None:
            return self.retry_server_errors, None
        status = response.status_code
        if status in self.fail_on:
            return False, PolicyOverrideError(f"status {status} is not accepted", status_code=status)
        if status in self.retry_on:
            return True, None
        if self.retry_server_errors and (status == NO_STATUS or status >= 500):
            return True, None
        return False, None

    def __hash__(self) -> int:
        return hash((self.retry_on, self.retry_server_errors, self.retry_errors, self.fail_on))
