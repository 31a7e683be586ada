"""Retry envelope for replayable HTTP requests.

Provides the retry loop with pluggable policies and backoff strategies.

Example:
    >>> from replaykit.runtime.retry import ExecutorConfig, RetryExecutor, StatusCodePolicy
    >>> config = ExecutorConfig(
    ...     retries_max=3,
    ...     retry_wait_min=0.1,
    ...     retry_wait_max=2.0,
    ...     retry_policy=StatusCodePolicy(retry_on=frozenset({429})),
    ... )
    >>> executor = RetryExecutor(transport, config)
    >>> resp = executor.do(request)
"""

from .backoff import (
    DEFAULT_BACKOFF,
    Backoff,
    ConstantBackoff,
    ExponentialBackoff,
    JitteredBackoff,
    LinearBackoff,
    RetryAfterBackoff,
)
from .executor import Attempt, AsyncRetryExecutor, ExecutorConfig, RetryExecutor
from .policy import NO_STATUS, RetryDecision, RetryPolicy, StatusCodePolicy, default_retry_policy

__all__ = [
    # Backoff strategies
    "Backoff",
    "ExponentialBackoff",
    "LinearBackoff",
    "ConstantBackoff",
    "JitteredBackoff",
    "RetryAfterBackoff",
    "DEFAULT_BACKOFF",
    # Policy
    "RetryPolicy",
    "RetryDecision",
    "StatusCodePolicy",
    "default_retry_policy",
    "NO_STATUS",
    # Execution
    "Attempt",
    "ExecutorConfig",
    "RetryExecutor",
    "AsyncRetryExecutor",
]
