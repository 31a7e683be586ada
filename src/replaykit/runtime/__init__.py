"""Runtime - retry execution, cancellation and observability."""

from .concurrency import CancelToken
from .observability import configure_logging, get_logger
from .retry import (
    AsyncRetryExecutor,
    Attempt,
    Backoff,
    ConstantBackoff,
    ExecutorConfig,
    ExponentialBackoff,
    JitteredBackoff,
    LinearBackoff,
    RetryAfterBackoff,
    RetryExecutor,
    RetryPolicy,
    StatusCodePolicy,
    default_retry_policy,
)

__all__ = [
    "CancelToken",
    "configure_logging", "get_logger",
    "Attempt", "ExecutorConfig", "RetryExecutor", "AsyncRetryExecutor",
    "RetryPolicy", "StatusCodePolicy", "default_retry_policy",
    "Backoff", "ExponentialBackoff", "LinearBackoff", "ConstantBackoff", "JitteredBackoff", "RetryAfterBackoff",
]
