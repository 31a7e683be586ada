"""replaykit - automatic retry and backoff for replayable HTTP requests.

Wraps any round-trip transport (httpx by default) with a retry envelope:
transient failures (transport errors, missing status, 5xx) are retried with
exponential backoff, request bodies are rewound and resent unchanged, and
discarded response bodies are drained so pooled connections stay reusable.

Quick Start:
    >>> from replaykit import Client
    >>>
    >>> with Client() as client:
    ...     resp = client.get("https://api.example.com/health")
    ...     resp.status_code
    200

Custom policy and backoff:
    >>> from replaykit import ExecutorConfig, HttpxTransport, RetryExecutor, StatusCodePolicy, new_request
    >>>
    >>> executor = RetryExecutor(HttpxTransport(), ExecutorConfig(
    ...     retries_max=3,
    ...     retry_wait_min=0.1,
    ...     retry_wait_max=2.0,
    ...     retry_policy=StatusCodePolicy(retry_on=frozenset({429})),
    ... ))
    >>> with open("payload.json", "rb") as body:
    ...     resp = executor.do(new_request("PUT", "https://api.example.com/doc", body))

Errors:
    ReplayError        body could not be rewound, never retried
    ExhaustionError    every attempt was retryable (carries method, url, attempts)
    TransportError     round-trip failure surfaced when the policy stops on it
    CancelledError     a CancelToken fired
"""

__version__ = "0.1.0"

from .client import AsyncClient, Client
from .foundation.config import ReplaykitSettings, clear_settings_cache, get_settings
from .foundation.errors import (
    CancelledError,
    ErrorCode,
    ExhaustionError,
    PolicyOverrideError,
    ReplayError,
    ReplaykitError,
    TransportError,
)
from .io import (
    AsyncHttpxTransport,
    AsyncTransport,
    BodySource,
    BytesBody,
    HttpxTransport,
    ReplayableRequest,
    RequestSpec,
    Response,
    SeekableBody,
    Transport,
    drain_body,
    new_request,
)
from .runtime import (
    AsyncRetryExecutor,
    Attempt,
    Backoff,
    CancelToken,
    ConstantBackoff,
    ExecutorConfig,
    ExponentialBackoff,
    JitteredBackoff,
    LinearBackoff,
    RetryAfterBackoff,
    RetryExecutor,
    RetryPolicy,
    StatusCodePolicy,
    configure_logging,
    default_retry_policy,
    get_logger,
)

__all__ = [
    "__version__",
    # Clients
    "Client", "AsyncClient",
    # Execution
    "RetryExecutor", "AsyncRetryExecutor", "ExecutorConfig", "Attempt", "CancelToken",
    # Policy & backoff
    "RetryPolicy", "default_retry_policy", "StatusCodePolicy",
    "Backoff", "ExponentialBackoff", "LinearBackoff", "ConstantBackoff", "JitteredBackoff", "RetryAfterBackoff",
    # Requests & transports
    "RequestSpec", "ReplayableRequest", "new_request", "BodySource", "BytesBody", "SeekableBody",
    "Transport", "AsyncTransport", "Response", "HttpxTransport", "AsyncHttpxTransport", "drain_body",
    # Errors
    "ErrorCode", "ReplaykitError", "TransportError", "ReplayError", "PolicyOverrideError",
    "ExhaustionError", "CancelledError",
    # Config & logging
    "ReplaykitSettings", "get_settings", "clear_settings_cache", "configure_logging", "get_logger",
]
