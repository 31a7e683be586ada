"""Request/response I/O: replayable requests, transports and body draining."""

from .request import (
    BodySource,
    BytesBody,
    ReplayableRequest,
    RequestSpec,
    Seekable,
    SeekableBody,
    as_body,
    new_request,
)
from .transport import (
    AsyncHttpxTransport,
    AsyncResponse,
    AsyncTransport,
    HttpxTransport,
    Response,
    Transport,
    adrain_body,
    drain_body,
)

__all__ = [
    # Requests
    "RequestSpec", "ReplayableRequest", "new_request",
    "BodySource", "BytesBody", "SeekableBody", "Seekable", "as_body",
    # Transports
    "Response", "AsyncResponse", "Transport", "AsyncTransport",
    "HttpxTransport", "AsyncHttpxTransport",
    "drain_body", "adrain_body",
]
