"""Replayable requests: a request descriptor composed with a rewindable body.

The descriptor (method, url, headers) is immutable. The body is a separate
capability that can be rewound to its origin; the executor rewinds it before
every attempt, including the first, and builds a fresh ``httpx.Request``
from the rewound body.

Example:
    >>> req = new_request("POST", "https://api.example.com/items", b'{"id": 1}',
    ...                   headers={"Content-Type": "application/json"})
    >>> req.rewind()
    >>> req.build().content
    b'{"id": 1}'
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import IO, Protocol, runtime_checkable

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator

from replaykit.foundation.errors import ReplayError


class RequestSpec(BaseModel):
    """Immutable request descriptor."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    method: str = Field(min_length=1)
    url: str = Field(min_length=1)
    headers: dict[str, str] = Field(default_factory=dict)

    @field_validator("method", mode="before")
    @classmethod
    def _normalize_method(cls, v: object) -> object:
        return v.strip().upper() if isinstance(v, str) else v


# ─────────────────────────────────────────────────────────────────────────────
# Body sources
# ─────────────────────────────────────────────────────────────────────────────


@runtime_checkable
class BodySource(Protocol):
    """Rewindable request body."""

    def rewind(self) -> None:
        """Reset to the origin. Raises if the body cannot be replayed."""
        ...

    def read(self) -> bytes:
        """Read the body from the current position to the end."""
        ...


@runtime_checkable
class Seekable(Protocol):
    def seek(self, offset: int, whence: int = 0) -> int: ...
    def read(self, size: int = -1) -> bytes: ...


@dataclass(frozen=True, slots=True)
class SeekableBody:
    """Body backed by a seekable binary stream (BytesIO, open file, ...)."""

    stream: IO[bytes] | Seekable

    def rewind(self) -> None:
        self.stream.seek(0)

    def read(self) -> bytes:
        return self.stream.read()


@dataclass(frozen=True, slots=True)
class BytesBody:
    """In-memory body. Always replayable."""

    data: bytes

    def rewind(self) -> None:
        pass

    def read(self) -> bytes:
        return self.data


def as_body(body: bytes | bytearray | BodySource | Seekable | None) -> BodySource | None:
    """Coerce supported body inputs into a BodySource."""
    if body is None or isinstance(body, (BytesBody, SeekableBody)):
        return body
    if isinstance(body, (bytes, bytearray)):
        return BytesBody(bytes(body))
    if isinstance(body, BodySource):
        return body
    if isinstance(body, Seekable):
        return SeekableBody(body)
    raise TypeError(f"Unsupported body type {type(body).__name__}: need bytes, a seekable stream or a BodySource")


# ─────────────────────────────────────────────────────────────────────────────
# Replayable request
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class ReplayableRequest:
    """Request descriptor plus an optional rewindable body.

    The request owns its body stream for the duration of a call; only one
    attempt may be in flight at a time.
    """

    spec: RequestSpec
    body: BodySource | None = None

    @property
    def method(self) -> str:
        return self.spec.method

    @property
    def url(self) -> str:
        return self.spec.url

    @property
    def headers(self) -> dict[str, str]:
        return self.spec.headers

    def rewind(self) -> None:
        """Rewind the body to its origin; any failure becomes a ReplayError."""
        if self.body is None:
            return
        try:
            self.body.rewind()
        except ReplayError:
            raise
        except Exception as e:
            raise ReplayError(f"{self.method} {self.url}: cannot rewind request body: {e}") from e

    def build(self) -> httpx.Request:
        """Build a transport request from the body's current position."""
        content: bytes | None = None
        if self.body is not None:
            try:
                content = self.body.read()
            except Exception as e:
                raise ReplayError(f"{self.method} {self.url}: cannot read request body: {e}") from e
        return httpx.Request(self.method, self.url, headers=self.headers, content=content)

    def with_header(self, name: str, value: str) -> ReplayableRequest:
        """Copy with header ``name`` set to ``value``, replacing any existing one regardless of case."""
        headers = {k: v for k, v in self.spec.headers.items() if k.lower() != name.lower()}
        spec = self.spec.model_copy(update={"headers": {**headers, name: value}})
        return ReplayableRequest(spec, self.body)


def new_request(
    method: str,
    url: str,
    body: bytes | bytearray | BodySource | Seekable | None = None,
    *,
    headers: dict[str, str] | None = None,
) -> ReplayableRequest:
    """Create a ReplayableRequest from raw parts.

    Raises:
        pydantic.ValidationError: empty method or url
        TypeError: unsupported body type
    """
    return ReplayableRequest(RequestSpec(method=method, url=url, headers=headers or {}), as_body(body))
