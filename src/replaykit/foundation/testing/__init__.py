"""Testing utilities: scripted transports and fake responses."""

from .mock import AsyncFakeResponse, AsyncScriptedTransport, FakeResponse, RecordedRequest, ScriptedTransport

__all__ = ["FakeResponse", "AsyncFakeResponse", "RecordedRequest", "ScriptedTransport", "AsyncScriptedTransport"]
