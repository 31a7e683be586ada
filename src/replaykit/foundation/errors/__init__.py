"""Error handling for replaykit.

- ErrorCode: Classification of failures
- ReplaykitError: Base exception
- TransportError / ReplayError / PolicyOverrideError / ExhaustionError / CancelledError
"""

from .errors import (
    CancelledError,
    ErrorCode,
    ExhaustionError,
    PolicyOverrideError,
    ReplayError,
    ReplaykitError,
    TransportError,
)

__all__ = [
    "ErrorCode", "ReplaykitError",
    "TransportError", "ReplayError", "PolicyOverrideError", "ExhaustionError",
    "CancelledError",
]
