"""Foundation - building blocks for replaykit.

Contains: error taxonomy, configuration, testing utilities.
"""

from .config import ReplaykitSettings, clear_settings_cache, get_settings
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
    # Errors
    "ErrorCode", "ReplaykitError", "TransportError", "ReplayError",
    "PolicyOverrideError", "ExhaustionError", "CancelledError",
    # Config
    "ReplaykitSettings", "get_settings", "clear_settings_cache",
]
