"""Discord DM Relay — token intake, guild lookup, bulk DMs and a live reply feed."""

from dm_relay.config import CONFIG, AppConfig, __version__
from dm_relay.errors import (
    AuthError,
    NotFoundError,
    PersistenceError,
    RelayError,
    UpstreamError,
    ValidationError,
)

__all__ = [
    "CONFIG",
    "AppConfig",
    "__version__",
    "AuthError",
    "NotFoundError",
    "PersistenceError",
    "RelayError",
    "UpstreamError",
    "ValidationError",
]
