"""Error taxonomy shared by the domain, adapters and web layer."""

from typing import Dict, List, Optional


class RelayError(Exception):
    """Base class for every error this package raises on purpose."""
    pass


class ValidationError(RelayError):
    """Malformed or missing input, raised before any external call."""

    def __init__(self, message: str, errors: Optional[Dict[str, List[str]]] = None):
        super().__init__(message)
        self.message = message
        self.errors: Dict[str, List[str]] = errors or {}

    @classmethod
    def for_field(cls, field_name: str, message: str) -> "ValidationError":
        return cls(message, {field_name: [message]})


class AuthError(RelayError):
    """Discord rejected the supplied bot token"""
    pass


class NotFoundError(RelayError):
    """Target user or guild does not exist from Discord's point of view"""
    pass


class UpstreamError(RelayError):
    """Any other Discord/network failure"""
    pass


class PersistenceError(RelayError):
    """Durable store unavailable"""
    pass
