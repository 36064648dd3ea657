"""Port interfaces (Hexagonal Architecture)."""

from dm_relay.ports.inbound import IncomingReply
from dm_relay.ports.outbound import FeedPublisher, MessagingSession, SessionFactory, StoragePort

__all__ = [
    "IncomingReply",
    "FeedPublisher",
    "MessagingSession",
    "SessionFactory",
    "StoragePort",
]
