"""Outbound ports — interfaces for external system adapters."""

from datetime import datetime
from typing import (
    Any,
    AsyncContextManager,
    Dict,
    List,
    Optional,
    Protocol,
    runtime_checkable,
)

from dm_relay.domain.models import (
    AppUser,
    CredentialSubmission,
    GuildMember,
    GuildSummary,
    RemoteUser,
    ReplyRecord,
)
from dm_relay.ports.inbound import IncomingReply


@runtime_checkable
class StoragePort(Protocol):
    """Durable store for submissions, replies and application users."""

    async def initialize(self) -> None: ...

    async def close(self) -> None: ...

    async def save_submission(
        self, token: str, application_id: Optional[str], submitted_at: datetime
    ) -> CredentialSubmission: ...

    async def list_submissions(self) -> List[CredentialSubmission]: ...

    async def save_reply(
        self, reply: IncomingReply, received_at: datetime
    ) -> ReplyRecord: ...

    async def list_replies(self) -> List[ReplyRecord]: ...

    async def get_user(self, user_id: int) -> Optional[AppUser]: ...

    async def get_user_by_username(self, username: str) -> Optional[AppUser]: ...

    async def create_user(self, username: str, password: str) -> AppUser: ...


@runtime_checkable
class MessagingSession(Protocol):
    """A logged-in Discord session owned by exactly one operation."""

    async def fetch_guilds(self) -> List[GuildSummary]: ...

    async def fetch_members(self, guild_id: str) -> List[GuildMember]: ...

    async def fetch_user(self, user_id: str) -> RemoteUser: ...

    async def send_direct(self, user: RemoteUser, text: str) -> None: ...


@runtime_checkable
class SessionFactory(Protocol):
    """Opens a MessagingSession that is released when the block exits."""

    def open(self, token: str) -> AsyncContextManager[MessagingSession]: ...


@runtime_checkable
class FeedPublisher(Protocol):
    """Broadcasts JSON events to every connected live-feed viewer."""

    async def publish(self, event: Dict[str, Any]) -> None: ...
