"""Domain data models — pure Python dataclasses."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


def _iso(value: datetime) -> str:
    return value.isoformat()


@dataclass
class CredentialSubmission:
    """A bot token handed in through the intake form."""

    id: int
    token: str
    application_id: Optional[str]
    submitted_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "botToken": self.token,
            "clientId": self.application_id,
            "timestamp": _iso(self.submitted_at),
        }


@dataclass
class GuildSummary:
    id: str
    name: str
    member_count: int = 0
    icon_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "memberCount": self.member_count,
            "iconUrl": self.icon_url,
        }


@dataclass
class GuildMember:
    """A guild member as seen by the bot.

    ``bot`` is only used for filtering and never leaves the server.
    """

    id: str
    username: str
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    source_guild_id: Optional[str] = None
    source_guild_name: Optional[str] = None
    bot: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "username": self.username,
            "displayName": self.display_name,
            "avatarUrl": self.avatar_url,
        }
        if self.source_guild_id is not None:
            data["sourceGuildId"] = self.source_guild_id
            data["sourceGuildName"] = self.source_guild_name
        return data


@dataclass
class RemoteUser:
    """A resolved Discord user; ``handle`` is the adapter's own object."""

    id: str
    username: str
    bot: bool = False
    handle: Any = field(default=None, repr=False, compare=False)


@dataclass
class DispatchRequest:
    token: str
    message: str
    explicit_user_ids: List[str] = field(default_factory=list)
    select_all: bool = False
    target_guild_id: Optional[str] = None
    inter_message_delay_ms: int = 0


@dataclass
class DispatchResult:
    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    failed_ids: List[str] = field(default_factory=list)

    def record_success(self):
        self.attempted += 1
        self.succeeded += 1

    def record_failure(self, user_id: str):
        self.attempted += 1
        self.failed += 1
        self.failed_ids.append(user_id)


@dataclass
class ReplyRecord:
    id: int
    user_id: str
    username: str
    content: str
    source_message_id: str
    timestamp: datetime
    avatar_url: Optional[str] = None
    guild_id: Optional[str] = None
    guild_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "username": self.username,
            "content": self.content,
            "messageId": self.source_message_id,
            "timestamp": _iso(self.timestamp),
            "avatarUrl": self.avatar_url,
            "guildId": self.guild_id,
            "guildName": self.guild_name,
        }


@dataclass
class AppUser:
    """Row of the application user table (account management only)."""

    id: int
    username: str
    password: str
