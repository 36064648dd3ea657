"""Directory lookup — guilds and human members visible to a bot."""

from typing import List, Optional

from dm_relay.domain.models import GuildMember, GuildSummary
from dm_relay.domain.targets import dedupe_members
from dm_relay.errors import ValidationError
from dm_relay.ports.outbound import MessagingSession, SessionFactory


def _require_token(token: Optional[str]):
    if not isinstance(token, str) or not token.strip():
        raise ValidationError.for_field("token", "Token is required")


async def collect_members(session: MessagingSession, guild_id: Optional[str] = None) -> List[GuildMember]:
    """Enumerate non-bot members on an already open session.

    With ``guild_id`` only that guild is listed. Without it every guild the
    bot belongs to is walked and members are deduplicated by id, so the
    first guild a member is seen in is the one they are attributed to.
    """
    if guild_id:
        return dedupe_members(await session.fetch_members(guild_id))

    members: List[GuildMember] = []
    for guild in await session.fetch_guilds():
        for member in await session.fetch_members(guild.id):
            if member.source_guild_id is None:
                member.source_guild_id = guild.id
                member.source_guild_name = guild.name
            members.append(member)
    return dedupe_members(members)


class DirectoryLookup:
    def __init__(self, sessions: SessionFactory):
        self._sessions = sessions

    async def list_guilds(self, token: str) -> List[GuildSummary]:
        _require_token(token)
        async with self._sessions.open(token) as session:
            return await session.fetch_guilds()

    async def list_members(self, token: str, guild_id: Optional[str] = None) -> List[GuildMember]:
        _require_token(token)
        async with self._sessions.open(token) as session:
            return await collect_members(session, guild_id)
