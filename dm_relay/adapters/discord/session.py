"""Short-lived discord.py sessions for lookups and DMs.

Only the REST half of discord.py is used here: ``Client.login()`` sets up
the HTTP client without opening a gateway connection, which is all that
guild/member listing and DM delivery need.
"""

import asyncio
import sys
from contextlib import asynccontextmanager, contextmanager
from typing import AsyncIterator, Callable, List, Optional

import aiohttp
import discord

from dm_relay.domain.models import GuildMember, GuildSummary, RemoteUser
from dm_relay.errors import AuthError, NotFoundError, UpstreamError

AVATAR_SIZE = 64


def _log(msg: str):
    print(msg, file=sys.stderr)


@contextmanager
def translate_errors(action: str):
    """Map discord.py / aiohttp failures onto the relay error taxonomy."""
    try:
        yield
    except discord.LoginFailure as e:
        raise AuthError(f"Failed to {action}: {e}") from e
    except discord.NotFound as e:
        raise NotFoundError(f"Failed to {action}: {e.text or 'not found'}") from e
    except discord.HTTPException as e:
        if e.status == 401:
            raise AuthError(f"Failed to {action}: {e.text or 'unauthorized'}") from e
        raise UpstreamError(f"Failed to {action}: {e.text or e}") from e
    except (discord.ClientException, aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise UpstreamError(f"Failed to {action}: {str(e) or type(e).__name__}") from e


def _snowflake(raw: str, kind: str) -> int:
    try:
        return int(str(raw).strip())
    except ValueError:
        raise NotFoundError(f"{kind} with ID {raw} not found")


def _icon_url(guild) -> Optional[str]:
    return guild.icon.with_size(AVATAR_SIZE).url if guild.icon else None


def _member_count(guild) -> int:
    return guild.approximate_member_count or guild.member_count or 0


def make_client() -> discord.Client:
    intents = discord.Intents.default()
    intents.members = True
    intents.dm_messages = True
    return discord.Client(intents=intents)


class DiscordSession:
    """MessagingSession implementation over a logged-in discord.Client."""

    def __init__(self, client: discord.Client):
        self._client = client

    async def fetch_guilds(self) -> List[GuildSummary]:
        with translate_errors("fetch guilds"):
            return [
                GuildSummary(
                    id=str(guild.id),
                    name=guild.name,
                    member_count=_member_count(guild),
                    icon_url=_icon_url(guild),
                )
                async for guild in self._client.fetch_guilds(limit=None)
            ]

    async def fetch_members(self, guild_id: str) -> List[GuildMember]:
        snowflake = _snowflake(guild_id, "Guild")
        with translate_errors("fetch guild members"):
            try:
                guild = await self._client.fetch_guild(snowflake)
            except discord.Forbidden as e:
                # Discord answers 403 for guilds the bot is not in
                raise NotFoundError(f"Guild with ID {guild_id} not found") from e
            return [
                GuildMember(
                    id=str(member.id),
                    username=member.name,
                    display_name=member.display_name,
                    avatar_url=member.display_avatar.with_size(AVATAR_SIZE).url,
                    source_guild_id=str(guild.id),
                    source_guild_name=guild.name,
                    bot=member.bot,
                )
                async for member in guild.fetch_members(limit=None)
            ]

    async def fetch_user(self, user_id: str) -> RemoteUser:
        snowflake = _snowflake(user_id, "User")
        with translate_errors(f"fetch user {user_id}"):
            user = await self._client.fetch_user(snowflake)
        return RemoteUser(id=str(user.id), username=user.name, bot=user.bot, handle=user)

    async def send_direct(self, user: RemoteUser, text: str) -> None:
        with translate_errors(f"send message to user {user.id}"):
            handle = user.handle
            if handle is None:
                handle = await self._client.fetch_user(_snowflake(user.id, "User"))
            channel = handle.dm_channel or await handle.create_dm()
            await channel.send(text)


class DiscordSessionFactory:
    """SessionFactory that logs in per operation and always closes the client."""

    def __init__(
        self,
        client_factory: Callable[[], discord.Client] = make_client,
        login_timeout: float = 30,
    ):
        self._client_factory = client_factory
        self._login_timeout = login_timeout

    @asynccontextmanager
    async def open(self, token: str) -> AsyncIterator[DiscordSession]:
        client = self._client_factory()
        try:
            with translate_errors("log in"):
                await asyncio.wait_for(client.login(token.strip()), timeout=self._login_timeout)
            yield DiscordSession(client)
        finally:
            try:
                await client.close()
            except Exception as e:
                _log(f"Discord client close failed: {e}")
