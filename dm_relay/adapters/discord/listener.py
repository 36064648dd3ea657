"""Gateway listener that turns user replies into stored, broadcast records."""

import asyncio
import sys
from typing import Callable, Optional

import discord

from dm_relay.adapters.discord.session import AVATAR_SIZE
from dm_relay.domain.replies import ReplyIngestion
from dm_relay.ports.inbound import IncomingReply


def _log(msg: str):
    print(msg, file=sys.stderr)


def to_incoming_reply(message: discord.Message) -> IncomingReply:
    """Convert a Discord message to a platform-agnostic IncomingReply."""
    guild = message.guild
    return IncomingReply(
        user_id=str(message.author.id),
        username=message.author.name,
        content=message.content,
        message_id=str(message.id),
        avatar_url=message.author.display_avatar.with_size(AVATAR_SIZE).url,
        guild_id=str(guild.id) if guild else None,
        guild_name=guild.name if guild else None,
    )


class ReplyListener(discord.Client):
    """Listens on the gateway for replies to the bot's own messages.

    A message counts as a reply when a human sends it either in a DM channel
    with the bot or as a reply to a message the bot authored.
    """

    def __init__(self, ingestion: ReplyIngestion, **discord_kwargs):
        intents = discord.Intents.default()
        intents.message_content = True
        intents.dm_messages = True
        super().__init__(intents=intents, **discord_kwargs)
        self._ingestion = ingestion

    async def on_ready(self):
        _log(f"Reply listener logged in as {self.user}")

    async def _references_own_message(self, message: discord.Message) -> bool:
        reference = message.reference
        if reference is None or reference.message_id is None:
            return False
        target = reference.resolved
        if target is None:
            try:
                target = await message.channel.fetch_message(reference.message_id)
            except discord.HTTPException as e:
                _log(f"Reply listener: referenced message lookup failed: {e}")
                return False
        author = getattr(target, "author", None)
        return author is not None and self.user is not None and author.id == self.user.id

    async def is_reply(self, message: discord.Message) -> bool:
        if message.author.bot or (self.user and message.author.id == self.user.id):
            return False
        if isinstance(message.channel, discord.DMChannel):
            return True
        return await self._references_own_message(message)

    async def on_message(self, message: discord.Message):
        if not await self.is_reply(message):
            return
        try:
            await self._ingestion.ingest(to_incoming_reply(message))
        except Exception as e:
            _log(f"Reply listener: failed to ingest message {message.id}: {e}")


class ListenerManager:
    """Keeps at most one ReplyListener running.

    ``start()`` and ``stop()`` hold a lock, so overlapping restarts replace
    the listener one after another instead of orphaning one of them.
    """

    def __init__(
        self,
        ingestion: ReplyIngestion,
        listener_factory: Optional[Callable[[ReplyIngestion], discord.Client]] = None,
    ):
        self._ingestion = ingestion
        self._listener_factory = listener_factory or ReplyListener
        self._listener: Optional[discord.Client] = None
        self._task: Optional[asyncio.Task] = None
        self._lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self, token: str):
        async with self._lock:
            await self._shutdown()
            listener = self._listener_factory(self._ingestion)

            async def _run():
                try:
                    await listener.start(token)
                except Exception as e:
                    _log(f"Reply listener stopped: {e}")
                finally:
                    if not listener.is_closed():
                        await listener.close()

            self._listener = listener
            self._task = asyncio.create_task(_run())
            _log("Reply listener starting...")

    async def stop(self):
        async with self._lock:
            await self._shutdown()

    async def _shutdown(self):
        listener, task = self._listener, self._task
        self._listener = None
        self._task = None
        if listener is not None and not listener.is_closed():
            await listener.close()
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
