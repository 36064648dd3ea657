"""Discord adapters (discord.py)."""

from dm_relay.adapters.discord.listener import ListenerManager, ReplyListener
from dm_relay.adapters.discord.session import DiscordSession, DiscordSessionFactory

__all__ = ["DiscordSession", "DiscordSessionFactory", "ListenerManager", "ReplyListener"]
