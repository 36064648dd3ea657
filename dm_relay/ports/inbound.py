"""Inbound port — platform-agnostic reply representation."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class IncomingReply:
    """A user's reply to a bot-authored message, before it is stored."""

    user_id: str
    username: str
    content: str
    message_id: str
    avatar_url: Optional[str] = None
    guild_id: Optional[str] = None
    guild_name: Optional[str] = None
