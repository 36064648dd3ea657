"""Shared fakes: an in-process Discord session factory and storage."""

from contextlib import asynccontextmanager
from typing import Dict, List, Set

import pytest

from dm_relay.adapters.storage.memory_store import InMemoryStorage
from dm_relay.domain.models import GuildMember, GuildSummary, RemoteUser
from dm_relay.errors import AuthError, NotFoundError, UpstreamError


class FakeSession:
    def __init__(self, factory: "FakeSessionFactory"):
        self._factory = factory

    async def fetch_guilds(self) -> List[GuildSummary]:
        return list(self._factory.guilds)

    async def fetch_members(self, guild_id: str) -> List[GuildMember]:
        if guild_id not in self._factory.members:
            raise NotFoundError(f"Guild with ID {guild_id} not found")
        return [
            GuildMember(
                id=m.id,
                username=m.username,
                display_name=m.display_name,
                bot=m.bot,
            )
            for m in self._factory.members[guild_id]
        ]

    async def fetch_user(self, user_id: str) -> RemoteUser:
        self._factory.calls.append(("fetch_user", user_id))
        if user_id in self._factory.unresolvable:
            raise NotFoundError(f"User with ID {user_id} not found")
        return RemoteUser(id=user_id, username=f"user{user_id}", bot=user_id in self._factory.bots)

    async def send_direct(self, user: RemoteUser, text: str) -> None:
        self._factory.calls.append(("send", user.id))
        if user.id in self._factory.send_failures:
            raise UpstreamError(f"Cannot send messages to user {user.id}")
        self._factory.sent.append((user.id, text))


class FakeSessionFactory:
    """Records every session opened/closed and every send attempted."""

    def __init__(self):
        self.guilds: List[GuildSummary] = []
        self.members: Dict[str, List[GuildMember]] = {}
        self.bots: Set[str] = set()
        self.unresolvable: Set[str] = set()
        self.send_failures: Set[str] = set()
        self.rejected_tokens: Set[str] = set()
        self.sent: List[tuple] = []
        self.calls: List[tuple] = []
        self.opened = 0
        self.closed = 0

    def add_guild(self, guild_id: str, name: str, members: List[GuildMember]):
        self.guilds.append(GuildSummary(id=guild_id, name=name, member_count=len(members)))
        self.members[guild_id] = members
        for member in members:
            if member.bot:
                self.bots.add(member.id)

    @asynccontextmanager
    async def open(self, token: str):
        self.opened += 1
        try:
            if token in self.rejected_tokens:
                raise AuthError("Failed to log in: Improper token has been passed.")
            yield FakeSession(self)
        finally:
            self.closed += 1


class RecordingSleep:
    def __init__(self):
        self.calls: List[float] = []

    async def __call__(self, seconds: float):
        self.calls.append(seconds)


@pytest.fixture
def sessions() -> FakeSessionFactory:
    return FakeSessionFactory()


@pytest.fixture
def sleeper() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()
