"""Primary storage with a one-time switch to volatile memory."""

import sys
from datetime import datetime
from typing import List, Optional

from dm_relay.adapters.storage.memory_store import InMemoryStorage
from dm_relay.domain.models import AppUser, CredentialSubmission, ReplyRecord
from dm_relay.errors import PersistenceError
from dm_relay.ports.inbound import IncomingReply
from dm_relay.ports.outbound import StoragePort


def _log(msg: str):
    print(msg, file=sys.stderr)


class FallbackStorage:
    """Delegates to ``primary`` until it raises PersistenceError.

    From then on every call goes to an in-memory store for the rest of the
    process lifetime. Data written to the primary before the switch is not
    migrated.
    """

    def __init__(self, primary: StoragePort, fallback: Optional[StoragePort] = None):
        self._primary = primary
        self._fallback = fallback
        self._active: StoragePort = primary
        self._degraded = False

    @property
    def degraded(self) -> bool:
        return self._degraded

    @property
    def backend_name(self) -> str:
        return "memory" if self._degraded else type(self._primary).__name__

    def _switch(self, error: Exception):
        if self._degraded:
            return
        _log(f"WARNING: primary storage failed ({error}); using in-memory storage. Data will be lost on restart!")
        if self._fallback is None:
            self._fallback = InMemoryStorage()
        self._active = self._fallback
        self._degraded = True

    async def _call(self, name: str, *args, **kwargs):
        try:
            return await getattr(self._active, name)(*args, **kwargs)
        except PersistenceError as e:
            if self._degraded:
                raise
            self._switch(e)
            return await getattr(self._active, name)(*args, **kwargs)

    async def initialize(self) -> None:
        try:
            await self._primary.initialize()
            _log(f"Using {type(self._primary).__name__} storage")
        except PersistenceError as e:
            self._switch(e)
            await self._active.initialize()

    async def close(self) -> None:
        await self._primary.close()
        if self._fallback is not None:
            await self._fallback.close()

    async def save_submission(
        self, token: str, application_id: Optional[str], submitted_at: datetime
    ) -> CredentialSubmission:
        return await self._call("save_submission", token, application_id, submitted_at)

    async def list_submissions(self) -> List[CredentialSubmission]:
        return await self._call("list_submissions")

    async def save_reply(self, reply: IncomingReply, received_at: datetime) -> ReplyRecord:
        return await self._call("save_reply", reply, received_at)

    async def list_replies(self) -> List[ReplyRecord]:
        return await self._call("list_replies")

    async def get_user(self, user_id: int) -> Optional[AppUser]:
        return await self._call("get_user", user_id)

    async def get_user_by_username(self, username: str) -> Optional[AppUser]:
        return await self._call("get_user_by_username", username)

    async def create_user(self, username: str, password: str) -> AppUser:
        return await self._call("create_user", username, password)
