"""Volatile in-memory storage adapter — implements StoragePort."""

import itertools
from datetime import datetime
from typing import Dict, List, Optional

from dm_relay.domain.models import AppUser, CredentialSubmission, ReplyRecord
from dm_relay.errors import ValidationError
from dm_relay.ports.inbound import IncomingReply


class InMemoryStorage:
    """Dict-backed storage. Everything is lost when the process exits."""

    def __init__(self):
        self._submissions: Dict[int, CredentialSubmission] = {}
        self._replies: Dict[int, ReplyRecord] = {}
        self._users: Dict[int, AppUser] = {}
        self._submission_ids = itertools.count(1)
        self._reply_ids = itertools.count(1)
        self._user_ids = itertools.count(1)

    async def initialize(self) -> None:
        return None

    async def close(self) -> None:
        return None

    async def save_submission(
        self, token: str, application_id: Optional[str], submitted_at: datetime
    ) -> CredentialSubmission:
        submission = CredentialSubmission(
            id=next(self._submission_ids),
            token=token,
            application_id=application_id or None,
            submitted_at=submitted_at,
        )
        self._submissions[submission.id] = submission
        return submission

    async def list_submissions(self) -> List[CredentialSubmission]:
        return sorted(self._submissions.values(), key=lambda s: s.id)

    async def save_reply(self, reply: IncomingReply, received_at: datetime) -> ReplyRecord:
        record = ReplyRecord(
            id=next(self._reply_ids),
            user_id=reply.user_id,
            username=reply.username,
            content=reply.content,
            source_message_id=reply.message_id,
            timestamp=received_at,
            avatar_url=reply.avatar_url or None,
            guild_id=reply.guild_id or None,
            guild_name=reply.guild_name or None,
        )
        self._replies[record.id] = record
        return record

    async def list_replies(self) -> List[ReplyRecord]:
        return sorted(
            self._replies.values(),
            key=lambda r: (r.timestamp, r.id),
            reverse=True,
        )

    async def get_user(self, user_id: int) -> Optional[AppUser]:
        return self._users.get(user_id)

    async def get_user_by_username(self, username: str) -> Optional[AppUser]:
        return next((u for u in self._users.values() if u.username == username), None)

    async def create_user(self, username: str, password: str) -> AppUser:
        if await self.get_user_by_username(username) is not None:
            raise ValidationError.for_field("username", "Username already exists")
        user = AppUser(id=next(self._user_ids), username=username, password=password)
        self._users[user.id] = user
        return user
