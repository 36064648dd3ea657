"""Reply ingestion — persist inbound replies and fan them out."""

import sys
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from dm_relay.domain.models import ReplyRecord
from dm_relay.ports.inbound import IncomingReply
from dm_relay.ports.outbound import FeedPublisher, StoragePort

INITIAL_EVENT = "initialReplies"
NEW_REPLY_EVENT = "newReply"


def _log(msg: str):
    print(msg, file=sys.stderr)


def snapshot_event(records: List[ReplyRecord]) -> Dict[str, Any]:
    return {"type": INITIAL_EVENT, "data": [r.to_dict() for r in records]}


def new_reply_event(record: ReplyRecord) -> Dict[str, Any]:
    return {"type": NEW_REPLY_EVENT, "data": record.to_dict()}


class ReplyIngestion:
    def __init__(self, storage: StoragePort, publisher: Optional[FeedPublisher] = None):
        self._storage = storage
        self._publisher = publisher

    async def ingest(self, reply: IncomingReply) -> ReplyRecord:
        """Store the reply, then broadcast it to live-feed viewers."""
        record = await self._storage.save_reply(reply, datetime.now(timezone.utc))
        _log(f"Reply stored from {record.username} ({record.user_id})")
        if self._publisher is not None:
            await self._publisher.publish(new_reply_event(record))
        return record

    async def history(self) -> List[ReplyRecord]:
        """Stored replies, newest first."""
        return await self._storage.list_replies()

    async def snapshot(self) -> Dict[str, Any]:
        return snapshot_event(await self.history())
