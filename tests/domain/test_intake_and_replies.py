"""Tests for CredentialIntake and ReplyIngestion."""

import pytest

from dm_relay.domain.intake import CredentialIntake
from dm_relay.domain.replies import ReplyIngestion, snapshot_event
from dm_relay.errors import ValidationError
from dm_relay.ports.inbound import IncomingReply


class _Publisher:
    def __init__(self):
        self.events = []

    async def publish(self, event):
        self.events.append(event)


def _reply(user_id="7", content="thanks!") -> IncomingReply:
    return IncomingReply(user_id=user_id, username="ann", content=content, message_id="m" + user_id)


class TestCredentialIntake:
    @pytest.mark.asyncio
    async def test_submit_returns_positive_id(self, storage):
        intake = CredentialIntake(storage)
        first = await intake.submit("abc123")
        second = await intake.submit("def456", "999")
        assert first >= 1
        assert second > first

    @pytest.mark.asyncio
    async def test_submission_listed(self, storage):
        intake = CredentialIntake(storage)
        submission_id = await intake.submit("abc123", "app-1")
        submissions = await intake.list_submissions()
        assert submissions[0].id == submission_id
        assert submissions[0].to_dict()["botToken"] == "abc123"
        assert submissions[0].to_dict()["clientId"] == "app-1"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", ["", "   ", None])
    async def test_empty_token_rejected(self, storage, token):
        intake = CredentialIntake(storage)
        with pytest.raises(ValidationError) as exc:
            await intake.submit(token)
        assert "botToken" in exc.value.errors
        assert await storage.list_submissions() == []

    @pytest.mark.asyncio
    async def test_token_stored_as_submitted(self, storage):
        intake = CredentialIntake(storage)
        await intake.submit("  abc123 \n")
        assert (await storage.list_submissions())[0].token == "  abc123 \n"

    @pytest.mark.asyncio
    async def test_empty_application_id_stored_as_none(self, storage):
        intake = CredentialIntake(storage)
        await intake.submit("abc", "")
        assert (await storage.list_submissions())[0].application_id is None

    @pytest.mark.asyncio
    async def test_on_submit_hook(self, storage):
        seen = []

        async def hook(submission):
            seen.append(submission.token)

        intake = CredentialIntake(storage, on_submit=hook)
        await intake.submit("abc")
        assert seen == ["abc"]


class TestReplyIngestion:
    @pytest.mark.asyncio
    async def test_ingest_persists_and_publishes(self, storage):
        publisher = _Publisher()
        ingestion = ReplyIngestion(storage, publisher)
        record = await ingestion.ingest(_reply())

        assert (await storage.list_replies())[0].id == record.id
        assert publisher.events == [{"type": "newReply", "data": record.to_dict()}]

    @pytest.mark.asyncio
    async def test_history_newest_first(self, storage):
        ingestion = ReplyIngestion(storage)
        await ingestion.ingest(_reply("1", "first"))
        await ingestion.ingest(_reply("2", "second"))
        history = await ingestion.history()
        assert [r.content for r in history] == ["second", "first"]

    @pytest.mark.asyncio
    async def test_snapshot_event(self, storage):
        ingestion = ReplyIngestion(storage)
        record = await ingestion.ingest(_reply())
        snapshot = await ingestion.snapshot()
        assert snapshot == snapshot_event([record])
        assert snapshot["type"] == "initialReplies"
        assert snapshot["data"][0]["messageId"] == "m7"
