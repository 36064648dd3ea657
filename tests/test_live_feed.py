"""Tests for the live reply feed: queue fan-out and the /ws endpoint."""

import asyncio

import pytest
from fastapi.testclient import TestClient

from dm_relay.adapters.storage.memory_store import InMemoryStorage
from dm_relay.adapters.web.feed import LiveFeed
from dm_relay.adapters.web.server import create_app, services_of
from dm_relay.config import AppConfig
from dm_relay.domain.replies import ReplyIngestion
from dm_relay.ports.inbound import IncomingReply


class TestLiveFeed:
    @pytest.mark.asyncio
    async def test_publish_reaches_every_subscriber(self):
        feed = LiveFeed()
        first, second = feed.subscribe(), feed.subscribe()
        assert feed.subscriber_count == 2

        await feed.publish({"type": "newReply", "data": {"id": 1}})
        assert first.get_nowait() == second.get_nowait() == {"type": "newReply", "data": {"id": 1}}

    @pytest.mark.asyncio
    async def test_unsubscribed_queue_gets_nothing(self):
        feed = LiveFeed()
        queue = feed.subscribe()
        feed.unsubscribe(queue)
        await feed.publish({"type": "newReply", "data": {}})
        assert feed.subscriber_count == 0
        with pytest.raises(asyncio.QueueEmpty):
            queue.get_nowait()

    @pytest.mark.asyncio
    async def test_publish_without_viewers(self):
        await LiveFeed().publish({"type": "newReply", "data": {}})


class TestWebSocketFeed:
    def _app(self, sessions):
        return create_app(AppConfig(), storage=InMemoryStorage(), sessions=sessions)

    def test_viewers_get_snapshot_then_live_replies(self, sessions):
        app = self._app(sessions)
        services = services_of(app)
        with TestClient(app) as client:
            client.portal.call(
                services.ingestion.ingest,
                IncomingReply(user_id="1", username="ann", content="earlier", message_id="m0"),
            )
            with client.websocket_connect("/ws") as ws1, client.websocket_connect("/ws") as ws2:
                snap1, snap2 = ws1.receive_json(), ws2.receive_json()
                assert snap1["type"] == snap2["type"] == "initialReplies"
                assert [r["content"] for r in snap1["data"]] == ["earlier"]

                record = client.portal.call(
                    services.ingestion.ingest,
                    IncomingReply(user_id="7", username="bob", content="thanks!", message_id="m1"),
                )
                event1, event2 = ws1.receive_json(), ws2.receive_json()
                assert event1 == event2
                assert event1["type"] == "newReply"
                assert event1["data"]["id"] == record.id
                assert event1["data"]["messageId"] == "m1"

            replies = client.get("/api/replies").json()["replies"]
            assert [r["content"] for r in replies] == ["thanks!", "earlier"]

    def test_viewer_count_drops_after_disconnect(self, sessions):
        app = self._app(sessions)
        with TestClient(app) as client:
            with client.websocket_connect("/ws") as ws:
                ws.receive_json()
                assert client.get("/status").json()["liveViewers"] == 1
            # the server unsubscribes once it sees the disconnect
            for _ in range(50):
                if client.get("/status").json()["liveViewers"] == 0:
                    break
            assert client.get("/status").json()["liveViewers"] == 0


class _FakeSocket:
    def __init__(self):
        self.sent = []
        self._incoming = asyncio.Queue()

    async def accept(self):
        pass

    async def send_json(self, data):
        self.sent.append(data)

    async def receive(self):
        return await self._incoming.get()

    def disconnect(self):
        self._incoming.put_nowait({"type": "websocket.disconnect"})


async def _wait_for(predicate):
    for _ in range(200):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


class TestServeSnapshotOverlap:
    @pytest.mark.asyncio
    async def test_reply_stored_during_snapshot_sent_once(self):
        feed = LiveFeed()
        ingestion = ReplyIngestion(InMemoryStorage(), feed)

        async def racing_snapshot():
            await ingestion.ingest(IncomingReply(user_id="1", username="ann", content="during", message_id="m1"))
            return await ingestion.snapshot()

        ws = _FakeSocket()
        task = asyncio.create_task(feed.serve(ws, racing_snapshot))
        await _wait_for(lambda: len(ws.sent) == 1)

        later = await ingestion.ingest(IncomingReply(user_id="2", username="bob", content="after", message_id="m2"))
        await _wait_for(lambda: len(ws.sent) == 2)
        ws.disconnect()
        await task

        snapshot, event = ws.sent
        assert snapshot["type"] == "initialReplies"
        assert [r["content"] for r in snapshot["data"]] == ["during"]
        assert event == {"type": "newReply", "data": later.to_dict()}
        assert feed.subscriber_count == 0
