"""WebSocket live feed — snapshot on connect, then broadcast events."""

import asyncio
import sys
from typing import Any, Awaitable, Callable, Dict, Set

from fastapi import WebSocket, WebSocketDisconnect

from dm_relay.domain.replies import NEW_REPLY_EVENT

Event = Dict[str, Any]


def _log(msg: str):
    print(msg, file=sys.stderr)


def _is_duplicate(event: Event, already_sent: Set[Any]) -> bool:
    if not already_sent or event.get("type") != NEW_REPLY_EVENT:
        return False
    return event.get("data", {}).get("id") in already_sent


class LiveFeed:
    """FeedPublisher that fans events out to every connected viewer.

    Each viewer owns an unbounded queue, so publishing never waits on a
    slow socket and one viewer never holds up another. Viewers keep no
    cursor: a reconnect starts again from a full snapshot.
    """

    def __init__(self):
        self._subscribers: Set[asyncio.Queue] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue()
        self._subscribers.add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue):
        self._subscribers.discard(queue)

    async def publish(self, event: Event) -> None:
        for queue in list(self._subscribers):
            queue.put_nowait(event)

    async def serve(self, websocket: WebSocket, snapshot: Callable[[], Awaitable[Event]]):
        """Run one viewer connection until the client goes away."""
        await websocket.accept()
        queue = self.subscribe()
        _log(f"Live feed viewer connected ({self.subscriber_count} total)")
        receiver = asyncio.create_task(self._wait_for_disconnect(websocket))
        try:
            initial = await snapshot()
            # Replies stored while the snapshot was read are queued as well
            already_sent = {record.get("id") for record in initial.get("data", [])}
            await websocket.send_json(initial)
            while True:
                getter = asyncio.create_task(queue.get())
                done, _ = await asyncio.wait({getter, receiver}, return_when=asyncio.FIRST_COMPLETED)
                if receiver in done:
                    getter.cancel()
                    break
                event = getter.result()
                if _is_duplicate(event, already_sent):
                    continue
                await websocket.send_json(event)
        except WebSocketDisconnect:
            pass
        finally:
            receiver.cancel()
            self.unsubscribe(queue)
            _log(f"Live feed viewer disconnected ({self.subscriber_count} left)")

    @staticmethod
    async def _wait_for_disconnect(websocket: WebSocket):
        # Viewers never send anything meaningful; drain until they leave
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                return
