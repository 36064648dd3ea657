"""Direct-message dispatch: single target and sequential bulk batches."""

import asyncio
import sys
from typing import Awaitable, Callable, Optional

from dm_relay.config import MAX_BULK_DELAY_MS
from dm_relay.domain.directory import collect_members
from dm_relay.domain.models import DispatchRequest, DispatchResult
from dm_relay.domain.targets import merge_targets, validate_dispatch
from dm_relay.errors import ValidationError
from dm_relay.ports.outbound import SessionFactory

Sleeper = Callable[[float], Awaitable[None]]


def _log(msg: str):
    print(msg, file=sys.stderr)


class MessageDispatcher:
    """Sends DMs through short-lived sessions.

    A bulk batch runs on one session, strictly one target at a time. The
    optional delay is the only deliberate pause and is applied between
    targets, never after the last one.
    """

    def __init__(
        self,
        sessions: SessionFactory,
        sleep: Optional[Sleeper] = None,
        max_delay_ms: int = MAX_BULK_DELAY_MS,
    ):
        self._sessions = sessions
        self._sleep = sleep or asyncio.sleep
        self._max_delay_ms = max_delay_ms

    async def send_direct(self, token: str, user_id: str, message: str) -> None:
        errors = {}
        if not token or not token.strip():
            errors["token"] = ["Bot token is required"]
        if not user_id or not str(user_id).strip():
            errors["userId"] = ["User ID is required"]
        if not message or not message.strip():
            errors["message"] = ["Message is required"]
        if errors:
            raise ValidationError("Invalid message format", errors)

        async with self._sessions.open(token) as session:
            user = await session.fetch_user(str(user_id).strip())
            await session.send_direct(user, message)
        _log(f"DM sent to user {user_id}")

    async def send_bulk(self, request: DispatchRequest) -> DispatchResult:
        request = validate_dispatch(request, self._max_delay_ms)
        result = DispatchResult()

        async with self._sessions.open(request.token) as session:
            targets = list(request.explicit_user_ids)
            if request.select_all:
                members = await collect_members(session, request.target_guild_id)
                targets = merge_targets(targets, (m.id for m in members))

            _log(f"Bulk dispatch started: {len(targets)} targets")
            delay_seconds = request.inter_message_delay_ms / 1000
            last_index = len(targets) - 1

            for index, user_id in enumerate(targets):
                try:
                    user = await session.fetch_user(user_id)
                except Exception as e:
                    _log(f"Bulk dispatch: could not resolve {user_id}: {e}")
                    result.record_failure(user_id)
                else:
                    if user.bot:
                        _log(f"Bulk dispatch: skipping bot account {user_id}")
                    else:
                        try:
                            await session.send_direct(user, request.message)
                        except Exception as e:
                            _log(f"Bulk dispatch: send to {user_id} failed: {e}")
                            result.record_failure(user_id)
                        else:
                            result.record_success()

                if index < last_index and delay_seconds > 0:
                    await self._sleep(delay_seconds)

        _log(
            f"Bulk dispatch finished: sent {result.succeeded}, "
            f"failed {result.failed} of {result.attempted}"
        )
        return result
