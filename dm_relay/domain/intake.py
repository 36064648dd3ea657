"""Credential intake — accepts and stores bot tokens."""

from datetime import datetime, timezone
from typing import Awaitable, Callable, List, Optional

from dm_relay.domain.models import CredentialSubmission
from dm_relay.errors import ValidationError
from dm_relay.ports.outbound import StoragePort

SubmitHook = Callable[[CredentialSubmission], Awaitable[None]]


class CredentialIntake:
    """Validates a submitted token structurally and persists it.

    No Discord call happens here; a token is only checked for being a
    non-empty string.
    """

    def __init__(self, storage: StoragePort, on_submit: Optional[SubmitHook] = None):
        self._storage = storage
        self._on_submit = on_submit

    async def submit(self, token: Optional[str], application_id: Optional[str] = None) -> int:
        if not isinstance(token, str) or not token.strip():
            raise ValidationError.for_field("botToken", "Bot token is required")

        submission = await self._storage.save_submission(
            token=token,
            application_id=application_id or None,
            submitted_at=datetime.now(timezone.utc),
        )
        if self._on_submit is not None:
            await self._on_submit(submission)
        return submission.id

    async def list_submissions(self) -> List[CredentialSubmission]:
        return await self._storage.list_submissions()
