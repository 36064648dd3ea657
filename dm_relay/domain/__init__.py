"""Domain layer — pure Python, no framework dependencies."""

from dm_relay.domain.models import (
    AppUser,
    CredentialSubmission,
    DispatchRequest,
    DispatchResult,
    GuildMember,
    GuildSummary,
    RemoteUser,
    ReplyRecord,
)
from dm_relay.domain.targets import dedupe_ids, dedupe_members, merge_targets, validate_dispatch

__all__ = [
    "AppUser",
    "CredentialSubmission",
    "DispatchRequest",
    "DispatchResult",
    "GuildMember",
    "GuildSummary",
    "RemoteUser",
    "ReplyRecord",
    "dedupe_ids",
    "dedupe_members",
    "merge_targets",
    "validate_dispatch",
]
