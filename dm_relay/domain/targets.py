"""Target-set assembly and request validation for bulk dispatch."""

from typing import Dict, Iterable, List

from dm_relay.config import MAX_BULK_DELAY_MS
from dm_relay.domain.models import DispatchRequest, GuildMember
from dm_relay.errors import ValidationError


def dedupe_ids(user_ids: Iterable[str]) -> List[str]:
    """Drop blanks and repeats, keeping first-seen order."""
    seen = set()
    result = []
    for raw in user_ids:
        user_id = str(raw).strip()
        if not user_id or user_id in seen:
            continue
        seen.add(user_id)
        result.append(user_id)
    return result


def merge_targets(explicit_ids: List[str], discovered_ids: Iterable[str]) -> List[str]:
    """Explicit ids first in their given order, then new discovered ids."""
    return dedupe_ids(list(explicit_ids) + list(discovered_ids))


def dedupe_members(members: Iterable[GuildMember]) -> List[GuildMember]:
    """Non-bot members, first occurrence of each id wins."""
    seen = set()
    result = []
    for member in members:
        if member.bot or member.id in seen:
            continue
        seen.add(member.id)
        result.append(member)
    return result


def validate_dispatch(request: DispatchRequest, max_delay_ms: int = MAX_BULK_DELAY_MS) -> DispatchRequest:
    """Normalize a bulk request or raise ValidationError.

    Returns a copy whose explicit ids are deduplicated.
    """
    max_delay_ms = min(max_delay_ms, MAX_BULK_DELAY_MS)
    errors: Dict[str, List[str]] = {}

    if not request.token or not request.token.strip():
        errors.setdefault("token", []).append("Bot token is required")
    if not request.message or not request.message.strip():
        errors.setdefault("message", []).append("Message is required")

    delay = request.inter_message_delay_ms
    if isinstance(delay, bool) or not isinstance(delay, int):
        errors.setdefault("delay", []).append("Delay must be an integer")
    elif delay < 0 or delay > max_delay_ms:
        errors.setdefault("delay", []).append(f"Delay must be between 0 and {max_delay_ms} ms")

    explicit = dedupe_ids(request.explicit_user_ids)
    if not explicit and not request.select_all:
        errors.setdefault("userIds", []).append("At least one user ID is required")

    if errors:
        raise ValidationError("Invalid bulk message format", errors)

    return DispatchRequest(
        token=request.token,
        message=request.message,
        explicit_user_ids=explicit,
        select_all=request.select_all,
        target_guild_id=request.target_guild_id or None,
        inter_message_delay_ms=delay,
    )
