"""Tests for target assembly and bulk request validation."""

import pytest

from dm_relay.domain.models import DispatchRequest, GuildMember
from dm_relay.domain.targets import dedupe_ids, dedupe_members, merge_targets, validate_dispatch
from dm_relay.errors import ValidationError


def _request(**overrides) -> DispatchRequest:
    fields = dict(token="tok", message="hi", explicit_user_ids=["1"])
    fields.update(overrides)
    return DispatchRequest(**fields)


class TestDedupeIds:
    def test_keeps_first_seen_order(self):
        assert dedupe_ids(["3", "1", "3", "2", "1"]) == ["3", "1", "2"]

    def test_drops_blank_ids(self):
        assert dedupe_ids(["", " ", "5"]) == ["5"]

    def test_strips_whitespace(self):
        assert dedupe_ids([" 7 ", "7"]) == ["7"]

    def test_size_never_exceeds_input(self):
        ids = ["1", "2", "2", "3"]
        assert len(dedupe_ids(ids)) <= len(ids)
        assert len(dedupe_ids(["1", "2", "3"])) == 3


class TestMergeTargets:
    def test_explicit_first_then_discovered(self):
        assert merge_targets(["9", "8"], ["1", "9", "2"]) == ["9", "8", "1", "2"]

    def test_empty_explicit(self):
        assert merge_targets([], ["1", "2"]) == ["1", "2"]


class TestDedupeMembers:
    def test_first_occurrence_wins(self):
        members = [
            GuildMember(id="1", username="a", source_guild_id="g1"),
            GuildMember(id="1", username="a", source_guild_id="g2"),
        ]
        result = dedupe_members(members)
        assert len(result) == 1
        assert result[0].source_guild_id == "g1"

    def test_bots_removed(self):
        members = [
            GuildMember(id="1", username="human"),
            GuildMember(id="2", username="robot", bot=True),
        ]
        assert [m.id for m in dedupe_members(members)] == ["1"]


class TestValidateDispatch:
    def test_valid_request_deduplicates(self):
        req = validate_dispatch(_request(explicit_user_ids=["1", "1", "2"]))
        assert req.explicit_user_ids == ["1", "2"]

    def test_empty_ids_without_select_all_rejected(self):
        with pytest.raises(ValidationError) as exc:
            validate_dispatch(_request(explicit_user_ids=[]))
        assert "userIds" in exc.value.errors

    def test_only_blank_ids_rejected(self):
        with pytest.raises(ValidationError):
            validate_dispatch(_request(explicit_user_ids=["", "  "]))

    def test_empty_ids_with_select_all_allowed(self):
        req = validate_dispatch(_request(explicit_user_ids=[], select_all=True))
        assert req.select_all is True
        assert req.explicit_user_ids == []

    def test_empty_message_rejected(self):
        with pytest.raises(ValidationError) as exc:
            validate_dispatch(_request(message="   "))
        assert "message" in exc.value.errors

    def test_missing_token_rejected(self):
        with pytest.raises(ValidationError) as exc:
            validate_dispatch(_request(token=""))
        assert "token" in exc.value.errors

    @pytest.mark.parametrize("delay", [-1, 10001])
    def test_delay_out_of_range(self, delay):
        with pytest.raises(ValidationError) as exc:
            validate_dispatch(_request(inter_message_delay_ms=delay))
        assert "delay" in exc.value.errors

    @pytest.mark.parametrize("delay", [0, 10000])
    def test_delay_bounds_inclusive(self, delay):
        assert validate_dispatch(_request(inter_message_delay_ms=delay)).inter_message_delay_ms == delay

    def test_custom_max_delay(self):
        with pytest.raises(ValidationError):
            validate_dispatch(_request(inter_message_delay_ms=600), max_delay_ms=500)

    def test_larger_max_delay_capped(self):
        with pytest.raises(ValidationError) as exc:
            validate_dispatch(_request(inter_message_delay_ms=20000), max_delay_ms=60000)
        assert exc.value.errors["delay"] == ["Delay must be between 0 and 10000 ms"]

    def test_collects_every_field_error(self):
        with pytest.raises(ValidationError) as exc:
            validate_dispatch(DispatchRequest(token="", message="", inter_message_delay_ms=-5))
        assert set(exc.value.errors) == {"token", "message", "delay", "userIds"}

    def test_blank_guild_id_normalized(self):
        req = validate_dispatch(_request(target_guild_id=""))
        assert req.target_guild_id is None
