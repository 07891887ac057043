"""webhook 파싱/분류 테스트."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import orjson
import pytest
from fix_build_trigger.errors import MalformedPayload
from fix_build_trigger.webhook import (
    NO_ACTION,
    NOT_LABELED,
    WRONG_LABEL,
    classify_event,
    parse_payload,
)


class TestParsePayload:
    """parse_payload 테스트."""

    def test_valid_object(self, sample_payload_data: dict[str, Any]) -> None:
        raw = orjson.dumps(sample_payload_data).decode()
        assert parse_payload(raw) == sample_payload_data

    def test_accepts_bytes(self) -> None:
        assert parse_payload(b'{"action": "labeled"}') == {"action": "labeled"}

    @pytest.mark.parametrize("raw", [None, "", "   \n"])
    def test_empty_payload(self, raw: str | None) -> None:
        with pytest.raises(MalformedPayload, match="No webhook payload found"):
            parse_payload(raw)

    def test_invalid_json(self) -> None:
        with pytest.raises(MalformedPayload, match="not valid JSON"):
            parse_payload("{not json")

    def test_non_object_json(self) -> None:
        with pytest.raises(MalformedPayload, match="must be a JSON object"):
            parse_payload("[1, 2, 3]")


class TestClassifyEvent:
    """classify_event 테스트."""

    def test_fix_build_label_continues(self, sample_payload_data: dict[str, Any]) -> None:
        result = classify_event(sample_payload_data, trigger_label="fix-build")

        assert result.should_continue
        assert result.stop_reason is None
        assert result.event is not None
        assert result.event.pull_request.number == 42
        assert result.event.pull_request.head.ref == "feature-x"
        assert result.event.repository.owner.login == "acme"
        assert result.event.full_repo_name == "acme/widgets"

    def test_missing_action_stops(self, sample_payload_data: dict[str, Any]) -> None:
        del sample_payload_data["action"]
        recorder = MagicMock()

        result = classify_event(sample_payload_data, trigger_label="fix-build", record_metadata=recorder)

        assert not result.should_continue
        assert result.stop_reason == NO_ACTION
        recorder.assert_not_called()

    @pytest.mark.parametrize("action", ["opened", "unlabeled", "synchronize", "Labeled"])
    def test_other_actions_stop(self, payload_factory, action: str) -> None:
        recorder = MagicMock()

        result = classify_event(payload_factory(action=action), trigger_label="fix-build",
                                record_metadata=recorder)

        assert result.stop_reason == NOT_LABELED
        recorder.assert_not_called()

    @pytest.mark.parametrize("label", [{"name": "needs-review"}, {"name": "Fix-Build"}, {}, None])
    def test_wrong_label_stops(self, payload_factory, label: dict | None) -> None:
        result = classify_event(payload_factory(label=label), trigger_label="fix-build")

        assert result.stop_reason == WRONG_LABEL
        assert result.event is None

    def test_records_metadata_for_labeled_event(self, payload_factory) -> None:
        recorder = MagicMock()

        classify_event(payload_factory(label={"name": "needs-review"}), trigger_label="fix-build",
                       record_metadata=recorder)

        assert recorder.call_args_list[0].args == ("webhook:event", "labeled")
        assert recorder.call_args_list[1].args == ("webhook:source", "github")

    def test_metadata_failure_does_not_change_result(self, sample_payload_data: dict[str, Any]) -> None:
        recorder = MagicMock(side_effect=RuntimeError("agent unavailable"))

        result = classify_event(sample_payload_data, trigger_label="fix-build", record_metadata=recorder)

        assert result.should_continue
        assert recorder.call_count == 2

    def test_custom_trigger_label(self, payload_factory) -> None:
        result = classify_event(payload_factory(label={"name": "autofix"}), trigger_label="autofix")
        assert result.should_continue

    def test_missing_pull_request_is_malformed(self, sample_payload_data: dict[str, Any]) -> None:
        del sample_payload_data["pull_request"]

        with pytest.raises(MalformedPayload, match="missing required fields"):
            classify_event(sample_payload_data, trigger_label="fix-build")

    def test_missing_pr_number_is_malformed(self, sample_payload_data: dict[str, Any]) -> None:
        del sample_payload_data["pull_request"]["number"]

        with pytest.raises(MalformedPayload):
            classify_event(sample_payload_data, trigger_label="fix-build")

    def test_missing_owner_login_is_malformed(self, sample_payload_data: dict[str, Any]) -> None:
        sample_payload_data["repository"]["owner"] = {}

        with pytest.raises(MalformedPayload):
            classify_event(sample_payload_data, trigger_label="fix-build")

    def test_event_is_immutable(self, sample_payload_data: dict[str, Any]) -> None:
        event = classify_event(sample_payload_data, trigger_label="fix-build").event
        assert event is not None

        with pytest.raises(Exception):
            event.action = "unlabeled"  # type: ignore[misc]
