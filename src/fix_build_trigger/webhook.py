"""webhook payload 파싱 및 분류.

분류 순서:
  action 존재 → action == "labeled" → (메타데이터 기록) → 라벨 일치 → 스키마 검증
앞의 네 단계에서 걸러진 이벤트는 예외 없이 Classification(stop_reason=...)으로 반환한다.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import orjson
from pydantic import ValidationError

from fix_build_trigger.errors import MalformedPayload
from fix_build_trigger.models import WebhookEvent

logger = logging.getLogger(__name__)

LABELED_ACTION = "labeled"
WEBHOOK_SOURCE = "github"

# 정상 종료 사유
NO_ACTION = "no_action"
NOT_LABELED = "not_labeled"
WRONG_LABEL = "wrong_label"


@dataclass(frozen=True)
class Classification:
    """webhook 분류 결과. stop_reason이 None이면 후속 처리 대상."""

    event: WebhookEvent | None = None
    stop_reason: str | None = None

    @property
    def should_continue(self) -> bool:
        return self.stop_reason is None


def parse_payload(raw: str | bytes | None) -> dict[str, Any]:
    """staging된 webhook 원문을 JSON 객체로 파싱한다.

    Raises:
        MalformedPayload: 비어 있거나 JSON이 아니거나 객체가 아닌 경우
    """
    if raw is None or not raw.strip():
        raise MalformedPayload("No webhook payload found")

    try:
        data = orjson.loads(raw)
    except orjson.JSONDecodeError as exc:
        raise MalformedPayload(f"Webhook payload is not valid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise MalformedPayload(f"Webhook payload must be a JSON object, got {type(data).__name__}")
    return data


def _record_safely(record_metadata: Callable[[str, str], None], key: str, value: str) -> None:
    """메타데이터 기록 실패는 흐름에 영향을 주지 않는다."""
    try:
        record_metadata(key, value)
    except Exception as exc:
        logger.warning("Failed to record metadata %s=%s: %s", key, value, exc)


def classify_event(
    payload: dict[str, Any],
    *,
    trigger_label: str,
    record_metadata: Callable[[str, str], None] | None = None,
) -> Classification:
    """webhook payload를 분류한다.

    Args:
        payload: parse_payload 결과
        trigger_label: 트리거 라벨 (예: "fix-build"), 대소문자 구분 완전 일치
        record_metadata: labeled 이벤트일 때 (key, value)로 호출되는 콜백 (best-effort)

    Returns:
        Classification

    Raises:
        MalformedPayload: 트리거 라벨 이벤트인데 pull_request/repository 필드가 없는 경우
    """
    action = payload.get("action")
    if not action:
        logger.info("Could not determine webhook event, nothing to do",
                    extra={"event_code": "SOFT_STOP", "reason": NO_ACTION})
        return Classification(stop_reason=NO_ACTION)

    logger.info("Webhook event: %s", action)

    if action != LABELED_ACTION:
        logger.info("Not a labeled event, exiting",
                    extra={"event_code": "SOFT_STOP", "reason": NOT_LABELED})
        return Classification(stop_reason=NOT_LABELED)

    if record_metadata is not None:
        _record_safely(record_metadata, "webhook:event", action)
        _record_safely(record_metadata, "webhook:source", WEBHOOK_SOURCE)

    label = payload.get("label")
    label_name = label.get("name") if isinstance(label, dict) else None
    logger.info("Label: %s", label_name)

    if label_name != trigger_label:
        logger.info("Label is not '%s', exiting", trigger_label,
                    extra={"event_code": "SOFT_STOP", "reason": WRONG_LABEL})
        return Classification(stop_reason=WRONG_LABEL)

    try:
        event = WebhookEvent.model_validate(payload)
    except ValidationError as exc:
        raise MalformedPayload(f"Webhook payload is missing required fields: {exc}") from exc

    logger.info(
        "PR #%d on branch %s in %s",
        event.pull_request.number,
        event.pull_request.head.ref,
        event.full_repo_name,
        extra={"pr_number": event.pull_request.number},
    )
    return Classification(event=event)
