"""JSON 구조화 로깅 설정.

Buildkite 잡 로그는 stderr를 그대로 보여주므로 핸들러는 stderr 하나만 둔다.
정상 종료 분기는 event_code=SOFT_STOP, 치명적 오류는 event_code=FATAL로 구분한다.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

_EXTRA_KEYS = ("event_code", "reason", "pr_number", "build_number", "commit")


class JsonFormatter(logging.Formatter):
    """JSON 형태로 로그 레코드를 포매팅한다."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.now(tz=UTC).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in _EXTRA_KEYS:
            value = getattr(record, key, None)
            if value is not None:
                log_entry[key] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False)


def setup_logging(*, json_format: bool = True, level: int = logging.INFO) -> None:
    """fix_build_trigger 로거에 stderr 핸들러를 설정한다.

    Args:
        json_format: True이면 JSON 포맷, False이면 사람이 읽는 텍스트 포맷
        level: 로그 레벨
    """
    root = logging.getLogger("fix_build_trigger")
    root.setLevel(level)
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        JsonFormatter() if json_format
        else logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
    )
    root.addHandler(handler)
