"""PR 확인 댓글 알림.

댓글 작성은 best-effort: 실패해도 pipeline 업로드는 계속 진행한다.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)

ACKNOWLEDGEMENT_TEMPLATE = "I'm on it! 🛠️\n\nYou can follow my progress here: {agent_build_url}"


class CommentPoster(Protocol):
    def create_issue_comment(self, owner: str, repo: str, issue_number: int, body: str) -> object: ...


@dataclass(frozen=True)
class NotifyResult:
    """댓글 작성 결과. posted=False여도 호출자는 흐름을 계속한다."""

    posted: bool
    error: str | None = None


def build_acknowledgement(agent_build_url: str) -> str:
    """확인 댓글 본문 생성."""
    return ACKNOWLEDGEMENT_TEMPLATE.format(agent_build_url=agent_build_url)


def post_acknowledgement(
    client: CommentPoster,
    owner: str,
    repo: str,
    pr_number: int,
    agent_build_url: str,
) -> NotifyResult:
    """PR에 확인 댓글을 작성한다.

    - 성공 시 NotifyResult(posted=True)
    - 어떤 예외든 WARNING 로그 후 NotifyResult(posted=False, error=...) 반환
    """
    try:
        client.create_issue_comment(owner, repo, pr_number, build_acknowledgement(agent_build_url))
    except Exception as exc:
        logger.warning(
            "Failed to post acknowledgement comment on PR #%d: %s",
            pr_number,
            exc,
            extra={"event_code": "NOTIFY_FAILED", "pr_number": pr_number},
        )
        return NotifyResult(posted=False, error=str(exc))

    logger.info("Posted acknowledgement comment on PR #%d", pr_number, extra={"pr_number": pr_number})
    return NotifyResult(posted=True)
