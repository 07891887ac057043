"""GitHub REST API 동기 클라이언트.

PR head 커밋 조회와 PR 댓글 작성만 사용한다.
- 토큰은 생성 시점에 검사 (네트워크 호출 전)
- 재시도 없음: non-2xx/전송 오류는 UpstreamError로 그대로 전파
"""

from __future__ import annotations

import logging
import os
from typing import Any

import httpx

from fix_build_trigger.config import GitHubApiConfig
from fix_build_trigger.errors import AuthenticationMissing, UpstreamError

logger = logging.getLogger(__name__)


class GitHubApiClient:
    """GitHub REST API 동기 클라이언트."""

    def __init__(self, config: GitHubApiConfig) -> None:
        token = os.environ.get(config.token_env_var, "")
        if not token:
            raise AuthenticationMissing(config.token_env_var)

        self._config = config
        self._client = httpx.Client(
            base_url=config.base_url,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": "fix-build-trigger/0.1.0",
            },
            timeout=config.request_timeout_sec,
        )

    def _request(self, method: str, path: str, *, json: Any = None) -> Any:
        """공통 요청 메서드. 2xx가 아니면 UpstreamError."""
        try:
            resp = self._client.request(method, path, json=json)
        except httpx.HTTPError as exc:
            raise UpstreamError("GitHub", 0, str(exc)) from exc

        if not resp.is_success:
            raise UpstreamError("GitHub", resp.status_code, resp.reason_phrase)

        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise UpstreamError("GitHub", resp.status_code, "invalid JSON body") from exc

    def get_pull_request_head(self, owner: str, repo: str, pr_number: int) -> str | None:
        """GET /repos/{owner}/{repo}/pulls/{n} — PR head 커밋 sha.

        응답에 head.sha가 없으면 None (오류 아님).
        """
        logger.info("Getting head commit for PR #%d...", pr_number, extra={"pr_number": pr_number})
        data = self._request("GET", f"/repos/{owner}/{repo}/pulls/{pr_number}")

        head = (data or {}).get("head") or {}
        commit_sha = head.get("sha")
        if commit_sha:
            logger.info("PR #%d head commit: %s", pr_number, commit_sha, extra={"commit": commit_sha})
            return commit_sha

        logger.warning("Could not get head commit for PR #%d", pr_number)
        return None

    def create_issue_comment(self, owner: str, repo: str, issue_number: int, body: str) -> dict[str, Any]:
        """POST /repos/{owner}/{repo}/issues/{n}/comments — PR에 댓글 작성."""
        return self._request(
            "POST",
            f"/repos/{owner}/{repo}/issues/{issue_number}/comments",
            json={"body": body},
        )

    def close(self) -> None:
        """httpx.Client를 종료한다."""
        self._client.close()

    def __enter__(self) -> GitHubApiClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
