"""Buildkite REST API 클라이언트.

브랜치의 최근 실패 빌드 목록만 조회한다. 재시도 없음.
"""

from __future__ import annotations

import logging
import os
from typing import Any

import httpx
from pydantic import ValidationError

from fix_build_trigger.config import BuildkiteApiConfig
from fix_build_trigger.errors import AuthenticationMissing, UpstreamError
from fix_build_trigger.models import FailedBuild

logger = logging.getLogger(__name__)


class BuildkiteApiClient:
    """Buildkite REST API 클라이언트."""

    def __init__(self, config: BuildkiteApiConfig) -> None:
        token = os.environ.get(config.token_env_var, "")
        if not token:
            raise AuthenticationMissing(config.token_env_var)

        self._config = config
        self._client = httpx.Client(
            base_url=config.base_url,
            headers={"Authorization": f"Bearer {token}"},
            timeout=config.request_timeout_sec,
        )

    def list_failed_builds(
        self,
        org: str,
        pipeline: str,
        branch: str,
        *,
        per_page: int | None = None,
    ) -> list[FailedBuild]:
        """GET /organizations/{org}/pipelines/{pipeline}/builds?state=failed.

        Returns:
            API가 반환한 순서(최신순) 그대로의 FailedBuild 리스트

        Raises:
            UpstreamError: non-2xx 응답, 전송 오류, 예상하지 못한 응답 형식
        """
        params = {
            "branch": branch,
            "state": "failed",
            "per_page": per_page or self._config.per_page,
        }
        path = f"/organizations/{org}/pipelines/{pipeline}/builds"

        try:
            resp = self._client.get(path, params=params)
        except httpx.HTTPError as exc:
            raise UpstreamError("Buildkite", 0, str(exc)) from exc

        if not resp.is_success:
            raise UpstreamError("Buildkite", resp.status_code, resp.reason_phrase)

        try:
            data = resp.json()
        except ValueError as exc:
            raise UpstreamError("Buildkite", resp.status_code, "invalid JSON body") from exc
        if not isinstance(data, list):
            raise UpstreamError("Buildkite", resp.status_code, "expected a list of builds")

        try:
            return [FailedBuild.model_validate(item) for item in data]
        except ValidationError as exc:
            raise UpstreamError("Buildkite", resp.status_code, f"unexpected build payload: {exc}") from exc

    def close(self) -> None:
        """httpx.Client를 종료한다."""
        self._client.close()

    def __enter__(self) -> BuildkiteApiClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
