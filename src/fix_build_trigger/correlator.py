"""PR head 커밋 ↔ Buildkite 실패 빌드 매칭."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from fix_build_trigger.buildkite_api import BuildkiteApiClient
from fix_build_trigger.models import FailedBuild

logger = logging.getLogger(__name__)


def pipeline_slug_for_repo(repo_name: str) -> str:
    """저장소 이름을 Buildkite pipeline slug로 변환한다 ("." → "-dot-")."""
    return repo_name.replace(".", "-dot-")


def select_failed_build(
    builds: Sequence[FailedBuild],
    target_commit: str | None = None,
) -> FailedBuild | None:
    """실패 빌드 목록에서 대상 빌드를 고른다.

    - target_commit 지정: commit이 완전히 일치하는 첫 빌드, 없으면 None
      (짧은 sha 매칭이나 첫 빌드 fallback 없음)
    - target_commit 미지정: 목록의 첫 빌드 (API 최신순), 빈 목록이면 None
    """
    if target_commit is not None:
        return next((b for b in builds if b.commit == target_commit), None)
    return builds[0] if builds else None


def find_failed_build_for_branch(
    client: BuildkiteApiClient,
    branch: str,
    org: str,
    pipeline: str,
    target_commit: str | None = None,
) -> FailedBuild | None:
    """브랜치의 최근 실패 빌드 중 target_commit에 해당하는 빌드를 찾는다.

    Raises:
        UpstreamError: Buildkite API 호출 실패
    """
    logger.info("Searching for failed builds on branch: %s", branch)
    if target_commit:
        logger.info("Filtering for commit: %s", target_commit, extra={"commit": target_commit})

    builds = client.list_failed_builds(org, pipeline, branch)
    failed_build = select_failed_build(builds, target_commit)

    if failed_build is None:
        if target_commit:
            logger.info("No failed builds found for branch: %s at commit: %s", branch, target_commit)
        else:
            logger.info("No failed builds found for branch: %s", branch)
        return None

    logger.info(
        "Found failed build #%d (%s) at commit %s",
        failed_build.number,
        failed_build.web_url,
        failed_build.commit,
        extra={"build_number": failed_build.number, "commit": failed_build.commit},
    )
    return failed_build
