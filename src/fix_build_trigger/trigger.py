"""fix-build 라벨 webhook 처리 흐름.

Task 흐름:
  parse → classify → PR head 커밋 조회 → 실패 빌드 매칭
  → 확인 댓글 (best-effort) → pipeline 생성 → pipeline upload

정상 종료 분기는 TriggerOutcome(status="stopped")로 반환하고,
MalformedPayload / AuthenticationMissing / UpstreamError / BuildkiteAgentError는 그대로 전파한다.
"""

from __future__ import annotations

import logging
from contextlib import ExitStack
from dataclasses import dataclass
from typing import Literal

from fix_build_trigger.agent import BuildkiteAgent
from fix_build_trigger.buildkite_api import BuildkiteApiClient
from fix_build_trigger.config import AppConfig
from fix_build_trigger.correlator import find_failed_build_for_branch, pipeline_slug_for_repo
from fix_build_trigger.github_api import GitHubApiClient
from fix_build_trigger.models import FailedBuild, WebhookEvent
from fix_build_trigger.notify import NotifyResult, post_acknowledgement
from fix_build_trigger.pipeline import ProvenanceContext, generate_fix_build_pipeline
from fix_build_trigger.webhook import classify_event, parse_payload

logger = logging.getLogger(__name__)

HEAD_UNRESOLVED = "head_unresolved"
NO_MATCHING_BUILD = "no_matching_build"


@dataclass
class TriggerOutcome:
    """한 번의 webhook 처리 결과."""

    status: Literal["stopped", "triggered"]
    reason: str | None = None
    event: WebhookEvent | None = None
    head_commit: str | None = None
    failed_build: FailedBuild | None = None
    context: ProvenanceContext | None = None
    notify: NotifyResult | None = None
    pipeline_yaml: str | None = None
    uploaded: bool = False

    @property
    def triggered(self) -> bool:
        return self.status == "triggered"


def pull_request_web_url(web_url: str, owner: str, repo: str, pr_number: int) -> str:
    """PR 웹 URL (예: https://github.com/acme/widgets/pull/42)."""
    return f"{web_url.rstrip('/')}/{owner}/{repo}/pull/{pr_number}"


def _stop(
    reason: str,
    message: str,
    *,
    event: WebhookEvent | None = None,
    head_commit: str | None = None,
) -> TriggerOutcome:
    logger.info(message, extra={"event_code": "SOFT_STOP", "reason": reason})
    return TriggerOutcome(status="stopped", reason=reason, event=event, head_commit=head_commit)


def run_fix_build_trigger(
    raw_payload: str | bytes | None,
    config: AppConfig,
    *,
    agent: BuildkiteAgent | None = None,
    github_client: GitHubApiClient | None = None,
    buildkite_client: BuildkiteApiClient | None = None,
    agent_build_url: str = "",
    dry_run: bool = False,
) -> TriggerOutcome:
    """webhook payload 하나를 처리한다.

    Args:
        raw_payload: staging된 webhook JSON 원문
        config: 애플리케이션 설정
        agent: buildkite-agent 래퍼 (meta-data 기록, pipeline upload). dry_run이면 생략 가능
        github_client: 미지정 시 config.github로 생성 (GITHUB_TOKEN 필요)
        buildkite_client: 미지정 시 빌드 매칭 직전에 config.buildkite로 생성 (BUILDKITE_API_TOKEN 필요)
        agent_build_url: 현재(트리거) 빌드 URL, 비어 있어도 됨
        dry_run: True이면 meta-data 기록, PR 코멘트, pipeline upload를 생략

    Returns:
        TriggerOutcome
    """
    if agent is None and not dry_run:
        raise ValueError("agent is required unless dry_run is set")

    payload = parse_payload(raw_payload)

    record_metadata = None if dry_run or agent is None else agent.meta_data_set
    classification = classify_event(
        payload,
        trigger_label=config.trigger_label,
        record_metadata=record_metadata,
    )
    if not classification.should_continue:
        return TriggerOutcome(status="stopped", reason=classification.stop_reason)

    event = classification.event
    assert event is not None
    owner = event.repository.owner.login
    repo = event.repository.name
    pr_number = event.pull_request.number
    branch = event.pull_request.head.ref

    logger.info("Label is '%s', checking for failed builds...", config.trigger_label)

    with ExitStack() as stack:
        if github_client is None:
            github_client = stack.enter_context(GitHubApiClient(config.github))

        head_commit = github_client.get_pull_request_head(owner, repo, pr_number)
        if not head_commit:
            return _stop(
                HEAD_UNRESOLVED,
                "Could not get PR head commit, skipping pipeline upload",
                event=event,
            )

        if buildkite_client is None:
            buildkite_client = stack.enter_context(BuildkiteApiClient(config.buildkite))

        failed_build = find_failed_build_for_branch(
            buildkite_client,
            branch,
            owner,
            pipeline_slug_for_repo(repo),
            head_commit,
        )
        if failed_build is None:
            return _stop(
                NO_MATCHING_BUILD,
                "No failed builds found for PR head commit, skipping pipeline upload",
                event=event,
                head_commit=head_commit,
            )

        logger.info(
            "Found failed build for PR head commit, posting acknowledgement and uploading fix-build pipeline",
            extra={"build_number": failed_build.number, "pr_number": pr_number},
        )

        pull_request_url = pull_request_web_url(config.github.web_url, owner, repo, pr_number)
        if dry_run:
            logger.info("[DRY RUN] Would post acknowledgement comment on PR #%d", pr_number)
            notify_result = None
        else:
            notify_result = post_acknowledgement(github_client, owner, repo, pr_number, agent_build_url)

    context = ProvenanceContext.from_failed_build(
        failed_build,
        pipeline_slug=repo,
        pull_request_url=pull_request_url,
        agent_build_url=agent_build_url,
    )
    pipeline_yaml = generate_fix_build_pipeline(
        context.build_url,
        context.pull_request_url,
        context.agent_build_url,
        config.pipeline,
    )

    outcome = TriggerOutcome(
        status="triggered",
        event=event,
        head_commit=head_commit,
        failed_build=failed_build,
        context=context,
        notify=notify_result,
        pipeline_yaml=pipeline_yaml,
    )

    if dry_run:
        logger.info("[DRY RUN] Would upload fix-build pipeline for build #%d", failed_build.number)
        return outcome

    assert agent is not None
    agent.pipeline_upload(pipeline_yaml, env=context.as_env())
    outcome.uploaded = True
    return outcome
