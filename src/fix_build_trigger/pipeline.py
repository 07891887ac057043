"""fix-build 파이프라인 YAML 생성.

동일 입력 → 동일 출력 (키 순서 고정). 원격 agent 컨테이너로 전달되는 환경변수는
ENVIRONMENT_ALLOWLIST에 있는 이름으로만 한정한다.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import yaml

from fix_build_trigger.config import PipelineConfig
from fix_build_trigger.models import FailedBuild

# 논리 이름 → Buildkite secrets 저장소 키
SECRET_BINDINGS: dict[str, str] = {
    "LINEAR_API_TOKEN": "LINEAR_API_TOKEN",
    "GITHUB_TOKEN": "GITHUB_TOKEN",
    "BUILDKITE_API_TOKEN": "API_TOKEN_BUILDKITE",
}

BUILDKITE_AGENT_VARIABLES = (
    "BUILDKITE",
    "BUILDKITE_AGENT_ENDPOINT",
    "BUILDKITE_AGENT_ACCESS_TOKEN",
    "BUILDKITE_BUILD_URL",
)

PROVENANCE_VARIABLES = (
    "WEBHOOK_BUILD_STATE",
    "WEBHOOK_BUILD_NUMBER",
    "WEBHOOK_BUILD_URL",
    "WEBHOOK_PIPELINE_SLUG",
    "WEBHOOK_PULL_REQUEST_URL",
)

ENVIRONMENT_ALLOWLIST: tuple[str, ...] = (
    *BUILDKITE_AGENT_VARIABLES,
    *SECRET_BINDINGS,
    *PROVENANCE_VARIABLES,
)


@dataclass(frozen=True)
class ProvenanceContext:
    """실패 빌드/PR/트리거 빌드 출처 정보.

    pipeline upload 프로세스에 WEBHOOK_* 환경변수로 전달된다.
    """

    build_state: str
    build_number: int
    build_url: str
    pipeline_slug: str
    pull_request_url: str
    agent_build_url: str = ""

    @classmethod
    def from_failed_build(
        cls,
        build: FailedBuild,
        *,
        pipeline_slug: str,
        pull_request_url: str,
        agent_build_url: str = "",
    ) -> ProvenanceContext:
        return cls(
            build_state=build.state,
            build_number=build.number,
            build_url=build.web_url,
            pipeline_slug=pipeline_slug,
            pull_request_url=pull_request_url,
            agent_build_url=agent_build_url,
        )

    def as_env(self) -> dict[str, str]:
        """WEBHOOK_* 환경변수 5개."""
        return {
            "WEBHOOK_BUILD_STATE": self.build_state,
            "WEBHOOK_BUILD_NUMBER": str(self.build_number),
            "WEBHOOK_BUILD_URL": self.build_url,
            "WEBHOOK_PIPELINE_SLUG": self.pipeline_slug,
            "WEBHOOK_PULL_REQUEST_URL": self.pull_request_url,
        }


def _build_step(
    failed_build_url: str,
    pull_request_url: str,
    agent_build_url: str,
    config: PipelineConfig,
) -> dict[str, Any]:
    token_args = [
        f"BuildURL={failed_build_url}",
        f"PullRequestURL={pull_request_url}",
        f"AgentBuildURL={agent_build_url}",
    ]
    return {
        "command": f"{config.script} {config.prompt} {' '.join(token_args)}",
        "label": config.label,
        "depends_on": config.depends_on,
        "plugins": [
            {
                config.plugin: {
                    "run": config.run_service,
                    "build": {
                        "context": config.build_context,
                        "dockerfile": config.dockerfile,
                    },
                    "mount-checkout": False,
                    "mount-buildkite-agent": True,
                    "environment": list(ENVIRONMENT_ALLOWLIST),
                },
            },
        ],
    }


def build_fix_build_pipeline(
    failed_build_url: str,
    pull_request_url: str,
    agent_build_url: str,
    config: PipelineConfig | None = None,
) -> dict[str, Any]:
    """pipeline 문서를 dict로 생성한다.

    Raises:
        ValueError: failed_build_url 또는 pull_request_url이 비어 있는 경우
    """
    if not failed_build_url:
        raise ValueError("failed_build_url must not be empty")
    if not pull_request_url:
        raise ValueError("pull_request_url must not be empty")

    config = config or PipelineConfig()
    return {
        "secrets": dict(SECRET_BINDINGS),
        "steps": [_build_step(failed_build_url, pull_request_url, agent_build_url, config)],
    }


def generate_fix_build_pipeline(
    failed_build_url: str,
    pull_request_url: str,
    agent_build_url: str,
    config: PipelineConfig | None = None,
) -> str:
    """`buildkite-agent pipeline upload`에 넘길 YAML을 생성한다."""
    document = build_fix_build_pipeline(failed_build_url, pull_request_url, agent_build_url, config)
    return yaml.safe_dump(document, sort_keys=False, allow_unicode=True, default_flow_style=False)
