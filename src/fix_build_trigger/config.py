"""YAML 설정 로딩 + Pydantic 모델."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

_DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "config.yaml"


# ── 설정 모델 ──────────────────────────────────────────


class GitHubApiConfig(BaseModel):
    base_url: str = "https://api.github.com"
    web_url: str = "https://github.com"
    token_env_var: str = "GITHUB_TOKEN"
    request_timeout_sec: int = 30


class BuildkiteApiConfig(BaseModel):
    base_url: str = "https://api.buildkite.com/v2"
    token_env_var: str = "BUILDKITE_API_TOKEN"
    request_timeout_sec: int = 30
    per_page: int = Field(default=10, ge=1, le=100)


class PipelineConfig(BaseModel):
    """업로드할 fix-build 스텝 설정.

    환경변수 allow-list와 secrets 바인딩은 설정이 아닌 pipeline 모듈의 상수다.
    """

    plugin: str = "docker-compose#v5.11.0"
    run_service: str = "buildsworth"
    build_context: str = "."
    dockerfile: str = "Dockerfile.agent"
    script: str = "./agent.sh"
    prompt: str = "prompts/fix-build.md"
    label: str = ":buildkite: Fixing the build"
    depends_on: str = "process-event"


class AppConfig(BaseModel):
    """애플리케이션 전체 설정."""

    trigger_label: str = "fix-build"
    webhook_metadata_key: str = "buildkite:webhook"
    github: GitHubApiConfig = Field(default_factory=GitHubApiConfig)
    buildkite: BuildkiteApiConfig = Field(default_factory=BuildkiteApiConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)

    @field_validator("trigger_label")
    @classmethod
    def trigger_label_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("trigger_label must not be blank")
        return v


# ── 로딩 ───────────────────────────────────────────────


def load_config(path: Path | None = None) -> AppConfig:
    """YAML 설정 파일을 로딩하고 Pydantic 모델로 검증한다.

    환경변수 우선순위: 시스템 환경변수 > .env 파일 > config.yaml 기본값
    경로를 지정하지 않았고 기본 config.yaml도 없으면 모델 기본값을 사용한다.
    """
    config_path = path or _DEFAULT_CONFIG_PATH

    # .env 파일 로딩: config.yaml과 같은 디렉터리의 .env를 탐색
    dotenv_path = config_path.parent / ".env"
    load_dotenv(dotenv_path=dotenv_path, override=False)

    if path is None and not config_path.exists():
        raw: dict | None = {}
    else:
        with open(config_path) as f:
            raw = yaml.safe_load(f)

        if raw is None:
            raise ValueError(f"Empty config file: {config_path}")

    # 환경변수 오버라이드
    if label := os.environ.get("FIX_BUILD_TRIGGER_LABEL"):
        raw["trigger_label"] = label

    return AppConfig.model_validate(raw)
