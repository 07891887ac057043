"""GitHub webhook / Buildkite 빌드 데이터 모델 (Pydantic)."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Label(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str


class PullRequestHeadRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    ref: str


class PullRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    number: int
    head: PullRequestHeadRef


class Owner(BaseModel):
    model_config = ConfigDict(frozen=True)

    login: str


class Repository(BaseModel):
    model_config = ConfigDict(frozen=True)

    owner: Owner
    name: str


class WebhookEvent(BaseModel):
    """GitHub pull_request webhook payload.

    - action/label은 선택 필드: labeled 이외의 이벤트에는 label이 없다
    - pull_request/repository는 필수 필드: 누락 시 MalformedPayload
    """

    model_config = ConfigDict(frozen=True)

    action: str | None = None
    label: Label | None = None
    pull_request: PullRequest
    repository: Repository

    @property
    def full_repo_name(self) -> str:
        return f"{self.repository.owner.login}/{self.repository.name}"


class FailedBuild(BaseModel):
    """Buildkite 빌드 응답 중 사용하는 필드."""

    model_config = ConfigDict(frozen=True)

    number: int
    web_url: str
    state: str
    commit: str = Field(..., description="빌드 대상 커밋 전체 sha")
