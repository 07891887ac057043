"""공통 fixture."""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any

import pytest
import yaml


@pytest.fixture()
def sample_payload_data() -> dict[str, Any]:
    """fix-build 라벨 webhook payload 샘플."""
    return {
        "action": "labeled",
        "label": {"name": "fix-build", "color": "d73a4a"},
        "pull_request": {
            "number": 42,
            "title": "Add widget sorting",
            "head": {"ref": "feature-x", "sha": "stale-sha-from-delivery"},
        },
        "repository": {
            "owner": {"login": "acme"},
            "name": "widgets",
            "full_name": "acme/widgets",
        },
        "sender": {"login": "octocat"},
    }


@pytest.fixture()
def payload_factory(sample_payload_data: dict[str, Any]):
    """필드를 덮어쓴 payload dict 생성기."""

    def _make(**overrides: Any) -> dict[str, Any]:
        data = copy.deepcopy(sample_payload_data)
        data.update(overrides)
        return data

    return _make


@pytest.fixture()
def sample_build_data() -> dict[str, Any]:
    """Buildkite 실패 빌드 응답 항목 샘플."""
    return {
        "id": "01890000-0000-0000-0000-000000000000",
        "number": 1234,
        "web_url": "https://buildkite.com/acme/widgets/builds/1234",
        "state": "failed",
        "commit": "abc123",
        "branch": "feature-x",
        "message": "Add widget sorting",
    }


@pytest.fixture()
def api_tokens(monkeypatch: pytest.MonkeyPatch) -> None:
    """GitHub/Buildkite 토큰 환경변수 설정."""
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_test_token_12345")
    monkeypatch.setenv("BUILDKITE_API_TOKEN", "bkua_test_token_12345")


@pytest.fixture()
def sample_config_data() -> dict[str, Any]:
    """테스트용 config dict."""
    return {
        "trigger_label": "fix-build",
        "github": {"base_url": "https://api.github.com", "web_url": "https://github.com"},
        "buildkite": {"base_url": "https://api.buildkite.com/v2", "per_page": 10},
        "pipeline": {"plugin": "docker-compose#v5.11.0", "run_service": "buildsworth"},
    }


@pytest.fixture()
def tmp_config_file(tmp_path: Path, sample_config_data: dict[str, Any]) -> Path:
    """임시 YAML 설정 파일."""
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.dump(sample_config_data), encoding="utf-8")
    return config_path


@pytest.fixture(autouse=True)
def _reset_logging():
    """CLI 테스트가 설치한 핸들러를 테스트마다 제거."""
    yield
    logging.getLogger("fix_build_trigger").handlers.clear()
