"""click CLI 엔트리포인트.

fix-build-trigger trigger --json-log
fix-build-trigger trigger --payload-file webhook.json --dry-run
fix-build-trigger render-pipeline --build-url ... --pull-request-url ...
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

import click

from fix_build_trigger.agent import BuildkiteAgent
from fix_build_trigger.config import load_config
from fix_build_trigger.logging_config import setup_logging
from fix_build_trigger.pipeline import generate_fix_build_pipeline
from fix_build_trigger.trigger import run_fix_build_trigger

logger = logging.getLogger(__name__)

_CONFIG_OPTION = click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=True, path_type=Path),
    help="설정 파일 경로 (기본: 프로젝트 루트 config.yaml)",
)


@click.group()
@click.version_option(version="0.1.0", prog_name="fix-build-trigger")
def main() -> None:
    """fix-build 라벨이 붙은 PR의 실패 빌드를 찾아 수정 파이프라인을 업로드합니다."""


@main.command()
@_CONFIG_OPTION
@click.option(
    "--payload-file",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="webhook payload JSON 파일 (기본: buildkite-agent meta-data에서 조회)",
)
@click.option("--dry-run", is_flag=True, help="meta-data 기록/PR 댓글/pipeline upload 없이 YAML만 출력")
@click.option("--json-log/--no-json-log", default=True, help="JSON 로그 포맷 (기본: 활성)")
def trigger(
    config_path: Path | None,
    payload_file: Path | None,
    dry_run: bool,
    json_log: bool,
) -> None:
    """webhook payload를 처리하고 조건이 맞으면 fix-build 파이프라인을 업로드합니다.

    정상 종료(라벨 불일치, 빌드 없음 포함)는 exit 0, 오류는 exit 1.
    """
    setup_logging(json_format=json_log)

    try:
        config = load_config(config_path)
        agent = BuildkiteAgent()

        if payload_file is not None:
            raw_payload = payload_file.read_text(encoding="utf-8")
        else:
            raw_payload = agent.meta_data_get(config.webhook_metadata_key)

        outcome = run_fix_build_trigger(
            raw_payload,
            config,
            agent=agent,
            agent_build_url=os.environ.get("BUILDKITE_BUILD_URL", ""),
            dry_run=dry_run,
        )
    except Exception as exc:
        logger.error("Error: %s", exc, exc_info=True, extra={"event_code": "FATAL"})
        sys.exit(1)

    if outcome.triggered:
        if dry_run and outcome.pipeline_yaml:
            click.echo(outcome.pipeline_yaml, nl=False)
        logger.info("Fix-build pipeline %s", "uploaded" if outcome.uploaded else "generated",
                    extra={"event_code": "TRIGGERED"})
    else:
        logger.info("Nothing to do (%s)", outcome.reason, extra={"reason": outcome.reason})


@main.command("render-pipeline")
@_CONFIG_OPTION
@click.option("--build-url", required=True, help="실패한 빌드 URL")
@click.option("--pull-request-url", required=True, help="PR URL")
@click.option(
    "--agent-build-url",
    default=None,
    help="트리거 빌드 URL (기본: $BUILDKITE_BUILD_URL)",
)
def render_pipeline(
    config_path: Path | None,
    build_url: str,
    pull_request_url: str,
    agent_build_url: str | None,
) -> None:
    """fix-build 파이프라인 YAML을 stdout으로 출력합니다."""
    config = load_config(config_path)
    if agent_build_url is None:
        agent_build_url = os.environ.get("BUILDKITE_BUILD_URL", "")

    try:
        document = generate_fix_build_pipeline(build_url, pull_request_url, agent_build_url, config.pipeline)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc

    click.echo(document, nl=False)
