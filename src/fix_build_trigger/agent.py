"""buildkite-agent CLI 래퍼: meta-data 조회/기록, pipeline upload."""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Mapping

from fix_build_trigger.errors import BuildkiteAgentError

logger = logging.getLogger(__name__)


class BuildkiteAgent:
    """buildkite-agent CLI를 subprocess로 호출한다."""

    def __init__(self, executable: str = "buildkite-agent", *, timeout_sec: float = 60.0) -> None:
        self._executable = executable
        self._timeout_sec = timeout_sec

    def _run(
        self,
        *args: str,
        input_text: str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> str:
        cmd = [self._executable, *args]
        try:
            result = subprocess.run(
                cmd,
                input=input_text,
                capture_output=True,
                text=True,
                check=True,
                timeout=self._timeout_sec,
                env=dict(env) if env is not None else None,
            )
        except FileNotFoundError as exc:
            raise BuildkiteAgentError(f"{self._executable} is not installed or not in PATH") from exc
        except subprocess.CalledProcessError as exc:
            raise BuildkiteAgentError(
                f"{self._executable} {' '.join(args[:2])} failed ({exc.returncode}): {exc.stderr}"
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise BuildkiteAgentError(
                f"{self._executable} {' '.join(args[:2])} timed out after {self._timeout_sec}s"
            ) from exc
        return result.stdout

    def meta_data_get(self, key: str) -> str:
        """`buildkite-agent meta-data get <key>` 결과 (앞뒤 공백 제거)."""
        return self._run("meta-data", "get", key).strip()

    def meta_data_set(self, key: str, value: str) -> None:
        """`buildkite-agent meta-data set <key> <value>`."""
        self._run("meta-data", "set", key, value)

    def pipeline_upload(self, document: str, *, env: Mapping[str, str] | None = None) -> str:
        """`buildkite-agent pipeline upload`, stdin으로 YAML 전달.

        env는 현재 프로세스 환경변수에 덧붙여 자식 프로세스에만 전달한다.
        os.environ 자체는 변경하지 않는다.
        """
        child_env = {**os.environ, **env} if env else None
        output = self._run("pipeline", "upload", input_text=document, env=child_env)
        logger.info("Pipeline uploaded")
        return output
