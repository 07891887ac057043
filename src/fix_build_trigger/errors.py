"""fix-build 트리거 예외 계층.

모든 치명적 오류는 FixBuildTriggerError를 상속하며, CLI 최상단에서 잡아 exit 1로 종료한다.
정상 종료 분기(라벨 불일치, 빌드 없음 등)는 예외가 아닌 결과 객체로 표현한다.
"""

from __future__ import annotations


class FixBuildTriggerError(RuntimeError):
    """fix-build 트리거 실행 실패."""


class MalformedPayload(FixBuildTriggerError):
    """webhook payload가 비어 있거나 JSON 객체가 아니거나 필수 필드가 없음."""


class AuthenticationMissing(FixBuildTriggerError):
    """필수 API 토큰 환경변수가 설정되지 않음."""

    def __init__(self, env_var: str):
        self.env_var = env_var
        super().__init__(f"환경변수 {env_var}이 설정되지 않았습니다")


class UpstreamError(FixBuildTriggerError):
    """GitHub/Buildkite API 호출 실패 (non-2xx 응답 또는 전송 오류)."""

    def __init__(self, service: str, status_code: int, message: str):
        self.service = service
        self.status_code = status_code
        super().__init__(f"{service} API error: {status_code} {message}".rstrip())


class BuildkiteAgentError(FixBuildTriggerError):
    """buildkite-agent CLI 실행 실패."""
