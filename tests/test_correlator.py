"""실패 빌드 매칭 테스트."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from fix_build_trigger.correlator import (
    find_failed_build_for_branch,
    pipeline_slug_for_repo,
    select_failed_build,
)
from fix_build_trigger.errors import UpstreamError
from fix_build_trigger.models import FailedBuild


def _build(number: int, commit: str) -> FailedBuild:
    return FailedBuild(
        number=number,
        web_url=f"https://buildkite.com/acme/widgets/builds/{number}",
        state="failed",
        commit=commit,
    )


BUILDS = [_build(30, "ccc333"), _build(20, "abc123"), _build(10, "abc123")]


class TestSelectFailedBuild:
    def test_first_exact_match(self) -> None:
        assert select_failed_build(BUILDS, "abc123") is BUILDS[1]

    def test_no_match_is_not_found_even_if_list_non_empty(self) -> None:
        assert select_failed_build(BUILDS, "def456") is None

    @pytest.mark.parametrize("target", ["abc", "ABC123", "abc123 "])
    def test_no_short_or_case_insensitive_match(self, target: str) -> None:
        assert select_failed_build(BUILDS, target) is None

    def test_no_target_returns_first(self) -> None:
        assert select_failed_build(BUILDS) is BUILDS[0]

    def test_no_target_empty_list(self) -> None:
        assert select_failed_build([]) is None

    def test_target_empty_list(self) -> None:
        assert select_failed_build([], "abc123") is None


class TestPipelineSlug:
    @pytest.mark.parametrize(
        ("repo", "slug"),
        [("widgets", "widgets"), ("widgets.js", "widgets-dot-js"), ("a.b.c", "a-dot-b-dot-c")],
    )
    def test_dots_replaced(self, repo: str, slug: str) -> None:
        assert pipeline_slug_for_repo(repo) == slug


class TestFindFailedBuildForBranch:
    def test_passes_identity_and_selects(self) -> None:
        client = MagicMock()
        client.list_failed_builds.return_value = BUILDS

        result = find_failed_build_for_branch(client, "feature-x", "acme", "widgets", "abc123")

        assert result is BUILDS[1]
        client.list_failed_builds.assert_called_once_with("acme", "widgets", "feature-x")

    def test_not_found(self) -> None:
        client = MagicMock()
        client.list_failed_builds.return_value = BUILDS

        assert find_failed_build_for_branch(client, "feature-x", "acme", "widgets", "def456") is None

    def test_without_target_commit(self) -> None:
        client = MagicMock()
        client.list_failed_builds.return_value = BUILDS

        assert find_failed_build_for_branch(client, "feature-x", "acme", "widgets") is BUILDS[0]

    def test_upstream_error_propagates(self) -> None:
        client = MagicMock()
        client.list_failed_builds.side_effect = UpstreamError("Buildkite", 500, "Internal Server Error")

        with pytest.raises(UpstreamError, match="500"):
            find_failed_build_for_branch(client, "feature-x", "acme", "widgets", "abc123")
