"""Tests for the JSON, Markdown and compact renderers."""

import json
from dataclasses import replace

import pytest

from repo_context.models import (
    ConventionsInfo,
    DependenciesInfo,
    HotPath,
    RecentChanges,
    RepoContext,
    StackInfo,
    StructureInfo,
)
from repo_context.reporter import to_compact, to_json, to_markdown


@pytest.fixture
def context():
    return RepoContext(
        repo="my-app",
        generated="2024-01-01T00:00:00.000Z",
        stack=StackInfo(
            languages=("TypeScript",),
            frameworks=("Next.js",),
            runtime="Node 20",
            package_manager="pnpm",
            test_framework="Vitest",
            ci="GitHub Actions",
        ),
        structure=StructureInfo(
            entry_points=("src/index.ts",),
            config_files=("tsconfig.json",),
            test_dirs=("__tests__",),
            total_files=42,
            total_lines=1500,
        ),
        conventions=ConventionsInfo("conventional", 0.9, ("feat", "fix")),
        hot_paths=(HotPath("src/index.ts", 10), HotPath("src/utils.ts", 5)),
        recent_changes=RecentChanges(
            last_commit="feat: add login",
            last_commit_sha="abc123",
            last_commit_date="2024-01-01 12:00:00 +0000",
            active_branches=("feat/auth",),
            open_prs=3,
            open_issues=7,
        ),
        dependencies=DependenciesInfo(direct=5, dev=10, notable=("next", "react")),
        agents_md="AI agents: follow project conventions.",
    )


class TestToJson:
    def test_round_trips_top_level_keys(self, context):
        parsed = json.loads(to_json(context))
        assert parsed["version"] == "1.0"
        assert parsed["repo"] == "my-app"
        assert parsed["stack"]["languages"] == ["TypeScript"]
        assert parsed["hot_paths"][0] == {"file": "src/index.ts", "commits": 10}
        assert parsed["recent_changes"]["open_prs"] == 3

    def test_trailing_newline(self, context):
        assert to_json(context).endswith("\n")

    def test_nulls_preserved(self, context):
        ctx = replace(context, stack=StackInfo(languages=("Go",)))
        parsed = json.loads(to_json(ctx))
        assert parsed["stack"]["runtime"] is None
        assert parsed["stack"]["ci"] is None


class TestToMarkdown:
    def test_sections(self, context):
        md = to_markdown(context)
        assert md.startswith("# Repository Context")
        for section in ("Stack", "Structure", "Conventions", "Hot Paths", "Recent Changes", "Dependencies", "Agent Notes"):
            assert f"## {section}" in md
        assert md.endswith("\n")

    def test_hot_paths_window(self, context):
        md = to_markdown(context)
        assert "- src/index.ts (10 commits/30d)" in md
        md = to_markdown(replace(context, hot_paths_window_days=7))
        assert "- src/utils.ts (5 commits/7d)" in md

    def test_empty_hot_paths(self, context):
        assert "## Hot Paths\n- None\n" in to_markdown(replace(context, hot_paths=()))

    def test_open_counts_only_when_known(self, context):
        md = to_markdown(context)
        assert "Open PRs**: 3" in md
        assert "Open Issues**: 7" in md
        unknown = replace(context, recent_changes=RecentChanges(last_commit="x"))
        md = to_markdown(unknown)
        assert "Open PRs" not in md
        assert "Open Issues" not in md

    def test_unknown_stack_fields(self, context):
        md = to_markdown(replace(context, stack=StackInfo()))
        assert "- **Languages**: Unknown" in md
        assert "- **Runtime**: Unknown" in md
        assert "- **Frameworks**: None" in md


class TestToCompact:
    def test_single_line(self, context):
        assert "\n" not in to_compact(context)

    def test_contents(self, context):
        result = to_compact(context)
        assert "my-app" in result
        assert "TypeScript" in result
        assert "Next.js" in result
        assert "42 files" in result
        assert "1500 lines" in result
        assert "src/index.ts" in result
        assert "1 active branch" in result
        assert "3 open PRs" in result
        assert "7 open issues" in result

    def test_no_hot_paths(self, context):
        assert "N/A" in to_compact(replace(context, hot_paths=()))

    def test_unknown_counts_omitted(self, context):
        result = to_compact(replace(context, recent_changes=RecentChanges(active_branches=("a", "b"))))
        assert "open PRs" not in result
        assert "open issues" not in result
        assert "2 active branches" in result
