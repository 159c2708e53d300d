"""Tests for history mining."""

from unittest.mock import patch

import pytest

from repo_context.history import (
    get_conventions,
    get_hot_paths,
    get_recent_changes,
    parse_branches,
    parse_conventions,
    parse_hot_paths,
)
from repo_context.models import HotPath


class TestParseHotPaths:
    def test_empty(self):
        assert parse_hot_paths("") == []

    def test_counts_and_sorts(self):
        log = "\n".join(["src/index.ts", "src/index.ts", "src/utils.ts", "src/index.ts"])
        assert parse_hot_paths(log) == [
            HotPath(file="src/index.ts", commits=3),
            HotPath(file="src/utils.ts", commits=1),
        ]

    def test_ties_keep_encounter_order(self):
        log = "b.ts\na.ts\nc.ts\na.ts\nb.ts"
        assert [p.file for p in parse_hot_paths(log)] == ["b.ts", "a.ts", "c.ts"]

    def test_ignores_merge_lines(self):
        log = "merge branch 'main'\nsrc/index.ts\nsrc/index.ts"
        result = parse_hot_paths(log)
        assert result == [HotPath(file="src/index.ts", commits=2)]

    def test_merge_filter_is_case_sensitive(self):
        result = parse_hot_paths("Merge branch 'main'\nmerge x")
        assert [p.file for p in result] == ["Merge branch 'main'"]

    def test_blank_and_whitespace(self):
        assert parse_hot_paths("\n  src/app.ts  \n\n src/app.ts\n\n") == [HotPath(file="src/app.ts", commits=2)]

    def test_only_merge_and_blank_lines(self):
        assert parse_hot_paths("\n\nmerge a\n   \n") == []

    def test_top_n(self):
        log = "\n".join(f"file{i}.ts" for i in range(15))
        assert len(parse_hot_paths(log, 5)) == 5
        assert len(parse_hot_paths(log)) == 10


class TestGetHotPaths:
    @patch("repo_context.history.try_git", return_value="")
    def test_empty_output(self, mock_git):
        assert get_hot_paths("/fake/repo") == []

    @patch("repo_context.history.try_git", return_value="src/index.ts\nsrc/index.ts\nsrc/utils.ts")
    def test_window_argument(self, mock_git):
        result = get_hot_paths("/fake/repo", days=7, top_n=1)
        assert result == [HotPath(file="src/index.ts", commits=2)]
        args = mock_git.call_args[0][1]
        assert "--since=7.days.ago" in args
        assert "--name-only" in args

    def test_real_repository(self, git_repo):
        git_repo.commit("feat: one", {"src/a.ts": "1"})
        git_repo.commit("fix: two", {"src/a.ts": "2", "src/b.ts": "1"})
        git_repo.commit("chore: three", {"src/a.ts": "3"})
        assert get_hot_paths(git_repo.root) == [
            HotPath(file="src/a.ts", commits=3),
            HotPath(file="src/b.ts", commits=1),
        ]

    def test_non_ascii_paths_are_not_quoted(self, git_repo):
        git_repo.commit("feat: one", {"src/café.ts": "1"})
        git_repo.commit("fix: two", {"src/café.ts": "2"})
        assert get_hot_paths(git_repo.root) == [HotPath(file="src/café.ts", commits=2)]


class TestParseConventions:
    def test_no_messages(self):
        result = parse_conventions([])
        assert result.commit_pattern == "unknown"
        assert result.conventional_commit_ratio == 0
        assert result.common_types == ()

    def test_blank_messages_only(self):
        assert parse_conventions(["", "   "]).commit_pattern == "unknown"

    def test_conventional(self):
        result = parse_conventions(["feat: add login", "fix: correct typo", "feat(auth): update token", "chore: bump deps"])
        assert result.commit_pattern == "conventional"
        assert result.conventional_commit_ratio == 1.0
        assert result.common_types[0] == "feat"

    def test_non_conventional(self):
        result = parse_conventions(["update stuff", "fix things", "some work", "cleaning up"])
        assert result.commit_pattern == "non-conventional"
        assert result.conventional_commit_ratio == 0
        assert result.common_types == ()

    def test_typed_but_outside_closed_set(self):
        result = parse_conventions(["docs: readme", "refactor(core): split", "feat: x"])
        assert result.common_types == ("docs", "refactor", "feat")
        assert result.conventional_commit_ratio == 0.33
        assert result.commit_pattern == "non-conventional"

    def test_ratio_rounding(self):
        messages = ["feat: a"] * 2 + ["wip"] * 1
        assert parse_conventions(messages).conventional_commit_ratio == 0.67
        messages = ["fix: a"] + ["wip"] * 7
        assert parse_conventions(messages).conventional_commit_ratio == 0.13

    def test_threshold_is_inclusive(self):
        result = parse_conventions(["feat: a", "wip"])
        assert result.conventional_commit_ratio == 0.5
        assert result.commit_pattern == "conventional"

    def test_top_three_ties_first_seen(self):
        result = parse_conventions(["feat: a", "feat: b", "feat: c", "fix: x", "fix: y", "chore: z", "docs: d"])
        assert result.common_types == ("feat", "fix", "chore")

    def test_ratio_monotonic(self):
        messages = ["wip", "docs: x", "random"]
        previous = parse_conventions(messages).conventional_commit_ratio
        for _ in range(5):
            messages.append("fix: more")
            current = parse_conventions(messages).conventional_commit_ratio
            assert current >= previous
            previous = current

    def test_colon_requires_whitespace(self):
        assert parse_conventions(["feat:nospace"]).common_types == ()

    def test_type_must_be_ascii_word(self):
        result = parse_conventions(["fé: accents", "fix_up: ok"])
        assert result.common_types == ("fix_up",)


class TestGetConventions:
    @patch("repo_context.history.try_git", return_value="")
    def test_empty_history(self, mock_git):
        result = get_conventions("/fake/repo")
        assert result.to_dict() == {
            "commit_pattern": "unknown",
            "conventional_commit_ratio": 0,
            "common_types": [],
        }

    @patch("repo_context.history.try_git", return_value="feat: a\nfix: b")
    def test_since_and_limit(self, mock_git):
        get_conventions("/fake/repo", since="2024-01-01", limit=5)
        args = mock_git.call_args[0][1]
        assert args == ["log", "--since=2024-01-01", "-5", "--pretty=format:%s"]


class TestRecentChanges:
    def test_parse_branches(self):
        output = "\n".join([
            "  origin/HEAD -> origin/main",
            "  origin/main",
            "  origin/master",
            "  origin/feat/auth",
            "  origin/fix/bug",
            "",
        ])
        assert parse_branches(output) == ["feat/auth", "fix/bug"]

    def test_branch_cap(self):
        output = "\n".join(f"  origin/b{i}" for i in range(8))
        assert parse_branches(output) == [f"b{i}" for i in range(5)]

    @patch("repo_context.history.get_open_issue_count", return_value=None)
    @patch("repo_context.history.get_open_pr_count", return_value=4)
    @patch("repo_context.history.try_git")
    def test_last_commit(self, mock_git, mock_prs, mock_issues):
        def fake_git(repo_path, args, timeout=None):
            if args[0] == "log":
                return "feat: a | b|abc123|2024-01-01 12:00:00 +0000"
            return "  origin/feat/x"

        mock_git.side_effect = fake_git
        changes = get_recent_changes("/fake/repo")
        assert changes.last_commit == "feat: a | b"
        assert changes.last_commit_sha == "abc123"
        assert changes.last_commit_date == "2024-01-01 12:00:00 +0000"
        assert changes.active_branches == ("feat/x",)
        assert changes.open_prs == 4
        assert changes.open_issues is None

    @patch("repo_context.history.get_open_issue_count", return_value=None)
    @patch("repo_context.history.get_open_pr_count", return_value=None)
    @patch("repo_context.history.try_git", return_value="")
    def test_not_a_repository(self, mock_git, mock_prs, mock_issues):
        changes = get_recent_changes("/fake/repo")
        assert changes.last_commit == ""
        assert changes.last_commit_sha == ""
        assert changes.active_branches == ()
        assert changes.open_prs is None


@pytest.mark.parametrize("days", [1, 30, 365])
def test_hot_paths_never_zero_counts(days):
    with patch("repo_context.history.try_git", return_value="a\n\nb\nmerge c\na"):
        assert all(p.commits >= 1 for p in get_hot_paths("/x", days=days))
