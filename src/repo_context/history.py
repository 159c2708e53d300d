"""History mining: hot paths, commit conventions and recent activity.

Every git query goes through ``try_git``, so a missing binary or a
directory that is not a work tree yields empty results rather than errors.
"""

from __future__ import annotations

import re
from collections import Counter
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path

from .config import DEFAULT_CONVENTION_LIMIT, DEFAULT_HOT_DAYS, DEFAULT_TOP_N
from .github import get_open_issue_count, get_open_pr_count
from .models import ConventionsInfo, HotPath, RecentChanges
from .process import DEFAULT_TIMEOUT, try_git

MERGE_PREFIX = "merge "

COMMIT_TYPE = re.compile(r"^([A-Za-z0-9_]+)(\(.+\))?:\s+")
CONVENTIONAL_COMMIT = re.compile(r"^(feat|fix|chore)(\(.+\))?:\s+.+")

CONVENTIONAL_THRESHOLD = 0.5
COMMON_TYPES_LIMIT = 3

PRIMARY_BRANCHES = frozenset({"main", "master", "HEAD -> origin/main", "HEAD -> origin/master"})
REMOTE_PREFIX = "origin/"
MAX_ACTIVE_BRANCHES = 5


def parse_hot_paths(log_output: str, top_n: int = DEFAULT_TOP_N) -> list[HotPath]:
    """Count file occurrences in ``git log --name-only`` output."""
    counts: Counter = Counter()
    for raw_line in log_output.split("\n"):
        line = raw_line.strip()
        if not line or line.startswith(MERGE_PREFIX):
            continue
        counts[line] += 1

    ranked = sorted(counts.items(), key=lambda x: -x[1])
    return [HotPath(file=f, commits=n) for f, n in ranked[:top_n]]


def get_hot_paths(
    repo_path: str | Path,
    days: int = DEFAULT_HOT_DAYS,
    top_n: int = DEFAULT_TOP_N,
    timeout: float | None = DEFAULT_TIMEOUT,
) -> list[HotPath]:
    """Files touched by the most commits in the last ``days`` days."""
    output = try_git(
        repo_path,
        ["log", f"--since={days}.days.ago", "--find-renames", "--name-only", "--pretty=format:"],
        timeout=timeout,
    )
    if not output:
        return []
    return parse_hot_paths(output, top_n)


def _round_ratio(value: float) -> float:
    # half-up, so 0.125 -> 0.13
    return float(Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def parse_conventions(messages: list[str]) -> ConventionsInfo:
    """Classify commit subjects by conventional-commit usage."""
    messages = [m.strip() for m in messages if m.strip()]
    if not messages:
        return ConventionsInfo(commit_pattern="unknown", conventional_commit_ratio=0.0, common_types=())

    conventional = 0
    type_counts: Counter = Counter()
    for msg in messages:
        match = COMMIT_TYPE.match(msg)
        if not match:
            continue
        type_counts[match.group(1)] += 1
        if CONVENTIONAL_COMMIT.match(msg):
            conventional += 1

    ratio = _round_ratio(conventional / len(messages))
    common = sorted(type_counts.items(), key=lambda x: -x[1])[:COMMON_TYPES_LIMIT]

    return ConventionsInfo(
        commit_pattern="conventional" if ratio >= CONVENTIONAL_THRESHOLD else "non-conventional",
        conventional_commit_ratio=ratio,
        common_types=tuple(t for t, _ in common),
    )


def get_conventions(
    repo_path: str | Path,
    since: str | None = None,
    limit: int = DEFAULT_CONVENTION_LIMIT,
    timeout: float | None = DEFAULT_TIMEOUT,
) -> ConventionsInfo:
    """Inspect the last ``limit`` commit subjects, optionally since a date."""
    args = ["log", f"-{limit}", "--pretty=format:%s"]
    if since:
        args.insert(1, f"--since={since}")
    output = try_git(repo_path, args, timeout=timeout)
    return parse_conventions(output.split("\n"))


def parse_branches(output: str) -> list[str]:
    """Remote branch names without the remote prefix or primary aliases."""
    branches = []
    for raw in output.split("\n"):
        name = raw.lstrip()
        if name.startswith(REMOTE_PREFIX):
            name = name[len(REMOTE_PREFIX):]
        if not name or name in PRIMARY_BRANCHES:
            continue
        branches.append(name)
    return branches[:MAX_ACTIVE_BRANCHES]


def get_recent_changes(
    repo_path: str | Path,
    since: str | None = None,
    timeout: float | None = DEFAULT_TIMEOUT,
    github_api: bool = True,
) -> RecentChanges:
    """Latest commit, active remote branches and open PR/issue counts."""
    args = ["log", "-1", "--pretty=format:%s|%H|%ci"]
    if since:
        args.insert(1, f"--since={since}")
    line = try_git(repo_path, args, timeout=timeout)

    message = sha = date = ""
    if line:
        # The subject may itself contain "|"; hash and date never do.
        parts = line.rsplit("|", 2)
        if len(parts) == 3:
            message, sha, date = parts
        else:
            message = parts[0]

    return RecentChanges(
        last_commit=message,
        last_commit_sha=sha,
        last_commit_date=date,
        active_branches=tuple(parse_branches(try_git(repo_path, ["branch", "-r"], timeout=timeout))),
        open_prs=get_open_pr_count(repo_path, timeout=timeout, use_api=github_api),
        open_issues=get_open_issue_count(repo_path, timeout=timeout, use_api=github_api),
    )
