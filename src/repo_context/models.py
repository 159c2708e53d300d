"""Immutable records produced by the context pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

SNAPSHOT_VERSION = "1.0"

AGENTS_NOTE = (
    "AI coding agents: use existing project patterns, keep changes scoped, "
    "and follow detected test/commit conventions."
)


@dataclass(frozen=True)
class StackInfo:
    """Detected languages, frameworks and tooling."""

    languages: tuple[str, ...] = ()
    frameworks: tuple[str, ...] = ()
    runtime: str | None = None
    package_manager: str | None = None
    test_framework: str | None = None
    ci: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "languages": list(self.languages),
            "frameworks": list(self.frameworks),
            "runtime": self.runtime,
            "package_manager": self.package_manager,
            "test_framework": self.test_framework,
            "ci": self.ci,
        }


@dataclass(frozen=True)
class StructureInfo:
    """Entry points, config files, test directories and size metrics."""

    entry_points: tuple[str, ...] = ()
    config_files: tuple[str, ...] = ()
    test_dirs: tuple[str, ...] = ()
    total_files: int = 0
    total_lines: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "entry_points": list(self.entry_points),
            "config_files": list(self.config_files),
            "test_dirs": list(self.test_dirs),
            "total_files": self.total_files,
            "total_lines": self.total_lines,
        }


@dataclass(frozen=True)
class ConventionsInfo:
    """Commit-message style summary."""

    commit_pattern: str = "unknown"
    conventional_commit_ratio: float = 0
    common_types: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "commit_pattern": self.commit_pattern,
            "conventional_commit_ratio": self.conventional_commit_ratio,
            "common_types": list(self.common_types),
        }


@dataclass(frozen=True)
class HotPath:
    """A file and how many commits touched it inside the window."""

    file: str
    commits: int

    def to_dict(self) -> dict[str, Any]:
        return {"file": self.file, "commits": self.commits}


@dataclass(frozen=True)
class RecentChanges:
    """Latest commit, remote branches and open PR/issue counts."""

    last_commit: str = ""
    last_commit_sha: str = ""
    last_commit_date: str = ""
    active_branches: tuple[str, ...] = ()
    open_prs: int | None = None
    open_issues: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "last_commit": self.last_commit,
            "last_commit_sha": self.last_commit_sha,
            "last_commit_date": self.last_commit_date,
            "active_branches": list(self.active_branches),
            "open_prs": self.open_prs,
            "open_issues": self.open_issues,
        }


@dataclass(frozen=True)
class DependenciesInfo:
    """Manifest dependency counts and the notable subset."""

    direct: int = 0
    dev: int = 0
    notable: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"direct": self.direct, "dev": self.dev, "notable": list(self.notable)}


@dataclass(frozen=True)
class RepoContext:
    """Complete context snapshot for one repository at one point in time."""

    repo: str
    generated: str
    stack: StackInfo = field(default_factory=StackInfo)
    structure: StructureInfo = field(default_factory=StructureInfo)
    conventions: ConventionsInfo = field(default_factory=ConventionsInfo)
    hot_paths: tuple[HotPath, ...] = ()
    hot_paths_window_days: int = 30
    recent_changes: RecentChanges = field(default_factory=RecentChanges)
    dependencies: DependenciesInfo = field(default_factory=DependenciesInfo)
    agents_md: str = AGENTS_NOTE
    version: str = SNAPSHOT_VERSION

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "repo": self.repo,
            "generated": self.generated,
            "stack": self.stack.to_dict(),
            "structure": self.structure.to_dict(),
            "conventions": self.conventions.to_dict(),
            "hot_paths": [p.to_dict() for p in self.hot_paths],
            "hot_paths_window_days": self.hot_paths_window_days,
            "recent_changes": self.recent_changes.to_dict(),
            "dependencies": self.dependencies.to_dict(),
            "agents_md": self.agents_md,
        }
