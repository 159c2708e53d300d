"""Context assembly - composes every analyzer into one snapshot."""

from __future__ import annotations

import datetime
from pathlib import Path

from .config import ContextConfig
from .detector import detect_stack
from .history import get_conventions, get_hot_paths, get_recent_changes
from .logging import get_logger
from .manifest import load_manifest
from .models import DependenciesInfo, RepoContext
from .structure import analyze_structure

logger = get_logger("context")

NOTABLE_DEPS = (
    "next",
    "react",
    "supabase-js",
    "vitest",
    "jest",
    "express",
    "fastapi",
    "django",
    "vue",
    "svelte",
)


def _timestamp() -> str:
    now = datetime.datetime.now(datetime.timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def summarize_dependencies(repo_path: str | Path) -> DependenciesInfo:
    """Direct/dev counts plus the watch-listed dependencies that are present."""
    manifest = load_manifest(repo_path)
    deps = manifest.all_dependencies
    return DependenciesInfo(
        direct=len(manifest.dependencies),
        dev=len(manifest.dev_dependencies),
        notable=tuple(d for d in NOTABLE_DEPS if d in deps),
    )


def build_repo_context(repo_path: str | Path, config: ContextConfig | None = None) -> RepoContext:
    """Run the full pipeline on a local repository."""
    config = config or ContextConfig()
    root = Path(repo_path).resolve()
    logger.debug("building context for %s", root)

    stack = detect_stack(root, config)
    structure = analyze_structure(root, config)
    hot_paths = get_hot_paths(root, config.hot_days, config.top_n, timeout=config.command_timeout)
    recent_changes = get_recent_changes(
        root, config.since, timeout=config.command_timeout, github_api=config.github_api
    )
    conventions = get_conventions(
        root, config.since, config.convention_limit, timeout=config.command_timeout
    )

    return RepoContext(
        repo=root.name,
        generated=_timestamp(),
        stack=stack,
        structure=structure,
        conventions=conventions,
        hot_paths=tuple(hot_paths),
        hot_paths_window_days=config.hot_days,
        recent_changes=recent_changes,
        dependencies=summarize_dependencies(root),
    )
