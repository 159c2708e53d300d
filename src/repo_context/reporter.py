"""Renderers for a context snapshot: JSON, Markdown and a one-line summary."""

from __future__ import annotations

import json

from .models import RepoContext


def to_json(context: RepoContext) -> str:
    return json.dumps(context.to_dict(), indent=2) + "\n"


def _join(values, empty: str = "None") -> str:
    return ", ".join(values) or empty


def to_markdown(context: RepoContext) -> str:
    """Render the snapshot as a Markdown document."""
    stack = context.stack
    structure = context.structure
    conventions = context.conventions
    changes = context.recent_changes
    deps = context.dependencies
    days = context.hot_paths_window_days

    if context.hot_paths:
        hot = "\n".join(f"- {p.file} ({p.commits} commits/{days}d)" for p in context.hot_paths)
    else:
        hot = "- None"

    lines = [
        "# Repository Context",
        "",
        f"- **Repo**: {context.repo}",
        f"- **Generated**: {context.generated}",
        "",
        "## Stack",
        f"- **Languages**: {_join(stack.languages, 'Unknown')}",
        f"- **Frameworks**: {_join(stack.frameworks)}",
        f"- **Runtime**: {stack.runtime or 'Unknown'}",
        f"- **Package Manager**: {stack.package_manager or 'Unknown'}",
        f"- **Test Framework**: {stack.test_framework or 'Unknown'}",
        f"- **CI**: {stack.ci or 'Unknown'}",
        "",
        "## Structure",
        f"- **Entry Points**: {_join(structure.entry_points)}",
        f"- **Config Files**: {_join(structure.config_files)}",
        f"- **Test Dirs**: {_join(structure.test_dirs)}",
        f"- **Total Files**: {structure.total_files}",
        f"- **Total Lines**: {structure.total_lines}",
        "",
        "## Conventions",
        f"- **Commit Pattern**: {conventions.commit_pattern}",
        f"- **Conventional Ratio**: {conventions.conventional_commit_ratio}",
        f"- **Common Commit Types**: {_join(conventions.common_types)}",
        "",
        "## Hot Paths",
        hot,
        "",
        "## Recent Changes",
        f"- **Last Commit**: {changes.last_commit}",
        f"- **SHA**: {changes.last_commit_sha}",
        f"- **Date**: {changes.last_commit_date}",
        f"- **Active Branches**: {_join(changes.active_branches)}",
    ]
    if changes.open_prs is not None:
        lines.append(f"- **Open PRs**: {changes.open_prs}")
    if changes.open_issues is not None:
        lines.append(f"- **Open Issues**: {changes.open_issues}")
    lines += [
        "",
        "## Dependencies",
        f"- **Direct**: {deps.direct}",
        f"- **Dev**: {deps.dev}",
        f"- **Notable**: {_join(deps.notable)}",
        "",
        "## Agent Notes",
        context.agents_md,
    ]
    return "\n".join(lines) + "\n"


def to_compact(context: RepoContext) -> str:
    """One-line summary suitable for a prompt preamble."""
    stack = context.stack
    structure = context.structure

    head = f"{context.repo}: {_join(stack.languages, 'Unknown')}"
    if stack.frameworks:
        head += f" ({', '.join(stack.frameworks)})"

    parts = [head, f"{structure.total_files} files, {structure.total_lines} lines"]
    if stack.test_framework:
        parts.append(f"tests: {stack.test_framework}")
    parts.append(f"commits: {context.conventions.commit_pattern}")

    hot = ", ".join(p.file for p in context.hot_paths[:3]) or "N/A"
    parts.append(f"hot: {hot}")

    n_branches = len(context.recent_changes.active_branches)
    parts.append(f"{n_branches} active branch" + ("" if n_branches == 1 else "es"))

    if context.recent_changes.open_prs is not None:
        parts.append(f"{context.recent_changes.open_prs} open PRs")
    if context.recent_changes.open_issues is not None:
        parts.append(f"{context.recent_changes.open_issues} open issues")

    return " | ".join(parts)
