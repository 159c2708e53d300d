"""Structure analysis: entry points, config files, test dirs and size metrics."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from .config import ContextConfig
from .files import count_lines, list_all, list_repo_files, unique
from .manifest import load_manifest
from .models import StructureInfo

CONVENTIONAL_ENTRY_POINTS = ("src/index.ts", "src/app/page.tsx", "src/main.ts")

CONFIG_CANDIDATES = (
    "tsconfig.json",
    "next.config.js",
    "next.config.mjs",
    "next.config.ts",
    "vite.config.js",
    "vite.config.ts",
    "vite.config.mjs",
    ".env.example",
    "Dockerfile",
)

TEST_DIR_NAMES = frozenset({"__tests__", "test", "tests", "e2e", "spec"})

# Object levels followed below the top-level exports map ("." -> {"import": {"types": ...}}).
_EXPORTS_MAX_DEPTH = 2


def analyze_structure(repo_path: str | Path, config: ContextConfig | None = None) -> StructureInfo:
    """Locate entry points, config files and test directories; measure size."""
    config = config or ContextConfig()
    root = Path(repo_path)
    files = list_repo_files(root, timeout=config.command_timeout)
    manifest = load_manifest(root)

    entry_points: list[str] = []
    if manifest.main:
        entry_points.append(manifest.main)
    entry_points.extend(export_targets(manifest.exports))
    entry_points.extend(p for p in CONVENTIONAL_ENTRY_POINTS if (root / p).exists())

    total_lines = sum(count_lines(root / f, config.max_file_bytes) for f in files)

    return StructureInfo(
        entry_points=tuple(unique(entry_points)),
        config_files=tuple(c for c in CONFIG_CANDIDATES if (root / c).exists()),
        test_dirs=tuple(find_test_dirs(list_all(root))),
        total_files=len(files),
        total_lines=total_lines,
    )


def export_targets(exports: Any) -> list[str]:
    """Collect string targets from a package.json ``exports`` field."""
    if isinstance(exports, str):
        return [exports]
    if not isinstance(exports, dict):
        return []
    targets: list[str] = []
    _collect_exports(exports, 0, targets)
    return targets


def _collect_exports(mapping: dict, depth: int, targets: list[str]) -> None:
    for value in mapping.values():
        if isinstance(value, str):
            targets.append(value)
        elif isinstance(value, dict) and depth < _EXPORTS_MAX_DEPTH:
            _collect_exports(value, depth + 1, targets)


def find_test_dirs(files: list[str]) -> list[str]:
    """Every path prefix ending in a conventional test directory name, sorted."""
    dirs = set()
    for f in files:
        parts = f.split("/")
        for i, part in enumerate(parts[:-1]):
            if part in TEST_DIR_NAMES:
                dirs.add("/".join(parts[: i + 1]))
    return sorted(dirs)
