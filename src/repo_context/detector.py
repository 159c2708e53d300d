"""Stack detection from file extensions, manifests and marker files."""

from __future__ import annotations

from collections import Counter
from pathlib import Path

from .config import ContextConfig
from .files import list_repo_files, read_text
from .manifest import Manifest, load_manifest
from .models import StackInfo

# Extension -> Language mapping
EXT_LANG = {
    ".ts": "TypeScript",
    ".tsx": "TypeScript",
    ".js": "JavaScript",
    ".jsx": "JavaScript",
    ".py": "Python",
    ".go": "Go",
    ".rs": "Rust",
}

# Dependency name -> framework, reported in table order
FRAMEWORK_DEPS = {
    "next": "Next.js",
    "react": "React",
    "vue": "Vue",
    "svelte": "Svelte",
    "express": "Express",
    "fastapi": "FastAPI",
    "django": "Django",
}

# Dependency name -> test framework, first match wins
TEST_FRAMEWORK_DEPS = {
    "vitest": "Vitest",
    "jest": "Jest",
    "mocha": "Mocha",
    "pytest": "Pytest",
}

NODE_VERSION_FILES = (".nvmrc", ".node-version")

LOCKFILES = (
    ("pnpm-lock.yaml", "pnpm"),
    ("yarn.lock", "yarn"),
    ("package-lock.json", "npm"),
)

WORKFLOW_DIR = ".github/workflows/"
CI_FILES = (
    (".gitlab-ci.yml", "GitLab CI"),
    (".circleci/config.yml", "CircleCI"),
)


def detect_stack(repo_path: str | Path, config: ContextConfig | None = None) -> StackInfo:
    """Classify the repository's languages, frameworks and tooling."""
    config = config or ContextConfig()
    root = Path(repo_path)
    files = list_repo_files(root, timeout=config.command_timeout)
    manifest = load_manifest(root)
    deps = manifest.all_dependencies

    return StackInfo(
        languages=tuple(rank_languages(files)),
        frameworks=tuple(detect_frameworks(deps)),
        runtime=_detect_runtime(root, manifest),
        package_manager=_detect_package_manager(root),
        test_framework=detect_test_framework(deps),
        ci=_detect_ci(root, files),
    )


def _extension(path: str) -> str | None:
    idx = path.rfind(".")
    if idx < 0:
        return None
    return path[idx:]


def rank_languages(files: list[str]) -> list[str]:
    """Languages by descending file count; ties keep first-seen order."""
    counts: Counter = Counter()
    for f in files:
        lang = EXT_LANG.get(_extension(f) or "")
        if lang:
            counts[lang] += 1
    return [lang for lang, _ in sorted(counts.items(), key=lambda x: -x[1])]


def detect_frameworks(deps: frozenset[str] | set[str]) -> list[str]:
    return [fw for dep, fw in FRAMEWORK_DEPS.items() if dep in deps]


def detect_test_framework(deps: frozenset[str] | set[str]) -> str | None:
    for dep, name in TEST_FRAMEWORK_DEPS.items():
        if dep in deps:
            return name
    return None


def _normalise_node_version(raw: str) -> str:
    line = raw.strip().splitlines()[0].strip() if raw.strip() else ""
    return line[1:] if line.startswith("v") else line


def _detect_runtime(root: Path, manifest: Manifest) -> str | None:
    for fname in NODE_VERSION_FILES:
        content = read_text(root / fname)
        if content:
            version = _normalise_node_version(content)
            if version:
                return f"Node {version}"
    if manifest.node_engine:
        return f"Node {manifest.node_engine}"
    return None


def _detect_package_manager(root: Path) -> str | None:
    for lockfile, manager in LOCKFILES:
        if (root / lockfile).exists():
            return manager
    return None


def _detect_ci(root: Path, files: list[str]) -> str | None:
    if any(f.startswith(WORKFLOW_DIR) and f.endswith((".yml", ".yaml")) for f in files):
        return "GitHub Actions"
    for path, name in CI_FILES:
        if (root / path).exists():
            return name
    return None
