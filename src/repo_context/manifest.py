"""Dependency manifest reader.

``package.json`` is the primary manifest. ``pyproject.toml`` dependencies
are merged in so Python projects get the same framework and test-framework
detection. A manifest that fails to parse is treated as absent.
"""

from __future__ import annotations

import re
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .files import read_json, read_text
from .logging import get_logger

logger = get_logger("manifest")

PACKAGE_JSON = "package.json"
PYPROJECT = "pyproject.toml"

_REQUIREMENT_NAME = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)")


@dataclass(frozen=True)
class Manifest:
    """Merged view of the repository's dependency declarations."""

    dependencies: tuple[str, ...] = ()
    dev_dependencies: tuple[str, ...] = ()
    main: str | None = None
    exports: Any = None
    node_engine: str | None = None

    @property
    def all_dependencies(self) -> frozenset[str]:
        """Runtime and development dependency names as one lookup set."""
        return frozenset(self.dependencies) | frozenset(self.dev_dependencies)


def load_manifest(repo_path: str | Path) -> Manifest:
    """Read every recognised manifest under ``repo_path``."""
    root = Path(repo_path)
    deps: list[str] = []
    dev_deps: list[str] = []
    main = None
    exports = None
    node_engine = None

    pkg = read_json(root / PACKAGE_JSON)
    if pkg is not None:
        deps.extend(_mapping_keys(pkg.get("dependencies")))
        dev_deps.extend(_mapping_keys(pkg.get("devDependencies")))
        if isinstance(pkg.get("main"), str):
            main = pkg["main"]
        exports = pkg.get("exports")
        engines = pkg.get("engines")
        if isinstance(engines, dict) and isinstance(engines.get("node"), str):
            node_engine = engines["node"] or None

    py_deps, py_dev_deps = _python_dependencies(root / PYPROJECT)
    deps.extend(d for d in py_deps if d not in deps)
    dev_deps.extend(d for d in py_dev_deps if d not in dev_deps)

    return Manifest(
        dependencies=tuple(deps),
        dev_dependencies=tuple(dev_deps),
        main=main,
        exports=exports,
        node_engine=node_engine,
    )


def _mapping_keys(value: Any) -> list[str]:
    if not isinstance(value, dict):
        return []
    return [k for k in value.keys() if isinstance(k, str)]


def _requirement_names(requirements: Any) -> list[str]:
    """Extract normalised package names from PEP 508 requirement strings."""
    if not isinstance(requirements, list):
        return []
    names = []
    for req in requirements:
        if not isinstance(req, str):
            continue
        match = _REQUIREMENT_NAME.match(req)
        if match:
            name = match.group(1).lower().replace("_", "-")
            if name not in names:
                names.append(name)
    return names


def _python_dependencies(path: Path) -> tuple[list[str], list[str]]:
    """Return (runtime, development) dependency names from pyproject.toml."""
    content = read_text(path)
    if content is None:
        return [], []
    try:
        data = tomllib.loads(content)
    except tomllib.TOMLDecodeError:
        logger.debug("ignoring malformed %s", path)
        return [], []

    deps: list[str] = []
    dev_deps: list[str] = []

    project = data.get("project")
    if isinstance(project, dict):
        deps.extend(_requirement_names(project.get("dependencies")))
        optional = project.get("optional-dependencies")
        if isinstance(optional, dict):
            for group in optional.values():
                dev_deps.extend(_requirement_names(group))

    groups = data.get("dependency-groups")
    if isinstance(groups, dict):
        for group in groups.values():
            dev_deps.extend(_requirement_names(group))

    poetry = data.get("tool", {}).get("poetry") if isinstance(data.get("tool"), dict) else None
    if isinstance(poetry, dict):
        deps.extend(k.lower() for k in _mapping_keys(poetry.get("dependencies")) if k.lower() != "python")
        dev_deps.extend(k.lower() for k in _mapping_keys(poetry.get("dev-dependencies")))
        poetry_groups = poetry.get("group")
        if isinstance(poetry_groups, dict):
            for group in poetry_groups.values():
                if isinstance(group, dict):
                    dev_deps.extend(k.lower() for k in _mapping_keys(group.get("dependencies")))

    return list(dict.fromkeys(deps)), list(dict.fromkeys(dev_deps))
