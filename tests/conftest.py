"""Shared fixtures: throwaway repositories on disk."""

from __future__ import annotations

import os
import shutil
import subprocess
import textwrap
from pathlib import Path
from typing import Mapping

import pytest


class RepoBuilder:
    """Write files into a throwaway repository and optionally commit them."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    def write(self, files: Mapping[str, str]) -> "RepoBuilder":
        """Write ``path -> contents`` entries into the repository."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
        return self

    def git(self, *args: str) -> str:
        env = {
            **os.environ,
            "GIT_AUTHOR_NAME": "Test",
            "GIT_AUTHOR_EMAIL": "test@example.com",
            "GIT_COMMITTER_NAME": "Test",
            "GIT_COMMITTER_EMAIL": "test@example.com",
        }
        result = subprocess.run(
            ["git", "-c", "commit.gpgsign=false", *args],
            cwd=self.root, capture_output=True, text=True, env=env, check=True,
        )
        return result.stdout

    def init(self) -> "RepoBuilder":
        self.git("init", "-q")
        self.git("symbolic-ref", "HEAD", "refs/heads/main")
        return self

    def commit(self, message: str, files: Mapping[str, str]) -> "RepoBuilder":
        self.write(files)
        self.git("add", "-A")
        self.git("commit", "-q", "-m", message)
        return self


@pytest.fixture
def repo(tmp_path: Path) -> RepoBuilder:
    """A plain directory repository (no git)."""
    return RepoBuilder(tmp_path / "repo")


@pytest.fixture
def git_repo(tmp_path: Path) -> RepoBuilder:
    """An initialised git repository; skipped when git is not installed."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    return RepoBuilder(tmp_path / "gitrepo").init()
