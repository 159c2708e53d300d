"""File enumeration and safe file readers.

Every analyzer works from one of two listings: the git-visible files
(tracked plus untracked-but-not-ignored) or, outside a work tree, a plain
directory walk that skips ``.git``.
"""

from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any

from .config import DEFAULT_MAX_FILE_BYTES
from .logging import get_logger
from .process import DEFAULT_TIMEOUT, try_git

logger = get_logger("files")

VCS_DIR = ".git"

_LINE_SPLIT = re.compile(r"\r?\n")


def list_tracked(repo_path: str | Path, timeout: float | None = DEFAULT_TIMEOUT) -> list[str]:
    """List git-visible files, or an empty list outside a work tree."""
    output = try_git(
        repo_path,
        ["ls-files", "--cached", "--others", "--exclude-standard"],
        timeout=timeout,
    )
    if not output:
        return []
    return [line.strip() for line in output.split("\n") if line.strip()]


def list_all(repo_path: str | Path) -> list[str]:
    """Walk the tree and return every regular file as a root-relative posix path."""
    root = Path(repo_path)
    files: list[str] = []

    def on_error(err: OSError) -> None:
        logger.debug("skipping unreadable path %s: %s", err.filename, err.strerror)

    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
        dirnames[:] = sorted(d for d in dirnames if d != VCS_DIR)
        for fname in sorted(filenames):
            fpath = os.path.join(dirpath, fname)
            if not os.path.isfile(fpath):
                continue
            rel = os.path.relpath(fpath, root)
            files.append(Path(rel).as_posix())
    return files


def list_repo_files(repo_path: str | Path, timeout: float | None = DEFAULT_TIMEOUT) -> list[str]:
    """Tracked listing when available, full walk otherwise."""
    tracked = list_tracked(repo_path, timeout=timeout)
    if tracked:
        return tracked
    return list_all(repo_path)


def read_text(path: str | Path) -> str | None:
    """Read a UTF-8 text file, ``None`` if it is missing or unreadable."""
    path = Path(path)
    if not path.is_file():
        return None
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.debug("cannot read %s: %s", path, e)
        return None


def read_json(path: str | Path) -> dict[str, Any] | None:
    """Parse a JSON object file; missing, unreadable or malformed files give ``None``."""
    content = read_text(path)
    if content is None:
        return None
    try:
        data = json.loads(content)
    except (json.JSONDecodeError, ValueError):
        logger.debug("ignoring malformed JSON in %s", path)
        return None
    return data if isinstance(data, dict) else None


def count_lines(path: str | Path, max_bytes: int = DEFAULT_MAX_FILE_BYTES) -> int:
    """Count lines in a file; oversized, empty or unreadable files count as zero."""
    path = Path(path)
    try:
        if not path.is_file():
            return 0
        if path.stat().st_size > max_bytes:
            return 0
        # newline="" keeps lone \r intact
        with open(path, encoding="utf-8", errors="replace", newline="") as f:
            content = f.read()
    except OSError:
        return 0
    if not content:
        return 0
    return len(_LINE_SPLIT.split(content))


def unique(values: list[str]) -> list[str]:
    """Drop duplicates, keeping first occurrences in order."""
    return list(dict.fromkeys(values))
