"""Blocking subprocess helpers.

`run_command` is strict and raises `CommandError`; the `try_*` variants
convert every failure into an empty string / ``None`` so callers never see
an exception from a missing binary, a non-zero exit or a timeout.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Sequence

from .logging import get_logger

DEFAULT_TIMEOUT = 10.0

logger = get_logger("process")


class CommandError(Exception):
    """An external command could not be run or exited non-zero."""

    def __init__(self, args: Sequence[str], message: str, returncode: int | None = None):
        self.args_list = list(args)
        self.returncode = returncode
        super().__init__(f"{' '.join(self.args_list)}: {message}")


def run_command(
    args: Sequence[str],
    cwd: str | Path,
    timeout: float | None = DEFAULT_TIMEOUT,
) -> str:
    """Run a command and return its stripped stdout."""
    try:
        result = subprocess.run(
            list(args),
            cwd=cwd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            stdin=subprocess.DEVNULL,
        )
    except FileNotFoundError as e:
        raise CommandError(args, f"not found: {e.filename or args[0]}") from e
    except NotADirectoryError as e:
        raise CommandError(args, f"invalid working directory {cwd}") from e
    except subprocess.TimeoutExpired as e:
        raise CommandError(args, f"timed out after {timeout}s") from e
    except OSError as e:
        raise CommandError(args, str(e)) from e

    if result.returncode != 0:
        raise CommandError(args, result.stderr.strip()[:200] or "failed", result.returncode)
    return result.stdout.strip()


def try_command(
    args: Sequence[str],
    cwd: str | Path,
    timeout: float | None = DEFAULT_TIMEOUT,
) -> str | None:
    """Run a command, returning ``None`` instead of raising on any failure."""
    try:
        return run_command(args, cwd, timeout=timeout)
    except CommandError as e:
        logger.debug("command unavailable: %s", e)
        return None


def try_git(
    repo_path: str | Path,
    args: Sequence[str],
    timeout: float | None = DEFAULT_TIMEOUT,
) -> str:
    """Run a git subcommand in ``repo_path``; empty string on failure.

    Paths in the output are printed verbatim, not C-quoted.
    """
    output = try_command(["git", "-c", "core.quotePath=false", *args], repo_path, timeout=timeout)
    return output or ""
