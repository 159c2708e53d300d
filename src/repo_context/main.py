"""repo-context CLI - structured repository context for humans and coding agents.

Usage:
    repo-context generate [path-or-url] [options]
    repo-context generate . --json
    repo-context generate https://github.com/facebook/react --summary
    repo-context serve --port 8421
"""

from __future__ import annotations

import re
import shutil
import subprocess
import tempfile
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .config import ConfigError, load_config
from .context import build_repo_context
from .logging import configure_logging
from .models import RepoContext
from .reporter import to_compact, to_json, to_markdown
from .serve import DEFAULT_PORT, start_server

console = Console(stderr=True)

CLONE_DEPTH = 200

_GITHUB_TARGET = re.compile(r"^(?:https?://)?(?:www\.)?(?:github\.com/)?([\w.-]+)/([\w.-]+?)(?:\.git)?/?$")


def _clone_repo(url: str, dest: Path, name: str) -> Path:
    """Shallow-clone a repository into dest/name and return the clone path."""
    clone_dir = dest / name
    console.print(f"  Cloning {url}...", style="dim")
    try:
        result = subprocess.run(
            ["git", "clone", f"--depth={CLONE_DEPTH}", "--no-single-branch", url, str(clone_dir)],
            capture_output=True, text=True, timeout=300,
        )
    except (subprocess.TimeoutExpired, FileNotFoundError) as e:
        raise click.ClickException(f"Git clone failed: {e}")
    if result.returncode != 0:
        raise click.ClickException(f"Git clone failed: {result.stderr[:200]}")
    return clone_dir


def _resolve_repo_path(target: str) -> tuple[Path, bool]:
    """Resolve target to a local path. Returns (path, is_temp).

    Handles:
    - Local paths (., ./myrepo, /absolute/path)
    - GitHub URLs (https://github.com/owner/repo)
    - Shorthand (owner/repo) when no such local path exists
    """
    path = Path(target)
    if path.is_dir():
        return path.resolve(), False

    is_url = "github.com/" in target
    if is_url or ("/" in target and not target.startswith((".", "/"))):
        match = _GITHUB_TARGET.match(target)
        if match:
            owner, repo = match.group(1), match.group(2)
            url = f"https://github.com/{owner}/{repo}.git"
            tmpdir = Path(tempfile.mkdtemp(prefix="repo-context-"))
            try:
                return _clone_repo(url, tmpdir, repo), True
            except click.ClickException:
                shutil.rmtree(tmpdir, ignore_errors=True)
                raise

    raise click.ClickException(f"Not a directory: {target}")


@click.group()
@click.version_option(version=__version__)
def cli():
    """repo-context - summarize a repository for humans and AI coding agents.

    Detects the stack, structure, commit conventions, hot files and recent
    activity of a repository. Read-only; nothing is cached.
    """
    pass


@cli.command()
@click.argument("target", default=".")
@click.option("--json", "as_json", is_flag=True, help="Print JSON to stdout")
@click.option("--md", "as_md", is_flag=True, help="Print Markdown to stdout")
@click.option("--summary", is_flag=True, help="Print a one-line summary to stdout")
@click.option("--out", "out_file", type=click.Path(dir_okay=False), default=None, help="Write output to a .json or .md file")
@click.option("--days", type=click.IntRange(min=1), default=None, help="Hot-path window in days (default 30)")
@click.option("--top", "top_n", type=click.IntRange(min=1), default=None, help="Number of hot paths to report (default 10)")
@click.option("--since", default=None, help="Only consider commits since this date for conventions and recent changes")
@click.option("--config", "config_file", type=click.Path(exists=True, dir_okay=False), default=None, help="Config file (default: <repo>/.repo-context.toml)")
@click.option("--no-github-api", is_flag=True, help="Never query the GitHub API for PR/issue counts")
@click.option("--verbose", "-v", is_flag=True, help="Log every degraded signal")
@click.option("--log-file", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Also write debug logs to this file")
def generate(
    target: str,
    as_json: bool,
    as_md: bool,
    summary: bool,
    out_file: str | None,
    days: int | None,
    top_n: int | None,
    since: str | None,
    config_file: str | None,
    no_github_api: bool,
    verbose: bool,
    log_file: Path | None,
):
    """Generate repository context.

    TARGET can be a local path, GitHub URL, or owner/repo shorthand.
    Without output flags, REPO.json and REPO.md are written into the
    repository root.

    Examples:

        repo-context generate .

        repo-context generate . --json

        repo-context generate pallets/flask --summary

        repo-context generate ./my-project --out context.md --days 14
    """
    configure_logging(verbose=verbose, log_file=log_file)

    if out_file and not out_file.endswith((".json", ".md")):
        raise click.UsageError("--out must end in .json or .md")

    repo_path, is_temp = _resolve_repo_path(target)
    try:
        try:
            config = load_config(repo_path, config_file)
        except ConfigError as e:
            raise click.ClickException(str(e))
        config = config.merged(
            hot_days=days,
            top_n=top_n,
            since=since,
            github_api=False if no_github_api else None,
        )

        context = build_repo_context(repo_path, config)

        if out_file:
            out_path = Path(out_file).resolve()
            rendered = to_json(context) if out_path.suffix == ".json" else to_markdown(context)
            out_path.write_text(rendered, encoding="utf-8")
            click.echo(str(out_path))
            return

        if as_json or as_md or summary:
            chunks = []
            if as_json:
                chunks.append(to_json(context))
            if as_md:
                chunks.append(to_markdown(context))
            if summary:
                chunks.append(to_compact(context) + "\n")
            click.echo("\n".join(chunks), nl=False)
            return

        if is_temp:
            raise click.UsageError("Use --json, --md, --summary or --out with a remote target")

        json_path = repo_path / "REPO.json"
        md_path = repo_path / "REPO.md"
        json_path.write_text(to_json(context), encoding="utf-8")
        md_path.write_text(to_markdown(context), encoding="utf-8")
        _print_context_summary(context)
        click.echo(f"Generated {json_path} and {md_path}")
    finally:
        # Clean up temp clone
        if is_temp:
            shutil.rmtree(repo_path.parent, ignore_errors=True)


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Interface to bind")
@click.option("--port", "-p", type=int, default=DEFAULT_PORT, show_default=True, help="Port to serve on")
@click.option("--verbose", "-v", is_flag=True, help="Log every request")
@click.option("--log-file", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Also write debug logs to this file")
def serve(host: str, port: int, verbose: bool, log_file: Path | None):
    """Serve context tools over HTTP for coding agents."""
    configure_logging(verbose=verbose, log_file=log_file)
    console.print(Panel.fit(
        f"[bold cyan]repo-context v{__version__}[/] tool server\n"
        f"http://{host}:{port}/api/tools",
        border_style="cyan",
    ))
    start_server(host=host, port=port)


@cli.command()
def version():
    """Show version information."""
    click.echo(f"repo-context v{__version__}")


def _print_context_summary(context: RepoContext) -> None:
    """Print a compact table of the generated context."""
    table = Table(title=f"Repository Context: {context.repo}", show_header=False, border_style="dim")
    table.add_column("Key", style="bold")
    table.add_column("Value")

    stack = context.stack
    table.add_row("Languages", ", ".join(stack.languages) or "Unknown")
    if stack.frameworks:
        table.add_row("Frameworks", ", ".join(stack.frameworks))
    if stack.runtime:
        table.add_row("Runtime", stack.runtime)
    if stack.package_manager:
        table.add_row("Package manager", stack.package_manager)
    if stack.test_framework:
        table.add_row("Testing", stack.test_framework)
    if stack.ci:
        table.add_row("CI/CD", stack.ci)
    table.add_row("Files / Lines", f"{context.structure.total_files:,} / {context.structure.total_lines:,}")
    table.add_row(
        "Commits",
        f"{context.conventions.commit_pattern} ({context.conventions.conventional_commit_ratio:.0%})",
    )
    if context.hot_paths:
        table.add_row("Hot paths", ", ".join(p.file for p in context.hot_paths[:3]))

    console.print(table)


if __name__ == "__main__":
    cli()
