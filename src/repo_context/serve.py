"""Local HTTP tool server.

Exposes the pipeline as named tools so agents can fetch context on demand:

    GET  /api/tools          -> tool catalogue
    POST /api/tools/<name>   -> {"result": ...} for a JSON arguments body
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from functools import partial
from http.server import BaseHTTPRequestHandler, HTTPServer
from pathlib import Path
from typing import Any

from . import __version__
from .config import ConfigError, ContextConfig, load_config
from .context import build_repo_context
from .detector import detect_stack
from .history import get_conventions, get_hot_paths
from .logging import get_logger

DEFAULT_PORT = 8421
MAX_BODY_BYTES = 64 * 1024

logger = get_logger("serve")

_REPO_PATH = {"repo_path": {"type": "string"}}

TOOLS = [
    {
        "name": "get_context",
        "description": "Return complete repo context",
        "inputSchema": {"type": "object", "properties": dict(_REPO_PATH)},
    },
    {
        "name": "get_stack",
        "description": "Return stack section only",
        "inputSchema": {"type": "object", "properties": dict(_REPO_PATH)},
    },
    {
        "name": "get_hot_paths",
        "description": "Return hot files",
        "inputSchema": {
            "type": "object",
            "properties": {**_REPO_PATH, "days": {"type": "number"}},
        },
    },
    {
        "name": "get_conventions",
        "description": "Return conventions section",
        "inputSchema": {"type": "object", "properties": dict(_REPO_PATH)},
    },
]


@dataclass
class ToolResult:
    """Outcome of a tool call."""

    data: Any = None
    error: str | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_dict(self) -> dict[str, Any]:
        if self.is_error:
            return {"isError": True, "content": [{"type": "text", "text": self.error}]}
        return {
            "content": [{"type": "text", "text": json.dumps(self.data, indent=2)}],
            "structuredContent": {"result": self.data},
        }


def _config_for(repo_path: Path, base: ContextConfig | None) -> ContextConfig:
    if base is not None:
        return base
    try:
        return load_config(repo_path)
    except ConfigError as e:
        logger.warning("ignoring invalid config for %s: %s", repo_path, e)
        return ContextConfig()


def call_tool(name: str, arguments: dict[str, Any] | None = None, config: ContextConfig | None = None) -> ToolResult:
    """Dispatch one named tool call onto the pipeline."""
    arguments = arguments or {}
    raw_path = arguments.get("repo_path") or "."
    if not isinstance(raw_path, str):
        return ToolResult(error="repo_path must be a string")
    repo_path = Path(raw_path).resolve()
    if not repo_path.is_dir():
        return ToolResult(error=f"Not a directory: {repo_path}")
    cfg = _config_for(repo_path, config)

    if name == "get_context":
        return ToolResult(build_repo_context(repo_path, cfg).to_dict())
    if name == "get_stack":
        return ToolResult(detect_stack(repo_path, cfg).to_dict())
    if name == "get_hot_paths":
        days = arguments.get("days", cfg.hot_days)
        if (
            isinstance(days, bool)
            or not isinstance(days, (int, float))
            or not math.isfinite(days)
            or days < 1
        ):
            return ToolResult(error="days must be a number of at least 1")
        paths = get_hot_paths(repo_path, math.ceil(days), cfg.top_n, timeout=cfg.command_timeout)
        return ToolResult([p.to_dict() for p in paths])
    if name == "get_conventions":
        conventions = get_conventions(
            repo_path, cfg.since, cfg.convention_limit, timeout=cfg.command_timeout
        )
        return ToolResult(conventions.to_dict())
    return ToolResult(error=f"Unknown tool: {name}")


class ToolHandler(BaseHTTPRequestHandler):
    """HTTP handler mapping tool routes onto ``call_tool``."""

    server_version = f"repo-context/{__version__}"

    def __init__(self, *args, config: ContextConfig | None = None, **kwargs):
        self._config = config
        super().__init__(*args, **kwargs)

    def do_GET(self):
        if self.path in ("/", "/api/tools"):
            self._send_json(200, {"name": "repo-context", "version": __version__, "tools": TOOLS})
        else:
            self.send_error(404)

    def do_POST(self):
        prefix = "/api/tools/"
        if not self.path.startswith(prefix):
            self.send_error(404)
            return
        name = self.path[len(prefix):]

        try:
            length = int(self.headers.get("Content-Length") or 0)
        except ValueError:
            length = -1
        if length < 0:
            self._send_json(400, ToolResult(error="Invalid Content-Length").to_dict())
            return
        if length > MAX_BODY_BYTES:
            self._send_json(413, ToolResult(error="Request body too large").to_dict())
            return
        raw = self.rfile.read(length) if length else b""
        try:
            arguments = json.loads(raw) if raw else {}
        except ValueError:
            self._send_json(400, ToolResult(error="Body must be JSON").to_dict())
            return
        if not isinstance(arguments, dict):
            self._send_json(400, ToolResult(error="Arguments must be a JSON object").to_dict())
            return

        result = call_tool(name, arguments, self._config)
        status = 404 if result.is_error and result.error.startswith("Unknown tool") else 200
        self._send_json(status, result.to_dict())

    def _send_json(self, status: int, payload: dict[str, Any]):
        content = json.dumps(payload).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(content)))
        self.end_headers()
        self.wfile.write(content)

    def log_message(self, format, *args):
        logger.debug("%s - %s", self.address_string(), format % args)


def start_server(
    host: str = "127.0.0.1",
    port: int = DEFAULT_PORT,
    config: ContextConfig | None = None,
) -> None:
    """Serve tool calls until interrupted.

    Args:
        host: Interface to bind
        port: Port to serve on
        config: Fixed settings for every call; per-repository config files
            are read when omitted
    """
    handler = partial(ToolHandler, config=config)
    HTTPServer.allow_reuse_address = True
    server = HTTPServer((host, port), handler)
    logger.info("serving repo-context tools on http://%s:%s", host, port)

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()
