# src/sitesmith/server.py
"""Development HTTP server with browser live reload."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

from livereload import Server

from .logs import get_logger


class DevServer:
    """Serve `root` and push a reload to connected browsers when it changes.

    The server only watches the built tree; rebuilding sources is the
    watcher's job, so a reload follows every write a transform makes.
    """

    def __init__(
        self,
        root: Path,
        *,
        server_factory: Callable[[], Any] = Server,
    ) -> None:
        self.root = root
        self._server = server_factory()

    def serve(self, host: str, port: int) -> None:
        """Block until the server loop exits (Ctrl+C)."""
        logger = get_logger()
        self.root.mkdir(parents=True, exist_ok=True)
        self._server.watch(str(self.root))
        logger.info("🌐 Serving %s at http://%s:%d", self.root, host, port)
        self._server.serve(root=str(self.root), host=host, port=port)
