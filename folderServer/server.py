from __future__ import annotations

import logging
import threading
from http.server import ThreadingHTTPServer
from typing import Optional

from .config import ServerConfig
from .handler import FolderRequestHandler
from .tls import Credential, build_ssl_context

LOG = logging.getLogger(__name__)


class folderServer:
    """
    Serves ``config.folder`` over HTTP, or over HTTPS when a credential is given.

    The handler is bound to the configuration through a factory closure, so
    several servers with different settings can live in one process.
    """

    def __init__(self, config: ServerConfig, credential: Optional[Credential] = None, logger: Optional[logging.Logger] = None) -> None:
        self.config = config
        self.root_dir = config.folder.resolve()
        self.credential = credential
        self.logger = logger or LOG
        self._server: Optional[ThreadingHTTPServer] = None
        self._thread: Optional[threading.Thread] = None
        self.sock_port: Optional[int] = None

    @property
    def scheme(self) -> str:
        return "https" if self.credential is not None else "http"

    def start(self) -> None:
        """Bind and serve in a background thread. If port is 0, OS assigns an ephemeral port."""
        if self._server:
            return
        handler_cls = FolderRequestHandler
        root, quiet = str(self.root_dir), self.config.quiet
        server = ThreadingHTTPServer(
            (self.config.host, self.config.port),
            lambda *args, **kwargs: handler_cls(*args, directory=root, quiet=quiet, **kwargs),
        )
        if self.credential is not None:
            try:
                ctx = build_ssl_context(self.credential)
            except Exception:
                server.server_close()
                raise
            server.socket = ctx.wrap_socket(server.socket, server_side=True)
        self._server = server
        self.sock_port = server.server_address[1]
        self.logger.info("%s server serving %s on %s:%d", self.scheme.upper(), self.root_dir, self.config.host, self.sock_port)
        thr = threading.Thread(target=server.serve_forever, daemon=True)
        self._thread = thr
        thr.start()

    def stop(self) -> None:
        if self._server:
            try:
                self._server.shutdown()
            except Exception:
                self.logger.exception("Error shutting down %s server", self.scheme.upper())
            try:
                self._server.server_close()
            except Exception:
                self.logger.exception("Error closing %s server", self.scheme.upper())
            self._server = None
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=2.0)
        self._thread = None
        self.sock_port = None
