from __future__ import annotations

import logging
from http.server import SimpleHTTPRequestHandler
from typing import Any, Callable, Optional

from .classify import RequestClass, classify, content_disposition, request_path

LOG = logging.getLogger(__name__)

STYLE = b"""
<style>
  body {
    background: #111;
    color: #def;
  }

  *, *::before, *::after {
    font: 20px JetBrainsMono, mono, Menlo-Regular;
    box-sizing: border-box;

    scrollbar-width: thin;
    scrollbar-color: #aef #0003;
  }
  *::-webkit-scrollbar-thumb {
    background: #aef;
    border-radius: 20rem;
  }
  *::-webkit-scrollbar-track {
    background: #0003;
  }
  *::-webkit-scrollbar {
    width: 3rem;
  }

  pre {
    margin: 0;
    padding: 0.5rem;
  }

  a {
    color: #abf;
    font-weight: bold;
  }

  a:visited {
    color: #fba;
  }

  a:hover {
    color: #aef;
  }
</style>
"""


class FolderRequestHandler(SimpleHTTPRequestHandler):
    """
    SimpleHTTPRequestHandler that forces downloads of media files, styles
    directory responses and logs each request once it has been answered.

    Directory responses are decorated rather than rebuilt: any Content-Length
    the base class announces grows by len(STYLE), and STYLE is written to the
    stream after the base class has finished its body.
    """

    protocol_version = "HTTP/1.1"

    def __init__(self, *args: Any, quiet: bool = False, logger: Optional[logging.Logger] = None, **kwargs: Any) -> None:
        self.quiet = quiet
        self.logger = logger or LOG
        self._reset()
        # the base constructor handles the connection, so state must exist first
        super().__init__(*args, **kwargs)

    def _reset(self) -> None:
        self._request: Optional[RequestClass] = None
        self._status: Optional[int] = None
        self._parsed = False
        self._styled = False
        self._style_owed = False

    # one handler instance serves every request on a keep-alive connection
    def handle_one_request(self) -> None:
        self._reset()
        super().handle_one_request()
        if self._status is not None:
            self._log_completed()

    def parse_request(self) -> bool:
        self._parsed = super().parse_request()
        return self._parsed

    def do_GET(self) -> None:
        self._serve(super().do_GET)

    def do_HEAD(self) -> None:
        self._serve(super().do_HEAD)

    def _serve(self, delegate: Callable[[], None]) -> None:
        self._request = classify(self.path)
        self._styled = self._request.is_directory
        try:
            delegate()
            if self._style_owed:
                self._append_style()
        finally:
            self._styled = False

    def _append_style(self) -> None:
        try:
            self.wfile.write(STYLE)
        except OSError:
            self.logger.debug("client went away before style was sent: %s", self.path)

    def send_response(self, code: int, message: Optional[str] = None) -> None:
        self._status = int(code)
        super().send_response(code, message)

    def send_header(self, keyword: str, value: str) -> None:
        if self._styled and keyword.lower() == "content-length":
            value = str(int(value) + len(STYLE))
            self._style_owed = self.command == "GET"
        super().send_header(keyword, value)

    def end_headers(self) -> None:
        req = self._request
        if req is not None and req.forces_download and self._status is not None and 200 <= self._status < 300:
            self.send_header("Content-Disposition", content_disposition(req.filename))
        super().end_headers()

    def log_request(self, code: Any = "-", size: Any = "-") -> None:
        # answered requests are logged once by handle_one_request
        pass

    def log_message(self, format: str, *args: Any) -> None:
        if self.quiet:
            return
        self.logger.info("%s - - %s", self.client_address[0], format % args)

    def _log_completed(self) -> None:
        if self.quiet:
            return
        host, port = self.client_address[:2]
        if self._request is not None:
            path = self._request.path
        elif self._parsed:
            path = request_path(self.path)
        else:
            # the request line was rejected before a path was read
            path = "-"
        self.logger.info(
            "%s %s %s %s %s:%s | %s",
            self.command or "-",
            path,
            self.request_version or "-",
            self._status if self._status is not None else "-",
            host,
            port,
            self.headers.get("User-Agent", "") if self._parsed else "",
        )
