from __future__ import annotations

from pathlib import Path
from typing import Iterator, Optional

import pytest

from folderServer import ServerConfig, folderServer
from folderServer.tls import Credential


@pytest.fixture
def site(tmp_path: Path) -> Path:
    root = tmp_path / "site"
    (root / "docs").mkdir(parents=True)
    (root / "images").mkdir()
    (root / "notes").mkdir()
    (root / "withindex").mkdir()
    (root / "docs" / "report.pdf").write_bytes(b"%PDF-1.4 fake")
    (root / "images" / "cat.png").write_bytes(b"\x89PNG fake")
    (root / "notes" / "readme.txt").write_text("just text")
    (root / "withindex" / "index.html").write_text("<p>home</p>")
    return root


def _running(root: Path, credential: Optional[Credential] = None, quiet: bool = False) -> Iterator[folderServer]:
    server = folderServer(ServerConfig(port=0, folder=root, quiet=quiet, https=credential is not None, host="127.0.0.1"), credential=credential)
    server.start()
    try:
        yield server
    finally:
        server.stop()


@pytest.fixture
def http_server(site: Path) -> Iterator[folderServer]:
    yield from _running(site)


@pytest.fixture
def running():
    return _running
