from __future__ import annotations

import argparse
import logging
import signal
import sys
from pathlib import Path
from typing import Optional

from .config import DEFAULT_FOLDER, DEFAULT_PORT, ServerConfig
from .network import banner, local_address
from .server import folderServer
from .tls import generate_self_signed_credential

LOG = logging.getLogger("folderServer.cli")


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="serve-folder", description="Serve a folder over HTTP (or HTTPS with a throwaway self-signed certificate)")
    p.add_argument("--port", type=int, default=DEFAULT_PORT, help="Port to listen on (0 for ephemeral)")
    p.add_argument("--folder", default=DEFAULT_FOLDER, help="Folder to serve")
    p.add_argument("--silent", action="store_true", help="Do not log requests")
    p.add_argument("--https", action="store_true", help="Serve HTTPS with a generated self-signed certificate")
    p.add_argument("--host", default="0.0.0.0", help="Host/interface to bind")
    p.add_argument("--log-level", default="INFO", help="Logging level")
    return p


def main(argv: Optional[list[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    folder = Path(args.folder).resolve()
    if not folder.is_dir():
        # keep serving; every request answers 404 until the folder appears
        LOG.warning("folder does not exist or is not a directory: %s", folder)

    config = ServerConfig(port=args.port, folder=folder, quiet=bool(args.silent), https=bool(args.https), host=args.host)

    credential = None
    if config.https:
        try:
            credential = generate_self_signed_credential()
        except Exception:
            LOG.exception("Could not generate a self-signed certificate")
            return 1

    server = folderServer(config, credential=credential, logger=LOG)

    # graceful shutdown handling
    stop_requested = False

    def _on_signal(signum, frame):
        nonlocal stop_requested
        LOG.info("Received signal %s, stopping...", signum)
        stop_requested = True

    signal.signal(signal.SIGINT, _on_signal)
    signal.signal(signal.SIGTERM, _on_signal)

    try:
        server.start()
        print(banner(config.scheme, server.sock_port, local_address()), flush=True)
        # wait until signal
        while not stop_requested:
            signal.pause()
    except KeyboardInterrupt:
        LOG.info("Keyboard interrupt received, stopping server")
    except Exception:
        LOG.exception("Server failed")
        return 1
    finally:
        server.stop()
        LOG.info("Server stopped")

    return 0


if __name__ == "__main__":
    sys.exit(main())
