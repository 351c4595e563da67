from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_PORT = 1080
DEFAULT_FOLDER = "public"


@dataclass(frozen=True)
class ServerConfig:
    """Process-wide settings, fixed once the CLI has parsed its arguments."""

    port: int = DEFAULT_PORT
    folder: Path = field(default_factory=lambda: Path(DEFAULT_FOLDER))
    quiet: bool = False
    https: bool = False
    host: str = "0.0.0.0"

    @property
    def scheme(self) -> str:
        return "https" if self.https else "http"
