"""Application configuration.

AppConfig is a frozen dataclass, immutable after creation.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(port=8080, template_dir="views", strict_routes=True)
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 3000
    debug: bool = False
    workers: int = 1
    log_level: str = "info"

    # Templates
    template_dir: str | Path = "templates"
    autoescape: bool = True

    # Static files
    static_index: str = "index.html"

    # Routing: raise RouteConflict instead of last-write-wins
    strict_routes: bool = False
