"""Network listener.

Starts a pounce ASGI server with the live wren App object.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from wren.app import App


def run_server(
    app: App,
    host: str,
    port: int,
    *,
    workers: int = 1,
    reload: bool = False,
    log_level: str = "info",
) -> None:
    """Start a pounce server with the given wren App.

    Pounce's ``run()`` takes an import string (e.g., ``"myapp:app"``),
    but wren has a live ``App`` object. We use ``pounce.Server``
    directly with the ASGI callable.

    Args:
        app: ASGI callable (wren App instance).
        host: Bind host address.
        port: Bind port number.
        workers: Worker count; development mode always uses one.
        reload: Enable auto-reload on file changes.
        log_level: Level for pounce's own access and error logs.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(
        host=host,
        port=port,
        workers=1 if reload else workers,
        reload=reload,
        log_level=log_level,
    )
    server = Server(config, app)
    server.run()
