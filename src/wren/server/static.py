"""Static asset handler.

A route handler that maps the request path onto a directory and answers
with the file bytes, honoring ``If-Modified-Since``. Registered by
``App.serve()``::

    app.serve("/public")               # ./public/** from the working directory
    app.serve("/", directory="site")   # site/** for every unmatched GET

The full request path is resolved under the root directory, so
``GET /public/app.css`` reads ``<root>/public/app.css``.
"""

from __future__ import annotations

import mimetypes
from email.utils import formatdate
from pathlib import Path
from typing import TYPE_CHECKING

import anyio

from wren.errors import HTTPError, StaticNotFound

if TYPE_CHECKING:
    from wren.context import Context


class StaticFiles:
    """Serve files from *directory* (default: the working directory).

    - Directories answer with their index file.
    - ``Content-Type`` comes from the file extension.
    - ``Last-Modified`` is sent as an HTTP-date; a request whose
      ``If-Modified-Since`` equals it gets ``304 Not Modified`` and no body.
    - Missing files raise ``StaticNotFound`` (404); paths that escape the
      root raise a 403. Other I/O errors propagate.
    """

    __slots__ = ("_directory", "_index")

    def __init__(self, directory: str | Path | None = None, *, index: str = "index.html") -> None:
        self._directory = Path(directory or ".").resolve()
        self._index = index

    @property
    def directory(self) -> Path:
        return self._directory

    async def __call__(self, ctx: Context) -> bytes | None:
        relative = ctx.path.lstrip("/")
        root = anyio.Path(self._directory)
        target = await (root / relative).resolve() if relative else root
        if not target.is_relative_to(root):
            raise HTTPError(status=403, detail="Forbidden")

        try:
            stat = await target.stat()
            if await target.is_dir():
                target = target / self._index
                stat = await target.stat()

            content_type, _ = mimetypes.guess_type(target.name)
            if content_type is not None:
                ctx.set("Content-Type", content_type)

            last_modified = formatdate(stat.st_mtime, usegmt=True)
            if ctx.headers.get("if-modified-since") == last_modified:
                ctx.status = 304
                ctx.status_text = "Not Modified"
                return None

            ctx.set("Last-Modified", last_modified)
            return await target.read_bytes()
        except FileNotFoundError:
            raise StaticNotFound from None
