"""Kida environment setup and the render collaborator.

``Engine`` owns one kida Environment, created lazily on first render from
the configured template directory, autoescape flag, filters and globals.
Its bound ``view`` and ``render`` methods are what every Context exposes.
"""

import threading
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from kida import Environment, FileSystemLoader
from kida.environment.exceptions import TemplateNotFoundError

from wren.errors import TemplateNotFound


def _as_context(data: Any) -> dict[str, Any]:
    """Template context for *data*: mappings as-is, anything else as ``data``."""
    if data is None:
        return {}
    if isinstance(data, Mapping):
        return dict(data)
    return {"data": data}


class Engine:
    """Render templates by identifier (``view``) or from source (``render``).

    Usage::

        engine = Engine("templates")
        engine.add_filter("upper", str.upper)
        html = engine.view("index.html", {"title": "Home"})
        html = engine.render("<h1>{{ title }}</h1>", {"title": "Home"})
    """

    __slots__ = ("_autoescape", "_env", "_filters", "_globals", "_lock", "_template_dir")

    def __init__(
        self,
        template_dir: str | Path = "templates",
        *,
        autoescape: bool = True,
        env: Environment | None = None,
    ) -> None:
        self._template_dir = template_dir
        self._autoescape = autoescape
        self._env: Environment | None = env
        self._filters: dict[str, Callable[..., Any]] = {}
        self._globals: dict[str, Any] = {}
        self._lock = threading.Lock()

    def configure(
        self,
        *,
        template_dir: str | Path | None = None,
        autoescape: bool | None = None,
        env: Environment | None = None,
    ) -> None:
        """Change options. The environment is rebuilt on next render."""
        with self._lock:
            if template_dir is not None:
                self._template_dir = template_dir
            if autoescape is not None:
                self._autoescape = autoescape
            self._env = env

    def add_filter(self, name: str, func: Callable[..., Any]) -> None:
        self._filters[name] = func
        if self._env is not None:
            self._env.update_filters({name: func})

    def add_global(self, name: str, value: Any) -> None:
        self._globals[name] = value
        if self._env is not None:
            self._env.add_global(name, value)

    @property
    def environment(self) -> Environment:
        """The kida Environment, created on first access."""
        if self._env is not None:
            return self._env
        with self._lock:
            if self._env is None:
                self._env = self._create()
            return self._env

    def _create(self) -> Environment:
        env = Environment(
            loader=FileSystemLoader(str(self._template_dir)),
            autoescape=self._autoescape,
        )
        if self._filters:
            env.update_filters(self._filters)
        for name, value in self._globals.items():
            env.add_global(name, value)
        return env

    def view(self, name: str, data: Any = None) -> str:
        """Render the template file *name* with *data*.

        Raises:
            TemplateNotFound: If no template with that name exists.
        """
        try:
            template = self.environment.get_template(name)
            return template.render(_as_context(data))
        except TemplateNotFoundError as exc:
            raise TemplateNotFound(name) from exc

    def render(self, source: str, data: Any = None) -> str:
        """Render template text *source* with *data*."""
        try:
            return self.environment.from_string(source).render(_as_context(data))
        except TemplateNotFoundError as exc:
            raise TemplateNotFound(str(exc)) from exc
