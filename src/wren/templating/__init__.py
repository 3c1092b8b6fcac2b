"""Templates — kida rendering bound to every Context as ``view``/``render``."""

from wren.templating.engine import Engine
from wren.templating.returns import Template

__all__ = ["Engine", "Template"]
