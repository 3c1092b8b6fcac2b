"""Middleware — priority-ordered hooks run before every handler."""

from wren.middleware.pipeline import run_middleware
from wren.middleware.protocol import Middleware

__all__ = ["Middleware", "run_middleware"]
