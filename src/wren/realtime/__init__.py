"""Server-Sent Events: poll a data source and push it to the client."""

from wren.realtime.events import EventSource

__all__ = ["EventSource"]
