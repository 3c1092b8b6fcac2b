"""Request pipeline: ASGI translation, dispatch, error capture, sending."""
