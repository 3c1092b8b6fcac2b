"""Tests for wren.errors and the failure pipeline in wren.server.errors."""

import pytest

from wren.context import Context
from wren.errors import (
    ConfigurationError,
    HTTPError,
    NotFound,
    RouteConflict,
    StaticNotFound,
    TemplateNotFound,
    WrenError,
    message_of,
    status_of,
)
from wren.http.request import Request
from wren.server.errors import PLAIN_TEXT, handle_failure


class TestHierarchy:
    def test_everything_is_wren_error(self) -> None:
        for exc_type in (ConfigurationError, RouteConflict, HTTPError, NotFound, TemplateNotFound):
            assert issubclass(exc_type, WrenError)

    def test_route_conflict_is_configuration_error(self) -> None:
        assert issubclass(RouteConflict, ConfigurationError)

    def test_not_found_defaults(self) -> None:
        exc = NotFound()
        assert exc.status == 404
        assert exc.detail == "Not Found"

    def test_static_not_found(self) -> None:
        exc = StaticNotFound()
        assert isinstance(exc, NotFound)
        assert exc.detail == "File not found"

    def test_template_not_found_keeps_name(self) -> None:
        exc = TemplateNotFound("page.html")
        assert exc.name == "page.html"
        assert "page.html" in str(exc)

    def test_http_error_str(self) -> None:
        assert str(HTTPError(status=418, detail="teapot")) == "418: teapot"
        assert str(HTTPError(status=500)) == "500"


class TestStatusAndMessage:
    def test_http_error_status(self) -> None:
        assert status_of(HTTPError(status=409)) == 409

    def test_plain_exception_is_500(self) -> None:
        assert status_of(ValueError("x")) == 500

    def test_status_attribute_honored(self) -> None:
        class Gone(Exception):
            status = 410

        assert status_of(Gone()) == 410

    def test_invalid_status_attribute_ignored(self) -> None:
        class Weird(Exception):
            status = "teapot"

        class Huge(Exception):
            status = 1000

        assert status_of(Weird()) == 500
        assert status_of(Huge()) == 500

    def test_messages(self) -> None:
        assert message_of(HTTPError(status=403, detail="Forbidden")) == "Forbidden"
        assert message_of(HTTPError(status=403)) == "Error 403"
        assert message_of(ValueError("bad value")) == "bad value"
        assert message_of(ValueError()) == "Internal Server Error"


def _ctx() -> Context:
    return Context(Request.build("GET", "/fail"))


class TestHandleFailure:
    async def test_without_handler(self) -> None:
        ctx = _ctx()
        response = await handle_failure(ValueError("broken"), ctx, None)

        assert response.status == 500
        assert response.content_type == PLAIN_TEXT
        assert response.body == "broken"
        assert isinstance(ctx.error, ValueError)

    async def test_http_error_headers_applied(self) -> None:
        exc = HTTPError(status=405, detail="Nope", headers=(("Allow", "GET"),))
        response = await handle_failure(exc, _ctx(), None)

        assert response.status == 405
        assert response.header("allow") == "GET"

    async def test_handler_receives_populated_context(self) -> None:
        seen: dict[str, object] = {}

        async def on_error(ctx: Context) -> str:
            seen["status"] = ctx.status
            seen["error"] = ctx.error
            return "handled"

        exc = NotFound()
        response = await handle_failure(exc, _ctx(), on_error)

        assert seen == {"status": 404, "error": exc}
        assert response.status == 404
        assert response.body == "handled"

    async def test_handler_failure_uses_last_resort(self) -> None:
        def on_error(ctx: Context) -> str:
            raise RuntimeError("again")

        response = await handle_failure(ValueError("first"), _ctx(), on_error)

        assert response.status == 500
        assert response.body == "Internal Server Error"

    async def test_status_text_cleared(self) -> None:
        ctx = _ctx()
        ctx.status_text = "Not Modified"
        response = await handle_failure(ValueError("x"), ctx, None)

        assert response.status_text == "Internal Server Error"

    async def test_logging(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level("WARNING", logger="wren.server"):
            await handle_failure(NotFound(), _ctx(), None)
            await handle_failure(ValueError("x"), _ctx(), None)

        levels = [record.levelname for record in caplog.records]
        assert levels == ["WARNING", "ERROR"]
