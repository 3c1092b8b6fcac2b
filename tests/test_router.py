"""Tests for wren.routing.router — segment-trie router."""

import logging

import pytest

from wren.errors import ConfigurationError, NotFound, RouteConflict
from wren.routing.route import Method, RouteEntry
from wren.routing.router import Router, parse_path


def _handler(ctx: object) -> str:
    return "ok"


def _other(ctx: object) -> str:
    return "other"


def _route(path: str, method: Method = Method.GET, handler=_handler) -> RouteEntry:
    return RouteEntry(method=method, path=path, handler=handler)


class TestParsePath:
    def test_root(self) -> None:
        assert parse_path("/") == []

    def test_literal_and_param(self) -> None:
        segments = parse_path("/users/:id")
        assert [s.kind for s in segments] == ["literal", "param"]
        assert segments[1].name == "id"

    def test_catch_all(self) -> None:
        segments = parse_path("/static/*path")
        assert segments[-1].kind == "catch_all"
        assert segments[-1].name == "path"

    def test_trailing_slash_ignored(self) -> None:
        assert parse_path("/users/") == parse_path("/users")

    @pytest.mark.parametrize(
        "pattern",
        ["users", "/users/:", "/files/*", "/files/*rest/more"],
    )
    def test_rejects_malformed(self, pattern: str) -> None:
        with pytest.raises(ConfigurationError):
            parse_path(pattern)


class TestRouterMatching:
    def test_param_extraction(self) -> None:
        router = Router()
        router.add(_route("/users/:id"))

        match = router.match("GET", "/users/42")
        assert match.params == {"id": "42"}

    def test_multiple_params(self) -> None:
        router = Router()
        router.add(_route("/orgs/:org/repos/:repo"))

        match = router.match("GET", "/orgs/acme/repos/wren")
        assert match.params == {"org": "acme", "repo": "wren"}

    def test_literal_wins_over_param(self) -> None:
        router = Router()
        router.add(_route("/users/:id", handler=_other))
        router.add(_route("/users/me"))

        assert router.match("GET", "/users/me").route.handler is _handler
        assert router.match("GET", "/users/7").route.handler is _other

    def test_backtracks_from_dead_literal_subtree(self) -> None:
        router = Router()
        router.add(_route("/users/me/settings"))
        router.add(_route("/users/:id/posts", handler=_other))

        match = router.match("GET", "/users/me/posts")
        assert match.route.handler is _other
        assert match.params == {"id": "me"}

    def test_param_requires_non_empty_segment(self) -> None:
        router = Router()
        router.add(_route("/users/:id/posts"))

        assert router.find("GET", "/users//posts") is None

    def test_trailing_slash_normalized(self) -> None:
        router = Router()
        router.add(_route("/about"))
        router.add(_route("/docs/"))

        assert router.find("GET", "/about/") is not None
        assert router.find("GET", "/docs") is not None

    def test_root_is_not_empty_path(self) -> None:
        router = Router()
        router.add(_route("/"))

        assert router.find("GET", "/") is not None
        assert router.find("GET", "") is None

    def test_catch_all_takes_rest_of_path(self) -> None:
        router = Router()
        router.add(_route("/static/*path"))

        match = router.match("GET", "/static/css/site/main.css")
        assert match.params == {"path": "css/site/main.css"}

    def test_catch_all_is_last_resort(self) -> None:
        router = Router()
        router.add(_route("/*path", handler=_other))
        router.add(_route("/api/:name"))

        assert router.match("GET", "/api/users").route.handler is _handler
        assert router.match("GET", "/api/users/1").route.handler is _other

    def test_unknown_path_raises_not_found(self) -> None:
        router = Router()
        router.add(_route("/users"))

        with pytest.raises(NotFound) as exc_info:
            router.match("GET", "/nope")
        assert exc_info.value.status == 404


class TestMethodFallback:
    def test_exact_method_preferred_over_all(self) -> None:
        router = Router()
        router.add(_route("/thing", Method.ALL, _other))
        router.add(_route("/thing", Method.GET, _handler))

        assert router.match("GET", "/thing").route.handler is _handler
        assert router.match("POST", "/thing").route.handler is _other

    def test_all_answers_any_method(self) -> None:
        router = Router()
        router.add(_route("/ping", Method.ALL))

        for method in ("GET", "POST", "DELETE", "PATCH"):
            assert router.match(method, "/ping").route.method is Method.ALL

    def test_find_does_not_fall_back(self) -> None:
        router = Router()
        router.add(_route("/ping", Method.ALL))

        assert router.find("GET", "/ping") is None

    def test_wrong_method_without_all_is_not_found(self) -> None:
        router = Router()
        router.add(_route("/users", Method.GET))

        with pytest.raises(NotFound):
            router.match("POST", "/users")


class TestConflicts:
    def test_identical_add_is_idempotent(self, caplog: pytest.LogCaptureFixture) -> None:
        router = Router(strict=True)
        entry = _route("/users/:id")
        router.add(entry)
        router.add(RouteEntry(Method.GET, "/users/:id", _handler))

        assert len(router.routes) == 1
        assert not caplog.records

    def test_duplicate_route_last_write_wins(self, caplog: pytest.LogCaptureFixture) -> None:
        router = Router()
        router.add(_route("/users", handler=_handler))
        with caplog.at_level(logging.WARNING, logger="wren.routing"):
            router.add(_route("/users", handler=_other))

        assert router.match("GET", "/users").route.handler is _other
        assert "Duplicate route" in caplog.text

    def test_duplicate_route_strict_raises(self) -> None:
        router = Router(strict=True)
        router.add(_route("/users", handler=_handler))

        with pytest.raises(RouteConflict):
            router.add(_route("/users", handler=_other))

    def test_shared_prefix_keeps_each_routes_names(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        router = Router()
        router.add(_route("/users/:id"))
        with caplog.at_level(logging.WARNING, logger="wren.routing"):
            router.add(_route("/users/:uid/posts", handler=_other))

        assert router.match("GET", "/users/5").params == {"id": "5"}
        assert router.match("GET", "/users/5/posts").params == {"uid": "5"}
        assert "collides" in caplog.text

    def test_param_name_collision_strict_raises(self) -> None:
        router = Router(strict=True)
        router.add(_route("/users/:id"))

        with pytest.raises(RouteConflict):
            router.add(_route("/users/:uid/posts"))

    def test_names_are_per_method(self, caplog: pytest.LogCaptureFixture) -> None:
        router = Router(strict=True)
        router.add(_route("/users/:id", Method.GET))
        with caplog.at_level(logging.WARNING, logger="wren.routing"):
            router.add(_route("/users/:user_id", Method.DELETE, _other))

        assert router.match("GET", "/users/42").params == {"id": "42"}
        assert router.match("DELETE", "/users/42").params == {"user_id": "42"}
        assert not caplog.records

    def test_all_bucket_binds_its_own_names(self) -> None:
        router = Router(strict=True)
        router.add(_route("/files/:name", Method.GET))
        router.add(_route("/files/:file_id", Method.ALL, _other))

        assert router.match("POST", "/files/a.txt").params == {"file_id": "a.txt"}
        assert router.match("GET", "/files/a.txt").params == {"name": "a.txt"}

    def test_names_bound_across_depths(self) -> None:
        router = Router(strict=True)
        router.add(_route("/orgs/:org/repos/:repo", Method.GET))
        router.add(_route("/orgs/:o/repos/:r/*rest", Method.PUT, _other))

        assert router.match("GET", "/orgs/a/repos/b").params == {"org": "a", "repo": "b"}
        assert router.match("PUT", "/orgs/a/repos/b/x/y").params == {
            "o": "a",
            "r": "b",
            "rest": "x/y",
        }

    def test_same_shape_different_names_is_duplicate(self) -> None:
        router = Router(strict=True)
        router.add(_route("/users/:id"))

        with pytest.raises(RouteConflict):
            router.add(_route("/users/:uid", handler=_other))


class TestRoutes:
    def test_routes_lists_every_entry(self) -> None:
        router = Router()
        entries = [
            _route("/"),
            _route("/users/:id"),
            _route("/users/:id", Method.DELETE),
            _route("/static/*path"),
        ]
        for entry in entries:
            router.add(entry)

        assert sorted(router.routes, key=lambda e: (e.path, e.method)) == sorted(
            entries, key=lambda e: (e.path, e.method)
        )
