"""Tests for sprig.routing.router — trie router and middleware pipelines."""

import pytest

from sprig.errors import ConfigurationError, MethodNotAllowed, NotFound
from sprig.http.request import Request
from sprig.http.response import Response
from sprig.routing.router import Router, normalize_path


def _ok(request: Request, response: Response) -> Response:
    return response.with_body("ok")


def _body(label: str):
    def handler(request: Request, response: Response) -> Response:
        return response.with_body(label)

    return handler


def _dispatch(router: Router, method: str, uri: str) -> Response:
    return router.dispatch(Request.create(method, uri), Response())


def _suffix(marker: str):
    """Middleware that appends *marker* to the body after the inner layers ran."""

    def middleware(request: Request, response: Response, next) -> Response:
        response = next(request, response)
        return response.with_body(f"{response.text} {marker}")

    return middleware


class TestNormalizePath:
    @pytest.mark.parametrize("raw", ["/a//b/", "a/b", "/a/b", "//a///b//"])
    def test_collapses_and_trims(self, raw: str) -> None:
        assert normalize_path(raw) == "a/b"

    def test_root(self) -> None:
        assert normalize_path("/") == ""
        assert normalize_path("") == ""


class TestStaticRoutes:
    def test_scenario_home(self) -> None:
        r = Router()
        r.add("GET", "/home", lambda req, res: res.with_body("Welcome Home"))

        assert _dispatch(r, "GET", "/home").text == "Welcome Home"

    def test_root(self) -> None:
        r = Router().add("GET", "/", _body("root"))
        assert _dispatch(r, "GET", "/").text == "root"

    def test_nested(self) -> None:
        r = Router().add("GET", "/api/v2/users", _body("users"))
        assert _dispatch(r, "GET", "/api/v2/users").text == "users"

    @pytest.mark.parametrize("registered", ["/a//b/", "a/b", "/a/b"])
    @pytest.mark.parametrize("requested", ["/a//b/", "a/b", "/a/b", "/a/b/"])
    def test_normalization_is_symmetric(self, registered: str, requested: str) -> None:
        r = Router().add("GET", registered, _ok)
        assert _dispatch(r, "GET", requested).text == "ok"

    def test_reregistering_overwrites(self) -> None:
        r = Router()
        r.add("GET", "/page", _body("first"))
        r.add("GET", "/page", _body("second"))

        assert _dispatch(r, "GET", "/page").text == "second"
        assert len(r.routes) == 1

    def test_method_is_case_insensitive(self) -> None:
        r = Router().add("get", "/x", _ok)
        assert _dispatch(r, "GET", "/x").text == "ok"

    def test_custom_verb(self) -> None:
        r = Router().add("PURGE", "/cache", _body("purged"))
        assert _dispatch(r, "PURGE", "/cache").text == "purged"

    def test_add_is_chainable(self) -> None:
        r = Router()
        assert r.add("GET", "/a", _ok) is r
        assert r.use(_suffix("m")) is r
        assert r.group("/g", lambda router: None) is r

    def test_verb_shortcuts(self) -> None:
        r = Router()
        r.get("/x", _body("get")).post("/x", _body("post")).put("/x", _body("put"))
        r.patch("/x", _body("patch")).delete("/x", _body("delete"))
        r.options("/x", _body("options")).head("/x", _body("head"))

        for verb in ("GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"):
            assert _dispatch(r, verb, "/x").text == verb.lower()


class TestParams:
    def test_scenario_user_id(self) -> None:
        r = Router()
        r.add("GET", "/user/:id", lambda req, res: res.with_body("User " + req.get("id")))

        assert _dispatch(r, "GET", "/user/42").text == "User 42"

    def test_capture_order(self) -> None:
        seen: dict[str, str] = {}

        def handler(request: Request, response: Response) -> None:
            seen.update(request.parameters)

        r = Router().add("GET", "/post/:postId/comment/:commentId", handler)
        _dispatch(r, "GET", "/post/10/comment/99")

        assert seen == {"postId": "10", "commentId": "99"}
        assert list(seen) == ["postId", "commentId"]

    def test_parameters_set_on_request(self) -> None:
        r = Router().add("GET", "/files/:name", _ok)
        request = Request.create("GET", "/files/report.pdf")
        r.dispatch(request, Response())

        assert request.parameters == {"name": "report.pdf"}

    def test_static_route_resets_parameters(self) -> None:
        r = Router().add("GET", "/about", _ok)
        request = Request.create("GET", "/about")
        request.parameters = {"stale": "value"}
        r.dispatch(request, Response())

        assert request.parameters == {}

    def test_param_consumes_exactly_one_segment(self) -> None:
        r = Router().add("GET", "/user/:id", _ok)

        with pytest.raises(NotFound):
            _dispatch(r, "GET", "/user/1/extra")
        with pytest.raises(NotFound):
            _dispatch(r, "GET", "/user")

    def test_routes_sharing_param_branch_keep_own_names(self) -> None:
        r = Router()
        r.add("GET", "/item/:id", lambda req, res: res.with_body(f"id={req.parameters}"))
        r.add("GET", "/item/:slug/edit", lambda req, res: res.with_body(f"slug={req.parameters}"))

        assert _dispatch(r, "GET", "/item/7").text == "id={'id': '7'}"
        assert _dispatch(r, "GET", "/item/seven/edit").text == "slug={'slug': 'seven'}"

    def test_empty_param_name_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            Router().add("GET", "/user/:", _ok)


class TestLiteralPrecedence:
    def test_literal_beats_param(self) -> None:
        r = Router()
        r.add("GET", "/user/:id", _body("param"))
        r.add("GET", "/user/profile", _body("literal"))

        assert _dispatch(r, "GET", "/user/profile").text == "literal"
        assert _dispatch(r, "GET", "/user/42").text == "param"

    def test_literal_beats_param_regardless_of_order(self) -> None:
        r = Router()
        r.add("GET", "/user/profile", _body("literal"))
        r.add("GET", "/user/:id", _body("param"))

        assert _dispatch(r, "GET", "/user/profile").text == "literal"

    def test_backtracks_into_param_when_literal_dead_ends(self) -> None:
        r = Router()
        r.add("GET", "/user/profile/settings", _body("settings"))
        r.add("GET", "/user/:id/posts", _body("posts"))

        response = _dispatch(r, "GET", "/user/profile/posts")
        assert response.text == "posts"

    def test_backtracks_when_literal_prefix_is_not_a_leaf(self) -> None:
        r = Router()
        r.add("GET", "/a/b/c", _body("abc"))
        r.add("GET", "/a/:x", _body("param"))

        request = Request.create("GET", "/a/b")
        assert r.dispatch(request, Response()).text == "param"
        assert request.parameters == {"x": "b"}

    def test_backtracks_across_ancestor_levels(self) -> None:
        r = Router()
        r.add("GET", "/x/y/z", _body("literal"))
        r.add("GET", "/:a/y/w", _body("param"))

        assert _dispatch(r, "GET", "/x/y/w").text == "param"


class TestErrors:
    def test_not_found(self) -> None:
        r = Router().add("GET", "/users", _ok)

        with pytest.raises(NotFound) as exc_info:
            _dispatch(r, "GET", "/nonexistent")
        assert exc_info.value.status == 404

    def test_not_found_on_empty_router(self) -> None:
        with pytest.raises(NotFound):
            _dispatch(Router(), "GET", "/")

    def test_method_not_allowed(self) -> None:
        r = Router().add("GET", "/about", _ok)

        with pytest.raises(MethodNotAllowed) as exc_info:
            _dispatch(r, "POST", "/about")

        err = exc_info.value
        assert err.status == 405
        assert dict(err.headers)["Allow"] == "GET"

    def test_method_not_allowed_lists_every_method(self) -> None:
        r = Router().add("GET", "/x", _ok).add("DELETE", "/x", _ok)

        with pytest.raises(MethodNotAllowed) as exc_info:
            _dispatch(r, "PUT", "/x")
        assert exc_info.value.allowed == frozenset({"GET", "DELETE"})

    def test_method_not_allowed_is_not_not_found(self) -> None:
        r = Router().add("GET", "/about", _ok)

        with pytest.raises(MethodNotAllowed):
            _dispatch(r, "POST", "/about")

    def test_intermediate_node_is_not_a_leaf(self) -> None:
        r = Router().add("GET", "/a/b", _ok)

        with pytest.raises(NotFound):
            _dispatch(r, "GET", "/a")

    def test_handler_exception_propagates_unchanged(self) -> None:
        boom = RuntimeError("boom")

        def handler(request: Request, response: Response) -> None:
            raise boom

        r = Router().add("GET", "/x", handler, [_suffix("never")])

        with pytest.raises(RuntimeError) as exc_info:
            _dispatch(r, "GET", "/x")
        assert exc_info.value is boom


class TestMatch:
    def test_match_returns_route_and_parameters(self) -> None:
        r = Router().add("GET", "/user/:id", _ok)
        matched = r.match("GET", "/user/5")

        assert matched.route.handler is _ok
        assert matched.route.path == "/user/:id"
        assert matched.parameters == {"id": "5"}

    def test_match_does_not_run_handler(self) -> None:
        calls: list[str] = []
        r = Router().add("GET", "/x", lambda req, res: calls.append("run"))
        r.match("GET", "/x")
        assert calls == []


class TestPipeline:
    def test_single_middleware(self) -> None:
        def with_middleware(request: Request, response: Response, next) -> Response:
            response = next(request, response)
            return response.with_body(response.text + " with middleware")

        r = Router().add("GET", "/test", _body("Base"), [with_middleware])
        assert _dispatch(r, "GET", "/test").text == "Base with middleware"

    def test_first_registered_runs_outermost(self) -> None:
        r = Router().add("GET", "/chain", _body("Start"), [_suffix("first"), _suffix("second")])
        assert _dispatch(r, "GET", "/chain").text == "Start second first"

    def test_pre_next_order(self) -> None:
        order: list[str] = []

        def tracer(name: str):
            def middleware(request: Request, response: Response, next) -> Response:
                order.append(f"{name}:before")
                result = next(request, response)
                order.append(f"{name}:after")
                return result

            return middleware

        def handler(request: Request, response: Response) -> None:
            order.append("handler")

        r = Router().add("GET", "/x", handler, [tracer("m1"), tracer("m2")])
        _dispatch(r, "GET", "/x")

        assert order == ["m1:before", "m2:before", "handler", "m2:after", "m1:after"]

    def test_void_handler_mutates_response(self) -> None:
        def handler(request: Request, response: Response) -> None:
            response.with_status(202).with_body("accepted")

        r = Router().add("GET", "/x", handler)
        given = Response()
        result = r.dispatch(Request.create("GET", "/x"), given)

        assert result is given
        assert result.status == 202
        assert result.text == "accepted"

    def test_returned_response_replaces_original(self) -> None:
        replacement = Response("new")
        r = Router().add("GET", "/x", lambda req, res: replacement)

        given = Response()
        assert r.dispatch(Request.create("GET", "/x"), given) is replacement

    def test_next_yields_response_when_inner_returns_none(self) -> None:
        captured: list[Response] = []

        def middleware(request: Request, response: Response, next) -> None:
            captured.append(next(request, response))

        def handler(request: Request, response: Response) -> None:
            response.with_body("mutated")

        given = Response()
        r = Router().add("GET", "/x", handler, [middleware])
        result = r.dispatch(Request.create("GET", "/x"), given)

        assert captured == [given]
        assert result is given
        assert result.text == "mutated"

    def test_middleware_can_short_circuit(self) -> None:
        calls: list[str] = []

        def deny(request: Request, response: Response, next) -> Response:
            return Response("denied", status=403)

        def handler(request: Request, response: Response) -> None:
            calls.append("handler")

        r = Router().add("GET", "/x", handler, [deny])
        response = _dispatch(r, "GET", "/x")

        assert response.status == 403
        assert calls == []

    def test_middleware_sees_parameters(self) -> None:
        seen: list[dict[str, str]] = []

        def spy(request: Request, response: Response, next) -> Response:
            seen.append(dict(request.parameters))
            return next(request, response)

        r = Router().add("GET", "/user/:id", _ok, [spy])
        _dispatch(r, "GET", "/user/9")
        assert seen == [{"id": "9"}]

    def test_fresh_pipeline_per_dispatch(self) -> None:
        r = Router().add("GET", "/x", _body("x"), [_suffix("m")])
        assert _dispatch(r, "GET", "/x").text == "x m"
        assert _dispatch(r, "GET", "/x").text == "x m"


class TestGlobalMiddleware:
    def test_global_wraps_route_middleware(self) -> None:
        r = Router().use(_suffix("global"))
        r.add("GET", "/x", _body("h"), [_suffix("route")])

        assert _dispatch(r, "GET", "/x").text == "h route global"

    def test_snapshotted_at_registration(self) -> None:
        r = Router()
        r.add("GET", "/before", _body("before"))
        r.use(_suffix("global"))
        r.add("GET", "/after", _body("after"))

        assert _dispatch(r, "GET", "/before").text == "before"
        assert _dispatch(r, "GET", "/after").text == "after global"

    def test_order_global_group_route(self) -> None:
        r = Router().use(_suffix("global"))
        r.group(
            "/g",
            lambda router: router.add("GET", "/x", _body("h"), [_suffix("route")]),
            [_suffix("group")],
        )

        assert _dispatch(r, "GET", "/g/x").text == "h route group global"


class TestGroups:
    def test_prefix_applied(self) -> None:
        r = Router()
        r.group("/admin", lambda router: router.add("GET", "/stats", _body("stats")))

        assert _dispatch(r, "GET", "/admin/stats").text == "stats"
        with pytest.raises(NotFound):
            _dispatch(r, "GET", "/stats")

    def test_prefix_without_slashes(self) -> None:
        r = Router()
        r.group("api", lambda router: router.add("GET", "users", _body("users")))
        assert _dispatch(r, "GET", "/api/users").text == "users"

    def test_scoping(self) -> None:
        r = Router()
        r.add("GET", "/before", _body("before"))
        r.group(
            "/g",
            lambda router: router.add("GET", "/inside", _body("inside")),
            [_suffix("group")],
        )
        r.add("GET", "/after", _body("after"))

        assert _dispatch(r, "GET", "/before").text == "before"
        assert _dispatch(r, "GET", "/g/inside").text == "inside group"
        assert _dispatch(r, "GET", "/after").text == "after"

    def test_nesting(self) -> None:
        def inner(router: Router) -> None:
            router.add("GET", "/leaf", _body("leaf"))

        def outer(router: Router) -> None:
            router.group("/inner", inner, [_suffix("inner")])
            router.add("GET", "/mid", _body("mid"))

        r = Router()
        r.group("/outer", outer, [_suffix("outer")])

        assert _dispatch(r, "GET", "/outer/inner/leaf").text == "leaf inner outer"
        assert _dispatch(r, "GET", "/outer/mid").text == "mid outer"

    def test_group_with_params(self) -> None:
        r = Router()
        r.group("/org/:org", lambda router: router.add("GET", "/repo/:repo", _ok))

        request = Request.create("GET", "/org/acme/repo/rocket")
        r.dispatch(request, Response())
        assert request.parameters == {"org": "acme", "repo": "rocket"}

    def test_scope_restored_after_error(self) -> None:
        def broken(router: Router) -> None:
            router.add("GET", "/ok", _ok)
            raise ValueError("bad config")

        r = Router()
        with pytest.raises(ValueError):
            r.group("/g", broken, [_suffix("group")])
        r.add("GET", "/after", _body("after"))

        assert _dispatch(r, "GET", "/after").text == "after"

    def test_group_does_not_touch_existing_routes(self) -> None:
        r = Router().add("GET", "/x", _body("x"))
        r.group("/", lambda router: None, [_suffix("group")])
        assert _dispatch(r, "GET", "/x").text == "x"


class TestRoutesIntrospection:
    def test_lists_all(self) -> None:
        r = Router()
        r.add("GET", "/a", _ok).add("POST", "/a", _ok).add("GET", "/b/:id", _ok)

        pairs = sorted((route.method, route.path) for route in r.routes)
        assert pairs == [("GET", "/a"), ("GET", "/b/:id"), ("POST", "/a")]

    def test_route_carries_merged_middleware(self) -> None:
        g, grp, per = _suffix("g"), _suffix("grp"), _suffix("per")
        r = Router().use(g)
        r.group("/x", lambda router: router.add("GET", "/y", _ok, [per]), [grp])

        (route,) = r.routes
        assert route.middleware == (g, grp, per)
        assert route.param_names == ()
