"""Router tests."""

import logging

import pytest
from roadtrail_core.http.request import RequestInfo
from roadtrail_core.routing.binding import ResolvedAction
from roadtrail_core.routing.collection import Collection
from roadtrail_core.routing.errors import (
    ConfigurationError,
    ErrorReporter,
    RouterFrozenError,
)
from roadtrail_core.routing.route import HttpMethod
from roadtrail_core.routing.router import Router


class RecordingReporter(ErrorReporter):
    """Reporter that only records."""

    def __init__(self):
        self.items = []

    def report(self, message, context=None):
        self.items.append((message, context or {}))


@pytest.fixture
def admin_router():
    """Router with an https admin collection."""
    router = Router()
    router.register_collection("admin", {
        "target": "/admin",
        "scheme": "https",
        "namespace": "AdminController",
    })
    router.get("/settings", "{ns}@settings", collection="admin")
    return router


class TestReservedCollections:
    """Test the default and error collections."""

    def test_reserved_exist(self):
        """Test default and error are always there."""
        router = Router()

        assert router.get_collection("default").is_reserved
        assert router.get_collection("error").is_reserved
        assert [c.name for c in router.collections] == ["default", "error"]

    def test_reserved_cannot_be_removed(self):
        """Test removal is refused."""
        router = Router()

        with pytest.raises(ConfigurationError):
            router.remove_collection("default")
        with pytest.raises(ConfigurationError):
            router.remove_collection("error")

    def test_reserved_flag_kept(self):
        """Test reconfiguring default keeps it reserved."""
        router = Router()
        router.register_collection("default", {"reserved": False, "target": "/"})
        router.add_collection(Collection("error"))

        assert router.get_collection("default").is_reserved
        assert router.get_collection("error").is_reserved


class TestResolve:
    """Test request resolution."""

    def test_admin_scenario(self, admin_router):
        """Test a route in a scheme-bound collection."""
        outcome = admin_router.resolve("get", "/admin/settings", "https")

        assert outcome.matched is True
        assert outcome.collection_name == "admin"
        assert outcome.arguments == {}
        assert outcome.method == "GET"
        assert outcome.action == ResolvedAction("AdminController", "settings")
        assert outcome.action.key == "AdminController@settings"
        assert outcome.handler is None

    def test_admin_scenario_prefixed(self, admin_router):
        """Test the same route with method prefixing."""
        admin_router.register_collection("admin", prefix=True)

        outcome = admin_router.resolve("GET", "/admin/settings", "https")

        assert outcome.action.key == "AdminController@get_settings"

    def test_scheme_mismatch_falls_back_to_default(self, admin_router):
        """Test a plain http request skips the https collection."""
        outcome = admin_router.resolve("GET", "/admin/settings", "http")

        assert outcome.matched is False
        assert outcome.collection_name == "default"

    def test_unknown_path_uses_default(self):
        """Test the default fallback."""
        router = Router()
        router.register_collection("admin", target="/admin")

        outcome = router.resolve("GET", "/unknown")

        assert outcome.collection_name == "default"
        assert outcome.matched is False
        assert outcome.route is None

    def test_default_routes_match(self):
        """Test routes in the default collection."""
        router = Router()
        route = router.get("/about", "Pages@about")

        outcome = router.resolve("GET", "/about")

        assert outcome.matched
        assert outcome.route is route
        assert outcome.collection_name == "default"

    def test_last_candidate_collection_wins(self):
        """Test later collections override earlier ones on overlap."""
        router = Router()
        router.register_collection("broad", target="/api")
        router.register_collection("narrow", target="/api/v2")

        assert router.resolve("GET", "/api/v2/users").collection_name == "narrow"

        router = Router()
        router.register_collection("narrow", target="/api/v2")
        router.register_collection("broad", target="/api")

        assert router.resolve("GET", "/api/v2/users").collection_name == "broad"

    def test_first_registered_route_wins(self):
        """Test overlapping routes in one collection."""
        router = Router()
        first = router.get("/pages/:slug", "Pages@show")
        router.get("/pages/about", "Pages@about")

        assert router.resolve("GET", "/pages/about").route is first

    def test_method_must_be_allowed(self):
        """Test method filtering."""
        router = Router()
        router.post("/users", "Users@store")

        assert router.resolve("GET", "/users").matched is False
        assert router.resolve("POST", "/users").matched is True
        assert router.resolve("BREW", "/users").matched is False

    def test_segment_count_strict(self):
        """Test extra segments do not match."""
        router = Router()
        router.get("/users/:id", "Users@show")

        assert router.resolve("GET", "/users/42/extra").matched is False

    def test_path_normalized(self):
        """Test trailing slash and query string."""
        router = Router()
        router.get("/users/:id", "Users@show")

        assert router.resolve("GET", "/users/42/").arguments == {"id": "42"}
        assert router.resolve("GET", "/users//42?tab=posts").arguments == {"id": "42"}

    def test_hostname_filter(self):
        """Test hostname-bound collections."""
        router = Router()
        router.register_collection("api", target="/v1", hostname="api.example.com")
        router.get("/ping", "Api@ping", collection="api")

        assert router.resolve("GET", "/v1/ping", "http", "www.example.com").collection_name == "default"
        assert router.resolve("GET", "/v1/ping", "http", "api.example.com").matched
        assert router.resolve("GET", "/v1/ping").matched

    def test_resolution_state(self):
        """Test the stored outcome accessors."""
        router = Router()
        route = router.get("/users/:id", "Users@show")

        router.resolve("GET", "/users/7")

        assert router.has_matched()
        assert router.resolved_route() is route
        assert router.resolved_arguments() == {"id": "7"}
        assert router.method == "GET"
        assert router.path == "/users/7"

        router.resolve("GET", "/nothing")

        assert not router.has_matched()
        assert router.resolved_route() is None

    def test_callable_outcome(self):
        """Test a callable handler and its arguments."""

        def show(user_id):
            return f"user {user_id}"

        router = Router()
        router.get("/users/:id", show)

        outcome = router.resolve("GET", "/users/9")

        assert outcome.handler is show
        assert outcome.action is None
        assert outcome.handler(*outcome.values) == "user 9"

    def test_resolve_request(self, admin_router):
        """Test resolving a request descriptor."""
        request = RequestInfo.from_url("GET", "https://example.com/admin/settings?x=1")

        assert admin_router.resolve_request(request).matched

    def test_orphaned_route_skipped(self):
        """Test resolution continues past an orphaned route."""
        router = Router()
        router.register_collection("ghost")
        orphan = router.get("/thing", "Ghost@thing", collection="ghost")
        router.get_collection("default")._routes.append(orphan)
        router.remove_collection("ghost")
        fallback = router.get("/thing", "Things@show")

        outcome = router.resolve("GET", "/thing")

        assert outcome.route is fallback
        assert len(outcome.errors) == 1
        assert router.has_errors

    def test_resolve_never_raises(self, monkeypatch):
        """Test unexpected failures become unmatched outcomes."""
        reporter = RecordingReporter()
        router = Router(reporter=reporter)
        router.get("/a", "A@a")

        def boom(method, path):
            raise RuntimeError("boom")

        monkeypatch.setattr(router.get_collection("default"), "resolve", boom)

        outcome = router.resolve("GET", "/a")

        assert outcome.matched is False
        assert reporter.items[0][1]["error"] == "boom"


class TestRegistration:
    """Test registration APIs."""

    def test_typed_registration_rejects_unknown(self):
        """Test the typed API refuses unknown methods."""
        router = Router()

        with pytest.raises(ConfigurationError):
            router.route("BREW", "/coffee", "Pot@brew")

        route = router.route(HttpMethod.DELETE, "/users/:id", "Users@destroy")
        assert route.methods == [HttpMethod.DELETE]

    def test_register_route_drops_unknown(self):
        """Test the list API drops unknown methods."""
        router = Router()
        route = router.register_route(["get", "brew"], "/coffee", "Pot@brew")

        assert route.methods == [HttpMethod.GET]

    def test_method_helpers(self):
        """Test one helper per method."""
        router = Router()

        for name in ("get", "post", "put", "patch", "delete", "head", "options"):
            route = getattr(router, name)(f"/{name}", f"Verbs@{name}")
            assert route.methods == [HttpMethod.parse(name)]

    def test_string_parameters_name_collection(self):
        """Test a string in the parameters slot is a collection name."""
        router = Router()
        route = router.register_route("get", "/x", "X@x", "admin")

        assert route.collection == "admin"
        assert router.has_collection("admin")

    def test_add_route_object(self):
        """Test adding a prebuilt route."""
        from roadtrail_core.routing.route import Route

        router = Router()
        router.register_collection("api", target="/api")
        route = Route("get", "/ping", "Api@ping", collection="api")

        router.add_route(route)

        assert route.router is router
        assert router.resolve("GET", "/api/ping").route is route

    def test_register_collections(self):
        """Test the multi-collection format."""
        router = Router()
        router.register_collections({
            "shop": {
                "config": {"target": "/shop", "namespace": "Shop"},
                "routes": [["get", "/cart", "{ns}@cart"]],
            },
            "docs": {"target": "/docs", "routes": [["get", "/:page", "Docs@page"]]},
            "broken": "nope",
        })

        assert router.resolve("GET", "/shop/cart").action.key == "Shop@cart"
        assert router.resolve("GET", "/docs/intro").arguments == {"page": "intro"}
        assert not router.has_collection("broken")

    def test_custom_identifier_and_classes(self):
        """Test router-wide pattern settings."""
        from roadtrail_core.routing.params import ParamClasses

        router = Router(identifier="$", param_classes=ParamClasses({"hex": "[0-9a-f]{1,8}"}))
        router.get("/colors/$value", "Colors@show", {"$value": "hex"})

        assert router.resolve("GET", "/colors/ff00aa").arguments == {"value": "ff00aa"}
        assert router.resolve("GET", "/colors/zz").matched is False


class TestFreeze:
    """Test the registration barrier."""

    def test_freeze_blocks_registration(self):
        """Test registration after freeze."""
        router = Router()
        route = router.get("/a", "A@a")
        router.freeze()

        assert router.is_frozen
        assert route._pattern is not None
        with pytest.raises(RouterFrozenError):
            router.get("/b", "B@b")
        with pytest.raises(RouterFrozenError):
            route.named("a")
        with pytest.raises(RouterFrozenError):
            router.register_collection("late")

    def test_resolve_after_freeze(self):
        """Test resolution still works."""
        router = Router()
        router.get("/a", "A@a")
        router.freeze()

        assert router.resolve("GET", "/a").matched


class TestUrlFor:
    """Test reverse URL generation."""

    def test_round_trip(self):
        """Test a matched path can be rebuilt."""
        router = Router()
        router.get("/users/:id", "Users@show").named("users.show")

        outcome = router.resolve("GET", "/users/42")

        assert router.url_for("users.show", {"id": 42}) == "/users/42"
        assert router.url_for("users.show", outcome.arguments) == "/users/42"

    def test_collection_target_included(self):
        """Test the collection target is part of the URL."""
        router = Router()
        router.register_collection("admin", target="/admin")
        router.get("/users/:id", "Admin@user", collection="admin").named("admin.user")

        assert router.url_for("admin.user", ["5"]) == "/admin/users/5"

    def test_missing_argument(self):
        """Test a missing argument gives an empty segment."""
        router = Router()
        router.get("/users/:id", "Users@show").named("users.show")

        assert router.url_for("users.show") == "/users/"
        assert router.url_for("users.show", {"other": 1}) == "/users/"

    def test_unknown_name_fallback(self):
        """Test the fallback is returned verbatim."""
        router = Router()

        assert router.url_for("missing") == "/"
        assert router.url_for("missing", {"id": 1}, "/fallback?x=1", query={"a": "b"}) == "/fallback?x=1"

    def test_duplicate_name_last_wins(self):
        """Test a reused name points at the newest route."""
        router = Router()
        router.get("/a", "A@a").named("dup")
        router.get("/b", "B@b").named("dup")

        assert router.url_for("dup") == "/b"

    def test_query(self):
        """Test a query string is appended."""
        router = Router()
        router.get("/users/:id", "Users@show").named("users.show")

        assert router.url_for("users.show", {"id": 1}, query={"tab": "posts"}) == "/users/1?tab=posts"


class TestInvalidPatterns:
    """Test routes whose parameter regex does not compile."""

    @pytest.fixture
    def broken_router(self):
        reporter = RecordingReporter()
        router = Router(reporter=reporter)
        router.get("/broken/:id", "A@a", {":id": "[0-9"}).named("broken")
        router.get("/users/:id", "Users@show").named("users.show")
        return router, reporter

    def test_later_routes_still_match(self, broken_router):
        """Test a broken route does not hide the rest of its collection."""
        router, reporter = broken_router

        outcome = router.resolve("GET", "/users/42")

        assert outcome.matched
        assert outcome.arguments == {"id": "42"}
        assert [message for message, _ in reporter.items] == ["Route pattern does not compile"]

    def test_url_for_returns_fallback(self, broken_router):
        """Test URL building for a broken route gives the fallback."""
        router, reporter = broken_router

        assert router.url_for("broken", {"id": 1}, "/oops") == "/oops"
        assert router.url_for("users.show", {"id": 1}) == "/users/1"
        assert reporter.items

    def test_freeze_reports(self, broken_router):
        """Test freezing reports the route instead of raising."""
        router, reporter = broken_router

        router.freeze()

        assert router.is_frozen
        assert reporter.items[0][1]["route"].startswith("Route(GET '/broken/:id'")
        assert router.resolve("GET", "/users/7").matched

    def test_from_config_with_freeze(self):
        """Test a config-built router survives a broken route."""
        from roadtrail_core.utils.config import RouterConfig

        config = RouterConfig.from_dict({
            "freeze": True,
            "collections": {"api": {"target": "/api", "routes": [
                {"methods": "get", "path": "/bad/:id", "handler": "Api@bad", "parameters": {":id": "(("}},
                ["get", "/ping", "Api@ping"],
            ]}},
        })

        router = Router.from_config(config, reporter=RecordingReporter())

        assert router.is_frozen
        assert router.resolve("GET", "/api/ping").action.key == "Api@ping"


class TestMalformedCollectionConfig:
    """Test malformed collection configs are skipped."""

    def test_routes_not_a_list(self, caplog):
        """Test a scalar routes entry is ignored."""
        router = Router()

        with caplog.at_level(logging.WARNING, logger="roadtrail_core"):
            collection = router.register_collection("admin", {"target": "/admin", "routes": 5})

        assert len(collection) == 0
        assert collection.target == "/admin"
        assert "ignoring routes of type int" in caplog.text

    def test_config_not_a_mapping(self, caplog):
        """Test a collection with a scalar config is skipped and the rest load."""
        router = Router()
        with caplog.at_level(logging.WARNING, logger="roadtrail_core"):
            router.register_collections({
                "admin": {"config": "oops", "routes": [["get", "/x", "A@x"]]},
                "shop": {"config": {"target": "/shop"}, "routes": [["get", "/cart", "Shop@cart"]]},
            })

        assert not router.has_collection("admin")
        assert router.resolve("GET", "/shop/cart").matched
        assert "config must be a mapping" in caplog.text
