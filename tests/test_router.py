"""Tests for the routing host: registration, resolution and dispatch."""

import sys

import pytest

from versionroute import (
    AppSettings,
    BaseRouter,
    InvalidConfiguration,
    RangeViolation,
    RouteDeclaration,
    Router,
    api_route,
)


class ExamplesApi:
    """Handlers mirroring a controller that broke GET twice."""

    @api_route("Examples/", methods=("POST",))
    def post(self):
        return "post"

    @api_route("Examples/", accepted_versions=[1])
    def get(self):
        return "get v1"

    @api_route("Examples/", accepted_versions=[2, 3, 4, 5, 6])
    def some_breaking_change_to_get(self, version):
        return f"get v{version}"

    @api_route("Examples/", starting_version=7)
    def latest_get(self, version):
        return f"latest v{version}"


def build_router(current="8"):
    api = ExamplesApi()
    router = Router(name="examples")
    router.add_entry([api.post, api.get, api.some_breaking_change_to_get, api.latest_get])
    router.resolve(AppSettings({"currentApiVersion": current}))
    return router


def test_resolve_renders_every_route():
    router = build_router()
    templates = [route.template for route in router.routes()]
    assert templates == [
        "api/v{version:int:regex(1|2|3|4|5|6|7|8)}/Examples/",
        "api/v{version:int:regex(1)}/Examples/",
        "api/v{version:int:regex(2|3|4|5|6)}/Examples/",
        "api/v{version:int:regex(7|8)}/Examples/",
    ]


def test_dispatch_picks_handler_by_version_and_method():
    router = build_router()
    assert router.dispatch("api/v1/Examples") == "get v1"
    assert router.dispatch("api/v4/Examples/") == "get v4"
    assert router.dispatch("/api/v8/Examples") == "latest v8"
    assert router.dispatch("api/v3/Examples", method="post") == "post"


def test_dispatch_outside_declared_versions_fails():
    router = build_router()
    with pytest.raises(LookupError):
        router.dispatch("api/v9/Examples")
    with pytest.raises(LookupError):
        router.dispatch("api/v1/Examples", method="DELETE")


def test_match_reports_route_and_params():
    router = build_router()
    found = router.match("api/v7/Examples")
    assert found is not None
    assert found.entry.name == "latest_get"
    assert found.route.versions == (7, 8)
    assert found.params == {"version": 7}
    assert router.match("api/v7/Other") is None


def test_match_before_resolve_raises():
    router = Router(name="api")
    router.add_route(RouteDeclaration("Examples/"), lambda: "ok")
    assert not router.is_resolved
    with pytest.raises(RuntimeError):
        router.match("api/v1/Examples")


def test_registration_after_resolve_requires_new_resolution():
    router = build_router()
    router.add_route(RouteDeclaration("Other/"), lambda: "other")
    with pytest.raises(RuntimeError):
        router.routes()
    router.resolve(AppSettings({"currentApiVersion": "8"}))
    assert router.dispatch("api/v2/Other") == "other"


def test_resolve_fails_fast_and_keeps_previous_table():
    router = Router(name="api")
    router.add_route(RouteDeclaration("Ok/"), lambda: "ok")
    router.resolve(AppSettings({"currentApiVersion": "3"}))
    previous = router.routes()

    with pytest.raises(InvalidConfiguration):
        router.resolve(AppSettings({"currentApiVersion": "-1"}))
    assert router.routes() == previous


def test_resolve_error_on_any_route_aborts_registration():
    router = Router(name="api")
    router.add_route(RouteDeclaration("Ok/"), lambda: "ok")
    router.add_route(RouteDeclaration("Late/", starting_version=5), lambda: "late")
    with pytest.raises(RangeViolation):
        router.resolve(AppSettings({"currentApiVersion": "3"}))
    assert not router.is_resolved


def test_order_controls_match_priority():
    router = Router(name="api")
    router.add_route(RouteDeclaration("Items/{name}"), lambda name: f"generic:{name}")
    router.add_route(RouteDeclaration("Items/special", order=-1), lambda: "special")
    router.resolve(AppSettings({"currentApiVersion": "1"}))
    assert router.dispatch("api/v1/Items/special") == "special"
    assert router.dispatch("api/v1/Items/other") == "generic:other"


def test_dispatch_passes_only_accepted_params_and_extra_kwargs():
    router = Router(name="api")

    def show(id, request=None):
        return (id, request)

    router.add_route(RouteDeclaration("Items/{id:int}"), show)
    router.resolve(AppSettings({"currentApiVersion": "2"}))
    assert router.dispatch("api/v2/Items/5", request="req") == (5, "req")


def test_stacked_decorators_register_several_routes():
    @api_route("Legacy/", accepted_versions=[1], name="legacy")
    @api_route("Modern/", starting_version=2, name="modern")
    def handler(version):
        return version

    router = BaseRouter(name="api").add_entry(handler)
    assert router.entries() == ("modern", "legacy")
    router.resolve(AppSettings({"currentApiVersion": "3"}))
    assert router.dispatch("api/v3/Modern") == 3
    assert router.dispatch("api/v1/Legacy") == 1
    assert router.match("api/v2/Legacy") is None


def test_decorator_validates_template_immediately():
    with pytest.raises(ValueError):
        api_route("/Leading")


def test_add_entry_requires_declaration():
    def plain():
        return None

    router = Router(name="api")
    with pytest.raises(TypeError):
        router.add_entry(plain)
    with pytest.raises(TypeError):
        router.add_entry(42)


def test_add_route_type_checks():
    router = Router(name="api")
    with pytest.raises(TypeError):
        router.add_route("Examples/", lambda: None)
    with pytest.raises(TypeError):
        router.add_route(RouteDeclaration("Examples/"), "not callable")


def test_explicit_route_names_are_unique():
    router = Router(name="api")
    router.add_route(RouteDeclaration("A/", name="dup"), lambda: None)
    with pytest.raises(ValueError):
        router.add_route(RouteDeclaration("B/", name="dup"), lambda: None)


def test_get_by_name_and_default_handler():
    router = build_router()
    assert router.get("get")() == "get v1"
    assert router["latest_get"](version=9) == "latest v9"
    assert router.call("post") == "post"
    assert router.get("missing", default_handler=lambda: "fallback")() == "fallback"
    with pytest.raises(NotImplementedError):
        router.get("missing")


def test_get_uses_init_default_handler():
    router = Router(name="api", get_default_handler=lambda: "init-default")
    assert router.get("missing")() == "init-default"


def test_get_with_smartasync(monkeypatch):
    calls = []

    def fake_smartasync(fn):
        def wrapper(*args, **kwargs):
            calls.append("wrapped")
            return fn(*args, **kwargs)

        return wrapper

    fake_module = type(sys)("smartasync")
    fake_module.smartasync = fake_smartasync
    monkeypatch.setitem(sys.modules, "smartasync", fake_module)

    router = build_router()
    assert router.get("post", use_smartasync=True)() == "post"
    assert calls == ["wrapped"]


def test_members_describe_declarations_and_resolution():
    router = Router(name="api")
    assert router.members() == {}
    router.add_route(RouteDeclaration("Items/", starting_version=2, name="items"), lambda: None)
    tree = router.members()
    assert tree["resolved"] is False
    assert "route" not in tree["entries"][0]

    router.resolve(AppSettings({"currentApiVersion": "3"}))
    info = router.members()["entries"][0]
    assert info["name"] == "items"
    assert info["starting_version"] == 2
    assert info["versions"] == (2, 3)
    assert info["route"] == "api/v{version:int:regex(2|3)}/Items/"


def test_routes_with_optional_catch_all_and_constraints_resolve():
    router = Router(name="api")
    router.add_route(RouteDeclaration("Items/{id:int?}", name="items"), lambda id=None: id)
    router.add_route(RouteDeclaration("Files/{*path}", name="files"), lambda path="": path)
    router.add_route(RouteDeclaration("Groups/{id:guid}", name="group"), lambda id: id)
    router.add_route(RouteDeclaration("Players/{id:min(1)}", name="player"), lambda id: id)
    router.resolve(AppSettings({"currentApiVersion": "2"}))

    guid = "0f8fad5b-d9cb-469f-a165-70867728950e"
    assert router.dispatch("api/v2/Items") is None
    assert router.dispatch("api/v2/Items/4") == 4
    assert router.dispatch("api/v1/Files/a/b.txt") == "a/b.txt"
    assert router.dispatch(f"api/v2/Groups/{guid}") == guid
    assert router.dispatch("api/v2/Players/7") == "7"


def test_unnamed_entries_for_one_handler_get_unique_names():
    router = Router(name="api")

    def h():
        return "h"

    router.add_route(RouteDeclaration("A/"), h)
    router.add_route(RouteDeclaration("B/"), h)
    assert router.entries() == ("h", "h_2")
    router.resolve(AppSettings({"currentApiVersion": "1"}))
    assert router.dispatch("api/v1/A") == "h"
    assert router.dispatch("api/v1/B") == "h"


def test_explicit_name_may_not_shadow_generated_name():
    router = Router(name="api")

    def h():
        return "h"

    router.add_route(RouteDeclaration("A/"), h)
    with pytest.raises(ValueError):
        router.add_route(RouteDeclaration("B/", name="h"), lambda: None)
