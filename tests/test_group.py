"""Tests for finch.routing.group — route groups and registration."""

import anyio
import pytest

from finch.errors import RegistrationError
from finch.routing.group import (
    RegistrationContext,
    RegistrationState,
    RouteGroup,
    join_path,
)
from finch.schema import SchemaContract, obj, string

MESSAGE = SchemaContract(responses={200: obj({"message": string()}, required=["message"])})


def work():
    return {"message": "work"}


def hello(name: str):
    return {"message": name}


class TestJoinPath:
    @pytest.mark.parametrize(
        ("prefix", "subpath", "expected"),
        [
            ("/books", "/", "/books/"),
            ("/greetings", "/work", "/greetings/work"),
            ("", "/", "/"),
            ("", "", "/"),
            ("/books", "", "/books"),
            ("/api", "items", "/api/items"),
        ],
    )
    def test_concatenates(self, prefix: str, subpath: str, expected: str) -> None:
        assert join_path(prefix, subpath) == expected


class TestRegistrationContext:
    def test_define_prefixes_paths(self) -> None:
        ctx = RegistrationContext("greetings", "/greetings")
        definition = ctx.define("get", "/hello/:name", MESSAGE, hello)
        assert definition.method == "GET"
        assert definition.path == "/greetings/hello/:name"
        assert definition.group == "greetings"
        assert definition.contract is MESSAGE

    def test_definitions_hidden_until_complete(self) -> None:
        ctx = RegistrationContext("greetings", "/greetings")
        ctx.define("GET", "/work", None, work)
        assert ctx.state is RegistrationState.PENDING
        with pytest.raises(RuntimeError, match="pending"):
            _ = ctx.definitions

        ctx.complete()
        assert ctx.state is RegistrationState.COMPLETE
        assert [d.path for d in ctx.definitions] == ["/greetings/work"]

    def test_failed_context_exposes_nothing(self) -> None:
        ctx = RegistrationContext("books", "/books")
        ctx.define("GET", "/", None, work)
        ctx.fail()
        assert ctx.state is RegistrationState.FAILED
        with pytest.raises(RuntimeError):
            _ = ctx.definitions
        with pytest.raises(RuntimeError):
            ctx.define("GET", "/again", None, work)
        with pytest.raises(RuntimeError):
            ctx.complete()


class TestRouteGroup:
    async def test_register_returns_definitions_in_order(self) -> None:
        group = RouteGroup("greetings")
        group.route("/work", contract=MESSAGE)(work)
        group.route("/hello/:name", contract=MESSAGE)(hello)

        definitions = await group.register("/greetings")

        assert [(d.method, d.path) for d in definitions] == [
            ("GET", "/greetings/work"),
            ("GET", "/greetings/hello/:name"),
        ]
        assert all(d.group == "greetings" for d in definitions)

    async def test_one_definition_per_method(self) -> None:
        group = RouteGroup("items")
        group.route("/", methods=["get", "post"])(work)
        definitions = await group.register("/items")
        assert [d.method for d in definitions] == ["GET", "POST"]

    async def test_same_group_mounted_twice(self) -> None:
        group = RouteGroup("greetings")
        group.route("/work")(work)
        first = await group.register("/v1")
        second = await group.register("/v2")
        assert first[0].path == "/v1/work"
        assert second[0].path == "/v2/work"

    async def test_async_setup_defines_routes_after_awaiting(self) -> None:
        group = RouteGroup("search")

        @group.setup
        async def add_search(ctx: RegistrationContext) -> None:
            await anyio.sleep(0)
            ctx.define("GET", "/search", None, work)

        definitions = await group.register("/books")
        assert [d.path for d in definitions] == ["/books/search"]

    async def test_sync_setup_supported(self) -> None:
        group = RouteGroup("sync")
        group.setup(lambda ctx: ctx.define("GET", "/ping", None, work))
        definitions = await group.register()
        assert definitions[0].path == "/ping"

    async def test_setup_failure_raises_registration_error(self) -> None:
        group = RouteGroup("books")
        group.route("/")(work)

        @group.setup
        async def broken(ctx: RegistrationContext) -> None:
            raise OSError("search index unreachable")

        with pytest.raises(RegistrationError) as exc_info:
            await group.register("/books")

        err = exc_info.value
        assert err.group == "books"
        assert "search index unreachable" in err.reason
        assert isinstance(err.__cause__, OSError)

    async def test_malformed_path_fails_registration(self) -> None:
        group = RouteGroup("legacy")
        group.route("/users/{id}")(work)
        with pytest.raises(RegistrationError, match="legacy"):
            await group.register("")
