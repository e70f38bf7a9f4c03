"""Tests for the ASGI surface — sender, request handler, and TestClient."""

from typing import Any

from finch.app import App
from finch.http.response import Response
from finch.schema import SchemaContract, obj, string
from finch.server.sender import send_response
from finch.testing import TestClient


async def _capture(response: Response) -> list[dict[str, Any]]:
    sent: list[dict[str, Any]] = []

    async def send(message):
        sent.append(message)

    await send_response(response, send)
    return sent


class TestSendResponse:
    async def test_json_body(self) -> None:
        start, body = await _capture(Response({"message": "hi"}).with_header("X-Id", "7"))
        assert start["status"] == 200
        headers = dict(start["headers"])
        assert headers[b"content-type"] == b"application/json; charset=utf-8"
        assert headers[b"x-id"] == b"7"
        assert headers[b"content-length"] == str(len(body["body"])).encode()
        assert body["body"] == b'{"message": "hi"}'

    async def test_no_body_for_204(self) -> None:
        start, body = await _capture(Response({"ignored": True}, status=204))
        assert body["body"] == b""
        assert (b"content-length", b"0") in start["headers"]
        assert b"content-type" not in dict(start["headers"])


def _echo_app() -> App:
    app = App()

    @app.route("/echo", methods=["POST", "PUT"], contract=SchemaContract(body=obj({"name": string()})))
    def echo(body, request):
        return {"body": body, "method": request.method, "agent": request.headers.get("user-agent")}

    @app.route("/items/:id", methods=["DELETE"])
    def remove(id):
        return None, 204

    @app.route("/tags")
    def tags(request):
        return {"tags": request.query.get_list("tag")}

    @app.route("/shelves/:shelf/books/:title")
    def shelved(request):
        return {"path_params": dict(request.path_params)}

    return app


class TestHandler:
    async def test_post_json_reaches_handler_with_request(self) -> None:
        async with TestClient(_echo_app()) as client:
            resp = await client.post("/echo", json={"name": "Ada"}, headers={"User-Agent": "t"})
        assert resp.status == 200
        assert resp.data == {"body": {"name": "Ada"}, "method": "POST", "agent": "t"}

    async def test_put(self) -> None:
        async with TestClient(_echo_app()) as client:
            resp = await client.put("/echo", json={"name": "Ada"})
        assert resp.data["method"] == "PUT"

    async def test_delete_with_empty_response(self) -> None:
        async with TestClient(_echo_app()) as client:
            resp = await client.delete("/items/3")
        assert resp.status == 204
        assert resp.data is None

    async def test_repeated_query_keys(self) -> None:
        async with TestClient(_echo_app()) as client:
            resp = await client.get("/tags", query={"tag": ["a", "b"]})
        assert resp.data == {"tags": ["a", "b"]}

    async def test_request_carries_matched_path_params(self) -> None:
        async with TestClient(_echo_app()) as client:
            resp = await client.get("/shelves/sf/books/Dune")
        assert resp.data == {"path_params": {"shelf": "sf", "title": "Dune"}}

    async def test_client_starts_and_stops_app(self) -> None:
        app = _echo_app()
        async with TestClient(app):
            assert app.ready
        assert not app.ready

    async def test_non_http_scope_ignored(self) -> None:
        sent: list[Any] = []

        async def receive():
            return {}

        async def send(message):
            sent.append(message)

        await _echo_app()({"type": "websocket"}, receive, send)
        assert sent == []
