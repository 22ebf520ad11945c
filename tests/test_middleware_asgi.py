import asyncio

import pytest
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse, StreamingResponse
from fastapi.testclient import TestClient

from openapi_audit.capture.record import TrafficLog
from openapi_audit.capture.recorder import TrafficRecorder
from openapi_audit.middleware.asgi import TrafficRecorderMiddleware


@pytest.fixture
def app():
    _app = FastAPI()

    @_app.post("/api/orders")
    def create_order(body: dict):
        return {"order_id": "123", "received": body}

    @_app.get("/api/orders/{order_id}")
    def get_order(order_id: str):
        return {"order_id": order_id}

    @_app.get("/api/text")
    def text():
        return PlainTextResponse("plain body")

    @_app.get("/api/stream")
    def stream():
        return StreamingResponse(iter([b'{"a": ', b"1}"]), media_type="application/json")

    return _app


@pytest.fixture
def log():
    return TrafficLog()


@pytest.fixture
def client(app, log):
    TrafficRecorder(log).attach(app)
    with TestClient(app) as c:
        yield c


class TestASGIMiddleware:
    def test_passes_through_request(self, client):
        response = client.post("/api/orders", json={"user_id": "1"})
        assert response.status_code == 200

    def test_does_not_consume_body(self, client):
        body = {"user_id": "abc", "cart_id": "xyz"}
        response = client.post("/api/orders", json=body)
        assert response.json()["received"] == body

    def test_records_method_url_status_and_payloads(self, client, log):
        client.post("/api/orders?dry_run=1", json={"user_id": "1"})
        [record] = log.records()
        assert record.method == "POST"
        assert record.url == "/api/orders?dry_run=1"
        assert record.status == 200
        assert record.request == {"user_id": "1"}
        assert record.response == {"order_id": "123", "received": {"user_id": "1"}}

    def test_records_error_status(self, client, log):
        client.get("/api/missing")
        [record] = log.records()
        assert record.status == 404
        assert record.url == "/api/missing"

    def test_non_json_response_kept_as_text(self, client, log):
        client.get("/api/text")
        assert log.records()[0].response == "plain body"

    def test_absent_request_body(self, client, log):
        client.get("/api/orders/42")
        assert log.records()[0].request is None

    def test_streamed_response_recorded_once(self, client, log):
        response = client.get("/api/stream")
        assert response.json() == {"a": 1}
        assert len(log) == 1
        assert log.records()[0].response == {"a": 1}

    def test_one_record_per_exchange_in_completion_order(self, client, log):
        client.get("/api/orders/1")
        client.get("/api/orders/2")
        client.get("/api/orders/3")
        assert [r.url for r in log.records()] == ["/api/orders/1", "/api/orders/2", "/api/orders/3"]


class TestNonHttpScopes:
    def test_lifespan_passes_through(self):
        seen = []

        async def inner(scope, receive, send):
            seen.append(scope["type"])

        log = TrafficLog()
        middleware = TrafficRecorderMiddleware(inner, log=log)
        asyncio.run(middleware({"type": "lifespan"}, None, None))
        assert seen == ["lifespan"]
        assert len(log) == 0


class TestCrashedExchange:
    def test_no_record_without_final_response(self):
        async def crashing_app(scope, receive, send):
            await send({"type": "http.response.start", "status": 200, "headers": []})
            raise RuntimeError("boom")

        async def receive():
            return {"type": "http.request", "body": b"", "more_body": False}

        async def send(message):
            pass

        log = TrafficLog()
        middleware = TrafficRecorderMiddleware(crashing_app, log=log)
        scope = {"type": "http", "method": "GET", "path": "/x", "query_string": b""}
        with pytest.raises(RuntimeError):
            asyncio.run(middleware(scope, receive, send))
        assert len(log) == 0
