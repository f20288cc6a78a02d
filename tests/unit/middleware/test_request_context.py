"""
Request Context Middleware Tests.

WHAT: Unit tests for the RequestContextMiddleware and its helpers.

WHY: The request ID ties a client's report to server log lines. These
tests ensure correct behavior for:
- Client IP extraction (direct and through proxies)
- Request ID reuse and generation
- Context availability during the request, and cleanup after it
- request_id stamping on log records

HOW: Helpers are tested with hand-built requests; the middleware is
mounted on a throwaway FastAPI app and called through httpx.
"""

import logging
import uuid

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from starlette.requests import Request

from helpdesk.middleware.request_context import (
    get_client_ip,
    get_user_agent,
    get_request_context,
    resolve_request_id,
    RequestContextMiddleware,
    RequestIdLogFilter,
)


def _make_request(headers: dict = None, client_host: str = None) -> Request:
    scope = {
        "type": "http",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": (client_host, 12345) if client_host else None,
    }
    return Request(scope)


class TestGetClientIp:

    def test_x_real_ip_wins(self):
        request = _make_request(
            {"X-Real-IP": "203.0.113.5", "X-Forwarded-For": "198.51.100.1"}, "10.0.0.1"
        )
        assert get_client_ip(request) == "203.0.113.5"

    def test_first_forwarded_for_entry(self):
        request = _make_request({"X-Forwarded-For": "198.51.100.1, 10.0.0.2"}, "10.0.0.1")
        assert get_client_ip(request) == "198.51.100.1"

    def test_socket_address(self):
        assert get_client_ip(_make_request(client_host="192.0.2.9")) == "192.0.2.9"

    def test_unknown(self):
        assert get_client_ip(_make_request()) == "unknown"

    def test_user_agent(self):
        assert get_user_agent(_make_request({"User-Agent": "curl/8.0"})) == "curl/8.0"
        assert get_user_agent(_make_request()) is None


class TestResolveRequestId:

    def test_inbound_id_reused(self):
        request = _make_request({"X-Request-ID": "edge-1234.abc"})
        assert resolve_request_id(request) == "edge-1234.abc"

    @pytest.mark.parametrize("bad", ["has space", "x" * 200, "semi;colon"])
    def test_unsafe_inbound_id_replaced(self, bad):
        request_id = resolve_request_id(_make_request({"X-Request-ID": bad}))

        assert request_id != bad
        uuid.UUID(request_id)

    def test_generated_when_missing(self):
        uuid.UUID(resolve_request_id(_make_request()))


def _app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(RequestContextMiddleware)

    @app.get("/probe")
    async def probe():
        ctx = get_request_context()
        logging.getLogger("tests.probe").info("inside request")
        return {"request_id": ctx.request_id, "ip": ctx.ip_address, "path": ctx.path}

    return app


class TestRequestContextMiddleware:

    @pytest.mark.asyncio
    async def test_context_available_and_echoed(self):
        async with AsyncClient(transport=ASGITransport(app=_app()), base_url="http://test") as ac:
            response = await ac.get("/probe", headers={"X-Forwarded-For": "198.51.100.7"})

        body = response.json()
        assert response.headers["X-Request-ID"] == body["request_id"]
        assert body["ip"] == "198.51.100.7"
        assert body["path"] == "/probe"

    @pytest.mark.asyncio
    async def test_inbound_request_id_propagates(self):
        async with AsyncClient(transport=ASGITransport(app=_app()), base_url="http://test") as ac:
            response = await ac.get("/probe", headers={"X-Request-ID": "trace-42"})

        assert response.headers["X-Request-ID"] == "trace-42"
        assert response.json()["request_id"] == "trace-42"

    @pytest.mark.asyncio
    async def test_context_cleared_after_request(self):
        async with AsyncClient(transport=ASGITransport(app=_app()), base_url="http://test") as ac:
            await ac.get("/probe")

        assert get_request_context() is None

    @pytest.mark.asyncio
    async def test_request_is_logged(self, caplog):
        caplog.set_level(logging.INFO, logger="helpdesk.middleware.request_context")

        async with AsyncClient(transport=ASGITransport(app=_app()), base_url="http://test") as ac:
            await ac.get("/probe")

        messages = [r.getMessage() for r in caplog.records if r.name == "helpdesk.middleware.request_context"]
        assert any("GET /probe -> 200" in m for m in messages)


class TestRequestIdLogFilter:

    def test_outside_request(self):
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)

        assert RequestIdLogFilter().filter(record) is True
        assert record.request_id == "-"
