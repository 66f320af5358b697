import logging

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pymongo.errors import ConfigurationError

from jedlik_api.api.fallback_api import install_error_handlers
from jedlik_api.core.cache import CacheConnector
from jedlik_api.core.errors import AppError, ErrorKind
from jedlik_api.core.mongo import DocumentStoreConnector
from jedlik_api.server import ServerBootstrap, create_app
from jedlik_api.services.resource_connector import ResourceConnector

from conftest import FAVICON_BYTES


@pytest.fixture
def app(settings, connector):
    return create_app(settings, connector)


@pytest.fixture
def client(app):
    return TestClient(app, raise_server_exceptions=False)


def test_health_checker(client):
    resp = client.get("/healthChecker")
    assert resp.status_code == 200
    assert resp.json() == {"status": "success", "message": "Welcome to CodevoWeb????"}


def test_health_checker_other_methods_fall_through(client):
    resp = client.post("/healthChecker", json={})
    assert resp.status_code == 404
    assert resp.json() == {"status": "error", "message": "Route /healthChecker not found"}


def test_unknown_route_includes_query_string(client):
    resp = client.delete("/api/missing?page=2")
    assert resp.status_code == 404
    assert resp.json() == {"status": "error", "message": "Route /api/missing?page=2 not found"}


def test_unknown_route_keeps_percent_encoding(client):
    resp = client.get("/a%20b?x=%2F")
    assert resp.status_code == 404
    assert resp.json() == {"status": "error", "message": "Route /a%20b?x=%2F not found"}


def test_request_id_header(client):
    resp = client.get("/healthChecker", headers={"X-Request-ID": "abc-123"})
    assert resp.headers["X-Request-ID"] == "abc-123"
    assert client.get("/healthChecker").headers["X-Request-ID"]


def test_middleware_order(app):
    assert app.state.middleware_order == ["favicon", "body-parser", "cookie-parser", "cors", "request-logger"]
    # Starlette keeps the outermost stage first
    names = [m.cls.__name__ for m in app.user_middleware]
    assert names == [
        "FaviconMiddleware",
        "JsonBodyMiddleware",
        "CookieParserMiddleware",
        "CORSMiddleware",
        "RequestLoggerMiddleware",
    ]


def test_missing_favicon_is_skipped(settings, connector, tmp_path):
    settings.FAVICON_PATH = str(tmp_path / "missing.ico")
    app = create_app(settings, connector)
    assert app.state.middleware_order == ["body-parser", "cookie-parser", "cors", "request-logger"]

    client = TestClient(app)
    assert client.get("/healthChecker").status_code == 200
    assert client.get("/favicon.ico").status_code == 404


def test_favicon_served(client):
    resp = client.get("/favicon.ico")
    assert resp.status_code == 200
    assert resp.content == FAVICON_BYTES
    assert resp.headers["content-type"] == "image/x-icon"
    assert resp.headers["cache-control"] == "public, max-age=31536000"
    assert "x-request-id" not in resp.headers


def test_cors_preflight_allowed_origin(client):
    resp = client.options(
        "/healthChecker",
        headers={
            "Origin": "http://localhost:8080",
            "Access-Control-Request-Method": "GET",
            "Access-Control-Request-Headers": "Content-Type, Authorization",
        },
    )
    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == "http://localhost:8080"
    assert resp.headers["access-control-allow-credentials"] == "true"


def test_cors_preflight_disallowed_origin(client):
    resp = client.options(
        "/healthChecker",
        headers={"Origin": "http://evil.example", "Access-Control-Request-Method": "GET"},
    )
    assert "access-control-allow-origin" not in resp.headers


def test_cors_simple_request_exposes_set_cookie(client):
    resp = client.get("/healthChecker", headers={"Origin": "https://jedlik-vite-ts-template.netlify.app"})
    assert resp.headers["access-control-allow-origin"] == "https://jedlik-vite-ts-template.netlify.app"
    assert resp.headers["access-control-expose-headers"] == "Set-Cookie"


def test_invalid_json_body(client):
    resp = client.post("/healthChecker", content=b'{"broken": ', headers={"Content-Type": "application/json"})
    assert resp.status_code == 400
    assert resp.json()["status"] == "error"


def test_json_body_over_limit(settings, connector):
    settings.JSON_BODY_LIMIT_BYTES = 16
    client = TestClient(create_app(settings, connector))
    resp = client.post("/anything", json={"payload": "x" * 64})
    assert resp.status_code == 413
    assert resp.json() == {"status": "error", "message": "request entity too large"}


def test_status_reports_dependencies(client):
    resp = client.get("/status")
    assert resp.status_code == 200
    data = resp.json()
    assert data["environment"] == "test"
    assert data["dependencies"] == {"mongodb": "connected", "redis": "connected"}


def test_lifespan_starts_and_stops_connector(app, connector):
    with TestClient(app) as client:
        connector.start.assert_called_once()
        assert client.get("/healthChecker").status_code == 200
    connector.stop.assert_awaited_once()


def test_fallback_disabled(settings, connector):
    settings.ENABLE_FALLBACK = False
    client = TestClient(create_app(settings, connector))
    resp = client.get("/nowhere")
    assert resp.status_code == 404
    assert resp.json() == {"detail": "Not Found"}
    assert client.post("/healthChecker").status_code == 405


def test_bootstrap_without_favicon_keeps_routes(settings, connector, tmp_path):
    settings.FAVICON_PATH = str(tmp_path / "nope.ico")
    bootstrap = ServerBootstrap(settings, connector)
    app = bootstrap.initialize()
    assert bootstrap.app is app
    paths = [route.path for route in app.routes]
    assert paths.index("/healthChecker") < paths.index("/{full_path:path}")


@pytest.fixture
def error_client():
    app = FastAPI()

    @app.get("/boom")
    async def boom():
        raise RuntimeError("database exploded")

    @app.get("/teapot")
    async def teapot():
        raise AppError(ErrorKind.SERVICE_UNAVAILABLE, "cache warming up", status="fail")

    @app.get("/plain")
    async def plain():
        raise AppError(ErrorKind.BAD_REQUEST, "missing field")

    install_error_handlers(app)
    return TestClient(app, raise_server_exceptions=False)


def test_error_handler_defaults(error_client):
    resp = error_client.get("/boom")
    assert resp.status_code == 500
    assert resp.json() == {"status": "error", "message": "database exploded"}


def test_error_handler_passes_values_through(error_client):
    resp = error_client.get("/teapot")
    assert resp.status_code == 503
    assert resp.json() == {"status": "fail", "message": "cache warming up"}


def test_error_handler_default_status_label(error_client):
    resp = error_client.get("/plain")
    assert resp.status_code == 400
    assert resp.json() == {"status": "error", "message": "missing field"}


def test_invalid_database_credentials_do_not_block_traffic(settings, make_redis_client):
    def refuse(*args, **kwargs):
        raise ConfigurationError("authentication failed")

    connector = ResourceConnector(
        settings,
        document_store=DocumentStoreConnector(settings, client_factory=refuse),
        cache=CacheConnector(settings, client_factory=lambda *a, **kw: make_redis_client()),
    )
    app = create_app(settings, connector)

    with TestClient(app) as client:
        resp = client.get("/healthChecker")
        assert resp.status_code == 200
        assert resp.json()["status"] == "success"

        dependencies = {}
        for _ in range(50):
            dependencies = client.get("/status").json()["dependencies"]
            if dependencies["mongodb"] == "failed" and dependencies["redis"] == "connected":
                break
        assert dependencies == {"mongodb": "failed", "redis": "connected"}

    assert connector.status() == {"mongodb": "disconnected", "redis": "disconnected"}


class StubServer:
    def __init__(self, binds: bool):
        self.binds = binds
        self.started = False

    async def serve(self):
        if self.binds:
            self.started = True


@pytest.mark.asyncio
async def test_listen_logs_port_once_bound(settings, connector, caplog):
    settings.PORT = 8123
    bootstrap = ServerBootstrap(settings, connector)

    with caplog.at_level(logging.INFO, logger="jedlik_api.server"):
        await bootstrap._serve(StubServer(binds=True))

    assert "App listening on the port 8123" in [r.getMessage() for r in caplog.records]


@pytest.mark.asyncio
async def test_listen_stays_quiet_when_bind_fails(settings, connector, caplog):
    bootstrap = ServerBootstrap(settings, connector)

    with caplog.at_level(logging.INFO, logger="jedlik_api.server"):
        await bootstrap._serve(StubServer(binds=False))

    assert not any(r.getMessage().startswith("App listening") for r in caplog.records)
