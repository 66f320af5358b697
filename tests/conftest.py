from unittest.mock import AsyncMock, MagicMock

import pytest

from jedlik_api.core.config import Settings
from jedlik_api.services.resource_connector import ResourceConnector

FAVICON_BYTES = b"\x00\x00\x01\x00\x01\x00\x10\x10\x00\x00\x01\x00\x20\x00fake-icon-data"


@pytest.fixture
def favicon_file(tmp_path):
    path = tmp_path / "favicon.ico"
    path.write_bytes(FAVICON_BYTES)
    return path


@pytest.fixture
def settings(favicon_file):
    return Settings(
        _env_file=None,
        ENV="test",
        FAVICON_PATH=str(favicon_file),
        MONGO_USER="user",
        MONGO_PASSWORD="secret",
        MONGO_PATH="@cluster0.example.mongodb.net/",
        MONGO_DB="jedlik",
        CACHE_RETRY_DELAY_SECONDS=5.0,
    )


@pytest.fixture
def connector():
    fake = MagicMock(spec=ResourceConnector)
    fake.start = MagicMock()
    fake.stop = AsyncMock()
    fake.status = MagicMock(return_value={"mongodb": "connected", "redis": "connected"})
    return fake


def _make_redis_client(ping_error=None):
    client = MagicMock()
    client.ping = AsyncMock(side_effect=ping_error)
    client.aclose = AsyncMock()
    return client


def _make_mongo_client(command_error=None):
    client = MagicMock()
    client.admin.command = AsyncMock(side_effect=command_error, return_value={"ok": 1.0})
    client.close = MagicMock()
    return client


@pytest.fixture
def make_redis_client():
    return _make_redis_client


@pytest.fixture
def make_mongo_client():
    return _make_mongo_client
