"""
Tests for DatabaseManager that do not need a running MongoDB.
"""
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from blog_backend.config import Settings
from blog_backend.database.manager import DatabaseManager


def _settings(**overrides):
    return Settings(_env_file=None, SECRET_KEY="test-secret-key", METRICS_ENABLED=False, **overrides)


def test_connection_string_without_credentials():
    manager = DatabaseManager(_settings(MONGODB_URL="mongodb://db:27017"))

    assert manager._connection_string() == "mongodb://db:27017"


def test_connection_string_with_credentials():
    manager = DatabaseManager(
        _settings(MONGODB_URL="mongodb://db:27017", MONGODB_USERNAME="blog", MONGODB_PASSWORD="s3cret")
    )

    assert manager._connection_string() == "mongodb://blog:s3cret@db:27017"


def test_get_collection_requires_connection():
    manager = DatabaseManager(_settings())

    with pytest.raises(RuntimeError):
        manager.get_collection("posts")


@pytest.mark.asyncio
async def test_health_check_without_client():
    manager = DatabaseManager(_settings())

    assert await manager.health_check() is False


@pytest.mark.asyncio
async def test_connect_retries_then_raises():
    manager = DatabaseManager(_settings(), connection_retries=2)
    client = MagicMock()
    client.admin.command = AsyncMock(side_effect=ServerSelectionTimeoutError("no servers"))

    with patch("blog_backend.database.manager.AsyncIOMotorClient", return_value=client) as mock_client, \
         patch("blog_backend.database.manager.asyncio.sleep", new=AsyncMock()) as mock_sleep:
        with pytest.raises(ServerSelectionTimeoutError):
            await manager.connect()

    assert mock_client.call_count == 2
    mock_sleep.assert_awaited_once_with(1)
    assert manager.client is None


@pytest.mark.asyncio
async def test_connect_and_disconnect():
    manager = DatabaseManager(_settings(MONGODB_DATABASE="blog_test"))
    client = MagicMock()
    client.admin.command = AsyncMock(return_value={"ok": 1})

    with patch("blog_backend.database.manager.AsyncIOMotorClient", return_value=client):
        await manager.connect()

    client.__getitem__.assert_called_with("blog_test")
    assert await manager.health_check() is True

    await manager.disconnect()

    client.close.assert_called_once()
    assert manager.client is None
