"""
# Database Management Module

This module provides the **MongoDB infrastructure** for the Blog Backend API.
`DatabaseManager` wraps the **Motor** async driver and owns the connection
lifecycle: connect with retries, index creation, health checks and shutdown.

## Lifecycle

1. **Instantiation**: `DatabaseManager(settings)` (no network I/O).
2. **Connection**: `await manager.connect()` during application startup.
3. **Operations**: `manager.get_collection("posts")` for queries.
4. **Shutdown**: `await manager.disconnect()`.

The manager is created by `AppContext` rather than living as a module-level
singleton, so tests and scripts can build their own.

## Usage

```python
manager = DatabaseManager(settings)
await manager.connect()
posts = manager.get_collection(settings.POSTS_COLLECTION)
post = await posts.find_one({"title": "Hello"})
await manager.disconnect()
```

## Thread Safety

The manager is designed for **asyncio** and is not thread-safe. All methods
must be called from the same event loop.
"""

import asyncio
import time
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import ConnectionFailure, PyMongoError, ServerSelectionTimeoutError

from blog_backend.config import Settings
from blog_backend.managers.logging_manager import get_logger

db_logger = get_logger("database", prefix="[DATABASE]")
perf_logger = get_logger("database", prefix="[DB_PERFORMANCE]")
health_logger = get_logger("database", prefix="[DB_HEALTH]")


class DatabaseManager:
    """
    Manages the MongoDB connection and collection access.

    Attributes:
        client (`Optional[AsyncIOMotorClient]`): The Motor client, `None` until `connect()` succeeds.
        database (`Optional[AsyncIOMotorDatabase]`): The selected database, `None` until connected.
    """

    def __init__(self, settings: Settings, connection_retries: int = 3):
        self.settings = settings
        self.client: Optional[AsyncIOMotorClient] = None
        self.database: Optional[AsyncIOMotorDatabase] = None
        self._connection_retries = connection_retries

    def _connection_string(self) -> str:
        settings = self.settings
        if settings.MONGODB_USERNAME and settings.MONGODB_PASSWORD:
            password = settings.MONGODB_PASSWORD.get_secret_value()
            db_logger.debug("Using authenticated connection to MongoDB")
            return (
                f"mongodb://{settings.MONGODB_USERNAME}:{password}@"
                f"{settings.MONGODB_URL.replace('mongodb://', '')}"
            )
        db_logger.debug("Using unauthenticated connection to MongoDB")
        return settings.MONGODB_URL

    async def connect(self):
        """
        Establish the MongoDB connection with exponential backoff.

        Up to `connection_retries` attempts are made, waiting 1s, 2s, 4s... in
        between. A `ping` verifies each attempt. Calling `connect()` on an
        already connected manager is a no-op.

        Raises:
            `ServerSelectionTimeoutError`: MongoDB unreachable after all attempts.
            `ConnectionFailure`: Authentication failed or the connection was refused.
        """
        if self.client is not None:
            return

        settings = self.settings
        start_time = time.time()
        db_logger.info("Starting MongoDB connection process")

        for attempt in range(self._connection_retries):
            attempt_start = time.time()
            try:
                db_logger.info("Connection attempt %d/%d to MongoDB", attempt + 1, self._connection_retries)
                db_logger.info(
                    "MongoDB connection config - Database: %s, ServerTimeout: %dms, ConnTimeout: %dms",
                    settings.MONGODB_DATABASE,
                    settings.MONGODB_SERVER_SELECTION_TIMEOUT,
                    settings.MONGODB_CONNECTION_TIMEOUT,
                )

                client = AsyncIOMotorClient(
                    self._connection_string(),
                    serverSelectionTimeoutMS=settings.MONGODB_SERVER_SELECTION_TIMEOUT,
                    connectTimeoutMS=settings.MONGODB_CONNECTION_TIMEOUT,
                )
                await client.admin.command("ping")

                self.client = client
                self.database = client[settings.MONGODB_DATABASE]
                perf_logger.info(
                    "MongoDB connected in %.3fs (attempt %.3fs)",
                    time.time() - start_time,
                    time.time() - attempt_start,
                )
                db_logger.info("Successfully connected to MongoDB database: %s", settings.MONGODB_DATABASE)
                return

            except (ServerSelectionTimeoutError, ConnectionFailure) as e:
                db_logger.warning("MongoDB connection attempt %d failed: %s", attempt + 1, e)
                if attempt == self._connection_retries - 1:
                    db_logger.error("All MongoDB connection attempts failed after %.3fs", time.time() - start_time)
                    raise
                await asyncio.sleep(2**attempt)

    async def disconnect(self):
        """Close the MongoDB client, if any."""
        if self.client is None:
            db_logger.warning("Disconnect called but no active MongoDB connection found")
            return

        start_time = time.time()
        self.client.close()
        self.client = None
        self.database = None
        perf_logger.info("MongoDB disconnection completed in %.3fs", time.time() - start_time)
        db_logger.info("Successfully disconnected from MongoDB")

    async def health_check(self) -> bool:
        """
        Ping MongoDB.

        Returns:
            `bool`: `True` if the server answered, `False` otherwise (never raises).
        """
        start_time = time.time()
        if self.client is None:
            health_logger.warning("Health check failed: No database client available")
            return False
        try:
            await self.client.admin.command("ping")
            health_logger.debug("Database health check passed in %.3fs", time.time() - start_time)
            return True
        except PyMongoError as e:
            health_logger.error("Database health check failed: %s", e)
            return False

    def get_collection(self, collection_name: str) -> AsyncIOMotorCollection:
        """
        Return a collection of the connected database.

        Raises:
            RuntimeError: If `connect()` has not been called.
        """
        if self.database is None:
            raise RuntimeError("Database not connected")
        return self.database[collection_name]

    async def create_indexes(self):
        """Create the indexes used by post listing filters."""
        try:
            db_logger.info("Creating indexes for posts collection")
            posts = self.get_collection(self.settings.POSTS_COLLECTION)
            await posts.create_index([("tags", ASCENDING)])
            await posts.create_index([("user.username", ASCENDING), ("_id", DESCENDING)])
            await posts.create_index([("user._id", ASCENDING)])
            db_logger.info("Posts collection indexes created successfully")
        except PyMongoError as e:
            db_logger.error("Failed to create posts indexes: %s", e)
            raise
