"""
# Application Context

`AppContext` bundles every piece of process-wide state the API needs: the
settings, the database manager, the post repository and service, and the
upload manager. It is built once by the app factory, started and stopped by
the FastAPI lifespan and handed to routes through dependencies.

```python
context = AppContext.from_settings(settings)
await context.startup()
...
await context.shutdown()
```

Tests build a context around an in-memory collection with
`AppContext(settings, post_service=..., upload_manager=...)` and never call
`startup()`.
"""

import random
from typing import Optional

from blog_backend.config import Settings
from blog_backend.database.manager import DatabaseManager
from blog_backend.database.post_repository import PostRepository
from blog_backend.managers.logging_manager import get_logger
from blog_backend.managers.upload_manager import UploadManager
from blog_backend.services.post_service import PostService

logger = get_logger("context", prefix="[Context]")


class AppContext:
    """Explicitly constructed container of the application's shared resources."""

    def __init__(
        self,
        settings: Settings,
        db_manager: Optional[DatabaseManager] = None,
        post_service: Optional[PostService] = None,
        upload_manager: Optional[UploadManager] = None,
    ):
        self.settings = settings
        self.db_manager = db_manager
        self._post_service = post_service
        self.upload_manager = upload_manager or UploadManager(
            settings.UPLOAD_DIR,
            resize_width=settings.UPLOAD_RESIZE_WIDTH,
            resize_in_background=settings.UPLOAD_RESIZE_IN_BACKGROUND,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "AppContext":
        return cls(settings, db_manager=DatabaseManager(settings))

    @property
    def post_service(self) -> PostService:
        if self._post_service is None:
            raise RuntimeError("AppContext has not been started")
        return self._post_service

    def build_post_service(self, collection, rng: Optional[random.Random] = None) -> PostService:
        settings = self.settings
        return PostService(
            PostRepository(collection),
            page_size=settings.POSTS_PAGE_SIZE,
            excerpt_length=settings.EXCERPT_LENGTH,
            thumbnail_base_url=settings.THUMBNAIL_BASE_URL,
            rng=rng,
        )

    async def startup(self) -> None:
        """Connect to MongoDB, prepare indexes and the upload directory."""
        self.upload_manager.ensure_directory()
        if self.db_manager is not None:
            await self.db_manager.connect()
            await self.db_manager.create_indexes()
            if self._post_service is None:
                collection = self.db_manager.get_collection(self.settings.POSTS_COLLECTION)
                self._post_service = self.build_post_service(collection)
        logger.info("Application context started")

    async def shutdown(self) -> None:
        """Finish pending uploads and close the database connection."""
        await self.upload_manager.drain()
        if self.db_manager is not None:
            await self.db_manager.disconnect()
        logger.info("Application context stopped")

    async def health_check(self) -> bool:
        if self.db_manager is None:
            return True
        return await self.db_manager.health_check()
