"""
# Database Package

MongoDB persistence for the blog, built on **Motor**.

- **`manager`**: `DatabaseManager`, connection lifecycle, indexes and health checks.
- **`post_repository`**: `PostRepository`, CRUD access to the `posts` collection.
"""

from blog_backend.database.manager import DatabaseManager
from blog_backend.database.post_repository import PostRepository

__all__ = ["DatabaseManager", "PostRepository"]
