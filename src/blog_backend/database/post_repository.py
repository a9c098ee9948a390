"""
# Post Repository

Thin async data-access layer over the `posts` collection.

The repository speaks raw MongoDB documents and knows nothing about
validation, sanitization or ownership. Every driver failure is re-raised as
`PostStoreError` so the layers above only deal with one error type.
"""

from typing import Any, Dict, List, Optional

from bson import ObjectId
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import PyMongoError

from blog_backend.managers.logging_manager import get_logger
from blog_backend.services.post_exceptions import PostStoreError

logger = get_logger("database.posts", prefix="[Post Repository]")


class PostRepository:
    """
    CRUD access to post documents.

    Args:
        collection: A Motor collection (or any object with the same async API).
    """

    def __init__(self, collection):
        self.collection = collection

    @staticmethod
    def is_valid_id(post_id: str) -> bool:
        return ObjectId.is_valid(post_id)

    async def create(self, document: Dict[str, Any]) -> Dict[str, Any]:
        """Insert `document` and return it with its assigned `_id`."""
        try:
            result = await self.collection.insert_one(document)
        except PyMongoError as e:
            logger.error("Failed to insert post: %s", e, exc_info=True)
            raise PostStoreError("Failed to create post", detail=str(e)) from e
        document["_id"] = result.inserted_id
        return document

    async def find_by_id(self, post_id: str) -> Optional[Dict[str, Any]]:
        try:
            return await self.collection.find_one({"_id": ObjectId(post_id)})
        except PyMongoError as e:
            logger.error("Failed to find post %s: %s", post_id, e, exc_info=True)
            raise PostStoreError("Failed to load post", detail=str(e)) from e

    async def find_many(self, query: Dict[str, Any], skip: int, limit: int) -> List[Dict[str, Any]]:
        """Return up to `limit` documents matching `query`, newest first."""
        try:
            cursor = self.collection.find(query).sort("_id", DESCENDING).skip(skip).limit(limit)
            return await cursor.to_list(length=limit)
        except PyMongoError as e:
            logger.error("Failed to list posts for query %s: %s", query, e, exc_info=True)
            raise PostStoreError("Failed to list posts", detail=str(e)) from e

    async def count(self, query: Dict[str, Any]) -> int:
        try:
            return await self.collection.count_documents(query)
        except PyMongoError as e:
            logger.error("Failed to count posts for query %s: %s", query, e, exc_info=True)
            raise PostStoreError("Failed to count posts", detail=str(e)) from e

    async def update_by_id(self, post_id: Any, update: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Apply a MongoDB update document to one post.

        Returns:
            The updated document, or `None` when no post has that id.
        """
        try:
            return await self.collection.find_one_and_update(
                {"_id": ObjectId(post_id)},
                update,
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.error("Failed to update post %s: %s", post_id, e, exc_info=True)
            raise PostStoreError("Failed to update post", detail=str(e)) from e

    async def delete_by_id(self, post_id: Any) -> bool:
        """Delete one post. Returns whether a document was removed."""
        try:
            result = await self.collection.delete_one({"_id": ObjectId(post_id)})
        except PyMongoError as e:
            logger.error("Failed to delete post %s: %s", post_id, e, exc_info=True)
            raise PostStoreError("Failed to delete post", detail=str(e)) from e
        return result.deleted_count > 0
