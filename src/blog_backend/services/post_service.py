"""
# Post Service

This module contains the **business logic** of the blog: every post operation
exposed by the API is a method of `PostService`.

## Responsibilities

- **Validation**: request payloads are checked against the post models before
  any store access, so a bad request never causes a partial write.
- **Sanitization**: bodies are cleaned with the post allow-list before they are
  persisted, and the thumbnail `image` is derived from the cleaned body.
- **Listing policy**: optional `tag`/`username` filters, newest-first order,
  fixed page size and the `last_page` count.
- **View counting**: reading a post increments its `count`.
- **Ownership**: only the account embedded in `post.user` may update or delete.

## Pipeline

Routes compose the operations as an ordered chain:

```
authenticate -> get_post_by_id -> check_own_post -> update_post / remove_post
```

Each step either returns the enriched context (the requester, the post
document) or raises one of the `post_exceptions` errors, which ends the request.

## Usage

```python
service = PostService(repository, thumbnail_base_url="http://localhost:4000/")
post = await service.write_post({"title": "Hi", "body": "<p>x</p>", "tags": []}, user)
page = await service.list_posts(page=1, tag="python")
```
"""

import math
import random
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Type, TypeVar, Union

from bson import ObjectId
from pydantic import BaseModel, ValidationError

from blog_backend.database.post_repository import PostRepository
from blog_backend.managers.logging_manager import get_logger
from blog_backend.models.post_models import (
    CreatePostRequest,
    PostResponse,
    PostUser,
    UpdatePostRequest,
)
from blog_backend.services.post_exceptions import (
    InvalidPostIdError,
    PostForbiddenError,
    PostNotFoundError,
    PostValidationError,
)
from blog_backend.utils.html_utils import (
    EXCERPT_LENGTH,
    build_excerpt,
    extract_thumbnail,
    sanitize_post_body,
)

logger = get_logger("services.posts", prefix="[Post Service]")

ModelT = TypeVar("ModelT", bound=BaseModel)


class PostPage(NamedTuple):
    """One page of the post listing."""

    posts: List[PostResponse]
    last_page: int


class PostService:
    """
    Orchestrates validation, authorization, sanitization and persistence of posts.

    Args:
        repository: Data access for the `posts` collection.
        page_size: Number of posts per listing page.
        excerpt_length: Body preview length used by listings.
        thumbnail_base_url: URL prefix of the fallback thumbnails.
        rng: Random source for fallback thumbnails.
    """

    def __init__(
        self,
        repository: PostRepository,
        page_size: int = 20,
        excerpt_length: int = EXCERPT_LENGTH,
        thumbnail_base_url: str = "http://localhost:4000/",
        rng: Optional[random.Random] = None,
    ):
        self.repository = repository
        self.page_size = page_size
        self.excerpt_length = excerpt_length
        self.thumbnail_base_url = thumbnail_base_url
        self.rng = rng

    @staticmethod
    def _validate(model: Type[ModelT], payload: Union[ModelT, Mapping[str, Any]]) -> ModelT:
        if isinstance(payload, model):
            return payload
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise PostValidationError(
                "Invalid post payload",
                errors=e.errors(include_url=False, include_context=False, include_input=False),
            ) from e

    def _thumbnail(self, body: Optional[str]) -> str:
        return extract_thumbnail(body, self.thumbnail_base_url, self.rng)

    async def write_post(
        self,
        payload: Union[CreatePostRequest, Mapping[str, Any]],
        user: PostUser,
    ) -> PostResponse:
        """
        Create a post owned by `user`.

        Raises:
            PostValidationError: If `title`, `body` or `tags` is missing or malformed.
            PostStoreError: If the insert fails.
        """
        request = self._validate(CreatePostRequest, payload)

        body = sanitize_post_body(request.body)
        document = {
            "title": request.title,
            "body": body,
            "image": self._thumbnail(body),
            "tags": list(request.tags),
            "published_date": datetime.now(timezone.utc),
            "count": 0,
            "user": {
                "_id": ObjectId(user.id) if ObjectId.is_valid(user.id) else user.id,
                "username": user.username,
            },
        }
        saved = await self.repository.create(document)

        logger.info("Created post %s for user %s", saved["_id"], user.username)
        return PostResponse.from_document(saved)

    async def list_posts(
        self,
        page: int = 1,
        tag: Optional[str] = None,
        username: Optional[str] = None,
    ) -> PostPage:
        """
        Return one page of posts, newest first, with excerpted bodies.

        Empty or missing `tag`/`username` values do not constrain the query.

        Raises:
            PostValidationError: If `page` is lower than 1.
        """
        if page < 1:
            raise PostValidationError(f"page must be >= 1, got {page}")

        query: Dict[str, Any] = {}
        if username:
            query["user.username"] = username
        if tag:
            query["tags"] = tag

        documents = await self.repository.find_many(
            query,
            skip=(page - 1) * self.page_size,
            limit=self.page_size,
        )
        total = await self.repository.count(query)

        posts = []
        for document in documents:
            post = PostResponse.from_document(document)
            post.body = build_excerpt(post.body, self.excerpt_length)
            posts.append(post)

        return PostPage(posts=posts, last_page=math.ceil(total / self.page_size))

    async def get_post_by_id(self, post_id: str) -> Dict[str, Any]:
        """
        Look up the raw post document shared by read, update and delete.

        Raises:
            InvalidPostIdError: If `post_id` is not a valid ObjectId (no query is made).
            PostNotFoundError: If no post has that id.
        """
        if not self.repository.is_valid_id(post_id):
            raise InvalidPostIdError(f"Invalid post id: {post_id}")

        post = await self.repository.find_by_id(post_id)
        if post is None:
            raise PostNotFoundError(f"Post {post_id} not found")
        return post

    async def read_post(self, post: Dict[str, Any]) -> PostResponse:
        """
        Increment the view counter of a looked-up post and return it.

        A missing counter counts as 0. The increment is applied atomically with
        `$inc`, so it only races with concurrent updates at document level.
        """
        count = post.get("count")
        if count is None:
            count = 0

        if count < 0:
            logger.warning("Post %s has a negative view count (%d), not incrementing", post["_id"], count)
            return PostResponse.from_document(post)

        updated = await self.repository.update_by_id(post["_id"], {"$inc": {"count": 1}})
        if updated is None:
            raise PostNotFoundError(f"Post {post['_id']} not found")
        return PostResponse.from_document(updated)

    def check_own_post(self, post: Dict[str, Any], user: PostUser) -> Dict[str, Any]:
        """
        Ensure `user` owns `post`.

        Raises:
            PostForbiddenError: If the embedded owner id differs from the requester id.
        """
        owner = post.get("user") or {}
        if str(owner.get("_id")) != str(user.id):
            logger.warning("User %s tried to modify post %s owned by %s", user.id, post["_id"], owner.get("_id"))
            raise PostForbiddenError(f"Post {post['_id']} is not owned by {user.id}")
        return post

    async def update_post(
        self,
        post: Dict[str, Any],
        payload: Union[UpdatePostRequest, Mapping[str, Any]],
    ) -> PostResponse:
        """
        Apply a partial update to a looked-up post.

        The thumbnail is always recomputed: from the new body when the patch
        has one, otherwise from the stored body.

        Raises:
            PostValidationError: If a present field is malformed.
            PostNotFoundError: If the post disappeared before the update.
        """
        patch = self._validate(UpdatePostRequest, payload)
        changes = patch.changes()

        if "body" in changes:
            changes["body"] = sanitize_post_body(changes["body"])
        changes["image"] = self._thumbnail(changes.get("body", post.get("body")))

        updated = await self.repository.update_by_id(post["_id"], {"$set": changes})
        if updated is None:
            raise PostNotFoundError(f"Post {post['_id']} not found")

        logger.info("Updated post %s (fields: %s)", post["_id"], ", ".join(sorted(changes)))
        return PostResponse.from_document(updated)

    async def remove_post(self, post_id: Any) -> None:
        """
        Permanently delete a post.

        Raises:
            PostNotFoundError: If nothing was removed (the post was already gone).
        """
        removed = await self.repository.delete_by_id(post_id)
        if not removed:
            raise PostNotFoundError(f"Post {post_id} not found")
        logger.info("Deleted post %s", post_id)
