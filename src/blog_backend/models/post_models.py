"""
# Post Models

This module defines the **Pydantic models** for blog posts: what clients may
send, what the `posts` collection stores and what the API returns.

## Domain Model Overview

- **Post**: a titled HTML body with tags, a derived thumbnail image, a view
  counter and an embedded snapshot of the owning account.
- **PostUser**: the `{id, username}` snapshot taken from the authenticated
  requester at creation time. It is never refreshed afterwards.

## Request/Response Separation

- `CreatePostRequest`: all of `title`, `body` and `tags` are required.
- `UpdatePostRequest`: a typed patch. Each field is optional, but a field that
  is present must satisfy the same rules as on creation. Explicit `null`s and
  unknown keys are rejected.
- `PostResponse`: the full post as returned by create, read and update.
- `UploadResponse`: the stored filename of an uploaded image.

Both request models forbid unknown keys, so a client cannot smuggle in
`image`, `count` or `user`.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class PostUser(BaseModel):
    """Snapshot of the account that owns a post."""

    id: str = Field(..., description="Account ID of the owner")
    username: str = Field(..., description="Username of the owner at creation time")


class CreatePostRequest(BaseModel):
    """
    Request model for creating a new post.

    **Fields:**
    *   **title**: non-empty text.
    *   **body**: raw HTML; sanitized before it is stored.
    *   **tags**: list of non-empty plain-text labels (may be empty).
    """

    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., min_length=1, description="Post title")
    body: str = Field(..., min_length=1, description="Post body (HTML)")
    tags: List[str] = Field(..., description="Post tags")

    @model_validator(mode="after")
    def validate_tags(self):
        if any(not tag for tag in self.tags):
            raise ValueError("tags must not contain empty strings")
        return self


class UpdatePostRequest(BaseModel):
    """
    Typed patch for updating a post.

    Absent fields keep their stored values. Present fields are validated like
    `CreatePostRequest`; sending `null` for a field is an error rather than a
    way to clear it.
    """

    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(None, min_length=1, description="Post title")
    body: Optional[str] = Field(None, min_length=1, description="Post body (HTML)")
    tags: Optional[List[str]] = Field(None, description="Post tags")

    @model_validator(mode="before")
    @classmethod
    def reject_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            nulls = sorted(key for key, value in data.items() if value is None)
            if nulls:
                raise ValueError(f"fields may not be null: {', '.join(nulls)}")
        return data

    @model_validator(mode="after")
    def validate_tags(self):
        if self.tags is not None and any(not tag for tag in self.tags):
            raise ValueError("tags must not contain empty strings")
        return self

    def changes(self) -> Dict[str, Any]:
        """Return only the fields the client actually sent."""
        return self.model_dump(exclude_unset=True)


class PostResponse(BaseModel):
    """
    Response model for a single post.

    `body` holds the sanitized HTML, or the excerpt when the post is part of a
    listing.
    """

    id: str
    title: str
    body: str
    image: Optional[str] = None
    tags: List[str] = []
    published_date: Optional[datetime] = None
    count: int = 0
    user: Optional[PostUser] = None

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "PostResponse":
        """Build a response from a raw `posts` collection document."""
        user = document.get("user")
        return cls(
            id=str(document["_id"]),
            title=document.get("title", ""),
            body=document.get("body", ""),
            image=document.get("image"),
            tags=list(document.get("tags") or []),
            published_date=document.get("published_date"),
            count=document.get("count") or 0,
            user=PostUser(id=str(user.get("_id")), username=user.get("username", "")) if user else None,
        )


class UploadResponse(BaseModel):
    """Response model for an uploaded image."""

    filename: str = Field(..., description="Generated name of the stored file")
