"""
# Post Routes

REST endpoints for blog posts. Every handler is a thin wrapper around
`PostService`; access control is expressed by the dependencies each route
declares, in order.

## API Endpoints

- `GET /posts` - List posts (20 per page, `Last-Page` header)
- `POST /posts` - Write a post (authenticated)
- `POST /posts/upload` - Upload an image (multipart field `img`)
- `GET /posts/{post_id}` - Read a post and count the view
- `PATCH /posts/{post_id}` - Update an owned post (authenticated)
- `DELETE /posts/{post_id}` - Delete an owned post (authenticated)

## Usage Examples

```python
response = await client.get("/api/posts", params={"page": 2, "tag": "python"})
last_page = int(response.headers["Last-Page"])

response = await client.post(
    "/api/posts",
    json={"title": "Hello", "body": "<p>World</p>", "tags": ["intro"]},
    headers={"Authorization": f"Bearer {token}"},
)
```
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile, status

from blog_backend.context import AppContext
from blog_backend.managers.logging_manager import get_logger
from blog_backend.models.post_models import (
    CreatePostRequest,
    PostResponse,
    PostUser,
    UpdatePostRequest,
    UploadResponse,
)
from blog_backend.routes.auth_dependencies import get_app_context, get_current_user
from blog_backend.routes.post_dependencies import check_own_post, get_post_by_id, get_post_service
from blog_backend.services.post_service import PostService

logger = get_logger("routes.posts", prefix="[Post Routes]")

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("", response_model=List[PostResponse])
async def list_posts(
    response: Response,
    page: int = Query(1, description="1-based page number"),
    tag: Optional[str] = Query(None, description="Only posts carrying this tag"),
    username: Optional[str] = Query(None, description="Only posts written by this user"),
    service: PostService = Depends(get_post_service),
):
    """
    List posts, newest first, with bodies shortened to an excerpt.

    The total number of pages for the same filters is returned in the
    `Last-Page` header.

    Raises:
        HTTPException(400): If `page` is lower than 1.
    """
    result = await service.list_posts(page=page, tag=tag, username=username)
    response.headers["Last-Page"] = str(result.last_page)
    return result.posts


@router.post("", response_model=PostResponse)
async def write_post(
    request: CreatePostRequest,
    current_user: PostUser = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
):
    """Create a post owned by the authenticated user."""
    return await service.write_post(request, current_user)


@router.post("/upload", response_model=UploadResponse)
async def upload_image(
    img: UploadFile = File(..., description="Image file"),
    context: AppContext = Depends(get_app_context),
):
    """
    Store an uploaded image and resize it to the configured width.

    The response may be sent before the resize completes, see
    `UPLOAD_RESIZE_IN_BACKGROUND`.
    """
    filename = await context.upload_manager.save_image(img)
    logger.info("Upload %s stored as %s", img.filename, filename)
    return UploadResponse(filename=filename)


@router.get("/{post_id}", response_model=PostResponse)
async def read_post(
    post: Dict[str, Any] = Depends(get_post_by_id),
    service: PostService = Depends(get_post_service),
):
    """Return a post and increment its view count."""
    return await service.read_post(post)


@router.patch("/{post_id}", response_model=PostResponse)
async def update_post(
    request: UpdatePostRequest,
    post: Dict[str, Any] = Depends(check_own_post),
    service: PostService = Depends(get_post_service),
):
    """Apply a partial update to a post owned by the authenticated user."""
    return await service.update_post(post, request)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_post(
    post: Dict[str, Any] = Depends(check_own_post),
    service: PostService = Depends(get_post_service),
):
    """Permanently delete a post owned by the authenticated user."""
    await service.remove_post(post["_id"])
    return Response(status_code=status.HTTP_204_NO_CONTENT)
