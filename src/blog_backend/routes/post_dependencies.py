"""
# Post Capability Dependencies

FastAPI dependencies that make up the request pipeline of the post routes.
Each one either returns the enriched context for the next step or raises,
which ends the request:

- `get_post_service`: the service of the running `AppContext`.
- `get_post_by_id`: validates the path id and loads the post (400 / 404).
- `check_own_post`: authenticates the requester and checks ownership (401 / 403).

Routes compose them explicitly:

```python
@router.patch("/{post_id}")
async def update(post: dict = Depends(check_own_post)):
    ...
```
"""

from typing import Any, Dict

from fastapi import Depends

from blog_backend.context import AppContext
from blog_backend.models.post_models import PostUser
from blog_backend.routes.auth_dependencies import get_app_context, get_current_user
from blog_backend.services.post_service import PostService


async def get_post_service(context: AppContext = Depends(get_app_context)) -> PostService:
    return context.post_service


async def get_post_by_id(
    post_id: str,
    service: PostService = Depends(get_post_service),
) -> Dict[str, Any]:
    return await service.get_post_by_id(post_id)


async def check_own_post(
    current_user: PostUser = Depends(get_current_user),
    post: Dict[str, Any] = Depends(get_post_by_id),
    service: PostService = Depends(get_post_service),
) -> Dict[str, Any]:
    return service.check_own_post(post, current_user)
