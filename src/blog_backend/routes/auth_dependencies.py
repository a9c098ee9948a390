"""
# Authentication Dependencies

The blog does not manage accounts. It only verifies bearer tokens issued by
the account service and turns them into a `PostUser` (`{id, username}`).

## Token Format

HS256 JWT signed with `SECRET_KEY`, carrying:
- `sub`: the account id
- `username`: the account's username
- `exp`: expiry (checked by `python-jose`)

## Usage

```python
@router.post("/posts")
async def write(current_user: PostUser = Depends(get_current_user)):
    ...
```
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt

from blog_backend.config import Settings
from blog_backend.context import AppContext
from blog_backend.managers.logging_manager import get_logger
from blog_backend.models.post_models import PostUser

logger = get_logger("auth", prefix="[Auth]")

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def get_app_context(request: Request) -> AppContext:
    """Return the `AppContext` attached to the running application."""
    return request.app.state.context


def create_access_token(
    user_id: str,
    username: str,
    settings: Settings,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Sign a token the way the account service does."""
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=60))
    to_encode: Dict[str, Any] = {"sub": user_id, "username": username, "exp": expire}
    return jwt.encode(to_encode, settings.SECRET_KEY.get_secret_value(), algorithm=settings.ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> PostUser:
    """
    Verify a bearer token and return the requester it identifies.

    Raises:
        HTTPException(401): If the token is invalid, expired or lacks claims.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.SECRET_KEY.get_secret_value(), algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.warning("Rejected bearer token: %s", e)
        raise credentials_exception

    user_id = payload.get("sub")
    username = payload.get("username")
    if not user_id or not username:
        raise credentials_exception
    return PostUser(id=str(user_id), username=str(username))


async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    context: AppContext = Depends(get_app_context),
) -> PostUser:
    """
    Authenticate the requester.

    Raises:
        HTTPException(401): If no valid bearer token was sent.
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return decode_access_token(token, context.settings)
