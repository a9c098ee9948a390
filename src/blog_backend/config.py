"""
# Configuration Management Module

This module provides the configuration system for the Blog Backend API.
Built on **Pydantic Settings**, it loads values from a config file and the
process environment, validates them at startup and exposes a single
`settings` object.

## Configuration Loading Hierarchy

Higher layers override lower layers:

1. **Environment variables** (highest priority)
2. **`BLOG_BACKEND_CONFIG_PATH`**: explicit path to a config file
3. **`.blog` file** in the project root
4. **`.env` file** in the project root
5. **Defaults** declared on the `Settings` class (lowest priority)

If no file is found the application runs in environment-only mode.

## Configuration Groups

| Group | Settings |
|-------|----------|
| **Server** | `HOST`, `PORT`, `DEBUG`, `API_PREFIX`, `CORS_ORIGINS` |
| **Database (MongoDB)** | `MONGODB_URL`, `MONGODB_DATABASE`, credentials, timeouts, `POSTS_COLLECTION` |
| **Authentication** | `SECRET_KEY` (required), `ALGORITHM` |
| **Posts** | `POSTS_PAGE_SIZE`, `EXCERPT_LENGTH`, `THUMBNAIL_BASE_URL` |
| **Uploads** | `UPLOAD_DIR`, `UPLOAD_RESIZE_WIDTH`, `UPLOAD_RESIZE_IN_BACKGROUND` |
| **Observability** | `LOG_LEVEL`, `METRICS_ENABLED` |

## Usage

```python
from blog_backend.config import settings

page_size = settings.POSTS_PAGE_SIZE
secret = settings.SECRET_KEY.get_secret_value()
```
"""

import os
from pathlib import Path
from typing import Any, List, Optional

from dotenv import load_dotenv
from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Constants ---
BLOG_FILENAME: str = ".blog"
DEFAULT_ENV_FILENAME: str = ".env"
CONFIG_ENV_VAR: str = "BLOG_BACKEND_CONFIG_PATH"
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent.parent


# --- Config file discovery (no logging) ---
def get_config_path() -> Optional[str]:
    """
    Determine the configuration file path based on a fixed precedence order.

    1.  **Environment Variable**: `BLOG_BACKEND_CONFIG_PATH` (if set and the file exists).
    2.  **Blog Config**: `.blog` file in the project root directory.
    3.  **Dotenv Config**: `.env` file in the project root directory.
    4.  **Fallback**: `None`, which means environment variables only.

    Returns:
        Optional[str]: The path to the configuration file, or `None` if not found.
    """
    env_path: Optional[str] = os.environ.get(CONFIG_ENV_VAR)
    if env_path and os.path.exists(env_path):
        return env_path
    blog_path: Path = PROJECT_ROOT / BLOG_FILENAME
    if blog_path.exists():
        return str(blog_path)
    env_path_file: Path = PROJECT_ROOT / DEFAULT_ENV_FILENAME
    if env_path_file.exists():
        return str(env_path_file)
    return None


CONFIG_PATH: Optional[str] = get_config_path()
if CONFIG_PATH:
    load_dotenv(dotenv_path=CONFIG_PATH, override=True)


class Settings(BaseSettings):
    """
    Application configuration settings model.

    Values are read from environment variables or the discovered config file.
    Field names are case sensitive and match the environment variable names.
    """

    model_config = SettingsConfigDict(
        env_file=CONFIG_PATH if CONFIG_PATH else None,
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="allow",
    )

    # Server configuration
    HOST: str = "127.0.0.1"
    PORT: int = 4000
    DEBUG: bool = False
    API_PREFIX: str = "/api"
    CORS_ORIGINS: str = "http://localhost:3000"

    # MongoDB configuration
    MONGODB_URL: str = "mongodb://localhost:27017"
    MONGODB_DATABASE: str = "blog"
    MONGODB_CONNECTION_TIMEOUT: int = 10000
    MONGODB_SERVER_SELECTION_TIMEOUT: int = 5000
    MONGODB_USERNAME: Optional[str] = None
    MONGODB_PASSWORD: Optional[SecretStr] = None
    POSTS_COLLECTION: str = "posts"

    # JWT verification (tokens are issued by the account service)
    SECRET_KEY: SecretStr
    ALGORITHM: str = "HS256"

    # Post listing and previews
    POSTS_PAGE_SIZE: int = 20
    EXCERPT_LENGTH: int = 100
    THUMBNAIL_BASE_URL: str = "http://localhost:4000/"

    # Image uploads
    UPLOAD_DIR: str = "public/uploads"
    UPLOAD_RESIZE_WIDTH: int = 600
    UPLOAD_RESIZE_IN_BACKGROUND: bool = True

    # Observability
    LOG_LEVEL: str = "INFO"
    METRICS_ENABLED: bool = True

    @field_validator("SECRET_KEY", mode="before")
    @classmethod
    def no_hardcoded_secrets(cls, v: Any, info: Any) -> Any:
        """
        Reject empty or placeholder signing keys.

        A blank key would let anyone sign bearer tokens for any account.

        Raises:
            ValueError: If the value is empty, whitespace or a placeholder such as
                "change-me" or "0000".
        """
        raw = v.get_secret_value() if isinstance(v, SecretStr) else v
        if not raw or not str(raw).strip() or "change" in str(raw).lower() or "0000" in str(raw):
            raise ValueError(f"{info.field_name} must be set via environment or .blog and not hardcoded!")
        return v

    @field_validator("MONGODB_URL", mode="before")
    @classmethod
    def no_empty_urls(cls, v: Any, info: Any) -> Any:
        """Reject blank MongoDB connection strings."""
        if v is None or not str(v).strip():
            raise ValueError(f"{info.field_name} must not be empty")
        return v

    @field_validator("POSTS_PAGE_SIZE", "EXCERPT_LENGTH", "UPLOAD_RESIZE_WIDTH", mode="before")
    @classmethod
    def validate_positive_integers(cls, v: Any, info: Any) -> int:
        value = int(v)
        if value <= 0:
            raise ValueError(f"{info.field_name} must be a positive integer")
        return value

    @property
    def cors_origins_list(self) -> List[str]:
        """Comma separated `CORS_ORIGINS` as a list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


settings: Settings = Settings()
