"""
# Blog Backend

A **FastAPI** backend for a blog: CRUD endpoints for posts with ownership-based
authorization, HTML sanitization, pagination and image upload/resizing, backed
by **MongoDB** through the async **Motor** driver.

## Package Structure

- **`main`**: application factory, lifespan and error handlers
- **`config`**: Pydantic-based settings loaded from the environment or a config file
- **`context`**: the `AppContext` holding the database manager, post service and upload manager
- **`database`**: MongoDB connection management and the post repository
- **`services`**: post business logic and its exceptions
- **`routes`**: HTTP routers and the dependency pipeline (auth, lookup, ownership)
- **`managers`**: logging and image uploads
- **`utils`**: HTML sanitization, thumbnail extraction and excerpts

## Getting Started

```bash
pip install -e ".[test]"
uvicorn blog_backend.main:app --reload --port 4000
```

Module Attributes:
    __version__ (str): Package version.
"""

__version__ = "1.0.0"
