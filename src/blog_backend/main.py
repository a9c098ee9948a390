"""
# Blog Backend - Main Application Module

Entry point of the Blog Backend FastAPI application: builds the app, wires the
routers, middleware and error handlers, and drives the startup/shutdown of
the shared `AppContext`.

## Lifespan

**Startup:**
1. **Logging**: configures the package logger from `LOG_LEVEL`.
2. **Uploads**: creates `UPLOAD_DIR` if needed.
3. **Database**: connects to MongoDB (with retries) and creates the post indexes.

**Shutdown:**
1. **Uploads**: waits for background image resizes.
2. **Database**: closes the MongoDB client.

## Error Mapping

| Exception | Status | Body |
|-----------|--------|------|
| `PostValidationError`, `RequestValidationError` | 400 | `{"detail": [...]}` |
| `InvalidUploadError` | 400 | `{"detail": "..."}` |
| `InvalidPostIdError` | 400 | empty |
| `PostForbiddenError` | 403 | empty |
| `PostNotFoundError` | 404 | empty |
| `PostStoreError` | 500 | `{"detail": {...}}` |

## Running

```bash
uvicorn blog_backend.main:app --host 0.0.0.0 --port 4000
```
"""

import time
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.middleware.cors import CORSMiddleware
import uvicorn

from blog_backend import __version__
from blog_backend.config import Settings, settings as default_settings
from blog_backend.context import AppContext
from blog_backend.managers.logging_manager import get_logger, setup_logging
from blog_backend.middleware.request_logging import RequestLoggingMiddleware
from blog_backend.routes.health import router as health_router
from blog_backend.routes.posts import router as posts_router
from blog_backend.services.post_exceptions import (
    InvalidUploadError,
    PostServiceError,
    PostValidationError,
)

logger = get_logger(prefix="[Main]")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Start the application context before serving and stop it afterwards.

    Raises:
        ServerSelectionTimeoutError: If MongoDB cannot be reached at startup.
    """
    context: AppContext = app.state.context
    startup_start_time = time.time()
    logger.info("Blog Backend %s starting up", __version__)

    await context.startup()
    logger.info("Startup completed in %.3fs", time.time() - startup_start_time)

    try:
        yield
    finally:
        logger.info("Shutting down")
        await context.shutdown()


def _clean_validation_errors(errors: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [{key: value for key, value in error.items() if key not in ("ctx", "url", "input")} for error in errors]


async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"detail": jsonable_encoder(_clean_validation_errors(exc.errors()))},
    )


async def handle_post_service_error(request: Request, exc: PostServiceError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc)
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": {"message": str(exc), "error": jsonable_encoder(exc.detail)}},
        )
    if isinstance(exc, (PostValidationError, InvalidUploadError)):
        detail = exc.detail if exc.detail is not None else str(exc)
        return JSONResponse(status_code=exc.status_code, content={"detail": jsonable_encoder(detail)})

    logger.debug("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc)
    return Response(status_code=exc.status_code)


def create_app(settings: Optional[Settings] = None, context: Optional[AppContext] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Configuration to use. Defaults to the global `settings`.
        context: Pre-built application context. Defaults to one connected to MongoDB.

    Returns:
        FastAPI: The configured application.
    """
    settings = settings or (context.settings if context else default_settings)
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="Blog Backend API",
        description="Posts with ownership checks, sanitized HTML bodies, pagination and image uploads.",
        version=__version__,
        lifespan=lifespan,
        debug=settings.DEBUG,
    )
    app.state.context = context or AppContext.from_settings(settings)

    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(PostServiceError, handle_post_service_error)

    cors_origins = settings.cors_origins_list
    logger.info("Configuring CORS with origins: %s", cors_origins)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["Last-Page"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(posts_router, prefix=settings.API_PREFIX)
    app.include_router(health_router)
    app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")

    if settings.METRICS_ENABLED:
        Instrumentator(
            should_group_status_codes=True,
            should_ignore_untemplated=True,
        ).instrument(app).expose(app, include_in_schema=False, endpoint="/metrics")
        logger.info("Prometheus metrics exposed at /metrics")

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "blog_backend.main:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        reload=default_settings.DEBUG,
        log_level="info",
    )
