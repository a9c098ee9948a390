"""
# Health Routes

Liveness and readiness probes for container orchestration.

- `/health/liveness`: 200 as long as the process answers.
- `/health/readiness`: 200 when MongoDB answers a ping, 503 otherwise.

```yaml
livenessProbe:
  httpGet:
    path: /health/liveness
    port: 4000
readinessProbe:
  httpGet:
    path: /health/readiness
    port: 4000
```
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from blog_backend.context import AppContext
from blog_backend.routes.auth_dependencies import get_app_context

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("/liveness")
async def liveness_probe():
    """Returns 200 if the application is alive."""
    return {"status": "alive"}


@router.get("/readiness")
async def readiness_probe(context: AppContext = Depends(get_app_context)):
    """Returns 200 only if the database is reachable."""
    if await context.health_check():
        return {"status": "ready", "database": "connected"}
    return JSONResponse(status_code=503, content={"status": "not_ready", "database": "unavailable"})
