"""
# Logging Manager

Central place to obtain loggers for the Blog Backend.

Every component asks for a logger through `get_logger()`, optionally with a
prefix such as `[DATABASE]` or `[Post Service]`. The prefix is prepended to
each message so log lines from different layers can be told apart without a
structured log pipeline.

```python
from blog_backend.managers.logging_manager import get_logger

logger = get_logger(prefix="[Post Service]")
logger.info("Created post %s", post_id)
```
"""

import logging
from typing import Optional

LOG_FORMAT = "%(asctime)-21s %(levelname)-8s %(name)-14s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
ROOT_LOGGER_NAME = "blog_backend"

_configured = False


class PrefixAdapter(logging.LoggerAdapter):
    """Logger adapter that prepends a fixed prefix to every message."""

    def process(self, msg, kwargs):
        prefix = self.extra.get("prefix")
        if prefix:
            msg = f"{prefix} {msg}"
        return msg, kwargs


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure the package root logger once.

    Args:
        level: Log level name. Defaults to `settings.LOG_LEVEL`.
    """
    global _configured
    if level is None:
        from blog_backend.config import settings

        level = settings.LOG_LEVEL

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level.upper())
    if not _configured:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root.addHandler(handler)
        root.propagate = False
        _configured = True


def get_logger(name: str = ROOT_LOGGER_NAME, prefix: str = "") -> logging.LoggerAdapter:
    """
    Return a logger for `name`, optionally decorated with `prefix`.

    Names outside the package namespace are nested under it so that a single
    handler configuration applies everywhere.
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return PrefixAdapter(logging.getLogger(name), {"prefix": prefix})
