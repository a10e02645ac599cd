"""Process logging helpers.

Every module grabs its logger with ``logger = get_logger(__name__)``. Handlers
are only installed by ``configure_logging`` (called from the CLI), so library
use stays silent unless the host application configures logging itself.
"""

import logging
from typing import Optional

ROOT_LOGGER_NAME = "recordquery"
DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Severity names used by the request-scoped log buffer, mapped to stdlib levels
AUDIT = 25
logging.addLevelName(AUDIT, "AUDIT")


def get_logger(name: str) -> logging.Logger:
    """Return a logger namespaced under the package root."""
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def configure_logging(level: str = "INFO", fmt: Optional[str] = None) -> logging.Logger:
    """
    Install a single stream handler on the package root logger.
    
    Calling this more than once replaces the previous handler instead of
    stacking duplicates. An unknown level name raises ValueError.
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level!r}")
        level = resolved
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        root.removeHandler(handler)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))
    root.addHandler(handler)
    root.setLevel(level)
    return root
