"""Logging configuration for the sync layer and the REST service."""
import logging
import sys
from zxsgit.config import Settings, settings


def resolve_level(config: Settings) -> int:
    """Level named by LOG_LEVEL, else DEBUG in development and INFO elsewhere."""
    if config.log_level:
        level = getattr(logging, config.log_level.strip().upper(), None)
        if isinstance(level, int):
            return level
    return logging.DEBUG if config.environment == "development" else logging.INFO


# Package logger shared by every module
logger = logging.getLogger("zxsgit")
logger.setLevel(resolve_level(settings))

handler = logging.StreamHandler(sys.stdout)
handler.setFormatter(
    logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - [%(module)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
)

if not logger.handlers:
    logger.addHandler(handler)

# Records stop here; uvicorn configures the root logger separately
logger.propagate = False

__all__ = ["logger", "resolve_level"]
