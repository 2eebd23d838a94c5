"""Stdout logging for scripts and periodic jobs.

Domain and persistence code report through Logfire; this only configures the
stdlib loggers that scripts, alembic and SQLAlchemy write to.
"""

import logging
import sys

from linkage.config import Settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Third-party loggers pinned regardless of the application level
PINNED_LEVELS = {
    "sqlalchemy.engine": logging.WARNING,  # echo is controlled by DEBUG
    "asyncpg": logging.WARNING,
    "alembic": logging.INFO,
}


def level_for(settings: Settings) -> int:
    """Log level for the configured environment."""
    if settings.debug:
        return logging.DEBUG
    if settings.environment == "test":
        return logging.WARNING
    return logging.INFO


def setup_logging(settings: Settings) -> None:
    """Send all logging to stdout at the environment's level.

    Args:
        settings: Application settings
    """
    level = level_for(settings)
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    for name, pinned in PINNED_LEVELS.items():
        logging.getLogger(name).setLevel(pinned)
    logging.getLogger("linkage").setLevel(level)

    get_logger(__name__).info(
        f"Logging configured: environment={settings.environment}, "
        f"level={logging.getLevelName(level)}"
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
