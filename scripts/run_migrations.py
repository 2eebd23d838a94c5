#!/usr/bin/env python3
"""Upgrade the database schema with Logfire error tracking.

Usage:
    python scripts/run_migrations.py            # upgrade to head
    python scripts/run_migrations.py 3f1c2a9d7e40
"""

import sys
from pathlib import Path

import logfire
from alembic import command
from alembic.config import Config

from linkage.config import Settings
from linkage.util.error import MigrationError
from linkage.util.logging import setup_logging
from linkage.util.observability import configure_logfire

ALEMBIC_INI = Path(__file__).resolve().parent.parent / "alembic.ini"


def main(argv: list[str]) -> int:
    """Upgrade to the revision in argv (default head), logging failures."""
    revision = argv[1] if len(argv) > 1 else "head"
    settings = Settings()

    setup_logging(settings)
    configure_logfire(settings)

    with logfire.span("run_migrations", revision=revision):
        alembic_cfg = Config(str(ALEMBIC_INI))
        try:
            command.upgrade(alembic_cfg, revision)
        except Exception as e:
            logfire.error(
                "Database migration failed",
                revision=revision,
                error_type=type(e).__name__,
                _exc_info=sys.exc_info(),
            )
            # Fail the deploy rather than run against a half-migrated schema
            raise MigrationError(revision, e) from e

    logfire.info("Database migrations completed", revision=revision)
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
