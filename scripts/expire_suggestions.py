#!/usr/bin/env python3
"""Expire past-due link suggestions with Logfire error tracking.

Meant to run periodically (e.g. hourly from cron). Also deletes decided and
expired suggestions older than IDENTITY__SUGGESTION_CLEANUP_DAYS.
"""

import asyncio
import sys

import logfire

from linkage.application.usecase.suggestion import (
    ExpireSuggestionsRequest,
    ExpireSuggestionsUseCase,
)
from linkage.config import Settings
from linkage.util.di.container import create_container
from linkage.util.logging import get_logger, setup_logging
from linkage.util.observability import configure_logfire

logger = get_logger(__name__)


async def run() -> int:
    """Run one expiry sweep inside a request scope."""
    container = create_container()
    try:
        async with container() as request_container:
            use_case = await request_container.get(ExpireSuggestionsUseCase)
            response = await use_case.execute(ExpireSuggestionsRequest())
    finally:
        await container.close()

    logger.info(
        f"Expired {response.expired} suggestions, deleted {response.deleted}"
    )
    return 0


def main() -> int:
    """Run the sweep and log any errors to Logfire."""
    settings = Settings()

    setup_logging(settings)
    configure_logfire(settings)

    try:
        logfire.info("Starting suggestion expiry")
        return asyncio.run(run())

    except Exception as e:
        logfire.error(
            "Suggestion expiry failed",
            error=str(e),
            error_type=type(e).__name__,
            _exc_info=sys.exc_info(),
        )
        # Re-raise so the scheduler sees the failure
        raise


if __name__ == "__main__":
    sys.exit(main())
