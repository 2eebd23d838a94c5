"""Observability configuration using Logfire.

Usage:
    import logfire

    # Structured logging
    logfire.info("Identity linked", identity_id=str(identity.id))

    # Manual spans around domain operations
    with logfire.span("link_service.link", identity_id=str(identity_id)):
        ...
"""

import logfire
from sqlalchemy.ext.asyncio import AsyncEngine

from linkage.config import ObservabilitySettings, Settings

SERVICE_NAME = "linkage"
SERVICE_VERSION = "0.1.0"


def should_send(observability: ObservabilitySettings) -> bool:
    """Whether telemetry leaves the process.

    An explicit `send_to_logfire` wins; otherwise a configured token turns
    sending on.
    """
    if observability.send_to_logfire is not None:
        return observability.send_to_logfire
    return bool(observability.logfire_token)


def configure_logfire(settings: Settings) -> None:
    """Configure Logfire for the engine's scripts and jobs.

    Spans and events always reach the console except under the test
    environment, where the console exporter is disabled.

    Args:
        settings: Application settings
    """
    observability = settings.observability
    send_to_logfire = should_send(observability)

    console: logfire.ConsoleOptions | bool = logfire.ConsoleOptions(
        colors="auto",
        span_style="show-parents",
        include_timestamps=True,
        verbose=settings.debug,
    )
    if settings.environment == "test":
        console = False

    logfire.configure(
        service_name=SERVICE_NAME,
        service_version=SERVICE_VERSION,
        environment=settings.environment,
        send_to_logfire=send_to_logfire,
        token=observability.logfire_token,
        console=console,
    )

    logfire.info(
        "Observability configured",
        environment=settings.environment,
        send_to_logfire=send_to_logfire,
        has_token=bool(observability.logfire_token),
    )


def instrument_sqlalchemy(engine: AsyncEngine) -> None:
    """Instrument SQLAlchemy engine with Logfire.

    Traces every SQL statement with its duration and transaction
    boundaries.

    Args:
        engine: SQLAlchemy async engine
    """
    logfire.instrument_sqlalchemy(
        engine=engine.sync_engine,
        enable_commenter=True,  # Add SQL comments with span context
    )
    logfire.info("SQLAlchemy instrumented")
