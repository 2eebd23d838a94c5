"""Async engine and session factory for the identity store."""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from linkage.config import Settings


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the asyncpg engine described by the database settings.

    The statement timeout and application name are sent as server settings
    on every new connection.

    Args:
        settings: Application settings

    Returns:
        Async engine with a pre-pinged connection pool
    """
    database = settings.database
    server_settings = {"application_name": database.application_name}
    if database.statement_timeout_ms:
        server_settings["statement_timeout"] = str(database.statement_timeout_ms)

    return create_async_engine(
        database.url,
        echo=settings.debug,
        pool_pre_ping=True,
        pool_size=database.pool_size,
        max_overflow=database.max_overflow,
        connect_args={"server_settings": server_settings},
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory whose rows stay readable after commit."""
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)
