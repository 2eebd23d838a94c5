"""UnitOfWork implementation using PostgreSQL savepoints."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession

from linkage.domain.repository import UnitOfWork


class PostgresUnitOfWork(UnitOfWork):
    """Transaction boundary over the request-scoped session.

    Each block runs in a SAVEPOINT, so a failing use case rolls back its own
    writes while the surrounding session (committed by the DI provider at
    the end of the request) stays usable.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize unit of work with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Run the block inside a savepoint."""
        async with self.session.begin_nested():
            yield
