"""In-memory unit of work for testing."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from linkage.domain.repository import UnitOfWork

from .store import InMemoryStore


class InMemoryUnitOfWork(UnitOfWork):
    """Snapshot/restore transactions over an InMemoryStore."""

    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Restore the store to its state at entry if the block raises."""
        snapshot = self.store.snapshot()
        try:
            yield
        except BaseException:
            self.store.restore(snapshot)
            raise
