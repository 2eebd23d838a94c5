"""Transaction boundary interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager


class UnitOfWork(ABC):
    """Groups repository writes into one atomic transaction.

    Usage:
        async with unit_of_work.transaction():
            await identity_repository.save(...)
            await audit_repository.append(...)

    If the block raises, every write made inside it is rolled back and the
    exception propagates. Transactions may be nested; only the outermost
    block decides the final outcome.
    """

    @abstractmethod
    def transaction(self) -> AbstractAsyncContextManager[None]:
        """Open a transaction scope."""
        pass
