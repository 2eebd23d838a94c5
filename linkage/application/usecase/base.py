"""Base use case."""

from abc import ABC, abstractmethod
from typing import Any

from linkage.domain.repository import UnitOfWork


class BaseUseCase(ABC):
    """Base use case for orchestrating domain services.

    Writing use cases run their whole `execute` inside one unit-of-work
    transaction, so every side effect of a call commits or rolls back
    together.
    """

    unit_of_work: UnitOfWork

    @abstractmethod
    async def execute(self, request: Any) -> Any:
        pass
