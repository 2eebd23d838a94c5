"""Expire suggestions use case."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from linkage.application.usecase.base import BaseUseCase
from linkage.config import IdentityConfig
from linkage.domain.model.common import utcnow
from linkage.domain.repository import UnitOfWork
from linkage.domain.service import SuggestionService


class ExpireSuggestionsRequest(BaseModel):
    """Expire suggestions request."""

    now: Optional[datetime] = None
    cleanup: bool = True
    # Defaults to the configured suggestion_cleanup_days
    cleanup_older_than_days: Optional[int] = Field(default=None, ge=1)


class ExpireSuggestionsResponse(BaseModel):
    """Expire suggestions response."""

    expired: int
    deleted: int = 0


class ExpireSuggestionsUseCase(BaseUseCase):
    """Use case for the periodic suggestion expiry sweep."""

    def __init__(
        self,
        suggestion_service: SuggestionService,
        identity_config: IdentityConfig,
        unit_of_work: UnitOfWork,
    ) -> None:
        """Initialize expire suggestions use case.

        Args:
            suggestion_service: Suggestion domain service
            identity_config: Engine-wide identity configuration
            unit_of_work: Transaction boundary
        """
        self.suggestion_service = suggestion_service
        self.identity_config = identity_config
        self.unit_of_work = unit_of_work

    async def execute(
        self, request: ExpireSuggestionsRequest
    ) -> ExpireSuggestionsResponse:
        """Expire past-due suggestions, then optionally purge old ones."""
        now = request.now or utcnow()

        async with self.unit_of_work.transaction():
            expired = await self.suggestion_service.expire_due(now)

            deleted = 0
            if request.cleanup:
                deleted = await self.suggestion_service.cleanup_processed(
                    request.cleanup_older_than_days
                    or self.identity_config.suggestion_cleanup_days,
                    now,
                )

        return ExpireSuggestionsResponse(expired=expired, deleted=deleted)
