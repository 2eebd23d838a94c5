"""Decide suggestion use case."""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from linkage.application.usecase.base import BaseUseCase
from linkage.application.usecase.views import IdentityView, SuggestionView
from linkage.domain.repository import UnitOfWork
from linkage.domain.service import LinkService, SuggestionService
from linkage.domain.value import LinkSuggestionId


class DecideSuggestionRequest(BaseModel):
    """Decide suggestion request."""

    suggestion_id: str  # UUID string
    accepted: bool
    reviewer: str
    reason: Optional[str] = None


class DecideSuggestionResponse(BaseModel):
    """Decide suggestion response."""

    suggestion: SuggestionView
    identity: IdentityView


class DecideSuggestionUseCase(BaseUseCase):
    """Use case for accepting or rejecting a link suggestion."""

    def __init__(
        self,
        suggestion_service: SuggestionService,
        link_service: LinkService,
        unit_of_work: UnitOfWork,
    ) -> None:
        """Initialize decide suggestion use case.

        Args:
            suggestion_service: Suggestion domain service
            link_service: Link domain service
            unit_of_work: Transaction boundary
        """
        self.suggestion_service = suggestion_service
        self.link_service = link_service
        self.unit_of_work = unit_of_work

    async def execute(
        self, request: DecideSuggestionRequest
    ) -> DecideSuggestionResponse:
        """Execute decision flow.

        Returns:
            The decided suggestion and the identity's resulting state

        Raises:
            NotFoundError: If the suggestion does not exist
            InvalidStateError: If the suggestion is no longer pending
        """
        async with self.unit_of_work.transaction():
            suggestion = await self.suggestion_service.decide(
                LinkSuggestionId(UUID(request.suggestion_id)),
                request.accepted,
                request.reviewer,
                request.reason,
            )
            identity = await self.link_service.get_identity(
                suggestion.external_identity_id
            )

        return DecideSuggestionResponse(
            suggestion=SuggestionView.from_model(suggestion),
            identity=IdentityView.from_model(identity),
        )
