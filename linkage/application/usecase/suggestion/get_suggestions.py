"""Get suggestions use case."""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from linkage.application.usecase.base import BaseUseCase
from linkage.application.usecase.views import SuggestionView
from linkage.domain.service import SuggestionService
from linkage.domain.value import ExternalIdentityId, OrganizationId, UserId


class GetSuggestionsRequest(BaseModel):
    """Get suggestions request.

    Filters, in priority order: `identity_id` returns every suggestion of
    that identity; `user_id` returns the user's pending suggestions; with
    neither, a page of the organization's pending suggestions.
    """

    organization_id: str  # UUID string
    identity_id: Optional[str] = None  # UUID string
    user_id: Optional[str] = None  # UUID string
    limit: int = Field(default=50, ge=1, le=200)
    offset: int = Field(default=0, ge=0)


class GetSuggestionsResponse(BaseModel):
    """Get suggestions response."""

    suggestions: list[SuggestionView]


class GetSuggestionsUseCase(BaseUseCase):
    """Use case for listing link suggestions awaiting review."""

    def __init__(self, suggestion_service: SuggestionService) -> None:
        """Initialize get suggestions use case.

        Args:
            suggestion_service: Suggestion domain service
        """
        self.suggestion_service = suggestion_service

    async def execute(self, request: GetSuggestionsRequest) -> GetSuggestionsResponse:
        """List suggestions, highest confidence first."""
        organization_id = OrganizationId(UUID(request.organization_id))

        if request.identity_id:
            suggestions = await self.suggestion_service.get_for_identity(
                ExternalIdentityId(UUID(request.identity_id))
            )
        elif request.user_id:
            suggestions = await self.suggestion_service.get_pending_for_user(
                organization_id, UserId(UUID(request.user_id))
            )
        else:
            suggestions = await self.suggestion_service.get_pending_for_organization(
                organization_id, request.limit, request.offset
            )

        return GetSuggestionsResponse(
            suggestions=[SuggestionView.from_model(s) for s in suggestions]
        )
