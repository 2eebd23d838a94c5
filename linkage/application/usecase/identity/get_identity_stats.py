"""Get identity stats use case."""

from uuid import UUID

from pydantic import BaseModel

from linkage.application.usecase.base import BaseUseCase
from linkage.domain.service import ExternalIdentityService, SuggestionService
from linkage.domain.value import IdentityStats, OrganizationId, SuggestionStats


class GetIdentityStatsRequest(BaseModel):
    """Get identity stats request."""

    organization_id: str  # UUID string


class GetIdentityStatsResponse(BaseModel):
    """Get identity stats response."""

    identities: IdentityStats
    suggestions: SuggestionStats


class GetIdentityStatsUseCase(BaseUseCase):
    """Use case for an organization's link coverage dashboard."""

    def __init__(
        self,
        external_identity_service: ExternalIdentityService,
        suggestion_service: SuggestionService,
    ) -> None:
        """Initialize get identity stats use case.

        Args:
            external_identity_service: External identity domain service
            suggestion_service: Suggestion domain service
        """
        self.external_identity_service = external_identity_service
        self.suggestion_service = suggestion_service

    async def execute(
        self, request: GetIdentityStatsRequest
    ) -> GetIdentityStatsResponse:
        """Collect identity and suggestion counts."""
        organization_id = OrganizationId(UUID(request.organization_id))
        return GetIdentityStatsResponse(
            identities=await self.external_identity_service.get_stats(organization_id),
            suggestions=await self.suggestion_service.get_stats(organization_id),
        )
