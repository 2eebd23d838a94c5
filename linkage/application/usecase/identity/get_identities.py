"""Get identities use case."""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from linkage.application.usecase.base import BaseUseCase
from linkage.application.usecase.views import IdentityView
from linkage.domain.service import ExternalIdentityService
from linkage.domain.value import IdentityProvider, OrganizationId, UserId


class GetIdentitiesRequest(BaseModel):
    """Get identities request.

    With `user_id`, returns that user's linked identities. Without it,
    returns a page of the organization's unresolved (unlinked or suggested)
    identities.
    """

    organization_id: str  # UUID string
    user_id: Optional[str] = None  # UUID string
    provider: Optional[IdentityProvider] = None
    limit: int = Field(default=50, ge=1, le=200)
    offset: int = Field(default=0, ge=0)


class GetIdentitiesResponse(BaseModel):
    """Get identities response."""

    identities: list[IdentityView]


class GetIdentitiesUseCase(BaseUseCase):
    """Use case for listing external identities."""

    def __init__(self, external_identity_service: ExternalIdentityService) -> None:
        """Initialize get identities use case.

        Args:
            external_identity_service: External identity domain service
        """
        self.external_identity_service = external_identity_service

    async def execute(self, request: GetIdentitiesRequest) -> GetIdentitiesResponse:
        """List a user's identities or the organization's unresolved ones."""
        organization_id = OrganizationId(UUID(request.organization_id))

        if request.user_id:
            identities = await self.external_identity_service.get_identities_for_user(
                organization_id, UserId(UUID(request.user_id))
            )
        else:
            identities = await self.external_identity_service.get_unresolved(
                organization_id, request.provider, request.limit, request.offset
            )

        return GetIdentitiesResponse(
            identities=[IdentityView.from_model(i) for i in identities]
        )
