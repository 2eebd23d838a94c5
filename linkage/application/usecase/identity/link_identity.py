"""Link identity use case."""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from linkage.application.usecase.base import BaseUseCase
from linkage.application.usecase.views import IdentityView
from linkage.domain.repository import UnitOfWork
from linkage.domain.service import LinkService
from linkage.domain.value import ExternalIdentityId, LinkMethod, UserId


class LinkIdentityRequest(BaseModel):
    """Link identity request."""

    identity_id: str  # UUID string
    user_id: str  # UUID string
    actor: str
    method: LinkMethod = LinkMethod.MANUAL
    reason: Optional[str] = None
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)


class LinkIdentityResponse(BaseModel):
    """Link identity response."""

    identity: IdentityView


class LinkIdentityUseCase(BaseUseCase):
    """Use case for linking an external identity to a user."""

    def __init__(self, link_service: LinkService, unit_of_work: UnitOfWork) -> None:
        """Initialize link identity use case.

        Args:
            link_service: Link domain service
            unit_of_work: Transaction boundary
        """
        self.link_service = link_service
        self.unit_of_work = unit_of_work

    async def execute(self, request: LinkIdentityRequest) -> LinkIdentityResponse:
        """Execute link flow.

        Raises:
            NotFoundError: If the identity or member does not exist
            InvalidStateError: If the identity is already linked
        """
        async with self.unit_of_work.transaction():
            identity = await self.link_service.link(
                ExternalIdentityId(UUID(request.identity_id)),
                UserId(UUID(request.user_id)),
                request.method,
                request.actor,
                reason=request.reason,
                confidence=request.confidence,
            )
        return LinkIdentityResponse(identity=IdentityView.from_model(identity))
