"""Unlink identity use case."""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from linkage.application.usecase.base import BaseUseCase
from linkage.application.usecase.views import IdentityView
from linkage.domain.repository import UnitOfWork
from linkage.domain.service import LinkService
from linkage.domain.value import ExternalIdentityId


class UnlinkIdentityRequest(BaseModel):
    """Unlink identity request."""

    identity_id: str  # UUID string
    actor: str
    reason: Optional[str] = None


class UnlinkIdentityResponse(BaseModel):
    """Unlink identity response."""

    identity: IdentityView
    previous_user_id: str


class UnlinkIdentityUseCase(BaseUseCase):
    """Use case for removing an identity's link."""

    def __init__(self, link_service: LinkService, unit_of_work: UnitOfWork) -> None:
        """Initialize unlink identity use case.

        Args:
            link_service: Link domain service
            unit_of_work: Transaction boundary
        """
        self.link_service = link_service
        self.unit_of_work = unit_of_work

    async def execute(self, request: UnlinkIdentityRequest) -> UnlinkIdentityResponse:
        """Execute unlink flow.

        Raises:
            NotFoundError: If the identity does not exist
            InvalidStateError: If the identity is not linked
        """
        identity_id = ExternalIdentityId(UUID(request.identity_id))
        async with self.unit_of_work.transaction():
            before = await self.link_service.get_identity(identity_id)
            identity = await self.link_service.unlink(
                identity_id, request.actor, request.reason
            )
        return UnlinkIdentityResponse(
            identity=IdentityView.from_model(identity),
            previous_user_id=str(before.user_id),
        )
