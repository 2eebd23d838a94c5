"""Relink identity use case."""

from uuid import UUID

from pydantic import BaseModel

from linkage.application.usecase.base import BaseUseCase
from linkage.application.usecase.views import IdentityView
from linkage.domain.repository import UnitOfWork
from linkage.domain.service import LinkService
from linkage.domain.value import ExternalIdentityId, UserId


class RelinkIdentityRequest(BaseModel):
    """Relink identity request.

    `reason` is mandatory; it is checked by the link service so a blank
    reason surfaces as a domain ValidationError.
    """

    identity_id: str  # UUID string
    new_user_id: str  # UUID string
    actor: str
    reason: str = ""


class RelinkIdentityResponse(BaseModel):
    """Relink identity response."""

    identity: IdentityView


class RelinkIdentityUseCase(BaseUseCase):
    """Use case for moving an identity to a different user (admin only)."""

    def __init__(self, link_service: LinkService, unit_of_work: UnitOfWork) -> None:
        """Initialize relink identity use case.

        Args:
            link_service: Link domain service
            unit_of_work: Transaction boundary
        """
        self.link_service = link_service
        self.unit_of_work = unit_of_work

    async def execute(self, request: RelinkIdentityRequest) -> RelinkIdentityResponse:
        """Execute relink flow.

        The unlink and the new link commit together or not at all.

        Raises:
            ValidationError: If reason is empty
            NotFoundError: If the identity or new user does not exist
        """
        identity_id = ExternalIdentityId(UUID(request.identity_id))
        async with self.unit_of_work.transaction():
            identity = await self.link_service.relink(
                identity_id,
                UserId(UUID(request.new_user_id)),
                request.actor,
                request.reason,
            )
        return RelinkIdentityResponse(identity=IdentityView.from_model(identity))
