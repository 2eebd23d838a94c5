"""Get identity history use case."""

from uuid import UUID

from pydantic import BaseModel, Field

from linkage.application.usecase.base import BaseUseCase
from linkage.application.usecase.views import AuditEntryView, IdentityView
from linkage.domain.error import NotFoundError
from linkage.domain.service import ExternalIdentityService
from linkage.domain.value import ExternalIdentityId


class GetIdentityHistoryRequest(BaseModel):
    """Get identity history request."""

    identity_id: str  # UUID string
    limit: int = Field(default=100, ge=1, le=1000)


class GetIdentityHistoryResponse(BaseModel):
    """Get identity history response."""

    identity: IdentityView
    entries: list[AuditEntryView]


class GetIdentityHistoryUseCase(BaseUseCase):
    """Use case for an identity's audit trail."""

    def __init__(self, external_identity_service: ExternalIdentityService) -> None:
        """Initialize get identity history use case.

        Args:
            external_identity_service: External identity domain service
        """
        self.external_identity_service = external_identity_service

    async def execute(
        self, request: GetIdentityHistoryRequest
    ) -> GetIdentityHistoryResponse:
        """Return the identity with its audit entries, newest first.

        Raises:
            NotFoundError: If the identity does not exist
        """
        identity_id = ExternalIdentityId(UUID(request.identity_id))
        identity = await self.external_identity_service.get_identity_by_id(identity_id)
        if identity is None:
            raise NotFoundError("ExternalIdentity", request.identity_id)

        entries = await self.external_identity_service.get_history(
            identity_id, request.limit
        )
        return GetIdentityHistoryResponse(
            identity=IdentityView.from_model(identity),
            entries=[AuditEntryView.from_model(e) for e in entries],
        )
