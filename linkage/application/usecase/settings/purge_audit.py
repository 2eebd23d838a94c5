"""Purge audit use case."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from linkage.application.usecase.base import BaseUseCase
from linkage.domain.repository import UnitOfWork
from linkage.domain.service import AuditService, IdentitySettingsService
from linkage.domain.value import OrganizationId


class PurgeAuditRequest(BaseModel):
    """Purge audit request."""

    organization_id: str  # UUID string
    now: Optional[datetime] = None


class PurgeAuditResponse(BaseModel):
    """Purge audit response."""

    purged: int
    retention_days: int


class PurgeAuditUseCase(BaseUseCase):
    """Use case for deleting audit entries beyond the retention window."""

    def __init__(
        self,
        audit_service: AuditService,
        identity_settings_service: IdentitySettingsService,
        unit_of_work: UnitOfWork,
    ) -> None:
        """Initialize purge audit use case.

        Args:
            audit_service: Audit domain service
            identity_settings_service: Identity settings domain service
            unit_of_work: Transaction boundary
        """
        self.audit_service = audit_service
        self.identity_settings_service = identity_settings_service
        self.unit_of_work = unit_of_work

    async def execute(self, request: PurgeAuditRequest) -> PurgeAuditResponse:
        """Delete entries older than the organization's audit_retention_days."""
        organization_id = OrganizationId(UUID(request.organization_id))
        settings = await self.identity_settings_service.get_settings(organization_id)

        async with self.unit_of_work.transaction():
            purged = await self.audit_service.purge(
                organization_id, settings.audit_retention_days, request.now
            )

        return PurgeAuditResponse(
            purged=purged, retention_days=settings.audit_retention_days
        )
