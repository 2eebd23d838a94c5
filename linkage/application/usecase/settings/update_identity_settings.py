"""Update identity settings use case."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from linkage.application.usecase.base import BaseUseCase
from linkage.domain.repository import UnitOfWork
from linkage.domain.service import IdentitySettingsService
from linkage.domain.value import OrganizationId


class UpdateIdentitySettingsRequest(BaseModel):
    """Update identity settings request.

    Fields left as None keep their current value.
    """

    organization_id: str  # UUID string
    auto_link_on_email: Optional[bool] = None
    auto_link_threshold: Optional[float] = None
    suggestion_threshold: Optional[float] = None
    suggestion_expiry_days: Optional[int] = None
    allow_user_self_link: Optional[bool] = None
    allow_user_self_unlink: Optional[bool] = None
    require_admin_approval: Optional[bool] = None
    audit_retention_days: Optional[int] = None


class UpdateIdentitySettingsResponse(BaseModel):
    """Update identity settings response."""

    organization_id: str
    auto_link_on_email: bool
    auto_link_threshold: float
    suggestion_threshold: float
    suggestion_expiry_days: int
    allow_user_self_link: bool
    allow_user_self_unlink: bool
    require_admin_approval: bool
    audit_retention_days: int
    updated_at: datetime


class UpdateIdentitySettingsUseCase(BaseUseCase):
    """Use case for the configuration service's settings writes."""

    def __init__(
        self,
        identity_settings_service: IdentitySettingsService,
        unit_of_work: UnitOfWork,
    ) -> None:
        """Initialize update identity settings use case.

        Args:
            identity_settings_service: Identity settings domain service
            unit_of_work: Transaction boundary
        """
        self.identity_settings_service = identity_settings_service
        self.unit_of_work = unit_of_work

    async def execute(
        self, request: UpdateIdentitySettingsRequest
    ) -> UpdateIdentitySettingsResponse:
        """Validate and save a partial settings update.

        Raises:
            ConfigurationError: If the resulting settings are invalid
        """
        changes = request.model_dump(exclude={"organization_id"}, exclude_none=True)

        async with self.unit_of_work.transaction():
            settings = await self.identity_settings_service.update_settings(
                OrganizationId(UUID(request.organization_id)), changes
            )

        return UpdateIdentitySettingsResponse(
            organization_id=str(settings.organization_id),
            **settings.model_dump(exclude={"organization_id"}),
        )
