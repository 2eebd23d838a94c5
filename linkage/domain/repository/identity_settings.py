"""Identity settings repository interface."""

from abc import ABC, abstractmethod
from typing import Optional

from linkage.domain.model.identity_settings import IdentitySettings
from linkage.domain.value import OrganizationId


class IdentitySettingsRepository(ABC):
    """Repository for per-organization IdentitySettings."""

    @abstractmethod
    async def find_by_organization(
        self, organization_id: OrganizationId
    ) -> Optional[IdentitySettings]:
        """Get an organization's settings.

        Args:
            organization_id: Organization

        Returns:
            Settings if configured, None otherwise
        """
        pass

    @abstractmethod
    async def save(self, settings: IdentitySettings) -> IdentitySettings:
        """Create or replace an organization's settings."""
        pass
