"""In-memory identity settings repository for testing."""

from typing import Optional

from linkage.domain.model import IdentitySettings
from linkage.domain.repository import IdentitySettingsRepository
from linkage.domain.value import OrganizationId

from .store import InMemoryStore


class InMemoryIdentitySettingsRepository(IdentitySettingsRepository):
    """In-memory implementation of IdentitySettingsRepository for testing."""

    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def find_by_organization(
        self, organization_id: OrganizationId
    ) -> Optional[IdentitySettings]:
        """Get an organization's settings."""
        return self.store.settings.get(organization_id)

    async def save(self, settings: IdentitySettings) -> IdentitySettings:
        """Create or replace settings."""
        self.store.settings[settings.organization_id] = settings
        return settings
