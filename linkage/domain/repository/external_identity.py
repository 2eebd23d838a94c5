"""External identity repository interface."""

from abc import ABC, abstractmethod
from collections.abc import Collection
from datetime import datetime
from typing import Optional

from linkage.domain.model.external_identity import ExternalIdentity
from linkage.domain.value import (
    ExternalIdentityId,
    ExternalProfile,
    IdentityProvider,
    LinkStatus,
    OrganizationId,
    UserId,
)


class ExternalIdentityRepository(ABC):
    """Repository for ExternalIdentity entity.

    Identities are unique on (organization, provider, provider user id);
    implementations must rely on that constraint for concurrent upserts.
    """

    @abstractmethod
    async def find_by_id(
        self, identity_id: ExternalIdentityId
    ) -> Optional[ExternalIdentity]:
        """Find an identity by ID.

        Args:
            identity_id: The identity's unique identifier

        Returns:
            The identity if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_provider(
        self,
        organization_id: OrganizationId,
        provider: IdentityProvider,
        provider_user_id: str,
    ) -> Optional[ExternalIdentity]:
        """Find an identity by its natural key.

        Args:
            organization_id: Owning organization
            provider: The external provider
            provider_user_id: The user's ID on that provider

        Returns:
            The identity if found, None otherwise
        """
        pass

    @abstractmethod
    async def upsert_profile(
        self,
        organization_id: OrganizationId,
        profile: ExternalProfile,
        now: datetime,
    ) -> ExternalIdentity:
        """Atomically create an unlinked identity or refresh its profile.

        Link state of an existing identity is never modified.

        Args:
            organization_id: Owning organization
            profile: Normalized provider profile
            now: Sync timestamp

        Returns:
            The stored identity after the upsert
        """
        pass

    @abstractmethod
    async def save(self, identity: ExternalIdentity) -> ExternalIdentity:
        """Unconditionally update an existing identity.

        Args:
            identity: The identity to save

        Returns:
            The saved identity
        """
        pass

    @abstractmethod
    async def save_if_status_in(
        self, identity: ExternalIdentity, expected: Collection[LinkStatus]
    ) -> bool:
        """Update an identity only if its stored status is in `expected`.

        Compare-and-set used by link transitions, so two concurrent writers
        can never both link the same identity.

        Args:
            identity: New identity state
            expected: Stored statuses under which the write may proceed

        Returns:
            True if the row was written, False if its status had changed
        """
        pass

    @abstractmethod
    async def find_all_by_user(
        self, organization_id: OrganizationId, user_id: UserId
    ) -> list[ExternalIdentity]:
        """Get all identities linked to a user, ordered by provider.

        Args:
            organization_id: Organization scope
            user_id: Internal user

        Returns:
            List of identities (may be empty)
        """
        pass

    @abstractmethod
    async def find_unresolved(
        self,
        organization_id: OrganizationId,
        provider: Optional[IdentityProvider] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[ExternalIdentity]:
        """List unlinked and suggested identities, newest first.

        Args:
            organization_id: Organization scope
            provider: Optional provider filter
            limit: Maximum number of results
            offset: Number of results to skip

        Returns:
            Page of identities
        """
        pass

    @abstractmethod
    async def count_by_status(
        self, organization_id: OrganizationId
    ) -> dict[LinkStatus, int]:
        """Count identities per link status."""
        pass

    @abstractmethod
    async def count_by_provider(
        self, organization_id: OrganizationId
    ) -> dict[IdentityProvider, int]:
        """Count identities per provider."""
        pass
