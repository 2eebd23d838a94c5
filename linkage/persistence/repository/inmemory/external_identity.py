"""In-memory external identity repository for testing."""

from collections import Counter
from collections.abc import Collection
from datetime import datetime
from typing import Optional
from uuid import uuid4

from linkage.domain.model import ExternalIdentity
from linkage.domain.repository import ExternalIdentityRepository
from linkage.domain.value import (
    ExternalIdentityId,
    ExternalProfile,
    IdentityProvider,
    LinkStatus,
    OrganizationId,
    UserId,
)

from .store import InMemoryStore


class InMemoryExternalIdentityRepository(ExternalIdentityRepository):
    """In-memory implementation of ExternalIdentityRepository for testing."""

    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def find_by_id(
        self, identity_id: ExternalIdentityId
    ) -> Optional[ExternalIdentity]:
        """Find identity by ID."""
        return self.store.identities.get(identity_id)

    async def find_by_provider(
        self,
        organization_id: OrganizationId,
        provider: IdentityProvider,
        provider_user_id: str,
    ) -> Optional[ExternalIdentity]:
        """Find identity by natural key."""
        for identity in self.store.identities.values():
            if (
                identity.organization_id == organization_id
                and identity.provider == provider
                and identity.provider_user_id == provider_user_id
            ):
                return identity
        return None

    async def upsert_profile(
        self,
        organization_id: OrganizationId,
        profile: ExternalProfile,
        now: datetime,
    ) -> ExternalIdentity:
        """Create or refresh an identity."""
        existing = await self.find_by_provider(
            organization_id, profile.provider, profile.provider_user_id
        )
        if existing is not None:
            identity = existing.refreshed_from(profile, now)
        else:
            identity = ExternalIdentity.from_profile(
                ExternalIdentityId(uuid4()), organization_id, profile
            ).model_copy(
                update={"last_synced_at": now, "created_at": now, "updated_at": now}
            )
        self.store.identities[identity.id] = identity
        return identity

    async def save(self, identity: ExternalIdentity) -> ExternalIdentity:
        """Replace identity."""
        self.store.identities[identity.id] = identity
        return identity

    async def save_if_status_in(
        self, identity: ExternalIdentity, expected: Collection[LinkStatus]
    ) -> bool:
        """Replace identity if its stored status is expected."""
        current = self.store.identities.get(identity.id)
        if current is None or current.link_status not in expected:
            return False
        self.store.identities[identity.id] = identity
        return True

    async def find_all_by_user(
        self, organization_id: OrganizationId, user_id: UserId
    ) -> list[ExternalIdentity]:
        """Find identities linked to a user."""
        matches = [
            i
            for i in self.store.identities.values()
            if i.organization_id == organization_id and i.user_id == user_id
        ]
        matches.sort(key=lambda i: i.provider.value)
        return matches

    async def find_unresolved(
        self,
        organization_id: OrganizationId,
        provider: Optional[IdentityProvider] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[ExternalIdentity]:
        """List unlinked and suggested identities, newest first."""
        matches = [
            i
            for i in self.store.identities.values()
            if i.organization_id == organization_id
            and not i.is_linked
            and (provider is None or i.provider == provider)
        ]
        matches.sort(key=lambda i: str(i.id))
        matches.sort(key=lambda i: i.created_at, reverse=True)
        return matches[offset : offset + limit]

    async def count_by_status(
        self, organization_id: OrganizationId
    ) -> dict[LinkStatus, int]:
        """Count identities per link status."""
        return dict(
            Counter(
                i.link_status
                for i in self.store.identities.values()
                if i.organization_id == organization_id
            )
        )

    async def count_by_provider(
        self, organization_id: OrganizationId
    ) -> dict[IdentityProvider, int]:
        """Count identities per provider."""
        return dict(
            Counter(
                i.provider
                for i in self.store.identities.values()
                if i.organization_id == organization_id
            )
        )
