"""ExternalIdentity repository implementation using PostgreSQL."""

from collections.abc import Collection
from datetime import datetime
from typing import Optional
from uuid import uuid4

import logfire
from sqlalchemy import desc, func, select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

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
from linkage.persistence.mappers import (
    external_identity_to_dict,
    row_to_external_identity,
)
from linkage.persistence.tables import external_identities_table

# Profile columns refreshed on re-sync when the new profile carries a value
_PROFILE_FIELDS = (
    "provider_team_id",
    "email",
    "display_name",
    "real_name",
    "avatar_url",
)


class PostgresExternalIdentityRepository(ExternalIdentityRepository):
    """PostgreSQL implementation of ExternalIdentityRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def find_by_id(
        self, identity_id: ExternalIdentityId
    ) -> Optional[ExternalIdentity]:
        """Get external identity by ID."""
        stmt = select(external_identities_table).where(
            external_identities_table.c.id == identity_id
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_external_identity(dict(row)) if row else None

    async def find_by_provider(
        self,
        organization_id: OrganizationId,
        provider: IdentityProvider,
        provider_user_id: str,
    ) -> Optional[ExternalIdentity]:
        """Get external identity by its natural key."""
        stmt = select(external_identities_table).where(
            external_identities_table.c.organization_id == organization_id,
            external_identities_table.c.provider == provider.value,
            external_identities_table.c.provider_user_id == provider_user_id,
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_external_identity(dict(row)) if row else None

    async def upsert_profile(
        self,
        organization_id: OrganizationId,
        profile: ExternalProfile,
        now: datetime,
    ) -> ExternalIdentity:
        """Insert a new unlinked identity or refresh the profile snapshot.

        A single INSERT ... ON CONFLICT DO UPDATE, so concurrent first
        sightings of the same user converge on one row.
        """
        with logfire.span(
            "external_identity_repository.upsert_profile",
            provider=profile.provider.value,
            provider_user_id=profile.provider_user_id,
        ):
            new_identity = ExternalIdentity.from_profile(
                ExternalIdentityId(uuid4()), organization_id, profile
            ).model_copy(
                update={"last_synced_at": now, "created_at": now, "updated_at": now}
            )

            stmt = insert(external_identities_table).values(
                **external_identity_to_dict(new_identity)
            )

            refreshed = {
                field: stmt.excluded[field]
                for field in _PROFILE_FIELDS
                if getattr(profile, field) is not None
            }
            if profile.metadata:
                refreshed["metadata"] = stmt.excluded["metadata"]

            stmt = stmt.on_conflict_do_update(
                constraint="uq_external_identity_provider",
                set_={
                    **refreshed,
                    "last_synced_at": now,
                    "sync_error": None,
                    "updated_at": now,
                },
            ).returning(external_identities_table)

            result = await self.session.execute(stmt)
            row = result.mappings().one()
            await self.session.flush()
            return row_to_external_identity(dict(row))

    async def save(self, identity: ExternalIdentity) -> ExternalIdentity:
        """Update an existing identity."""
        stmt = (
            update(external_identities_table)
            .where(external_identities_table.c.id == identity.id)
            .values(**external_identity_to_dict(identity))
        )
        await self.session.execute(stmt)
        await self.session.flush()
        return identity

    async def save_if_status_in(
        self, identity: ExternalIdentity, expected: Collection[LinkStatus]
    ) -> bool:
        """Compare-and-set update guarded by the stored link status."""
        stmt = (
            update(external_identities_table)
            .where(external_identities_table.c.id == identity.id)
            .where(
                external_identities_table.c.link_status.in_(
                    [status.value for status in expected]
                )
            )
            .values(**external_identity_to_dict(identity))
            .returning(external_identities_table.c.id)
        )
        result = await self.session.execute(stmt)
        written = result.first() is not None
        await self.session.flush()
        return written

    async def find_all_by_user(
        self, organization_id: OrganizationId, user_id: UserId
    ) -> list[ExternalIdentity]:
        """Find all identities linked to a user."""
        stmt = (
            select(external_identities_table)
            .where(external_identities_table.c.organization_id == organization_id)
            .where(external_identities_table.c.user_id == user_id)
            .order_by(external_identities_table.c.provider)
        )
        result = await self.session.execute(stmt)
        return [row_to_external_identity(dict(row)) for row in result.mappings()]

    async def find_unresolved(
        self,
        organization_id: OrganizationId,
        provider: Optional[IdentityProvider] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[ExternalIdentity]:
        """List unlinked and suggested identities, newest first."""
        stmt = (
            select(external_identities_table)
            .where(external_identities_table.c.organization_id == organization_id)
            .where(
                external_identities_table.c.link_status.in_(
                    [LinkStatus.UNLINKED.value, LinkStatus.SUGGESTED.value]
                )
            )
        )
        if provider is not None:
            stmt = stmt.where(external_identities_table.c.provider == provider.value)

        stmt = (
            stmt.order_by(
                desc(external_identities_table.c.created_at),
                external_identities_table.c.id,
            )
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(stmt)
        return [row_to_external_identity(dict(row)) for row in result.mappings()]

    async def count_by_status(
        self, organization_id: OrganizationId
    ) -> dict[LinkStatus, int]:
        """Count identities per link status."""
        stmt = (
            select(external_identities_table.c.link_status, func.count())
            .where(external_identities_table.c.organization_id == organization_id)
            .group_by(external_identities_table.c.link_status)
        )
        result = await self.session.execute(stmt)
        return {LinkStatus(status): count for status, count in result.all()}

    async def count_by_provider(
        self, organization_id: OrganizationId
    ) -> dict[IdentityProvider, int]:
        """Count identities per provider."""
        stmt = (
            select(external_identities_table.c.provider, func.count())
            .where(external_identities_table.c.organization_id == organization_id)
            .group_by(external_identities_table.c.provider)
        )
        result = await self.session.execute(stmt)
        return {IdentityProvider(provider): count for provider, count in result.all()}
