"""IdentitySettings repository implementation using PostgreSQL."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from linkage.domain.model import IdentitySettings
from linkage.domain.repository import IdentitySettingsRepository
from linkage.domain.value import OrganizationId
from linkage.persistence.mappers import (
    identity_settings_to_dict,
    row_to_identity_settings,
)
from linkage.persistence.tables import identity_settings_table


class PostgresIdentitySettingsRepository(IdentitySettingsRepository):
    """PostgreSQL implementation of IdentitySettingsRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def find_by_organization(
        self, organization_id: OrganizationId
    ) -> Optional[IdentitySettings]:
        """Get an organization's settings."""
        stmt = select(identity_settings_table).where(
            identity_settings_table.c.organization_id == organization_id
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_identity_settings(dict(row)) if row else None

    async def save(self, settings: IdentitySettings) -> IdentitySettings:
        """Create or replace an organization's settings."""
        values = identity_settings_to_dict(settings)
        stmt = insert(identity_settings_table).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[identity_settings_table.c.organization_id],
            set_={k: v for k, v in values.items() if k != "organization_id"},
        )
        await self.session.execute(stmt)
        await self.session.flush()
        return settings
