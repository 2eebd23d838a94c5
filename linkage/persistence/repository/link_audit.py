"""LinkAudit repository implementation using PostgreSQL."""

from datetime import datetime

from sqlalchemy import delete, desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from linkage.domain.model import LinkAudit
from linkage.domain.repository import LinkAuditRepository
from linkage.domain.value import ExternalIdentityId, OrganizationId
from linkage.persistence.mappers import link_audit_to_dict, row_to_link_audit
from linkage.persistence.tables import link_audits_table


class PostgresLinkAuditRepository(LinkAuditRepository):
    """PostgreSQL implementation of LinkAuditRepository.

    Entries are only ever inserted; the retention purge is the one delete.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def append(self, entry: LinkAudit) -> LinkAudit:
        """Insert an audit entry."""
        stmt = link_audits_table.insert().values(**link_audit_to_dict(entry))
        await self.session.execute(stmt)
        await self.session.flush()
        return entry

    async def find_by_identity(
        self, identity_id: ExternalIdentityId, limit: int = 100
    ) -> list[LinkAudit]:
        """List an identity's audit entries, newest first."""
        stmt = (
            select(link_audits_table)
            .where(link_audits_table.c.external_identity_id == identity_id)
            .order_by(
                desc(link_audits_table.c.created_at), desc(link_audits_table.c.seq)
            )
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [row_to_link_audit(dict(row)) for row in result.mappings()]

    async def delete_older_than(
        self, organization_id: OrganizationId, cutoff: datetime
    ) -> int:
        """Delete an organization's entries created before `cutoff`."""
        stmt = (
            delete(link_audits_table)
            .where(link_audits_table.c.organization_id == organization_id)
            .where(link_audits_table.c.created_at < cutoff)
            .returning(link_audits_table.c.id)
        )
        result = await self.session.execute(stmt)
        deleted = len(result.all())
        await self.session.flush()
        return deleted
