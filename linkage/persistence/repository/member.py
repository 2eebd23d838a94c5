"""Member repository implementation using PostgreSQL."""

from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from linkage.domain.model import Member
from linkage.domain.repository import MemberRepository
from linkage.domain.value import OrganizationId, UserId
from linkage.persistence.mappers import member_to_dict, row_to_member
from linkage.persistence.tables import organization_members_table


class PostgresMemberRepository(MemberRepository):
    """PostgreSQL implementation of MemberRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def find_by_email(
        self, organization_id: OrganizationId, email: str
    ) -> list[Member]:
        """Find members by email, ignoring case and surrounding whitespace."""
        stmt = (
            select(organization_members_table)
            .where(organization_members_table.c.organization_id == organization_id)
            .where(
                func.lower(func.trim(organization_members_table.c.email))
                == email.strip().lower()
            )
            .order_by(organization_members_table.c.user_id)
        )
        result = await self.session.execute(stmt)
        return [row_to_member(dict(row)) for row in result.mappings()]

    async def find_by_user_id(
        self, organization_id: OrganizationId, user_id: UserId
    ) -> Optional[Member]:
        """Get a member of the organization by user id."""
        stmt = select(organization_members_table).where(
            organization_members_table.c.organization_id == organization_id,
            organization_members_table.c.user_id == user_id,
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_member(dict(row)) if row else None

    async def find_all_by_organization(
        self, organization_id: OrganizationId
    ) -> list[Member]:
        """List every member of an organization."""
        stmt = (
            select(organization_members_table)
            .where(organization_members_table.c.organization_id == organization_id)
            .order_by(organization_members_table.c.user_id)
        )
        result = await self.session.execute(stmt)
        return [row_to_member(dict(row)) for row in result.mappings()]

    async def save(self, member: Member) -> Member:
        """Create or replace a member projection."""
        values = member_to_dict(member)
        stmt = insert(organization_members_table).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[
                organization_members_table.c.organization_id,
                organization_members_table.c.user_id,
            ],
            set_={"email": values["email"], "display_name": values["display_name"]},
        )
        await self.session.execute(stmt)
        await self.session.flush()
        return member
