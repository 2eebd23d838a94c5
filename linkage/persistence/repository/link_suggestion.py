"""LinkSuggestion repository implementation using PostgreSQL."""

from collections.abc import Collection
from datetime import datetime
from typing import Optional

import logfire
from sqlalchemy import delete, desc, func, select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from linkage.domain.model import LinkSuggestion
from linkage.domain.repository import LinkSuggestionRepository
from linkage.domain.value import (
    ExternalIdentityId,
    LinkSuggestionId,
    OrganizationId,
    SuggestionStatus,
    UserId,
)
from linkage.persistence.mappers import link_suggestion_to_dict, row_to_link_suggestion
from linkage.persistence.tables import link_suggestions_table

# Rows an upsert may overwrite; decided rows stay as they were
_REFRESHABLE = [SuggestionStatus.PENDING.value, SuggestionStatus.EXPIRED.value]


class PostgresLinkSuggestionRepository(LinkSuggestionRepository):
    """PostgreSQL implementation of LinkSuggestionRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def find_by_id(
        self, suggestion_id: LinkSuggestionId
    ) -> Optional[LinkSuggestion]:
        """Get suggestion by ID."""
        stmt = select(link_suggestions_table).where(
            link_suggestions_table.c.id == suggestion_id
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_link_suggestion(dict(row)) if row else None

    async def upsert(self, suggestion: LinkSuggestion) -> Optional[LinkSuggestion]:
        """Insert or refresh the suggestion for (identity, suggested user)."""
        stmt = insert(link_suggestions_table).values(
            **link_suggestion_to_dict(suggestion)
        )
        stmt = stmt.on_conflict_do_update(
            constraint="uq_link_suggestion_pair",
            set_={
                "match_method": stmt.excluded.match_method,
                "confidence_score": stmt.excluded.confidence_score,
                "match_details": stmt.excluded.match_details,
                "expires_at": stmt.excluded.expires_at,
                "status": SuggestionStatus.PENDING.value,
                "reviewed_by": None,
                "reviewed_at": None,
                "rejection_reason": None,
                "updated_at": stmt.excluded.updated_at,
            },
            where=link_suggestions_table.c.status.in_(_REFRESHABLE),
        ).returning(link_suggestions_table)

        result = await self.session.execute(stmt)
        row = result.mappings().first()
        await self.session.flush()
        return row_to_link_suggestion(dict(row)) if row else None

    async def save_if_status_in(
        self, suggestion: LinkSuggestion, expected: Collection[SuggestionStatus]
    ) -> bool:
        """Compare-and-set update guarded by the stored suggestion status."""
        stmt = (
            update(link_suggestions_table)
            .where(link_suggestions_table.c.id == suggestion.id)
            .where(
                link_suggestions_table.c.status.in_(
                    [status.value for status in expected]
                )
            )
            .values(**link_suggestion_to_dict(suggestion))
            .returning(link_suggestions_table.c.id)
        )
        result = await self.session.execute(stmt)
        written = result.first() is not None
        await self.session.flush()
        return written

    async def find_by_identity(
        self,
        identity_id: ExternalIdentityId,
        status: Optional[SuggestionStatus] = None,
    ) -> list[LinkSuggestion]:
        """List suggestions of an identity, highest confidence first."""
        stmt = select(link_suggestions_table).where(
            link_suggestions_table.c.external_identity_id == identity_id
        )
        if status is not None:
            stmt = stmt.where(link_suggestions_table.c.status == status.value)
        stmt = stmt.order_by(
            desc(link_suggestions_table.c.confidence_score),
            link_suggestions_table.c.suggested_user_id,
        )
        result = await self.session.execute(stmt)
        return [row_to_link_suggestion(dict(row)) for row in result.mappings()]

    async def find_pending_for_user(
        self, organization_id: OrganizationId, user_id: UserId, now: datetime
    ) -> list[LinkSuggestion]:
        """List unexpired pending suggestions naming a user."""
        stmt = (
            select(link_suggestions_table)
            .where(link_suggestions_table.c.organization_id == organization_id)
            .where(link_suggestions_table.c.suggested_user_id == user_id)
            .where(link_suggestions_table.c.status == SuggestionStatus.PENDING.value)
            .where(link_suggestions_table.c.expires_at > now)
            .order_by(
                desc(link_suggestions_table.c.confidence_score),
                link_suggestions_table.c.created_at,
            )
        )
        result = await self.session.execute(stmt)
        return [row_to_link_suggestion(dict(row)) for row in result.mappings()]

    async def find_pending_for_organization(
        self,
        organization_id: OrganizationId,
        now: datetime,
        limit: int = 50,
        offset: int = 0,
    ) -> list[LinkSuggestion]:
        """List a page of unexpired pending suggestions of an organization."""
        stmt = (
            select(link_suggestions_table)
            .where(link_suggestions_table.c.organization_id == organization_id)
            .where(link_suggestions_table.c.status == SuggestionStatus.PENDING.value)
            .where(link_suggestions_table.c.expires_at > now)
            .order_by(
                desc(link_suggestions_table.c.confidence_score),
                link_suggestions_table.c.created_at,
                link_suggestions_table.c.id,
            )
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(stmt)
        return [row_to_link_suggestion(dict(row)) for row in result.mappings()]

    async def resolve_pending(
        self,
        identity_id: ExternalIdentityId,
        status: SuggestionStatus,
        reviewed_by: str,
        now: datetime,
    ) -> list[LinkSuggestion]:
        """Move every pending suggestion of an identity to `status`."""
        stmt = (
            update(link_suggestions_table)
            .where(link_suggestions_table.c.external_identity_id == identity_id)
            .where(link_suggestions_table.c.status == SuggestionStatus.PENDING.value)
            .values(
                status=status.value,
                reviewed_by=reviewed_by,
                reviewed_at=now,
                updated_at=now,
            )
            .returning(link_suggestions_table)
        )
        result = await self.session.execute(stmt)
        resolved = [row_to_link_suggestion(dict(row)) for row in result.mappings()]
        await self.session.flush()
        return resolved

    async def expire_due(self, now: datetime) -> list[LinkSuggestion]:
        """Expire every pending suggestion with expires_at <= now."""
        with logfire.span("link_suggestion_repository.expire_due"):
            stmt = (
                update(link_suggestions_table)
                .where(
                    link_suggestions_table.c.status == SuggestionStatus.PENDING.value
                )
                .where(link_suggestions_table.c.expires_at <= now)
                .values(status=SuggestionStatus.EXPIRED.value, updated_at=now)
                .returning(link_suggestions_table)
            )
            result = await self.session.execute(stmt)
            expired = [row_to_link_suggestion(dict(row)) for row in result.mappings()]
            await self.session.flush()
            return expired

    async def count_by_status(
        self, organization_id: OrganizationId
    ) -> dict[SuggestionStatus, int]:
        """Count suggestions per status."""
        stmt = (
            select(link_suggestions_table.c.status, func.count())
            .where(link_suggestions_table.c.organization_id == organization_id)
            .group_by(link_suggestions_table.c.status)
        )
        result = await self.session.execute(stmt)
        return {SuggestionStatus(status): count for status, count in result.all()}

    async def delete_processed_before(self, cutoff: datetime) -> int:
        """Delete non-pending suggestions last updated before `cutoff`."""
        stmt = (
            delete(link_suggestions_table)
            .where(link_suggestions_table.c.status != SuggestionStatus.PENDING.value)
            .where(link_suggestions_table.c.updated_at < cutoff)
            .returning(link_suggestions_table.c.id)
        )
        result = await self.session.execute(stmt)
        deleted = len(result.all())
        await self.session.flush()
        return deleted
