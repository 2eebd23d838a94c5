"""Link audit domain service."""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Optional
from uuid import uuid4

import logfire

from linkage.domain.model import ExternalIdentity, LinkAudit
from linkage.domain.model.common import utcnow
from linkage.domain.repository import LinkAuditRepository
from linkage.domain.value import (
    AuditAction,
    ExternalIdentityId,
    LinkAuditId,
    LinkMethod,
    LinkSuggestionId,
    OrganizationId,
    UserId,
)

from .base import Service


class AuditService(Service):
    """Writes and reads the append-only link audit log."""

    def __init__(self, link_audit_repository: LinkAuditRepository) -> None:
        """Initialize audit service.

        Args:
            link_audit_repository: Link audit repository
        """
        self.link_audit_repository = link_audit_repository

    async def record(
        self,
        identity: ExternalIdentity,
        action: AuditAction,
        performed_by: Optional[str],
        *,
        user_id: Optional[UserId] = None,
        previous_user_id: Optional[UserId] = None,
        link_method: Optional[LinkMethod] = None,
        confidence: Optional[Decimal] = None,
        suggestion_id: Optional[LinkSuggestionId] = None,
        reason: Optional[str] = None,
        metadata: Optional[dict[str, Any]] = None,
        now: Optional[datetime] = None,
    ) -> LinkAudit:
        """Append one audit entry for an identity.

        Args:
            identity: Identity the action applies to
            action: Action performed
            performed_by: Acting principal (None or "system" for automation)
            user_id: Owner after the action
            previous_user_id: Owner before the action
            link_method: Link method, for link actions
            confidence: Link or suggestion confidence
            suggestion_id: Suggestion involved, if any
            reason: Free-text reason
            metadata: Extra structured context
            now: Entry timestamp

        Returns:
            The recorded entry
        """
        entry = LinkAudit(
            id=LinkAuditId(uuid4()),
            organization_id=identity.organization_id,
            external_identity_id=identity.id,
            suggestion_id=suggestion_id,
            action=action,
            user_id=user_id,
            previous_user_id=previous_user_id,
            link_method=link_method,
            confidence=confidence,
            performed_by=performed_by,
            reason=reason,
            metadata=metadata or {},
            created_at=now or utcnow(),
        )
        saved = await self.link_audit_repository.append(entry)
        logfire.debug(
            "Audit entry recorded",
            action=action.value,
            external_identity_id=str(identity.id),
            performed_by=performed_by,
        )
        return saved

    async def history(
        self, identity_id: ExternalIdentityId, limit: int = 100
    ) -> list[LinkAudit]:
        """Get the audit history of an identity, newest first."""
        with logfire.span("audit_service.history", identity_id=str(identity_id)):
            return await self.link_audit_repository.find_by_identity(
                identity_id, limit
            )

    async def purge(
        self,
        organization_id: OrganizationId,
        retention_days: int,
        now: Optional[datetime] = None,
    ) -> int:
        """Delete audit entries older than the retention window.

        Args:
            organization_id: Organization scope
            retention_days: Days of history to keep
            now: Reference time

        Returns:
            Number of purged entries
        """
        with logfire.span(
            "audit_service.purge",
            organization_id=str(organization_id),
            retention_days=retention_days,
        ):
            cutoff = (now or utcnow()) - timedelta(days=retention_days)
            purged = await self.link_audit_repository.delete_older_than(
                organization_id, cutoff
            )
            logfire.info(
                "Audit entries purged",
                organization_id=str(organization_id),
                purged=purged,
            )
            return purged
