"""Link audit repository interface."""

from abc import ABC, abstractmethod
from datetime import datetime

from linkage.domain.model.link_audit import LinkAudit
from linkage.domain.value import ExternalIdentityId, OrganizationId


class LinkAuditRepository(ABC):
    """Append-only repository for LinkAudit entries.

    There is no update operation; entries leave the log only through the
    retention purge.
    """

    @abstractmethod
    async def append(self, entry: LinkAudit) -> LinkAudit:
        """Append an audit entry.

        Args:
            entry: Entry to record

        Returns:
            The recorded entry
        """
        pass

    @abstractmethod
    async def find_by_identity(
        self, identity_id: ExternalIdentityId, limit: int = 100
    ) -> list[LinkAudit]:
        """Get audit history of an identity, newest first.

        Args:
            identity_id: External identity
            limit: Maximum number of entries

        Returns:
            List of entries (may be empty)
        """
        pass

    @abstractmethod
    async def delete_older_than(
        self, organization_id: OrganizationId, cutoff: datetime
    ) -> int:
        """Purge entries created before `cutoff`.

        Args:
            organization_id: Organization scope
            cutoff: Retention boundary

        Returns:
            Number of deleted entries
        """
        pass
