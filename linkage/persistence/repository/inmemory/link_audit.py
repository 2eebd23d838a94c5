"""In-memory link audit repository for testing."""

from datetime import datetime

from linkage.domain.model import LinkAudit
from linkage.domain.repository import LinkAuditRepository
from linkage.domain.value import ExternalIdentityId, OrganizationId

from .store import InMemoryStore


class InMemoryLinkAuditRepository(LinkAuditRepository):
    """In-memory implementation of LinkAuditRepository for testing."""

    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def append(self, entry: LinkAudit) -> LinkAudit:
        """Append audit entry."""
        self.store.audits.append(entry)
        return entry

    async def find_by_identity(
        self, identity_id: ExternalIdentityId, limit: int = 100
    ) -> list[LinkAudit]:
        """List an identity's entries, newest first."""
        # Insertion order breaks ties between entries sharing a timestamp
        entries = [
            (position, entry)
            for position, entry in enumerate(self.store.audits)
            if entry.external_identity_id == identity_id
        ]
        entries.sort(key=lambda pair: (pair[1].created_at, pair[0]), reverse=True)
        return [entry for _, entry in entries[:limit]]

    async def delete_older_than(
        self, organization_id: OrganizationId, cutoff: datetime
    ) -> int:
        """Delete an organization's entries created before `cutoff`."""
        kept = [
            e
            for e in self.store.audits
            if e.organization_id != organization_id or e.created_at >= cutoff
        ]
        deleted = len(self.store.audits) - len(kept)
        self.store.audits = kept
        return deleted
