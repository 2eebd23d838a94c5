"""In-memory link suggestion repository for testing."""

from collections import Counter
from collections.abc import Collection
from datetime import datetime
from typing import Optional

from linkage.domain.model import LinkSuggestion
from linkage.domain.repository import LinkSuggestionRepository
from linkage.domain.value import (
    ExternalIdentityId,
    LinkSuggestionId,
    OrganizationId,
    SuggestionStatus,
    UserId,
)

from .store import InMemoryStore


def _by_confidence(suggestions: list[LinkSuggestion]) -> list[LinkSuggestion]:
    return sorted(
        suggestions, key=lambda s: (-s.confidence_score, s.created_at, str(s.id))
    )


class InMemoryLinkSuggestionRepository(LinkSuggestionRepository):
    """In-memory implementation of LinkSuggestionRepository for testing."""

    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def find_by_id(
        self, suggestion_id: LinkSuggestionId
    ) -> Optional[LinkSuggestion]:
        """Find suggestion by ID."""
        return self.store.suggestions.get(suggestion_id)

    async def upsert(self, suggestion: LinkSuggestion) -> Optional[LinkSuggestion]:
        """Insert or refresh the suggestion for (identity, suggested user)."""
        for existing in self.store.suggestions.values():
            if (
                existing.external_identity_id == suggestion.external_identity_id
                and existing.suggested_user_id == suggestion.suggested_user_id
            ):
                if existing.status in (
                    SuggestionStatus.ACCEPTED,
                    SuggestionStatus.REJECTED,
                ):
                    return None
                refreshed = existing.model_copy(
                    update={
                        "match_method": suggestion.match_method,
                        "confidence_score": suggestion.confidence_score,
                        "match_details": suggestion.match_details,
                        "expires_at": suggestion.expires_at,
                        "status": SuggestionStatus.PENDING,
                        "reviewed_by": None,
                        "reviewed_at": None,
                        "rejection_reason": None,
                        "updated_at": suggestion.updated_at,
                    }
                )
                self.store.suggestions[refreshed.id] = refreshed
                return refreshed

        self.store.suggestions[suggestion.id] = suggestion
        return suggestion

    async def save_if_status_in(
        self, suggestion: LinkSuggestion, expected: Collection[SuggestionStatus]
    ) -> bool:
        """Replace suggestion if its stored status is expected."""
        current = self.store.suggestions.get(suggestion.id)
        if current is None or current.status not in expected:
            return False
        self.store.suggestions[suggestion.id] = suggestion
        return True

    async def find_by_identity(
        self,
        identity_id: ExternalIdentityId,
        status: Optional[SuggestionStatus] = None,
    ) -> list[LinkSuggestion]:
        """List suggestions of an identity."""
        return _by_confidence(
            [
                s
                for s in self.store.suggestions.values()
                if s.external_identity_id == identity_id
                and (status is None or s.status == status)
            ]
        )

    async def find_pending_for_user(
        self, organization_id: OrganizationId, user_id: UserId, now: datetime
    ) -> list[LinkSuggestion]:
        """List unexpired pending suggestions naming a user."""
        return _by_confidence(
            [
                s
                for s in self.store.suggestions.values()
                if s.organization_id == organization_id
                and s.suggested_user_id == user_id
                and s.is_pending
                and s.expires_at > now
            ]
        )

    async def find_pending_for_organization(
        self,
        organization_id: OrganizationId,
        now: datetime,
        limit: int = 50,
        offset: int = 0,
    ) -> list[LinkSuggestion]:
        """List a page of unexpired pending suggestions."""
        pending = _by_confidence(
            [
                s
                for s in self.store.suggestions.values()
                if s.organization_id == organization_id
                and s.is_pending
                and s.expires_at > now
            ]
        )
        return pending[offset : offset + limit]

    async def resolve_pending(
        self,
        identity_id: ExternalIdentityId,
        status: SuggestionStatus,
        reviewed_by: str,
        now: datetime,
    ) -> list[LinkSuggestion]:
        """Move every pending suggestion of an identity to `status`."""
        resolved = []
        for suggestion in list(self.store.suggestions.values()):
            if suggestion.external_identity_id == identity_id and suggestion.is_pending:
                updated = suggestion.model_copy(
                    update={
                        "status": status,
                        "reviewed_by": reviewed_by,
                        "reviewed_at": now,
                        "updated_at": now,
                    }
                )
                self.store.suggestions[updated.id] = updated
                resolved.append(updated)
        return resolved

    async def expire_due(self, now: datetime) -> list[LinkSuggestion]:
        """Expire pending suggestions with expires_at <= now."""
        expired = []
        for suggestion in list(self.store.suggestions.values()):
            if suggestion.is_due(now):
                updated = suggestion.model_copy(
                    update={"status": SuggestionStatus.EXPIRED, "updated_at": now}
                )
                self.store.suggestions[updated.id] = updated
                expired.append(updated)
        return expired

    async def count_by_status(
        self, organization_id: OrganizationId
    ) -> dict[SuggestionStatus, int]:
        """Count suggestions per status."""
        return dict(
            Counter(
                s.status
                for s in self.store.suggestions.values()
                if s.organization_id == organization_id
            )
        )

    async def delete_processed_before(self, cutoff: datetime) -> int:
        """Delete non-pending suggestions last updated before `cutoff`."""
        doomed = [
            s.id
            for s in self.store.suggestions.values()
            if not s.is_pending and s.updated_at < cutoff
        ]
        for suggestion_id in doomed:
            del self.store.suggestions[suggestion_id]
        return len(doomed)
