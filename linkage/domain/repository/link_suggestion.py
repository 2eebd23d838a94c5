"""Link suggestion repository interface."""

from abc import ABC, abstractmethod
from collections.abc import Collection
from datetime import datetime
from typing import Optional

from linkage.domain.model.link_suggestion import LinkSuggestion
from linkage.domain.value import (
    ExternalIdentityId,
    LinkSuggestionId,
    OrganizationId,
    SuggestionStatus,
    UserId,
)


class LinkSuggestionRepository(ABC):
    """Repository for LinkSuggestion entity.

    Suggestions are unique on (external identity, suggested user).
    """

    @abstractmethod
    async def find_by_id(
        self, suggestion_id: LinkSuggestionId
    ) -> Optional[LinkSuggestion]:
        """Find a suggestion by ID.

        Args:
            suggestion_id: The suggestion's unique identifier

        Returns:
            The suggestion if found, None otherwise
        """
        pass

    @abstractmethod
    async def upsert(self, suggestion: LinkSuggestion) -> Optional[LinkSuggestion]:
        """Insert a suggestion or refresh the existing one for the same pair.

        On conflict, method, confidence, details and expiry are refreshed and
        an expired row returns to pending. Accepted and rejected rows are left
        untouched.

        Args:
            suggestion: Pending suggestion to store

        Returns:
            The stored suggestion, or None if an accepted/rejected row
            blocked the write
        """
        pass

    @abstractmethod
    async def save_if_status_in(
        self, suggestion: LinkSuggestion, expected: Collection[SuggestionStatus]
    ) -> bool:
        """Update a suggestion only if its stored status is in `expected`.

        Keeps decided suggestions immutable when two reviewers act on the
        same suggestion at once.

        Args:
            suggestion: New suggestion state
            expected: Stored statuses under which the write may proceed

        Returns:
            True if the row was written, False if its status had changed
        """
        pass

    @abstractmethod
    async def find_by_identity(
        self,
        identity_id: ExternalIdentityId,
        status: Optional[SuggestionStatus] = None,
    ) -> list[LinkSuggestion]:
        """List suggestions of an identity, highest confidence first.

        Args:
            identity_id: External identity
            status: Optional status filter

        Returns:
            List of suggestions (may be empty)
        """
        pass

    @abstractmethod
    async def find_pending_for_user(
        self, organization_id: OrganizationId, user_id: UserId, now: datetime
    ) -> list[LinkSuggestion]:
        """List unexpired pending suggestions naming a user.

        Args:
            organization_id: Organization scope
            user_id: Suggested user
            now: Suggestions with expires_at <= now are excluded

        Returns:
            Suggestions, highest confidence first
        """
        pass

    @abstractmethod
    async def find_pending_for_organization(
        self,
        organization_id: OrganizationId,
        now: datetime,
        limit: int = 50,
        offset: int = 0,
    ) -> list[LinkSuggestion]:
        """List unexpired pending suggestions of an organization.

        Args:
            organization_id: Organization scope
            now: Suggestions with expires_at <= now are excluded
            limit: Maximum number of results
            offset: Number of results to skip

        Returns:
            Page of suggestions, highest confidence first
        """
        pass

    @abstractmethod
    async def resolve_pending(
        self,
        identity_id: ExternalIdentityId,
        status: SuggestionStatus,
        reviewed_by: str,
        now: datetime,
    ) -> list[LinkSuggestion]:
        """Move every pending suggestion of an identity to `status`.

        Args:
            identity_id: External identity
            status: Terminal status to apply
            reviewed_by: Acting principal
            now: Review timestamp

        Returns:
            The suggestions that were transitioned
        """
        pass

    @abstractmethod
    async def expire_due(self, now: datetime) -> list[LinkSuggestion]:
        """Transition all pending suggestions with expires_at <= now to expired.

        Args:
            now: Cutoff time

        Returns:
            The suggestions that were expired
        """
        pass

    @abstractmethod
    async def count_by_status(
        self, organization_id: OrganizationId
    ) -> dict[SuggestionStatus, int]:
        """Count suggestions per status."""
        pass

    @abstractmethod
    async def delete_processed_before(self, cutoff: datetime) -> int:
        """Delete non-pending suggestions last updated before `cutoff`.

        Args:
            cutoff: Retention boundary

        Returns:
            Number of deleted suggestions
        """
        pass
