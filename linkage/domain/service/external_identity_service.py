"""External identity query domain service."""

from typing import Optional

import logfire

from linkage.domain.model import ExternalIdentity, LinkAudit
from linkage.domain.repository import (
    ExternalIdentityRepository,
    LinkSuggestionRepository,
)
from linkage.domain.value import (
    ExternalIdentityId,
    IdentityProvider,
    IdentityStats,
    LinkStatus,
    OrganizationId,
    SuggestionStatus,
    UserId,
)

from .audit_service import AuditService
from .base import Service


class ExternalIdentityService(Service):
    """Domain service for external identity lookups and statistics."""

    def __init__(
        self,
        external_identity_repository: ExternalIdentityRepository,
        link_suggestion_repository: LinkSuggestionRepository,
        audit_service: AuditService,
    ) -> None:
        """Initialize external identity service.

        Args:
            external_identity_repository: External identity repository
            link_suggestion_repository: Link suggestion repository
            audit_service: Audit domain service
        """
        self.external_identity_repository = external_identity_repository
        self.link_suggestion_repository = link_suggestion_repository
        self.audit_service = audit_service

    async def get_identity_by_id(
        self, identity_id: ExternalIdentityId
    ) -> Optional[ExternalIdentity]:
        """Get identity by ID.

        Args:
            identity_id: Identity ID

        Returns:
            Identity if found, None otherwise
        """
        with logfire.span(
            "external_identity_service.get_identity_by_id",
            identity_id=str(identity_id),
        ):
            identity = await self.external_identity_repository.find_by_id(identity_id)
            if identity is None:
                logfire.warn("Identity not found", identity_id=str(identity_id))
            return identity

    async def get_identity_by_provider(
        self,
        organization_id: OrganizationId,
        provider: IdentityProvider,
        provider_user_id: str,
    ) -> Optional[ExternalIdentity]:
        """Get identity by provider and provider user ID.

        Args:
            organization_id: Organization scope
            provider: External provider
            provider_user_id: Provider-specific user ID

        Returns:
            Identity if found, None otherwise
        """
        with logfire.span(
            "external_identity_service.get_identity_by_provider",
            organization_id=str(organization_id),
            provider=provider.value,
            provider_user_id=provider_user_id,
        ):
            identity = await self.external_identity_repository.find_by_provider(
                organization_id, provider, provider_user_id
            )
            if identity is None:
                logfire.warn(
                    "Identity not found",
                    provider=provider.value,
                    provider_user_id=provider_user_id,
                )
            return identity

    async def get_identities_for_user(
        self, organization_id: OrganizationId, user_id: UserId
    ) -> list[ExternalIdentity]:
        """Get all identities linked to a user.

        Args:
            organization_id: Organization scope
            user_id: Internal user

        Returns:
            Identities ordered by provider
        """
        with logfire.span(
            "external_identity_service.get_identities_for_user",
            organization_id=str(organization_id),
            user_id=str(user_id),
        ):
            identities = await self.external_identity_repository.find_all_by_user(
                organization_id, user_id
            )
            logfire.info(
                "Identities retrieved", user_id=str(user_id), count=len(identities)
            )
            return identities

    async def get_unresolved(
        self,
        organization_id: OrganizationId,
        provider: Optional[IdentityProvider] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[ExternalIdentity]:
        """Get a page of unlinked and suggested identities, newest first."""
        with logfire.span(
            "external_identity_service.get_unresolved",
            organization_id=str(organization_id),
            provider=provider.value if provider else None,
            limit=limit,
            offset=offset,
        ):
            return await self.external_identity_repository.find_unresolved(
                organization_id, provider, limit, offset
            )

    async def get_stats(self, organization_id: OrganizationId) -> IdentityStats:
        """Summarize link coverage of an organization.

        Args:
            organization_id: Organization scope

        Returns:
            Identity counts per status and provider, plus pending suggestions
        """
        with logfire.span(
            "external_identity_service.get_stats",
            organization_id=str(organization_id),
        ):
            by_status = await self.external_identity_repository.count_by_status(
                organization_id
            )
            by_provider = await self.external_identity_repository.count_by_provider(
                organization_id
            )
            suggestions = await self.link_suggestion_repository.count_by_status(
                organization_id
            )
            return IdentityStats(
                total=sum(by_status.values()),
                linked=by_status.get(LinkStatus.LINKED, 0),
                unlinked=by_status.get(LinkStatus.UNLINKED, 0),
                suggested=by_status.get(LinkStatus.SUGGESTED, 0),
                by_provider=by_provider,
                pending_suggestions=suggestions.get(SuggestionStatus.PENDING, 0),
            )

    async def get_history(
        self, identity_id: ExternalIdentityId, limit: int = 100
    ) -> list[LinkAudit]:
        """Get an identity's audit history, newest first."""
        return await self.audit_service.history(identity_id, limit)
