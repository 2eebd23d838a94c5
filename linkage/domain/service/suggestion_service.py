"""Suggestion lifecycle domain service."""

from datetime import datetime, timedelta
from typing import Optional
from uuid import uuid4

import logfire

from linkage.domain.error import InvalidStateError, NotFoundError
from linkage.domain.model import ExternalIdentity, LinkSuggestion
from linkage.domain.model.common import utcnow
from linkage.domain.repository import (
    ExternalIdentityRepository,
    LinkSuggestionRepository,
)
from linkage.domain.value import (
    AuditAction,
    ExternalIdentityId,
    LinkCandidate,
    LinkMethod,
    LinkStatus,
    LinkSuggestionId,
    OrganizationId,
    SuggestionStats,
    SuggestionStatus,
    UserId,
)

from .audit_service import AuditService
from .base import Service
from .identity_settings_service import IdentitySettingsService
from .link_service import LinkService

DEFAULT_ACCEPT_REASON = "Accepted suggestion"


class SuggestionService(Service):
    """Domain service for creating, expiring and deciding link suggestions."""

    def __init__(
        self,
        link_suggestion_repository: LinkSuggestionRepository,
        external_identity_repository: ExternalIdentityRepository,
        identity_settings_service: IdentitySettingsService,
        link_service: LinkService,
        audit_service: AuditService,
    ) -> None:
        """Initialize suggestion service.

        Args:
            link_suggestion_repository: Link suggestion repository
            external_identity_repository: External identity repository
            identity_settings_service: Identity settings domain service
            link_service: Link domain service
            audit_service: Audit domain service
        """
        self.link_suggestion_repository = link_suggestion_repository
        self.external_identity_repository = external_identity_repository
        self.identity_settings_service = identity_settings_service
        self.link_service = link_service
        self.audit_service = audit_service

    async def create_suggestions(
        self,
        identity: ExternalIdentity,
        candidates: list[LinkCandidate],
        actor: str,
        now: Optional[datetime] = None,
    ) -> list[LinkSuggestion]:
        """Store pending suggestions for an identity.

        Existing suggestions for the same user are refreshed; expired ones
        return to pending. Accepted and rejected suggestions are never
        touched, so a user someone already rejected is not proposed again.

        Args:
            identity: Identity the candidates were found for
            candidates: Candidates, highest confidence first
            actor: Acting principal
            now: Creation timestamp

        Returns:
            The stored pending suggestions, in candidate order
        """
        if not candidates:
            return []

        with logfire.span(
            "suggestion_service.create_suggestions",
            identity_id=str(identity.id),
            candidate_count=len(candidates),
        ):
            now = now or utcnow()
            settings = await self.identity_settings_service.get_settings(
                identity.organization_id
            )
            expires_at = now + timedelta(days=settings.suggestion_expiry_days)

            stored = []
            for candidate in candidates:
                suggestion = LinkSuggestion(
                    id=LinkSuggestionId(uuid4()),
                    organization_id=identity.organization_id,
                    external_identity_id=identity.id,
                    suggested_user_id=candidate.user_id,
                    match_method=candidate.match_result.method,
                    confidence_score=candidate.confidence,
                    match_details={
                        **candidate.match_result.details,
                        "score": candidate.match_result.score,
                        "domain_boosted": candidate.match_result.domain_boosted,
                    },
                    expires_at=expires_at,
                    created_at=now,
                    updated_at=now,
                )
                saved = await self.link_suggestion_repository.upsert(suggestion)
                if saved is None:
                    logfire.debug(
                        "Suggestion blocked by earlier decision",
                        identity_id=str(identity.id),
                        user_id=str(candidate.user_id),
                    )
                    continue
                stored.append(saved)

            if stored:
                top = stored[0]
                await self.audit_service.record(
                    identity,
                    AuditAction.SUGGESTION_CREATED,
                    actor,
                    metadata={
                        "candidate_count": len(stored),
                        "top_confidence": top.confidence_score,
                        "top_method": top.match_method.value,
                    },
                    now=now,
                )

            logfire.info(
                "Suggestions created",
                identity_id=str(identity.id),
                created=len(stored),
                blocked=len(candidates) - len(stored),
            )
            return stored

    async def get_suggestion(self, suggestion_id: LinkSuggestionId) -> LinkSuggestion:
        """Get a suggestion or raise NotFoundError."""
        suggestion = await self.link_suggestion_repository.find_by_id(suggestion_id)
        if suggestion is None:
            raise NotFoundError("LinkSuggestion", str(suggestion_id))
        return suggestion

    async def decide(
        self,
        suggestion_id: LinkSuggestionId,
        accepted: bool,
        reviewer: str,
        reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> LinkSuggestion:
        """Accept or reject a pending suggestion.

        Accepting links the identity to the suggested user with method
        manual, which also marks every other pending suggestion of the
        identity accepted.

        Args:
            suggestion_id: Suggestion to decide on
            accepted: True to accept, False to reject
            reviewer: Acting principal
            reason: Optional reason
            now: Decision timestamp

        Returns:
            The decided suggestion

        Raises:
            NotFoundError: If the suggestion does not exist
            InvalidStateError: If the suggestion is not pending, or (on
                accept) the identity is already linked
        """
        with logfire.span(
            "suggestion_service.decide",
            suggestion_id=str(suggestion_id),
            accepted=accepted,
        ):
            now = now or utcnow()
            suggestion = await self.get_suggestion(suggestion_id)
            if not suggestion.is_pending:
                logfire.warn(
                    "Decision on resolved suggestion",
                    suggestion_id=str(suggestion_id),
                    status=suggestion.status.value,
                )
                raise InvalidStateError(
                    f"Suggestion {suggestion_id} is {suggestion.status.value}"
                )

            if accepted:
                await self.link_service.link(
                    suggestion.external_identity_id,
                    suggestion.suggested_user_id,
                    LinkMethod.MANUAL,
                    reviewer,
                    reason=reason or DEFAULT_ACCEPT_REASON,
                    suggestion_id=suggestion.id,
                    now=now,
                )
                return await self.get_suggestion(suggestion_id)

            rejected = suggestion.evolve(
                status=SuggestionStatus.REJECTED,
                reviewed_by=reviewer,
                reviewed_at=now,
                rejection_reason=reason,
                updated_at=now,
            )
            if not await self.link_suggestion_repository.save_if_status_in(
                rejected, {SuggestionStatus.PENDING}
            ):
                current = await self.get_suggestion(suggestion_id)
                logfire.warn(
                    "Suggestion decided concurrently",
                    suggestion_id=str(suggestion_id),
                    status=current.status.value,
                )
                raise InvalidStateError(
                    f"Suggestion {suggestion_id} is {current.status.value}"
                )

            identity = await self.link_service.get_identity(
                suggestion.external_identity_id
            )
            await self.audit_service.record(
                identity,
                AuditAction.REJECTED,
                reviewer,
                suggestion_id=suggestion.id,
                reason=reason,
                metadata={
                    "suggested_user_id": str(suggestion.suggested_user_id),
                    "confidence_score": suggestion.confidence_score,
                },
                now=now,
            )
            await self._settle_identity(identity, now)

            logfire.info(
                "Suggestion rejected",
                suggestion_id=str(suggestion_id),
                identity_id=str(suggestion.external_identity_id),
            )
            return rejected

    async def expire_due(self, now: Optional[datetime] = None) -> int:
        """Expire every pending suggestion whose expiry time has passed.

        Args:
            now: Reference time

        Returns:
            Number of expired suggestions
        """
        with logfire.span("suggestion_service.expire_due"):
            now = now or utcnow()
            expired = await self.link_suggestion_repository.expire_due(now)

            by_identity: dict[ExternalIdentityId, list[LinkSuggestion]] = {}
            for suggestion in expired:
                by_identity.setdefault(suggestion.external_identity_id, []).append(
                    suggestion
                )

            for identity_id, suggestions in by_identity.items():
                identity = await self.link_service.get_identity(identity_id)
                for suggestion in suggestions:
                    await self.audit_service.record(
                        identity,
                        AuditAction.SUGGESTION_EXPIRED,
                        None,
                        suggestion_id=suggestion.id,
                        metadata={
                            "suggested_user_id": str(suggestion.suggested_user_id),
                            "expires_at": suggestion.expires_at.isoformat(),
                        },
                        now=now,
                    )
                await self._settle_identity(identity, now)

            logfire.info(
                "Suggestions expired",
                expired=len(expired),
                identities=len(by_identity),
            )
            return len(expired)

    async def cleanup_processed(
        self, older_than_days: int = 90, now: Optional[datetime] = None
    ) -> int:
        """Delete decided and expired suggestions older than the cutoff.

        Pending suggestions are never deleted.

        Args:
            older_than_days: Age in days, measured from last update
            now: Reference time

        Returns:
            Number of deleted suggestions
        """
        with logfire.span(
            "suggestion_service.cleanup_processed", older_than_days=older_than_days
        ):
            cutoff = (now or utcnow()) - timedelta(days=older_than_days)
            deleted = await self.link_suggestion_repository.delete_processed_before(
                cutoff
            )
            logfire.info("Processed suggestions deleted", deleted=deleted)
            return deleted

    async def get_pending_for_user(
        self,
        organization_id: OrganizationId,
        user_id: UserId,
        now: Optional[datetime] = None,
    ) -> list[LinkSuggestion]:
        """Get unexpired pending suggestions naming a user."""
        with logfire.span(
            "suggestion_service.get_pending_for_user", user_id=str(user_id)
        ):
            return await self.link_suggestion_repository.find_pending_for_user(
                organization_id, user_id, now or utcnow()
            )

    async def get_pending_for_organization(
        self,
        organization_id: OrganizationId,
        limit: int = 50,
        offset: int = 0,
        now: Optional[datetime] = None,
    ) -> list[LinkSuggestion]:
        """Get a page of unexpired pending suggestions of an organization."""
        with logfire.span(
            "suggestion_service.get_pending_for_organization",
            organization_id=str(organization_id),
            limit=limit,
            offset=offset,
        ):
            return await self.link_suggestion_repository.find_pending_for_organization(
                organization_id, now or utcnow(), limit, offset
            )

    async def get_for_identity(
        self,
        identity_id: ExternalIdentityId,
        status: Optional[SuggestionStatus] = None,
    ) -> list[LinkSuggestion]:
        """Get an identity's suggestions, highest confidence first."""
        return await self.link_suggestion_repository.find_by_identity(
            identity_id, status
        )

    async def get_stats(self, organization_id: OrganizationId) -> SuggestionStats:
        """Count an organization's suggestions per status."""
        with logfire.span(
            "suggestion_service.get_stats", organization_id=str(organization_id)
        ):
            counts = await self.link_suggestion_repository.count_by_status(
                organization_id
            )
            return SuggestionStats(
                pending=counts.get(SuggestionStatus.PENDING, 0),
                accepted=counts.get(SuggestionStatus.ACCEPTED, 0),
                rejected=counts.get(SuggestionStatus.REJECTED, 0),
                expired=counts.get(SuggestionStatus.EXPIRED, 0),
            )

    async def _settle_identity(self, identity: ExternalIdentity, now: datetime) -> None:
        """Return a suggested identity to unlinked once nothing is pending."""
        current = await self.external_identity_repository.find_by_id(identity.id)
        if current is None or current.link_status != LinkStatus.SUGGESTED:
            return

        pending = await self.link_suggestion_repository.find_by_identity(
            identity.id, SuggestionStatus.PENDING
        )
        if pending:
            return

        await self.external_identity_repository.save_if_status_in(
            current.with_status(LinkStatus.UNLINKED, now), {LinkStatus.SUGGESTED}
        )
        logfire.debug("Identity settled to unlinked", identity_id=str(identity.id))
