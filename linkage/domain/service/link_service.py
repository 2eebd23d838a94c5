"""Link state machine domain service."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

import logfire

from linkage.domain.error import InvalidStateError, NotFoundError, ValidationError
from linkage.domain.model import ExternalIdentity
from linkage.domain.model.common import utcnow
from linkage.domain.repository import (
    ExternalIdentityRepository,
    LinkSuggestionRepository,
    MemberRepository,
)
from linkage.domain.value import (
    AuditAction,
    ExternalIdentityId,
    LinkMethod,
    LinkStatus,
    LinkSuggestionId,
    SuggestionStatus,
    UserId,
    to_link_confidence,
)

from .audit_service import AuditService
from .base import Service

# Confidence stored when the caller does not supply one
DEFAULT_CONFIDENCE: dict[LinkMethod, Decimal] = {
    LinkMethod.AUTO_EMAIL: Decimal("0.98"),
    LinkMethod.AUTO_FUZZY: Decimal("0.90"),
    LinkMethod.MANUAL: Decimal("1.00"),
    LinkMethod.ADMIN: Decimal("1.00"),
    LinkMethod.MIGRATION: Decimal("0.95"),
}

NOT_LINKED = frozenset({LinkStatus.UNLINKED, LinkStatus.SUGGESTED})

RELINK_REASON_PREFIX = "Re-linking to different user: "


class LinkService(Service):
    """Domain service for linking, unlinking and relinking identities.

    Every write is a compare-and-set on the stored link status, so two
    concurrent callers can never both link the same identity.
    """

    def __init__(
        self,
        external_identity_repository: ExternalIdentityRepository,
        link_suggestion_repository: LinkSuggestionRepository,
        member_repository: MemberRepository,
        audit_service: AuditService,
    ) -> None:
        """Initialize link service.

        Args:
            external_identity_repository: External identity repository
            link_suggestion_repository: Link suggestion repository
            member_repository: Organization member repository
            audit_service: Audit domain service
        """
        self.external_identity_repository = external_identity_repository
        self.link_suggestion_repository = link_suggestion_repository
        self.member_repository = member_repository
        self.audit_service = audit_service

    async def get_identity(self, identity_id: ExternalIdentityId) -> ExternalIdentity:
        """Get an identity or raise NotFoundError."""
        identity = await self.external_identity_repository.find_by_id(identity_id)
        if identity is None:
            raise NotFoundError("ExternalIdentity", str(identity_id))
        return identity

    async def link(
        self,
        identity_id: ExternalIdentityId,
        user_id: UserId,
        method: LinkMethod,
        actor: str,
        reason: Optional[str] = None,
        confidence: Optional[float | Decimal] = None,
        suggestion_id: Optional[LinkSuggestionId] = None,
        now: Optional[datetime] = None,
    ) -> ExternalIdentity:
        """Link an external identity to an internal user.

        Every pending suggestion of the identity is marked accepted.

        Args:
            identity_id: Identity to link
            user_id: Internal user to link to
            method: How the link was established
            actor: Acting principal
            reason: Optional audit reason
            confidence: Link confidence; defaults per method
            suggestion_id: Suggestion that led to the link, if any
            now: Link timestamp

        Returns:
            The linked identity

        Raises:
            NotFoundError: If the identity does not exist or the user is not a
                member of the identity's organization
            InvalidStateError: If the identity is already linked
        """
        with logfire.span(
            "link_service.link",
            identity_id=str(identity_id),
            user_id=str(user_id),
            method=method.value,
        ):
            linked = await self.link_if_unlinked(
                identity_id,
                user_id,
                method,
                actor,
                reason=reason,
                confidence=confidence,
                suggestion_id=suggestion_id,
                now=now,
            )
            if linked is None:
                current = await self.get_identity(identity_id)
                logfire.warn(
                    "Link attempt on linked identity",
                    identity_id=str(identity_id),
                    linked_user_id=str(current.user_id),
                )
                raise InvalidStateError(
                    f"External identity {identity_id} is already linked"
                )
            return linked

    async def link_if_unlinked(
        self,
        identity_id: ExternalIdentityId,
        user_id: UserId,
        method: LinkMethod,
        actor: str,
        reason: Optional[str] = None,
        confidence: Optional[float | Decimal] = None,
        suggestion_id: Optional[LinkSuggestionId] = None,
        now: Optional[datetime] = None,
    ) -> Optional[ExternalIdentity]:
        """Link an identity unless someone else linked it first.

        Same as `link`, but returns None instead of raising when the identity
        is (or concurrently becomes) linked.

        Raises:
            NotFoundError: If the identity does not exist or the user is not a
                member of the identity's organization
        """
        now = now or utcnow()
        identity = await self.get_identity(identity_id)
        if identity.is_linked:
            return None

        member = await self.member_repository.find_by_user_id(
            identity.organization_id, user_id
        )
        if member is None:
            logfire.warn(
                "Link to non-member",
                identity_id=str(identity_id),
                organization_id=str(identity.organization_id),
                user_id=str(user_id),
            )
            raise NotFoundError("Member", str(user_id))

        link_confidence = (
            to_link_confidence(confidence)
            if confidence is not None
            else DEFAULT_CONFIDENCE[method]
        )
        linked = identity.linked_to(user_id, method, link_confidence, actor, now)

        if not await self.external_identity_repository.save_if_status_in(
            linked, NOT_LINKED
        ):
            logfire.info(
                "Identity linked concurrently",
                identity_id=str(identity_id),
            )
            return None

        accepted = await self.link_suggestion_repository.resolve_pending(
            identity_id, SuggestionStatus.ACCEPTED, actor, now
        )

        await self.audit_service.record(
            linked,
            AuditAction.LINKED,
            actor,
            user_id=user_id,
            link_method=method,
            confidence=link_confidence,
            suggestion_id=suggestion_id,
            reason=reason,
            metadata={"accepted_suggestions": len(accepted)} if accepted else None,
            now=now,
        )

        logfire.info(
            "Identity linked",
            identity_id=str(identity_id),
            user_id=str(user_id),
            method=method.value,
            confidence=str(link_confidence),
        )
        return linked

    async def unlink(
        self,
        identity_id: ExternalIdentityId,
        actor: str,
        reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ExternalIdentity:
        """Remove the link between an identity and its user.

        Args:
            identity_id: Identity to unlink
            actor: Acting principal
            reason: Optional audit reason
            now: Unlink timestamp

        Returns:
            The unlinked identity

        Raises:
            NotFoundError: If the identity does not exist
            InvalidStateError: If the identity is not linked
        """
        with logfire.span("link_service.unlink", identity_id=str(identity_id)):
            now = now or utcnow()
            identity = await self.get_identity(identity_id)
            if not identity.is_linked:
                raise InvalidStateError(f"External identity {identity_id} is not linked")

            unlinked = identity.unlinked(now)
            if not await self.external_identity_repository.save_if_status_in(
                unlinked, {LinkStatus.LINKED}
            ):
                raise InvalidStateError(
                    f"External identity {identity_id} changed during unlink"
                )

            await self.audit_service.record(
                unlinked,
                AuditAction.UNLINKED,
                actor,
                previous_user_id=identity.user_id,
                link_method=identity.link_method,
                confidence=identity.link_confidence,
                reason=reason,
                now=now,
            )

            logfire.info(
                "Identity unlinked",
                identity_id=str(identity_id),
                previous_user_id=str(identity.user_id),
            )
            return unlinked

    async def relink(
        self,
        identity_id: ExternalIdentityId,
        new_user_id: UserId,
        actor: str,
        reason: str,
        now: Optional[datetime] = None,
    ) -> ExternalIdentity:
        """Move an identity to a different user.

        Callers run this inside one transaction so the unlink and the new
        link commit together.

        Args:
            identity_id: Identity to relink
            new_user_id: User to link to
            actor: Acting principal (an administrator)
            reason: Mandatory justification
            now: Timestamp

        Returns:
            The identity linked to the new user

        Raises:
            ValidationError: If reason is empty or blank
            NotFoundError: If the identity or user does not exist
        """
        if not reason or not reason.strip():
            raise ValidationError("A reason is required to relink an identity")

        with logfire.span(
            "link_service.relink",
            identity_id=str(identity_id),
            new_user_id=str(new_user_id),
        ):
            now = now or utcnow()
            identity = await self.get_identity(identity_id)

            # Fail before unlinking so a bad target leaves the link intact
            member = await self.member_repository.find_by_user_id(
                identity.organization_id, new_user_id
            )
            if member is None:
                raise NotFoundError("Member", str(new_user_id))

            if identity.is_linked:
                await self.unlink(
                    identity_id, actor, RELINK_REASON_PREFIX + reason, now=now
                )

            return await self.link(
                identity_id,
                new_user_id,
                LinkMethod.ADMIN,
                actor,
                reason=reason,
                confidence=Decimal("1.00"),
                now=now,
            )
