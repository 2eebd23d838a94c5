"""Identity resolution domain service."""

from datetime import datetime
from typing import Optional

import logfire

from linkage.domain.model import ExternalIdentity, IdentitySettings
from linkage.domain.model.common import utcnow
from linkage.domain.model.identity_settings import check_threshold_order
from linkage.domain.repository import ExternalIdentityRepository, MemberRepository
from linkage.domain.value import (
    ExternalIdentityId,
    ExternalProfile,
    LinkCandidate,
    LinkMethod,
    LinkStatus,
    OrganizationId,
    ResolutionAction,
    ResolutionOptions,
    ResolutionResult,
    UserId,
)

from .base import Service
from .candidate_finder import CandidateFinder
from .identity_settings_service import IdentitySettingsService
from .link_service import DEFAULT_CONFIDENCE, LinkService, NOT_LINKED
from .suggestion_service import SuggestionService

DEFAULT_MAX_SUGGESTIONS = 5


class ResolutionService(Service):
    """Decides what to do with an external profile.

    Resolution either finds the identity already linked, links it
    automatically (exact email, or a single confident name match), stores
    suggestions for a human to review, or does nothing.
    """

    def __init__(
        self,
        external_identity_repository: ExternalIdentityRepository,
        member_repository: MemberRepository,
        identity_settings_service: IdentitySettingsService,
        candidate_finder: CandidateFinder,
        link_service: LinkService,
        suggestion_service: SuggestionService,
        max_suggestions: int = DEFAULT_MAX_SUGGESTIONS,
        skip_bot_accounts: bool = True,
    ) -> None:
        """Initialize resolution service.

        Args:
            external_identity_repository: External identity repository
            member_repository: Organization member repository
            identity_settings_service: Identity settings domain service
            candidate_finder: Candidate finder
            link_service: Link domain service
            suggestion_service: Suggestion domain service
            max_suggestions: Maximum suggestions stored per resolution
            skip_bot_accounts: Never link accounts flagged as bots
        """
        self.external_identity_repository = external_identity_repository
        self.member_repository = member_repository
        self.identity_settings_service = identity_settings_service
        self.candidate_finder = candidate_finder
        self.link_service = link_service
        self.suggestion_service = suggestion_service
        self.max_suggestions = max_suggestions
        self.skip_bot_accounts = skip_bot_accounts

    async def resolve(
        self,
        profile: ExternalProfile,
        organization_id: OrganizationId,
        actor: str,
        options: Optional[ResolutionOptions] = None,
        now: Optional[datetime] = None,
    ) -> ResolutionResult:
        """Sync an external profile and try to link it to a member.

        Args:
            profile: Normalized provider profile
            organization_id: Organization the profile was seen in
            actor: Acting principal
            options: Per-call threshold overrides
            now: Resolution timestamp

        Returns:
            What resolution did and with which user(s)

        Raises:
            ConfigurationError: If threshold overrides are out of order
        """
        options = options or ResolutionOptions()
        now = now or utcnow()

        with logfire.span(
            "resolution_service.resolve",
            organization_id=str(organization_id),
            provider=profile.provider.value,
            provider_user_id=profile.provider_user_id,
        ):
            settings = await self.identity_settings_service.get_settings(
                organization_id
            )
            auto_threshold, suggestion_threshold = self._thresholds(settings, options)

            identity = await self.external_identity_repository.upsert_profile(
                organization_id, profile, now
            )

            if identity.is_linked:
                logfire.debug(
                    "Identity already linked", identity_id=str(identity.id)
                )
                return self._already_linked(identity)

            if self.skip_bot_accounts and profile.is_bot:
                logfire.info(
                    "Skipping bot account",
                    identity_id=str(identity.id),
                    provider=profile.provider.value,
                )
                return self._no_match(identity.id)

            if (
                profile.email
                and settings.auto_link_on_email
                and not options.skip_auto_link
            ):
                members = await self.member_repository.find_by_email(
                    organization_id, profile.email
                )
                if len(members) == 1:
                    return await self._auto_link(
                        identity,
                        members[0].user_id,
                        LinkMethod.AUTO_EMAIL,
                        float(DEFAULT_CONFIDENCE[LinkMethod.AUTO_EMAIL]),
                        actor,
                        "Exact email match",
                        now,
                    )
                if len(members) > 1:
                    logfire.warn(
                        "Email matches several members",
                        organization_id=str(organization_id),
                        matches=len(members),
                    )

            candidates = await self.candidate_finder.find_candidates(
                organization_id, profile.matching_name, profile.email
            )
            auto_eligible = [c for c in candidates if c.confidence >= auto_threshold]
            suggestion_eligible = [
                c
                for c in candidates
                if suggestion_threshold <= c.confidence < auto_threshold
            ]

            if len(auto_eligible) == 1 and not options.skip_auto_link:
                candidate = auto_eligible[0]
                return await self._auto_link(
                    identity,
                    candidate.user_id,
                    LinkMethod.AUTO_FUZZY,
                    candidate.confidence,
                    actor,
                    f"Name match ({candidate.match_result.method.value})",
                    now,
                )

            # Several confident matches are as ambiguous as weak ones
            ranked = (auto_eligible + suggestion_eligible)[: self.max_suggestions]
            if ranked:
                return await self._suggest(identity, ranked, actor, now)

            logfire.info(
                "No match for identity",
                identity_id=str(identity.id),
                candidates=len(candidates),
            )
            return self._no_match(identity.id)

    def _thresholds(
        self, settings: IdentitySettings, options: ResolutionOptions
    ) -> tuple[float, float]:
        """Effective (auto-link, suggestion) thresholds for one call."""
        auto_threshold = (
            options.auto_link_threshold
            if options.auto_link_threshold is not None
            else settings.auto_link_threshold
        )
        suggestion_threshold = (
            options.suggestion_threshold
            if options.suggestion_threshold is not None
            else settings.suggestion_threshold
        )
        check_threshold_order(suggestion_threshold, auto_threshold)
        return auto_threshold, suggestion_threshold

    async def _auto_link(
        self,
        identity: ExternalIdentity,
        user_id: UserId,
        method: LinkMethod,
        confidence: float,
        actor: str,
        reason: str,
        now: datetime,
    ) -> ResolutionResult:
        linked = await self.link_service.link_if_unlinked(
            identity.id,
            user_id,
            method,
            actor,
            reason=reason,
            confidence=confidence,
            now=now,
        )
        if linked is None:
            return await self._reload_linked(identity.id)

        return ResolutionResult(
            action=ResolutionAction.AUTO_LINKED,
            external_identity_id=identity.id,
            linked_user_id=user_id,
            confidence=confidence,
            method=method,
        )

    async def _suggest(
        self,
        identity: ExternalIdentity,
        candidates: list[LinkCandidate],
        actor: str,
        now: datetime,
    ) -> ResolutionResult:
        stored = await self.suggestion_service.create_suggestions(
            identity, candidates, actor, now
        )
        if not stored:
            logfire.info(
                "Every candidate was already decided",
                identity_id=str(identity.id),
            )
            return self._no_match(identity.id)

        if not await self.external_identity_repository.save_if_status_in(
            identity.with_status(LinkStatus.SUGGESTED, now), NOT_LINKED
        ):
            return await self._reload_linked(identity.id)

        stored_users = {s.suggested_user_id for s in stored}
        return ResolutionResult(
            action=ResolutionAction.SUGGESTED,
            external_identity_id=identity.id,
            suggestions=[c for c in candidates if c.user_id in stored_users],
            confidence=stored[0].confidence_score,
        )

    async def _reload_linked(self, identity_id: ExternalIdentityId) -> ResolutionResult:
        """Report the state a concurrent writer left behind."""
        current = await self.link_service.get_identity(identity_id)
        logfire.info(
            "Identity linked by concurrent resolution",
            identity_id=str(identity_id),
            user_id=str(current.user_id),
        )
        if current.is_linked:
            return self._already_linked(current)
        return self._no_match(identity_id)

    @staticmethod
    def _already_linked(identity: ExternalIdentity) -> ResolutionResult:
        return ResolutionResult(
            action=ResolutionAction.ALREADY_LINKED,
            external_identity_id=identity.id,
            linked_user_id=identity.user_id,
            confidence=(
                float(identity.link_confidence)
                if identity.link_confidence is not None
                else None
            ),
            method=identity.link_method,
        )

    @staticmethod
    def _no_match(identity_id: ExternalIdentityId) -> ResolutionResult:
        return ResolutionResult(
            action=ResolutionAction.NO_MATCH, external_identity_id=identity_id
        )
