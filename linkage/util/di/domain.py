"""Domain layer DI providers."""

from dishka import Scope, provide

from linkage.config import IdentityConfig
from linkage.domain.repository import (
    ExternalIdentityRepository,
    IdentitySettingsRepository,
    LinkAuditRepository,
    LinkSuggestionRepository,
    MemberRepository,
)
from linkage.domain.service import (
    AuditService,
    CandidateFinder,
    ExternalIdentityService,
    IdentitySettingsService,
    LinkService,
    NameMatcher,
    ProfileExtractor,
    ProfileNormalizer,
    ResolutionService,
    SettingsCache,
    SuggestionService,
)
from linkage.domain.value import IdentityProvider
from linkage.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services are REQUEST-scoped to align with repository/session lifecycle.
    Each request gets fresh service instances sharing one transaction.
    """

    scope = Scope.REQUEST

    @provide
    def get_audit_service(
        self, link_audit_repository: LinkAuditRepository
    ) -> AuditService:
        """Provide audit domain service."""
        return AuditService(link_audit_repository=link_audit_repository)

    @provide
    def get_identity_settings_service(
        self,
        identity_settings_repository: IdentitySettingsRepository,
        settings_cache: SettingsCache,
    ) -> IdentitySettingsService:
        """Provide identity settings domain service."""
        return IdentitySettingsService(
            identity_settings_repository=identity_settings_repository,
            settings_cache=settings_cache,
        )

    @provide
    def get_candidate_finder(
        self, member_repository: MemberRepository, name_matcher: NameMatcher
    ) -> CandidateFinder:
        """Provide candidate finder."""
        return CandidateFinder(
            member_repository=member_repository, name_matcher=name_matcher
        )

    @provide
    def get_link_service(
        self,
        external_identity_repository: ExternalIdentityRepository,
        link_suggestion_repository: LinkSuggestionRepository,
        member_repository: MemberRepository,
        audit_service: AuditService,
    ) -> LinkService:
        """Provide link domain service."""
        return LinkService(
            external_identity_repository=external_identity_repository,
            link_suggestion_repository=link_suggestion_repository,
            member_repository=member_repository,
            audit_service=audit_service,
        )

    @provide
    def get_suggestion_service(
        self,
        link_suggestion_repository: LinkSuggestionRepository,
        external_identity_repository: ExternalIdentityRepository,
        identity_settings_service: IdentitySettingsService,
        link_service: LinkService,
        audit_service: AuditService,
    ) -> SuggestionService:
        """Provide suggestion domain service."""
        return SuggestionService(
            link_suggestion_repository=link_suggestion_repository,
            external_identity_repository=external_identity_repository,
            identity_settings_service=identity_settings_service,
            link_service=link_service,
            audit_service=audit_service,
        )

    @provide
    def get_resolution_service(
        self,
        external_identity_repository: ExternalIdentityRepository,
        member_repository: MemberRepository,
        identity_settings_service: IdentitySettingsService,
        candidate_finder: CandidateFinder,
        link_service: LinkService,
        suggestion_service: SuggestionService,
        identity_config: IdentityConfig,
    ) -> ResolutionService:
        """Provide resolution domain service."""
        return ResolutionService(
            external_identity_repository=external_identity_repository,
            member_repository=member_repository,
            identity_settings_service=identity_settings_service,
            candidate_finder=candidate_finder,
            link_service=link_service,
            suggestion_service=suggestion_service,
            max_suggestions=identity_config.max_suggestions,
            skip_bot_accounts=identity_config.skip_bot_accounts,
        )

    @provide
    def get_external_identity_service(
        self,
        external_identity_repository: ExternalIdentityRepository,
        link_suggestion_repository: LinkSuggestionRepository,
        audit_service: AuditService,
    ) -> ExternalIdentityService:
        """Provide external identity query service."""
        return ExternalIdentityService(
            external_identity_repository=external_identity_repository,
            link_suggestion_repository=link_suggestion_repository,
            audit_service=audit_service,
        )

    @provide
    def get_profile_normalizer(
        self, extractors: dict[IdentityProvider, ProfileExtractor]
    ) -> ProfileNormalizer:
        """Provide provider profile normalizer.

        Args:
            extractors: Dictionary mapping providers to their profile extractors

        Returns:
            ProfileNormalizer configured with all available extractors
        """
        return ProfileNormalizer(extractors=extractors)
