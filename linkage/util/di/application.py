"""Application layer DI providers."""

from dishka import Scope, provide

from linkage.application.usecase.identity import (
    GetIdentitiesUseCase,
    GetIdentityHistoryUseCase,
    GetIdentityStatsUseCase,
    LinkIdentityUseCase,
    RelinkIdentityUseCase,
    ResolveIdentityUseCase,
    UnlinkIdentityUseCase,
)
from linkage.application.usecase.settings import (
    PurgeAuditUseCase,
    UpdateIdentitySettingsUseCase,
)
from linkage.application.usecase.suggestion import (
    DecideSuggestionUseCase,
    ExpireSuggestionsUseCase,
    GetSuggestionsUseCase,
)
from linkage.config import IdentityConfig
from linkage.domain.repository import UnitOfWork
from linkage.domain.service import (
    AuditService,
    ExternalIdentityService,
    IdentitySettingsService,
    LinkService,
    ProfileNormalizer,
    ResolutionService,
    SuggestionService,
)
from linkage.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application use cases provider - concrete, no mocks needed."""

    # Identity use cases
    @provide(scope=Scope.REQUEST)
    def get_resolve_identity_use_case(
        self,
        resolution_service: ResolutionService,
        profile_normalizer: ProfileNormalizer,
        unit_of_work: UnitOfWork,
    ) -> ResolveIdentityUseCase:
        """Provide resolve identity use case."""
        return ResolveIdentityUseCase(
            resolution_service=resolution_service,
            profile_normalizer=profile_normalizer,
            unit_of_work=unit_of_work,
        )

    @provide(scope=Scope.REQUEST)
    def get_link_identity_use_case(
        self, link_service: LinkService, unit_of_work: UnitOfWork
    ) -> LinkIdentityUseCase:
        """Provide link identity use case."""
        return LinkIdentityUseCase(link_service=link_service, unit_of_work=unit_of_work)

    @provide(scope=Scope.REQUEST)
    def get_unlink_identity_use_case(
        self, link_service: LinkService, unit_of_work: UnitOfWork
    ) -> UnlinkIdentityUseCase:
        """Provide unlink identity use case."""
        return UnlinkIdentityUseCase(
            link_service=link_service, unit_of_work=unit_of_work
        )

    @provide(scope=Scope.REQUEST)
    def get_relink_identity_use_case(
        self, link_service: LinkService, unit_of_work: UnitOfWork
    ) -> RelinkIdentityUseCase:
        """Provide relink identity use case."""
        return RelinkIdentityUseCase(
            link_service=link_service, unit_of_work=unit_of_work
        )

    @provide(scope=Scope.REQUEST)
    def get_get_identities_use_case(
        self, external_identity_service: ExternalIdentityService
    ) -> GetIdentitiesUseCase:
        """Provide get identities use case."""
        return GetIdentitiesUseCase(external_identity_service=external_identity_service)

    @provide(scope=Scope.REQUEST)
    def get_get_identity_history_use_case(
        self, external_identity_service: ExternalIdentityService
    ) -> GetIdentityHistoryUseCase:
        """Provide get identity history use case."""
        return GetIdentityHistoryUseCase(
            external_identity_service=external_identity_service
        )

    @provide(scope=Scope.REQUEST)
    def get_get_identity_stats_use_case(
        self,
        external_identity_service: ExternalIdentityService,
        suggestion_service: SuggestionService,
    ) -> GetIdentityStatsUseCase:
        """Provide get identity stats use case."""
        return GetIdentityStatsUseCase(
            external_identity_service=external_identity_service,
            suggestion_service=suggestion_service,
        )

    # Suggestion use cases
    @provide(scope=Scope.REQUEST)
    def get_decide_suggestion_use_case(
        self,
        suggestion_service: SuggestionService,
        link_service: LinkService,
        unit_of_work: UnitOfWork,
    ) -> DecideSuggestionUseCase:
        """Provide decide suggestion use case."""
        return DecideSuggestionUseCase(
            suggestion_service=suggestion_service,
            link_service=link_service,
            unit_of_work=unit_of_work,
        )

    @provide(scope=Scope.REQUEST)
    def get_expire_suggestions_use_case(
        self,
        suggestion_service: SuggestionService,
        identity_config: IdentityConfig,
        unit_of_work: UnitOfWork,
    ) -> ExpireSuggestionsUseCase:
        """Provide expire suggestions use case."""
        return ExpireSuggestionsUseCase(
            suggestion_service=suggestion_service,
            identity_config=identity_config,
            unit_of_work=unit_of_work,
        )

    @provide(scope=Scope.REQUEST)
    def get_get_suggestions_use_case(
        self, suggestion_service: SuggestionService
    ) -> GetSuggestionsUseCase:
        """Provide get suggestions use case."""
        return GetSuggestionsUseCase(suggestion_service=suggestion_service)

    # Settings use cases
    @provide(scope=Scope.REQUEST)
    def get_update_identity_settings_use_case(
        self,
        identity_settings_service: IdentitySettingsService,
        unit_of_work: UnitOfWork,
    ) -> UpdateIdentitySettingsUseCase:
        """Provide update identity settings use case."""
        return UpdateIdentitySettingsUseCase(
            identity_settings_service=identity_settings_service,
            unit_of_work=unit_of_work,
        )

    @provide(scope=Scope.REQUEST)
    def get_purge_audit_use_case(
        self,
        audit_service: AuditService,
        identity_settings_service: IdentitySettingsService,
        unit_of_work: UnitOfWork,
    ) -> PurgeAuditUseCase:
        """Provide purge audit use case."""
        return PurgeAuditUseCase(
            audit_service=audit_service,
            identity_settings_service=identity_settings_service,
            unit_of_work=unit_of_work,
        )
