"""Mock persistence providers for testing."""

from dishka import Scope, provide

from linkage.domain.repository import (
    ExternalIdentityRepository,
    IdentitySettingsRepository,
    LinkAuditRepository,
    LinkSuggestionRepository,
    MemberRepository,
    UnitOfWork,
)
from linkage.persistence.repository.inmemory import (
    InMemoryExternalIdentityRepository,
    InMemoryIdentitySettingsRepository,
    InMemoryLinkAuditRepository,
    InMemoryLinkSuggestionRepository,
    InMemoryMemberRepository,
    InMemoryStore,
    InMemoryUnitOfWork,
)
from linkage.util.di.infrastructure.persistence import PersistenceProvider


class MockPersistenceProvider(PersistenceProvider):
    """Mock persistence provider using in-memory repositories.

    Uses REQUEST scope to ensure test isolation - each test gets a fresh
    store. Every repository of a request shares that store, so the unit of
    work can roll all of them back together.
    """

    __is_mock__ = True

    @provide(scope=Scope.REQUEST)
    def get_store(self) -> InMemoryStore:
        """Provide the in-memory tables for this request."""
        return InMemoryStore()

    @provide(scope=Scope.REQUEST)
    def get_unit_of_work(self, store: InMemoryStore) -> UnitOfWork:
        """Provide snapshot-based unit of work."""
        return InMemoryUnitOfWork(store)

    @provide(scope=Scope.REQUEST)
    def get_external_identity_repository(
        self, store: InMemoryStore
    ) -> ExternalIdentityRepository:
        """Provide in-memory external identity repository."""
        return InMemoryExternalIdentityRepository(store)

    @provide(scope=Scope.REQUEST)
    def get_link_suggestion_repository(
        self, store: InMemoryStore
    ) -> LinkSuggestionRepository:
        """Provide in-memory link suggestion repository."""
        return InMemoryLinkSuggestionRepository(store)

    @provide(scope=Scope.REQUEST)
    def get_link_audit_repository(self, store: InMemoryStore) -> LinkAuditRepository:
        """Provide in-memory link audit repository."""
        return InMemoryLinkAuditRepository(store)

    @provide(scope=Scope.REQUEST)
    def get_identity_settings_repository(
        self, store: InMemoryStore
    ) -> IdentitySettingsRepository:
        """Provide in-memory identity settings repository."""
        return InMemoryIdentitySettingsRepository(store)

    @provide(scope=Scope.REQUEST)
    def get_member_repository(self, store: InMemoryStore) -> MemberRepository:
        """Provide in-memory member repository."""
        return InMemoryMemberRepository(store)
