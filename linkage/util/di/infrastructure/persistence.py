"""Persistence infrastructure providers."""

from collections.abc import AsyncIterator

from dishka import Scope, provide
import logfire
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from linkage.config import Settings
from linkage.domain.repository import (
    ExternalIdentityRepository,
    IdentitySettingsRepository,
    LinkAuditRepository,
    LinkSuggestionRepository,
    MemberRepository,
    UnitOfWork,
)
from linkage.persistence.database import create_engine, create_session_factory
from linkage.persistence.repository import (
    PostgresExternalIdentityRepository,
    PostgresIdentitySettingsRepository,
    PostgresLinkAuditRepository,
    PostgresLinkSuggestionRepository,
    PostgresMemberRepository,
    PostgresUnitOfWork,
)
from linkage.util.di.base import ProviderBase
from linkage.util.observability import instrument_sqlalchemy


class PersistenceProvider(ProviderBase):
    """Persistence component base."""

    __mock_component__ = "persistence"


class ProdPersistenceProvider(PersistenceProvider):
    """Production persistence provider using PostgreSQL."""

    __is_mock__ = False

    scope = Scope.APP

    @provide(scope=Scope.APP)
    async def get_engine(self, settings: Settings) -> AsyncIterator[AsyncEngine]:
        """Provide database engine, disposed when the container closes."""
        engine = create_engine(settings)
        # Instrument SQLAlchemy for observability
        instrument_sqlalchemy(engine)
        yield engine
        await engine.dispose()

    @provide(scope=Scope.APP)
    def get_session_factory(
        self, engine: AsyncEngine
    ) -> async_sessionmaker[AsyncSession]:
        """Provide session factory."""
        return create_session_factory(engine)

    @provide(scope=Scope.REQUEST)
    async def get_session(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> AsyncIterator[AsyncSession]:
        """Provide database session for request scope.

        The session is automatically committed at the end of the request
        if no exception occurred, or rolled back if an exception was raised.
        """
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
                logfire.debug("Session committed")
            except Exception as e:
                logfire.warn("Session rollback", error=str(e))
                await session.rollback()
                raise

    @provide(scope=Scope.REQUEST)
    def get_unit_of_work(self, session: AsyncSession) -> UnitOfWork:
        """Provide savepoint-based unit of work."""
        return PostgresUnitOfWork(session)

    @provide(scope=Scope.REQUEST)
    def get_external_identity_repository(
        self, session: AsyncSession
    ) -> ExternalIdentityRepository:
        """Provide ExternalIdentity repository."""
        return PostgresExternalIdentityRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_link_suggestion_repository(
        self, session: AsyncSession
    ) -> LinkSuggestionRepository:
        """Provide LinkSuggestion repository."""
        return PostgresLinkSuggestionRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_link_audit_repository(self, session: AsyncSession) -> LinkAuditRepository:
        """Provide LinkAudit repository."""
        return PostgresLinkAuditRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_identity_settings_repository(
        self, session: AsyncSession
    ) -> IdentitySettingsRepository:
        """Provide IdentitySettings repository."""
        return PostgresIdentitySettingsRepository(session)

    @provide(scope=Scope.REQUEST)
    def get_member_repository(self, session: AsyncSession) -> MemberRepository:
        """Provide Member repository."""
        return PostgresMemberRepository(session)
