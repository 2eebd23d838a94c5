"""PostgreSQL repository implementations."""

from linkage.persistence.repository.external_identity import (
    PostgresExternalIdentityRepository,
)
from linkage.persistence.repository.identity_settings import (
    PostgresIdentitySettingsRepository,
)
from linkage.persistence.repository.link_audit import PostgresLinkAuditRepository
from linkage.persistence.repository.link_suggestion import (
    PostgresLinkSuggestionRepository,
)
from linkage.persistence.repository.member import PostgresMemberRepository
from linkage.persistence.repository.unit_of_work import PostgresUnitOfWork

__all__ = [
    "PostgresExternalIdentityRepository",
    "PostgresIdentitySettingsRepository",
    "PostgresLinkAuditRepository",
    "PostgresLinkSuggestionRepository",
    "PostgresMemberRepository",
    "PostgresUnitOfWork",
]
