"""In-memory repository implementations for testing."""

from .external_identity import InMemoryExternalIdentityRepository
from .identity_settings import InMemoryIdentitySettingsRepository
from .link_audit import InMemoryLinkAuditRepository
from .link_suggestion import InMemoryLinkSuggestionRepository
from .member import InMemoryMemberRepository
from .store import InMemoryStore
from .unit_of_work import InMemoryUnitOfWork

__all__ = [
    "InMemoryExternalIdentityRepository",
    "InMemoryIdentitySettingsRepository",
    "InMemoryLinkAuditRepository",
    "InMemoryLinkSuggestionRepository",
    "InMemoryMemberRepository",
    "InMemoryStore",
    "InMemoryUnitOfWork",
]
