"""Repository interfaces for the identity-linking domain.

Repository interfaces are defined in the domain layer (dependency inversion).
Implementations live in the persistence layer.
"""

from linkage.domain.repository.external_identity import ExternalIdentityRepository
from linkage.domain.repository.identity_settings import IdentitySettingsRepository
from linkage.domain.repository.link_audit import LinkAuditRepository
from linkage.domain.repository.link_suggestion import LinkSuggestionRepository
from linkage.domain.repository.member import MemberRepository
from linkage.domain.repository.unit_of_work import UnitOfWork

__all__ = [
    "ExternalIdentityRepository",
    "IdentitySettingsRepository",
    "LinkAuditRepository",
    "LinkSuggestionRepository",
    "MemberRepository",
    "UnitOfWork",
]
