"""Domain model entities for identity linking."""

from linkage.domain.model.external_identity import ExternalIdentity
from linkage.domain.model.identity_settings import IdentitySettings
from linkage.domain.model.link_audit import LinkAudit
from linkage.domain.model.link_suggestion import LinkSuggestion
from linkage.domain.model.member import Member

__all__ = [
    "ExternalIdentity",
    "IdentitySettings",
    "LinkAudit",
    "LinkSuggestion",
    "Member",
]
