"""Domain value objects for identity linking."""

from linkage.domain.value.identifiers import (
    SYSTEM_ACTOR,
    ActorId,
    ExternalIdentityId,
    LinkAuditId,
    LinkSuggestionId,
    OrganizationId,
    UserId,
)
from linkage.domain.value.types import (
    AuditAction,
    ExternalProfile,
    IdentityStats,
    IdentityProvider,
    LinkCandidate,
    LinkMethod,
    LinkStatus,
    MatchMethod,
    MatchResult,
    ResolutionAction,
    ResolutionOptions,
    ResolutionResult,
    SuggestionStats,
    SuggestionStatus,
    to_link_confidence,
)

__all__ = [
    # Identifiers
    "ActorId",
    "ExternalIdentityId",
    "LinkAuditId",
    "LinkSuggestionId",
    "OrganizationId",
    "SYSTEM_ACTOR",
    "UserId",
    # Types
    "AuditAction",
    "ExternalProfile",
    "IdentityStats",
    "IdentityProvider",
    "LinkCandidate",
    "LinkMethod",
    "LinkStatus",
    "MatchMethod",
    "MatchResult",
    "ResolutionAction",
    "ResolutionOptions",
    "ResolutionResult",
    "SuggestionStats",
    "SuggestionStatus",
    "to_link_confidence",
]
