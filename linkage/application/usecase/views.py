"""Response views shared by several use cases."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel

from linkage.domain.model import ExternalIdentity, LinkAudit, LinkSuggestion
from linkage.domain.value import (
    AuditAction,
    IdentityProvider,
    LinkCandidate,
    LinkMethod,
    LinkStatus,
    MatchMethod,
    SuggestionStatus,
)


class IdentityView(BaseModel):
    """External identity as returned to callers."""

    id: str
    organization_id: str
    provider: IdentityProvider
    provider_user_id: str
    email: Optional[str]
    display_name: Optional[str]
    real_name: Optional[str]
    avatar_url: Optional[str]
    user_id: Optional[str]
    link_status: LinkStatus
    link_method: Optional[LinkMethod]
    link_confidence: Optional[float]
    linked_at: Optional[datetime]
    linked_by: Optional[str]
    last_synced_at: datetime

    @classmethod
    def from_model(cls, identity: ExternalIdentity) -> "IdentityView":
        return cls(
            id=str(identity.id),
            organization_id=str(identity.organization_id),
            provider=identity.provider,
            provider_user_id=identity.provider_user_id,
            email=identity.email,
            display_name=identity.display_name,
            real_name=identity.real_name,
            avatar_url=identity.avatar_url,
            user_id=str(identity.user_id) if identity.user_id else None,
            link_status=identity.link_status,
            link_method=identity.link_method,
            link_confidence=(
                float(identity.link_confidence)
                if identity.link_confidence is not None
                else None
            ),
            linked_at=identity.linked_at,
            linked_by=identity.linked_by,
            last_synced_at=identity.last_synced_at,
        )


class SuggestionView(BaseModel):
    """Link suggestion as returned to callers."""

    id: str
    external_identity_id: str
    suggested_user_id: str
    match_method: MatchMethod
    confidence_score: float
    match_details: dict[str, Any]
    status: SuggestionStatus
    reviewed_by: Optional[str]
    reviewed_at: Optional[datetime]
    rejection_reason: Optional[str]
    expires_at: datetime
    created_at: datetime

    @classmethod
    def from_model(cls, suggestion: LinkSuggestion) -> "SuggestionView":
        return cls(
            id=str(suggestion.id),
            external_identity_id=str(suggestion.external_identity_id),
            suggested_user_id=str(suggestion.suggested_user_id),
            match_method=suggestion.match_method,
            confidence_score=suggestion.confidence_score,
            match_details=suggestion.match_details,
            status=suggestion.status,
            reviewed_by=suggestion.reviewed_by,
            reviewed_at=suggestion.reviewed_at,
            rejection_reason=suggestion.rejection_reason,
            expires_at=suggestion.expires_at,
            created_at=suggestion.created_at,
        )


class CandidateView(BaseModel):
    """Member proposed by resolution."""

    user_id: str
    email: Optional[str]
    display_name: Optional[str]
    confidence: float
    method: MatchMethod
    domain_boosted: bool

    @classmethod
    def from_candidate(cls, candidate: LinkCandidate) -> "CandidateView":
        return cls(
            user_id=str(candidate.user_id),
            email=candidate.email,
            display_name=candidate.display_name,
            confidence=candidate.confidence,
            method=candidate.match_result.method,
            domain_boosted=candidate.match_result.domain_boosted,
        )


class AuditEntryView(BaseModel):
    """Audit log entry as returned to callers."""

    id: str
    action: AuditAction
    user_id: Optional[str]
    previous_user_id: Optional[str]
    suggestion_id: Optional[str]
    link_method: Optional[LinkMethod]
    confidence: Optional[float]
    performed_by: Optional[str]
    reason: Optional[str]
    metadata: dict[str, Any]
    created_at: datetime

    @classmethod
    def from_model(cls, entry: LinkAudit) -> "AuditEntryView":
        return cls(
            id=str(entry.id),
            action=entry.action,
            user_id=str(entry.user_id) if entry.user_id else None,
            previous_user_id=(
                str(entry.previous_user_id) if entry.previous_user_id else None
            ),
            suggestion_id=str(entry.suggestion_id) if entry.suggestion_id else None,
            link_method=entry.link_method,
            confidence=float(entry.confidence) if entry.confidence is not None else None,
            performed_by=entry.performed_by,
            reason=entry.reason,
            metadata=entry.metadata,
            created_at=entry.created_at,
        )
