"""Link suggestion entity."""

from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from linkage.domain.model.common import DomainModel, utcnow
from linkage.domain.value import (
    ExternalIdentityId,
    LinkSuggestionId,
    MatchMethod,
    OrganizationId,
    SuggestionStatus,
    UserId,
)


class LinkSuggestion(DomainModel):
    """Candidate link awaiting a human decision.

    Unique on (external_identity_id, suggested_user_id). Once a suggestion
    leaves PENDING it is never modified again, except that an EXPIRED
    suggestion may be revived when resolution proposes the same user anew.
    """

    id: LinkSuggestionId
    organization_id: OrganizationId
    external_identity_id: ExternalIdentityId
    suggested_user_id: UserId
    match_method: MatchMethod
    confidence_score: float = Field(ge=0.0, le=1.0)
    match_details: dict[str, Any] = Field(default_factory=dict)
    status: SuggestionStatus = SuggestionStatus.PENDING
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    expires_at: datetime
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def is_pending(self) -> bool:
        """Whether the suggestion still awaits a decision."""
        return self.status == SuggestionStatus.PENDING

    def is_due(self, now: datetime) -> bool:
        """Whether a pending suggestion has reached its expiry time."""
        return self.is_pending and self.expires_at <= now
