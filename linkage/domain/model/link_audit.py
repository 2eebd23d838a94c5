"""Link audit entity."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import Field

from linkage.domain.model.common import DomainModel, utcnow
from linkage.domain.value import (
    AuditAction,
    ExternalIdentityId,
    LinkAuditId,
    LinkMethod,
    LinkSuggestionId,
    OrganizationId,
    UserId,
)


class LinkAudit(DomainModel):
    """Append-only record of a state-changing action on an identity."""

    id: LinkAuditId
    organization_id: OrganizationId
    external_identity_id: ExternalIdentityId
    suggestion_id: Optional[LinkSuggestionId] = None
    action: AuditAction
    user_id: Optional[UserId] = None  # Owner after the action
    previous_user_id: Optional[UserId] = None  # Owner before the action
    link_method: Optional[LinkMethod] = None
    confidence: Optional[Decimal] = None
    performed_by: Optional[str] = None
    reason: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utcnow)
