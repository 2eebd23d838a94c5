"""Mappers for converting between database rows and domain models.

Since we're using Pydantic domain models (immutable), we use manual mapping
instead of SQLAlchemy's classical imperative mapping.
"""

from decimal import Decimal
from typing import Any, Dict, Optional
from uuid import UUID

from linkage.domain.model import (
    ExternalIdentity,
    IdentitySettings,
    LinkAudit,
    LinkSuggestion,
    Member,
)
from linkage.domain.value import (
    AuditAction,
    ExternalIdentityId,
    IdentityProvider,
    LinkAuditId,
    LinkMethod,
    LinkStatus,
    LinkSuggestionId,
    MatchMethod,
    OrganizationId,
    SuggestionStatus,
    UserId,
)


def _uuid(value: Any) -> Optional[UUID]:
    """Coerce a driver value to UUID, passing None through."""
    if value is None:
        return None
    return value if isinstance(value, UUID) else UUID(str(value))


def _decimal(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    return value if isinstance(value, Decimal) else Decimal(str(value))


def row_to_member(row: Dict[str, Any]) -> Member:
    """Convert database row to Member domain model."""
    return Member(
        user_id=UserId(_uuid(row["user_id"])),
        organization_id=OrganizationId(_uuid(row["organization_id"])),
        email=row.get("email"),
        display_name=row.get("display_name"),
    )


def member_to_dict(member: Member) -> Dict[str, Any]:
    """Convert Member domain model to database dict."""
    return member.model_dump()


def row_to_external_identity(row: Dict[str, Any]) -> ExternalIdentity:
    """Convert database row to ExternalIdentity domain model.

    Args:
        row: Database row as dict

    Returns:
        ExternalIdentity domain model
    """
    user_id = _uuid(row.get("user_id"))
    return ExternalIdentity(
        id=ExternalIdentityId(_uuid(row["id"])),
        organization_id=OrganizationId(_uuid(row["organization_id"])),
        provider=IdentityProvider(row["provider"]),
        provider_user_id=row["provider_user_id"],
        provider_team_id=row.get("provider_team_id"),
        email=row.get("email"),
        display_name=row.get("display_name"),
        real_name=row.get("real_name"),
        avatar_url=row.get("avatar_url"),
        metadata=row.get("metadata") or {},
        user_id=UserId(user_id) if user_id else None,
        link_status=LinkStatus(row["link_status"]),
        link_method=LinkMethod(row["link_method"]) if row.get("link_method") else None,
        link_confidence=_decimal(row.get("link_confidence")),
        linked_at=row.get("linked_at"),
        linked_by=row.get("linked_by"),
        last_synced_at=row["last_synced_at"],
        sync_error=row.get("sync_error"),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def external_identity_to_dict(identity: ExternalIdentity) -> Dict[str, Any]:
    """Convert ExternalIdentity domain model to database dict.

    Args:
        identity: ExternalIdentity domain model

    Returns:
        Dict suitable for database insertion/update
    """
    data = identity.model_dump()
    data["provider"] = identity.provider.value
    data["link_status"] = identity.link_status.value
    data["link_method"] = identity.link_method.value if identity.link_method else None
    return data


def row_to_link_suggestion(row: Dict[str, Any]) -> LinkSuggestion:
    """Convert database row to LinkSuggestion domain model.

    Args:
        row: Database row as dict

    Returns:
        LinkSuggestion domain model
    """
    return LinkSuggestion(
        id=LinkSuggestionId(_uuid(row["id"])),
        organization_id=OrganizationId(_uuid(row["organization_id"])),
        external_identity_id=ExternalIdentityId(_uuid(row["external_identity_id"])),
        suggested_user_id=UserId(_uuid(row["suggested_user_id"])),
        match_method=MatchMethod(row["match_method"]),
        confidence_score=float(row["confidence_score"]),
        match_details=row.get("match_details") or {},
        status=SuggestionStatus(row["status"]),
        reviewed_by=row.get("reviewed_by"),
        reviewed_at=row.get("reviewed_at"),
        rejection_reason=row.get("rejection_reason"),
        expires_at=row["expires_at"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def link_suggestion_to_dict(suggestion: LinkSuggestion) -> Dict[str, Any]:
    """Convert LinkSuggestion domain model to database dict."""
    data = suggestion.model_dump()
    data["match_method"] = suggestion.match_method.value
    data["status"] = suggestion.status.value
    return data


def row_to_link_audit(row: Dict[str, Any]) -> LinkAudit:
    """Convert database row to LinkAudit domain model."""
    suggestion_id = _uuid(row.get("suggestion_id"))
    user_id = _uuid(row.get("user_id"))
    previous_user_id = _uuid(row.get("previous_user_id"))
    return LinkAudit(
        id=LinkAuditId(_uuid(row["id"])),
        organization_id=OrganizationId(_uuid(row["organization_id"])),
        external_identity_id=ExternalIdentityId(_uuid(row["external_identity_id"])),
        suggestion_id=LinkSuggestionId(suggestion_id) if suggestion_id else None,
        action=AuditAction(row["action"]),
        user_id=UserId(user_id) if user_id else None,
        previous_user_id=UserId(previous_user_id) if previous_user_id else None,
        link_method=LinkMethod(row["link_method"]) if row.get("link_method") else None,
        confidence=_decimal(row.get("confidence")),
        performed_by=row.get("performed_by"),
        reason=row.get("reason"),
        metadata=row.get("metadata") or {},
        created_at=row["created_at"],
    )


def link_audit_to_dict(entry: LinkAudit) -> Dict[str, Any]:
    """Convert LinkAudit domain model to database dict."""
    data = entry.model_dump()
    data["action"] = entry.action.value
    data["link_method"] = entry.link_method.value if entry.link_method else None
    return data


def row_to_identity_settings(row: Dict[str, Any]) -> IdentitySettings:
    """Convert database row to IdentitySettings domain model."""
    return IdentitySettings(
        organization_id=OrganizationId(_uuid(row["organization_id"])),
        auto_link_on_email=row["auto_link_on_email"],
        auto_link_threshold=float(row["auto_link_threshold"]),
        suggestion_threshold=float(row["suggestion_threshold"]),
        suggestion_expiry_days=row["suggestion_expiry_days"],
        allow_user_self_link=row["allow_user_self_link"],
        allow_user_self_unlink=row["allow_user_self_unlink"],
        require_admin_approval=row["require_admin_approval"],
        audit_retention_days=row["audit_retention_days"],
        updated_at=row["updated_at"],
    )


def identity_settings_to_dict(settings: IdentitySettings) -> Dict[str, Any]:
    """Convert IdentitySettings domain model to database dict."""
    return settings.model_dump()
