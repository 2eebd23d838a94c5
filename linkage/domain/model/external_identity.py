"""External identity entity.

One row per (organization, provider, provider user id). Holds the synced
profile snapshot and the link to an internal user.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import Field, model_validator

from linkage.domain.error import InvalidStateError
from linkage.domain.model.common import DomainModel, utcnow
from linkage.domain.value import (
    ExternalIdentityId,
    ExternalProfile,
    IdentityProvider,
    LinkMethod,
    LinkStatus,
    OrganizationId,
    UserId,
)


class ExternalIdentity(DomainModel):
    """Provider-scoped user record, optionally linked to an internal user.

    Invariant: link_status is LINKED if and only if user_id is set. A row
    violating it cannot be constructed, so corrupt storage surfaces as an
    error instead of being silently tolerated.
    """

    id: ExternalIdentityId
    organization_id: OrganizationId
    provider: IdentityProvider
    provider_user_id: str
    provider_team_id: Optional[str] = None

    # Profile snapshot, refreshed on every sync
    email: Optional[str] = None
    display_name: Optional[str] = None
    real_name: Optional[str] = None
    avatar_url: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    # Link state
    user_id: Optional[UserId] = None
    link_status: LinkStatus = LinkStatus.UNLINKED
    link_method: Optional[LinkMethod] = None
    link_confidence: Optional[Decimal] = None
    linked_at: Optional[datetime] = None
    linked_by: Optional[str] = None

    last_synced_at: datetime = Field(default_factory=utcnow)
    sync_error: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @model_validator(mode="after")
    def check_link_invariant(self) -> "ExternalIdentity":
        """Reject any combination of link status and user that disagrees."""
        is_linked = self.link_status == LinkStatus.LINKED
        if is_linked != (self.user_id is not None):
            raise ValueError(
                f"Identity {self.id} has link_status={self.link_status.value} "
                f"but user_id={self.user_id}"
            )
        if not is_linked and self.link_method is not None:
            raise ValueError(f"Identity {self.id} is not linked but has a link method")
        return self

    @property
    def is_linked(self) -> bool:
        """Whether the identity is linked to an internal user."""
        return self.link_status == LinkStatus.LINKED

    @classmethod
    def from_profile(
        cls,
        identity_id: ExternalIdentityId,
        organization_id: OrganizationId,
        profile: ExternalProfile,
    ) -> "ExternalIdentity":
        """Create a new, unlinked identity from a first sighting."""
        return cls(
            id=identity_id,
            organization_id=organization_id,
            provider=profile.provider,
            provider_user_id=profile.provider_user_id,
            provider_team_id=profile.provider_team_id,
            email=profile.email,
            display_name=profile.display_name,
            real_name=profile.real_name,
            avatar_url=profile.avatar_url,
            metadata=dict(profile.metadata),
        )

    def refreshed_from(self, profile: ExternalProfile, now: datetime) -> "ExternalIdentity":
        """Return a copy with the profile snapshot refreshed.

        Fields missing from the new profile keep their stored value. Link
        state is never touched.
        """
        return self.model_copy(
            update={
                "email": profile.email or self.email,
                "display_name": profile.display_name or self.display_name,
                "real_name": profile.real_name or self.real_name,
                "avatar_url": profile.avatar_url or self.avatar_url,
                "provider_team_id": profile.provider_team_id or self.provider_team_id,
                "metadata": dict(profile.metadata) or self.metadata,
                "last_synced_at": now,
                "sync_error": None,
                "updated_at": now,
            }
        )

    def linked_to(
        self,
        user_id: UserId,
        method: LinkMethod,
        confidence: Decimal,
        actor: str,
        now: datetime,
    ) -> "ExternalIdentity":
        """Return a copy linked to `user_id`."""
        return self.evolve(
            user_id=user_id,
            link_status=LinkStatus.LINKED,
            link_method=method,
            link_confidence=confidence,
            linked_at=now,
            linked_by=actor,
            updated_at=now,
        )

    def unlinked(self, now: datetime) -> "ExternalIdentity":
        """Return a copy with every link field cleared."""
        return self.evolve(
            user_id=None,
            link_status=LinkStatus.UNLINKED,
            link_method=None,
            link_confidence=None,
            linked_at=None,
            linked_by=None,
            updated_at=now,
        )

    def with_status(self, status: LinkStatus, now: datetime) -> "ExternalIdentity":
        """Move between the two not-linked states (unlinked and suggested)."""
        if status == LinkStatus.LINKED or self.is_linked:
            raise InvalidStateError(
                f"Identity {self.id} cannot move to {status.value} via with_status"
            )
        return self.evolve(link_status=status, updated_at=now)
