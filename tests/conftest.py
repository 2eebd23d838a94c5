"""Test configuration and helpers."""

from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

from linkage.domain.model import Member
from linkage.domain.repository import MemberRepository
from linkage.domain.value import (
    ExternalProfile,
    IdentityProvider,
    OrganizationId,
    UserId,
)

# Fixed reference time for tests that depend on expiry arithmetic
NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def new_org_id() -> OrganizationId:
    """Fresh organization id."""
    return OrganizationId(uuid4())


async def add_member(
    member_repo: MemberRepository,
    organization_id: OrganizationId,
    display_name: Optional[str] = None,
    email: Optional[str] = None,
) -> Member:
    """Seed an organization member and return it."""
    return await member_repo.save(
        Member(
            user_id=UserId(uuid4()),
            organization_id=organization_id,
            email=email,
            display_name=display_name,
        )
    )


def make_profile(
    provider_user_id: str = "U001",
    display_name: Optional[str] = None,
    email: Optional[str] = None,
    provider: IdentityProvider = IdentityProvider.SLACK,
    **metadata: Any,
) -> ExternalProfile:
    """Build a normalized profile the way a provider extractor would."""
    return ExternalProfile(
        provider=provider,
        provider_user_id=provider_user_id,
        provider_team_id="T001",
        email=email,
        display_name=display_name,
        metadata=metadata,
    )
