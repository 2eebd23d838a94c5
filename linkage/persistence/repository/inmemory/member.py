"""In-memory member repository for testing."""

from typing import Optional

from linkage.domain.model import Member
from linkage.domain.repository import MemberRepository
from linkage.domain.value import OrganizationId, UserId

from .store import InMemoryStore


class InMemoryMemberRepository(MemberRepository):
    """In-memory implementation of MemberRepository for testing."""

    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def find_by_email(
        self, organization_id: OrganizationId, email: str
    ) -> list[Member]:
        """Find members by email, ignoring case."""
        wanted = email.strip().lower()
        return [
            m
            for m in await self.find_all_by_organization(organization_id)
            if m.normalized_email == wanted
        ]

    async def find_by_user_id(
        self, organization_id: OrganizationId, user_id: UserId
    ) -> Optional[Member]:
        """Get a member by user id."""
        return self.store.members.get((organization_id, user_id))

    async def find_all_by_organization(
        self, organization_id: OrganizationId
    ) -> list[Member]:
        """List members of an organization, ordered by user id."""
        members = [
            m for m in self.store.members.values() if m.organization_id == organization_id
        ]
        members.sort(key=lambda m: str(m.user_id))
        return members

    async def save(self, member: Member) -> Member:
        """Create or replace a member."""
        self.store.members[(member.organization_id, member.user_id)] = member
        return member
