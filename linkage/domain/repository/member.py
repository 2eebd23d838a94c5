"""Organization member repository interface."""

from abc import ABC, abstractmethod
from typing import Optional

from linkage.domain.model.member import Member
from linkage.domain.value import OrganizationId, UserId


class MemberRepository(ABC):
    """Read access to organization members.

    Members are owned by the surrounding system; `save` exists for seeding
    and tests.
    """

    @abstractmethod
    async def find_by_email(
        self, organization_id: OrganizationId, email: str
    ) -> list[Member]:
        """Find members whose email equals `email`, ignoring case.

        Args:
            organization_id: Organization scope
            email: Email address to look up

        Returns:
            Matching members (normally zero or one)
        """
        pass

    @abstractmethod
    async def find_by_user_id(
        self, organization_id: OrganizationId, user_id: UserId
    ) -> Optional[Member]:
        """Get a member by user id, if the user belongs to the organization."""
        pass

    @abstractmethod
    async def find_all_by_organization(
        self, organization_id: OrganizationId
    ) -> list[Member]:
        """List every member of an organization, ordered by user id."""
        pass

    @abstractmethod
    async def save(self, member: Member) -> Member:
        """Create or replace a member projection."""
        pass
