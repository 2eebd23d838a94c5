"""Organization member projection."""

from typing import Optional

from linkage.domain.model.common import DomainModel
from linkage.domain.value import OrganizationId, UserId


class Member(DomainModel):
    """Internal user as seen by the matcher.

    Read-only view over the surrounding system's users and memberships.
    """

    user_id: UserId
    organization_id: OrganizationId
    email: Optional[str] = None
    display_name: Optional[str] = None

    @property
    def normalized_email(self) -> Optional[str]:
        """Lower-cased, trimmed email used for exact matching."""
        return self.email.strip().lower() if self.email else None
