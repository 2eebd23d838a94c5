"""Strongly typed identifiers for identity-linking entities.

Using NewType keeps an organization id from being passed where a user id
is expected, without any runtime cost.
"""

from typing import NewType
from uuid import UUID

# Entities owned by this engine
ExternalIdentityId = NewType("ExternalIdentityId", UUID)
LinkSuggestionId = NewType("LinkSuggestionId", UUID)
LinkAuditId = NewType("LinkAuditId", UUID)

# Entities owned by the surrounding system
OrganizationId = NewType("OrganizationId", UUID)
UserId = NewType("UserId", UUID)

# Acting principal: a user id rendered as text, or "system"
ActorId = NewType("ActorId", str)

SYSTEM_ACTOR = ActorId("system")
