"""Shared in-memory storage for testing."""

from dataclasses import dataclass, field
from typing import Any

from linkage.domain.model import (
    ExternalIdentity,
    IdentitySettings,
    LinkAudit,
    LinkSuggestion,
    Member,
)
from linkage.domain.value import (
    ExternalIdentityId,
    LinkSuggestionId,
    OrganizationId,
    UserId,
)


@dataclass
class InMemoryStore:
    """Tables shared by the in-memory repositories of one scope.

    Entities are immutable, so a shallow copy of every table is a complete
    snapshot.
    """

    identities: dict[ExternalIdentityId, ExternalIdentity] = field(default_factory=dict)
    suggestions: dict[LinkSuggestionId, LinkSuggestion] = field(default_factory=dict)
    audits: list[LinkAudit] = field(default_factory=list)
    settings: dict[OrganizationId, IdentitySettings] = field(default_factory=dict)
    members: dict[tuple[OrganizationId, UserId], Member] = field(default_factory=dict)

    def snapshot(self) -> dict[str, Any]:
        return {
            "identities": dict(self.identities),
            "suggestions": dict(self.suggestions),
            "audits": list(self.audits),
            "settings": dict(self.settings),
            "members": dict(self.members),
        }

    def restore(self, snapshot: dict[str, Any]) -> None:
        self.identities = snapshot["identities"]
        self.suggestions = snapshot["suggestions"]
        self.audits = snapshot["audits"]
        self.settings = snapshot["settings"]
        self.members = snapshot["members"]
