"""Domain value objects for identity linking.

Value objects are immutable and defined by their values, not identity.
They encapsulate the vocabulary shared by the matcher, the resolution
policy and the suggestion lifecycle.
"""

from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any

from pydantic import Field, computed_field, field_validator

from linkage.domain.value.common import ValueObject
from linkage.domain.value.identifiers import ExternalIdentityId, UserId


class IdentityProvider(str, Enum):
    """External collaboration providers that report identities."""

    SLACK = "slack"
    GOOGLE = "google"
    NOTION = "notion"


class LinkStatus(str, Enum):
    """Link state of an external identity."""

    UNLINKED = "unlinked"
    LINKED = "linked"
    SUGGESTED = "suggested"


class LinkMethod(str, Enum):
    """How an external identity came to be linked."""

    AUTO_EMAIL = "auto_email"
    AUTO_FUZZY = "auto_fuzzy"
    MANUAL = "manual"
    ADMIN = "admin"
    MIGRATION = "migration"


class SuggestionStatus(str, Enum):
    """Status of a link suggestion.

    Only PENDING suggestions can change state.
    """

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"

    @property
    def is_terminal(self) -> bool:
        """Whether the suggestion has been resolved one way or another."""
        return self is not SuggestionStatus.PENDING


class AuditAction(str, Enum):
    """State-changing actions recorded in the audit log."""

    LINKED = "linked"
    UNLINKED = "unlinked"
    REJECTED = "rejected"
    SUGGESTION_CREATED = "suggestion_created"
    SUGGESTION_EXPIRED = "suggestion_expired"


class MatchMethod(str, Enum):
    """Name matcher stage that produced a result."""

    EXACT = "exact"
    NORMALIZED = "normalized"
    SIMILARITY = "similarity"
    TOKEN = "token"
    NONE = "none"


class ResolutionAction(str, Enum):
    """Outcome of resolving an external profile."""

    ALREADY_LINKED = "already_linked"
    AUTO_LINKED = "auto_linked"
    SUGGESTED = "suggested"
    NO_MATCH = "no_match"


# Fixed-point precision for stored link confidence
CONFIDENCE_QUANTUM = Decimal("0.01")


def to_link_confidence(value: float | Decimal) -> Decimal:
    """Round a confidence score to the two decimal places stored on a link.

    Args:
        value: Confidence in [0, 1]

    Returns:
        Decimal with exactly two decimal places
    """
    return Decimal(str(value)).quantize(CONFIDENCE_QUANTUM, rounding=ROUND_HALF_UP)


class ExternalProfile(ValueObject):
    """Canonical profile produced by a provider profile extractor.

    Optional fields are None when the provider did not report them.
    """

    provider: IdentityProvider
    provider_user_id: str = Field(min_length=1, max_length=255)
    provider_team_id: str | None = None
    email: str | None = None
    display_name: str | None = None
    real_name: str | None = None
    avatar_url: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("provider_user_id")
    @classmethod
    def validate_provider_user_id(cls, v: str) -> str:
        """Reject ids made only of whitespace."""
        if not v.strip():
            raise ValueError("Provider user id must not be blank")
        return v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str | None) -> str | None:
        """Trim email and treat empty strings as missing."""
        if v is None:
            return None
        v = v.strip()
        return v or None

    @property
    def matching_name(self) -> str | None:
        """Name used for fuzzy matching: display name, else real name."""
        return self.display_name or self.real_name

    @property
    def is_bot(self) -> bool:
        """Whether the provider flagged this account as a bot or restricted."""
        return (
            self.metadata.get("is_bot") is True
            or self.metadata.get("type") == "bot"
            or self.metadata.get("is_restricted") is True
            or self.metadata.get("is_ultra_restricted") is True
        )


class MatchResult(ValueObject):
    """Result of comparing two names.

    `score` is the raw coefficient of the stage that fired (or the best raw
    coefficient when nothing qualified); `confidence` is what thresholds are
    compared against.
    """

    score: float = Field(ge=0.0, le=1.0)
    method: MatchMethod
    confidence: float = Field(ge=0.0, le=1.0)
    domain_boosted: bool = False
    details: dict[str, Any] = Field(default_factory=dict)


class LinkCandidate(ValueObject):
    """Organization member proposed as the owner of an external identity."""

    user_id: UserId
    email: str | None = None
    display_name: str | None = None
    match_result: MatchResult

    @property
    def confidence(self) -> float:
        """Shortcut for the candidate's match confidence."""
        return self.match_result.confidence


class ResolutionOptions(ValueObject):
    """Per-call overrides for identity resolution.

    Threshold overrides replace the organization's settings for this call
    only; skip_auto_link turns every would-be automatic link into a
    suggestion.
    """

    auto_link_threshold: float | None = Field(default=None, ge=0.0, le=1.0)
    suggestion_threshold: float | None = Field(default=None, ge=0.0, le=1.0)
    skip_auto_link: bool = False


class ResolutionResult(ValueObject):
    """Outcome of resolving one external profile."""

    action: ResolutionAction
    external_identity_id: ExternalIdentityId
    linked_user_id: UserId | None = None
    suggestions: list[LinkCandidate] = Field(default_factory=list)
    confidence: float | None = None
    method: LinkMethod | None = None


class IdentityStats(ValueObject):
    """Link coverage of an organization's external identities."""

    total: int = 0
    linked: int = 0
    unlinked: int = 0
    suggested: int = 0
    by_provider: dict[IdentityProvider, int] = Field(default_factory=dict)
    pending_suggestions: int = 0


class SuggestionStats(ValueObject):
    """Suggestion counts of an organization per status."""

    pending: int = 0
    accepted: int = 0
    rejected: int = 0
    expired: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total(self) -> int:
        """Suggestions in any status."""
        return self.pending + self.accepted + self.rejected + self.expired
