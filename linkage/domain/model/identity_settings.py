"""Per-organization identity settings."""

from datetime import datetime

from pydantic import Field, model_validator

from linkage.domain.error import ConfigurationError
from linkage.domain.model.common import DomainModel, utcnow
from linkage.domain.value import OrganizationId

DEFAULT_AUTO_LINK_THRESHOLD = 0.95
DEFAULT_SUGGESTION_THRESHOLD = 0.85
DEFAULT_SUGGESTION_EXPIRY_DAYS = 30
DEFAULT_AUDIT_RETENTION_DAYS = 365


def check_threshold_order(suggestion_threshold: float, auto_link_threshold: float) -> None:
    """Raise ConfigurationError unless suggestion <= auto-link threshold.

    Raises:
        ConfigurationError: If either threshold is outside [0, 1] or the
            suggestion threshold is above the auto-link threshold
    """
    for name, value in (
        ("auto_link_threshold", auto_link_threshold),
        ("suggestion_threshold", suggestion_threshold),
    ):
        if not 0.0 <= value <= 1.0:
            raise ConfigurationError(f"{name} must be between 0 and 1, got {value}")
    if suggestion_threshold > auto_link_threshold:
        raise ConfigurationError(
            f"suggestion_threshold ({suggestion_threshold}) must not exceed "
            f"auto_link_threshold ({auto_link_threshold})"
        )


class IdentitySettings(DomainModel):
    """Identity-linking configuration of one organization.

    Owned by the surrounding configuration service. Construction fails with
    ConfigurationError when thresholds are out of order, so an invalid
    configuration can never be saved or loaded.
    """

    organization_id: OrganizationId
    auto_link_on_email: bool = True
    auto_link_threshold: float = DEFAULT_AUTO_LINK_THRESHOLD
    suggestion_threshold: float = DEFAULT_SUGGESTION_THRESHOLD
    suggestion_expiry_days: int = DEFAULT_SUGGESTION_EXPIRY_DAYS
    allow_user_self_link: bool = True
    allow_user_self_unlink: bool = True
    require_admin_approval: bool = False
    audit_retention_days: int = DEFAULT_AUDIT_RETENTION_DAYS
    updated_at: datetime = Field(default_factory=utcnow)

    @model_validator(mode="after")
    def check_configuration(self) -> "IdentitySettings":
        """Enforce threshold ordering and positive day counts."""
        check_threshold_order(self.suggestion_threshold, self.auto_link_threshold)
        if self.suggestion_expiry_days < 1:
            raise ConfigurationError("suggestion_expiry_days must be at least 1")
        if self.audit_retention_days < 1:
            raise ConfigurationError("audit_retention_days must be at least 1")
        return self

    @classmethod
    def defaults(cls, organization_id: OrganizationId) -> "IdentitySettings":
        """Settings applied to organizations that never configured any."""
        return cls(organization_id=organization_id)
