"""Identity settings domain service."""

import time
from typing import Any, Optional

import logfire
from pydantic import ValidationError as PydanticValidationError

from linkage.domain.error import ConfigurationError
from linkage.domain.model import IdentitySettings
from linkage.domain.model.common import utcnow
from linkage.domain.repository import IdentitySettingsRepository
from linkage.domain.value import OrganizationId

from .base import Service

# Fields the configuration service may change
MUTABLE_SETTINGS = frozenset(
    {
        "auto_link_on_email",
        "auto_link_threshold",
        "suggestion_threshold",
        "suggestion_expiry_days",
        "allow_user_self_link",
        "allow_user_self_unlink",
        "require_admin_approval",
        "audit_retention_days",
    }
)


class SettingsCache:
    """Per-organization settings cache with a fixed time-to-live.

    Application-scoped and shared by all requests. Threshold changes are
    rare, so a reader may observe stale settings for up to `ttl_seconds`.
    """

    def __init__(self, ttl_seconds: float) -> None:
        self.ttl_seconds = ttl_seconds
        self._entries: dict[OrganizationId, tuple[float, IdentitySettings]] = {}

    def get(self, organization_id: OrganizationId) -> Optional[IdentitySettings]:
        entry = self._entries.get(organization_id)
        if entry is None:
            return None
        loaded_at, settings = entry
        if time.monotonic() - loaded_at >= self.ttl_seconds:
            del self._entries[organization_id]
            return None
        return settings

    def put(self, settings: IdentitySettings) -> None:
        self._entries[settings.organization_id] = (time.monotonic(), settings)

    def invalidate(self, organization_id: OrganizationId) -> None:
        self._entries.pop(organization_id, None)


class IdentitySettingsService(Service):
    """Domain service for reading and validating identity settings."""

    def __init__(
        self,
        identity_settings_repository: IdentitySettingsRepository,
        settings_cache: SettingsCache,
    ) -> None:
        """Initialize identity settings service.

        Args:
            identity_settings_repository: Identity settings repository
            settings_cache: Shared settings cache
        """
        self.identity_settings_repository = identity_settings_repository
        self.settings_cache = settings_cache

    async def get_settings(self, organization_id: OrganizationId) -> IdentitySettings:
        """Get an organization's settings, falling back to defaults.

        Args:
            organization_id: Organization

        Returns:
            Stored settings, or defaults if the organization has none
        """
        cached = self.settings_cache.get(organization_id)
        if cached is not None:
            return cached

        with logfire.span(
            "identity_settings_service.get_settings",
            organization_id=str(organization_id),
        ):
            settings = await self.identity_settings_repository.find_by_organization(
                organization_id
            )
            if settings is None:
                logfire.debug(
                    "No identity settings, using defaults",
                    organization_id=str(organization_id),
                )
                settings = IdentitySettings.defaults(organization_id)

            self.settings_cache.put(settings)
            return settings

    async def update_settings(
        self, organization_id: OrganizationId, changes: dict[str, Any]
    ) -> IdentitySettings:
        """Apply a partial update to an organization's settings.

        Args:
            organization_id: Organization
            changes: Field values to change; None values are ignored

        Returns:
            The saved settings

        Raises:
            ConfigurationError: If a field is unknown or the resulting
                settings are invalid (e.g. suggestion threshold above the
                auto-link threshold)
        """
        with logfire.span(
            "identity_settings_service.update_settings",
            organization_id=str(organization_id),
            fields=sorted(changes),
        ):
            unknown = set(changes) - MUTABLE_SETTINGS
            if unknown:
                raise ConfigurationError(
                    f"Unknown identity settings: {', '.join(sorted(unknown))}"
                )

            current = await self.identity_settings_repository.find_by_organization(
                organization_id
            ) or IdentitySettings.defaults(organization_id)

            updates = {k: v for k, v in changes.items() if v is not None}
            try:
                updated = current.evolve(**updates, updated_at=utcnow())
            except PydanticValidationError as e:
                logfire.warn(
                    "Rejected identity settings",
                    organization_id=str(organization_id),
                    error=str(e),
                )
                raise ConfigurationError(str(e)) from e
            except ConfigurationError as e:
                logfire.warn(
                    "Rejected identity settings",
                    organization_id=str(organization_id),
                    error=str(e),
                )
                raise

            saved = await self.identity_settings_repository.save(updated)
            self.settings_cache.invalidate(organization_id)
            logfire.info(
                "Identity settings updated",
                organization_id=str(organization_id),
                auto_link_threshold=saved.auto_link_threshold,
                suggestion_threshold=saved.suggestion_threshold,
            )
            return saved
