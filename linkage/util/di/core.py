"""Core DI providers (non-mockable)."""

from dishka import Scope, provide
from pydantic import ValidationError

from linkage.config import IdentityConfig, Settings
from linkage.domain.service import NameMatcher, SettingsCache
from linkage.util.di.base import ProviderBase
from linkage.util.error import ConfigurationError


class ProdConfigProvider(ProviderBase):
    """Production config provider - concrete, no mocks needed.

    Settings are loaded from environment variables and .env file automatically.
    """

    @provide(scope=Scope.APP)
    def provide_settings(self) -> Settings:
        """Provide application settings from environment.

        Raises:
            ConfigurationError: If the environment holds invalid values
        """
        try:
            return Settings()
        except ValidationError as e:
            raise ConfigurationError(f"Invalid application settings: {e}") from e

    @provide(scope=Scope.APP)
    def provide_identity_config(self, settings: Settings) -> IdentityConfig:
        """Provide identity resolution config."""
        return settings.identity

    @provide(scope=Scope.APP)
    def provide_settings_cache(self, identity_config: IdentityConfig) -> SettingsCache:
        """Provide the organization settings cache, shared by all requests."""
        return SettingsCache(ttl_seconds=identity_config.settings_cache_ttl_seconds)

    @provide(scope=Scope.APP)
    def provide_name_matcher(self, identity_config: IdentityConfig) -> NameMatcher:
        """Provide the stateless name matcher."""
        return NameMatcher(free_mail_domains=identity_config.free_mail_domains)
