"""Unit tests for IdentitySettingsService."""

import pytest

from linkage.domain.error import ConfigurationError
from linkage.domain.model.identity_settings import (
    DEFAULT_AUTO_LINK_THRESHOLD,
    DEFAULT_SUGGESTION_THRESHOLD,
)
from linkage.domain.repository import IdentitySettingsRepository
from linkage.domain.service import IdentitySettingsService, SettingsCache
from tests.conftest import new_org_id
from tests.harness import create_env_fixture

# Unit test fixture - everything mocked, no database needed
unit_env = create_env_fixture()


class TestGetSettings:
    """Tests for get_settings method."""

    @pytest.mark.asyncio
    async def test_defaults_for_unconfigured_organization(self, unit_env):
        """Organizations without stored settings get the defaults."""
        service = await unit_env.get(IdentitySettingsService)
        org_id = new_org_id()

        settings = await service.get_settings(org_id)

        assert settings.organization_id == org_id
        assert settings.auto_link_on_email is True
        assert settings.auto_link_threshold == DEFAULT_AUTO_LINK_THRESHOLD
        assert settings.suggestion_threshold == DEFAULT_SUGGESTION_THRESHOLD
        assert settings.suggestion_expiry_days == 30

    @pytest.mark.asyncio
    async def test_settings_cached(self, unit_env):
        """A second read within the TTL does not hit the repository."""
        service = await unit_env.get(IdentitySettingsService)
        repo = await unit_env.get(IdentitySettingsRepository)
        org_id = new_org_id()

        first = await service.get_settings(org_id)
        await repo.save(first.evolve(auto_link_threshold=0.99))

        second = await service.get_settings(org_id)

        assert second.auto_link_threshold == DEFAULT_AUTO_LINK_THRESHOLD


class TestUpdateSettings:
    """Tests for update_settings method."""

    @pytest.mark.asyncio
    async def test_partial_update_saved_and_cache_invalidated(self, unit_env):
        service = await unit_env.get(IdentitySettingsService)
        org_id = new_org_id()
        await service.get_settings(org_id)

        saved = await service.update_settings(
            org_id, {"auto_link_threshold": 0.97, "suggestion_threshold": None}
        )

        assert saved.auto_link_threshold == 0.97
        assert saved.suggestion_threshold == DEFAULT_SUGGESTION_THRESHOLD
        assert (await service.get_settings(org_id)).auto_link_threshold == 0.97

    @pytest.mark.asyncio
    async def test_out_of_order_thresholds_rejected(self, unit_env):
        """Suggestion threshold may never exceed the auto-link threshold."""
        service = await unit_env.get(IdentitySettingsService)
        repo = await unit_env.get(IdentitySettingsRepository)
        org_id = new_org_id()

        with pytest.raises(ConfigurationError):
            await service.update_settings(
                org_id, {"auto_link_threshold": 0.8, "suggestion_threshold": 0.9}
            )

        assert await repo.find_by_organization(org_id) is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "changes",
        [
            {"auto_link_threshold": 1.5},
            {"suggestion_expiry_days": 0},
            {"not_a_setting": True},
        ],
    )
    async def test_invalid_values_rejected(self, unit_env, changes):
        service = await unit_env.get(IdentitySettingsService)

        with pytest.raises(ConfigurationError):
            await service.update_settings(new_org_id(), changes)


class TestSettingsCache:
    """Tests for SettingsCache expiry."""

    @pytest.mark.asyncio
    async def test_zero_ttl_never_caches(self, unit_env):
        service = await unit_env.get(IdentitySettingsService)
        org_id = new_org_id()
        settings = await service.get_settings(org_id)

        cache = SettingsCache(ttl_seconds=0)
        cache.put(settings)

        assert cache.get(org_id) is None
