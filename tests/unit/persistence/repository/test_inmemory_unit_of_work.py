"""Unit tests for the in-memory unit of work."""

import pytest

from linkage.domain.repository import (
    ExternalIdentityRepository,
    LinkAuditRepository,
    UnitOfWork,
)
from linkage.domain.service import AuditService
from linkage.domain.value import AuditAction, LinkStatus
from tests.conftest import NOW, make_profile, new_org_id
from tests.harness import create_env_fixture

# Unit test fixture - everything mocked, no database needed
unit_env = create_env_fixture()


class TestInMemoryUnitOfWork:
    """Tests for transaction rollback across repositories."""

    @pytest.mark.asyncio
    async def test_commit_keeps_writes(self, unit_env):
        uow = await unit_env.get(UnitOfWork)
        identity_repo = await unit_env.get(ExternalIdentityRepository)
        org_id = new_org_id()

        async with uow.transaction():
            identity = await identity_repo.upsert_profile(org_id, make_profile(), NOW)

        assert await identity_repo.find_by_id(identity.id) is not None

    @pytest.mark.asyncio
    async def test_error_rolls_back_every_repository(self, unit_env):
        """Writes to identities and audits vanish together on failure."""
        # Arrange
        uow = await unit_env.get(UnitOfWork)
        identity_repo = await unit_env.get(ExternalIdentityRepository)
        audit_repo = await unit_env.get(LinkAuditRepository)
        audit_service = await unit_env.get(AuditService)
        org_id = new_org_id()
        identity = await identity_repo.upsert_profile(org_id, make_profile(), NOW)

        # Act
        with pytest.raises(RuntimeError):
            async with uow.transaction():
                await identity_repo.save_if_status_in(
                    identity.with_status(LinkStatus.SUGGESTED, NOW),
                    {LinkStatus.UNLINKED},
                )
                await audit_service.record(
                    identity, AuditAction.SUGGESTION_CREATED, "system", now=NOW
                )
                raise RuntimeError("boom")

        # Assert
        stored = await identity_repo.find_by_id(identity.id)
        assert stored.link_status == LinkStatus.UNLINKED
        assert await audit_repo.find_by_identity(identity.id) == []


class TestCompareAndSet:
    """Tests for save_if_status_in."""

    @pytest.mark.asyncio
    async def test_rejects_unexpected_status(self, unit_env):
        identity_repo = await unit_env.get(ExternalIdentityRepository)
        identity = await identity_repo.upsert_profile(
            new_org_id(), make_profile(), NOW
        )

        saved = await identity_repo.save_if_status_in(
            identity.with_status(LinkStatus.SUGGESTED, NOW), {LinkStatus.SUGGESTED}
        )

        assert saved is False
        stored = await identity_repo.find_by_id(identity.id)
        assert stored.link_status == LinkStatus.UNLINKED
