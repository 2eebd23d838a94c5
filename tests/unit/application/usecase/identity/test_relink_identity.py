"""Unit tests for link, unlink and relink use cases."""

import pytest

from linkage.application.usecase.identity import (
    GetIdentityHistoryRequest,
    GetIdentityHistoryUseCase,
    LinkIdentityRequest,
    LinkIdentityUseCase,
    RelinkIdentityRequest,
    RelinkIdentityUseCase,
    UnlinkIdentityRequest,
    UnlinkIdentityUseCase,
)
from linkage.domain.error import NotFoundError, ValidationError
from linkage.domain.repository import ExternalIdentityRepository, MemberRepository
from linkage.domain.value import AuditAction, LinkMethod, LinkStatus
from tests.conftest import NOW, add_member, make_profile, new_org_id
from tests.harness import create_env_fixture

# Unit test fixture
unit_env = create_env_fixture()


async def _seed(unit_env):
    member_repo = await unit_env.get(MemberRepository)
    identity_repo = await unit_env.get(ExternalIdentityRepository)
    org_id = new_org_id()
    old_owner = await add_member(member_repo, org_id, "John Smith")
    new_owner = await add_member(member_repo, org_id, "Jane Doe")
    identity = await identity_repo.upsert_profile(
        org_id, make_profile(display_name="Someone"), NOW
    )
    return identity, old_owner, new_owner


class TestLinkAndUnlink:
    """Tests for LinkIdentityUseCase and UnlinkIdentityUseCase."""

    @pytest.mark.asyncio
    async def test_link_then_unlink(self, unit_env):
        link_use_case = await unit_env.get(LinkIdentityUseCase)
        unlink_use_case = await unit_env.get(UnlinkIdentityUseCase)
        identity, owner, _ = await _seed(unit_env)

        linked = await link_use_case.execute(
            LinkIdentityRequest(
                identity_id=str(identity.id), user_id=str(owner.user_id), actor="admin-1"
            )
        )
        unlinked = await unlink_use_case.execute(
            UnlinkIdentityRequest(identity_id=str(identity.id), actor="admin-1")
        )

        assert linked.identity.link_status == LinkStatus.LINKED
        assert linked.identity.link_method == LinkMethod.MANUAL
        assert linked.identity.link_confidence == 1.0
        assert unlinked.identity.link_status == LinkStatus.UNLINKED
        assert unlinked.previous_user_id == str(owner.user_id)


class TestRelinkIdentityUseCase:
    """Tests for RelinkIdentityUseCase."""

    @pytest.mark.asyncio
    async def test_relink_records_history(self, unit_env):
        """Relink leaves an unlink and a link entry in the history."""
        # Arrange
        link_use_case = await unit_env.get(LinkIdentityUseCase)
        relink_use_case = await unit_env.get(RelinkIdentityUseCase)
        history_use_case = await unit_env.get(GetIdentityHistoryUseCase)
        identity, old_owner, new_owner = await _seed(unit_env)
        await link_use_case.execute(
            LinkIdentityRequest(
                identity_id=str(identity.id),
                user_id=str(old_owner.user_id),
                actor="admin-1",
            )
        )

        # Act
        response = await relink_use_case.execute(
            RelinkIdentityRequest(
                identity_id=str(identity.id),
                new_user_id=str(new_owner.user_id),
                actor="admin-1",
                reason="Account belongs to Jane",
            )
        )

        # Assert
        assert response.identity.user_id == str(new_owner.user_id)
        assert response.identity.link_method == LinkMethod.ADMIN

        history = await history_use_case.execute(
            GetIdentityHistoryRequest(identity_id=str(identity.id))
        )
        assert [entry.action for entry in history.entries] == [
            AuditAction.LINKED,
            AuditAction.UNLINKED,
            AuditAction.LINKED,
        ]

    @pytest.mark.asyncio
    async def test_relink_without_reason_changes_nothing(self, unit_env):
        link_use_case = await unit_env.get(LinkIdentityUseCase)
        relink_use_case = await unit_env.get(RelinkIdentityUseCase)
        identity_repo = await unit_env.get(ExternalIdentityRepository)
        identity, old_owner, new_owner = await _seed(unit_env)
        await link_use_case.execute(
            LinkIdentityRequest(
                identity_id=str(identity.id),
                user_id=str(old_owner.user_id),
                actor="admin-1",
            )
        )

        with pytest.raises(ValidationError):
            await relink_use_case.execute(
                RelinkIdentityRequest(
                    identity_id=str(identity.id),
                    new_user_id=str(new_owner.user_id),
                    actor="admin-1",
                )
            )

        stored = await identity_repo.find_by_id(identity.id)
        assert stored.user_id == old_owner.user_id

    @pytest.mark.asyncio
    async def test_history_of_unknown_identity(self, unit_env):
        history_use_case = await unit_env.get(GetIdentityHistoryUseCase)

        with pytest.raises(NotFoundError):
            await history_use_case.execute(
                GetIdentityHistoryRequest(
                    identity_id="00000000-0000-0000-0000-000000000001"
                )
            )
