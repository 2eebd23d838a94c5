"""Unit tests for LinkService."""

from decimal import Decimal
from uuid import uuid4

import pytest

from linkage.domain.error import InvalidStateError, NotFoundError, ValidationError
from linkage.domain.repository import (
    ExternalIdentityRepository,
    LinkAuditRepository,
    LinkSuggestionRepository,
    MemberRepository,
)
from linkage.domain.service import LinkService, ResolutionService
from linkage.domain.value import (
    SYSTEM_ACTOR,
    AuditAction,
    ExternalIdentityId,
    LinkMethod,
    LinkStatus,
    SuggestionStatus,
    UserId,
)
from tests.conftest import NOW, add_member, make_profile, new_org_id
from tests.harness import create_env_fixture

# Unit test fixture - everything mocked, no database needed
unit_env = create_env_fixture()


async def _unlinked_identity(unit_env, org_id, display_name="Nobody Known"):
    repo = await unit_env.get(ExternalIdentityRepository)
    return await repo.upsert_profile(
        org_id, make_profile(provider_user_id=str(uuid4()), display_name=display_name), NOW
    )


class TestLink:
    """Tests for link method."""

    @pytest.mark.asyncio
    async def test_link_sets_link_fields_and_audits(self, unit_env):
        """Linking records method, confidence, actor and an audit entry."""
        # Arrange
        link_service = await unit_env.get(LinkService)
        member_repo = await unit_env.get(MemberRepository)
        audit_repo = await unit_env.get(LinkAuditRepository)
        org_id = new_org_id()
        member = await add_member(member_repo, org_id, "John Smith")
        identity = await _unlinked_identity(unit_env, org_id)

        # Act
        linked = await link_service.link(
            identity.id, member.user_id, LinkMethod.MANUAL, "admin-1", reason="Known", now=NOW
        )

        # Assert
        assert linked.link_status == LinkStatus.LINKED
        assert linked.user_id == member.user_id
        assert linked.link_method == LinkMethod.MANUAL
        assert linked.link_confidence == Decimal("1.00")
        assert linked.linked_by == "admin-1"
        assert linked.linked_at == NOW

        history = await audit_repo.find_by_identity(identity.id)
        assert len(history) == 1
        assert history[0].action == AuditAction.LINKED
        assert history[0].user_id == member.user_id
        assert history[0].performed_by == "admin-1"
        assert history[0].reason == "Known"

    @pytest.mark.asyncio
    async def test_confidence_rounded_to_two_places(self, unit_env):
        link_service = await unit_env.get(LinkService)
        member_repo = await unit_env.get(MemberRepository)
        org_id = new_org_id()
        member = await add_member(member_repo, org_id, "John Smith")
        identity = await _unlinked_identity(unit_env, org_id)

        linked = await link_service.link(
            identity.id, member.user_id, LinkMethod.AUTO_FUZZY, SYSTEM_ACTOR, confidence=0.9474
        )

        assert linked.link_confidence == Decimal("0.95")

    @pytest.mark.asyncio
    async def test_link_to_non_member_raises(self, unit_env):
        """Users outside the identity's organization cannot be linked."""
        link_service = await unit_env.get(LinkService)
        member_repo = await unit_env.get(MemberRepository)
        org_id = new_org_id()
        outsider = await add_member(member_repo, new_org_id(), "John Smith")
        identity = await _unlinked_identity(unit_env, org_id)

        with pytest.raises(NotFoundError) as exc_info:
            await link_service.link(
                identity.id, outsider.user_id, LinkMethod.ADMIN, "admin-1"
            )
        assert exc_info.value.resource == "Member"

    @pytest.mark.asyncio
    async def test_link_missing_identity_raises(self, unit_env):
        link_service = await unit_env.get(LinkService)

        with pytest.raises(NotFoundError):
            await link_service.link(
                ExternalIdentityId(uuid4()), UserId(uuid4()), LinkMethod.ADMIN, "admin-1"
            )

    @pytest.mark.asyncio
    async def test_link_already_linked_raises(self, unit_env):
        """A linked identity must be unlinked or relinked, never re-linked."""
        link_service = await unit_env.get(LinkService)
        member_repo = await unit_env.get(MemberRepository)
        org_id = new_org_id()
        first = await add_member(member_repo, org_id, "John Smith")
        second = await add_member(member_repo, org_id, "Jane Doe")
        identity = await _unlinked_identity(unit_env, org_id)
        await link_service.link(identity.id, first.user_id, LinkMethod.ADMIN, "admin-1")

        with pytest.raises(InvalidStateError):
            await link_service.link(
                identity.id, second.user_id, LinkMethod.ADMIN, "admin-1"
            )

        current = await link_service.get_identity(identity.id)
        assert current.user_id == first.user_id

    @pytest.mark.asyncio
    async def test_link_if_unlinked_returns_none_when_linked(self, unit_env):
        link_service = await unit_env.get(LinkService)
        member_repo = await unit_env.get(MemberRepository)
        org_id = new_org_id()
        member = await add_member(member_repo, org_id, "John Smith")
        identity = await _unlinked_identity(unit_env, org_id)
        await link_service.link(identity.id, member.user_id, LinkMethod.ADMIN, "admin-1")

        result = await link_service.link_if_unlinked(
            identity.id, member.user_id, LinkMethod.AUTO_FUZZY, SYSTEM_ACTOR
        )

        assert result is None

    @pytest.mark.asyncio
    async def test_link_accepts_every_pending_suggestion(self, unit_env):
        """Pending suggestions are closed as accepted when the identity links."""
        # Arrange
        link_service = await unit_env.get(LinkService)
        resolution_service = await unit_env.get(ResolutionService)
        member_repo = await unit_env.get(MemberRepository)
        suggestion_repo = await unit_env.get(LinkSuggestionRepository)
        audit_repo = await unit_env.get(LinkAuditRepository)
        org_id = new_org_id()
        first = await add_member(member_repo, org_id, "John Smith")
        await add_member(member_repo, org_id, "John Smith")

        result = await resolution_service.resolve(
            make_profile(display_name="John Smith"), org_id, SYSTEM_ACTOR
        )

        # Act
        await link_service.link(
            result.external_identity_id, first.user_id, LinkMethod.ADMIN, "admin-1"
        )

        # Assert
        suggestions = await suggestion_repo.find_by_identity(result.external_identity_id)
        assert len(suggestions) == 2
        assert all(s.status == SuggestionStatus.ACCEPTED for s in suggestions)
        assert all(s.reviewed_by == "admin-1" for s in suggestions)

        latest = (await audit_repo.find_by_identity(result.external_identity_id))[0]
        assert latest.action == AuditAction.LINKED
        assert latest.metadata == {"accepted_suggestions": 2}


class TestUnlink:
    """Tests for unlink method."""

    @pytest.mark.asyncio
    async def test_unlink_clears_link_fields(self, unit_env):
        """Unlinking clears every link field and remembers the old owner."""
        link_service = await unit_env.get(LinkService)
        member_repo = await unit_env.get(MemberRepository)
        audit_repo = await unit_env.get(LinkAuditRepository)
        org_id = new_org_id()
        member = await add_member(member_repo, org_id, "John Smith")
        identity = await _unlinked_identity(unit_env, org_id)
        await link_service.link(identity.id, member.user_id, LinkMethod.ADMIN, "admin-1")

        unlinked = await link_service.unlink(identity.id, "admin-1", reason="Left company")

        assert unlinked.link_status == LinkStatus.UNLINKED
        assert unlinked.user_id is None
        assert unlinked.link_method is None
        assert unlinked.link_confidence is None
        assert unlinked.linked_at is None
        assert unlinked.linked_by is None

        latest = (await audit_repo.find_by_identity(identity.id))[0]
        assert latest.action == AuditAction.UNLINKED
        assert latest.previous_user_id == member.user_id
        assert latest.user_id is None
        assert latest.reason == "Left company"

    @pytest.mark.asyncio
    async def test_unlink_unlinked_identity_raises(self, unit_env):
        link_service = await unit_env.get(LinkService)
        identity = await _unlinked_identity(unit_env, new_org_id())

        with pytest.raises(InvalidStateError):
            await link_service.unlink(identity.id, "admin-1")


class TestRelink:
    """Tests for relink method."""

    @pytest.mark.asyncio
    async def test_relink_moves_identity_to_new_user(self, unit_env):
        """Relink unlinks, then links with method admin at full confidence."""
        # Arrange
        link_service = await unit_env.get(LinkService)
        member_repo = await unit_env.get(MemberRepository)
        audit_repo = await unit_env.get(LinkAuditRepository)
        org_id = new_org_id()
        old_owner = await add_member(member_repo, org_id, "John Smith")
        new_owner = await add_member(member_repo, org_id, "Jane Doe")
        identity = await _unlinked_identity(unit_env, org_id)
        await link_service.link(
            identity.id, old_owner.user_id, LinkMethod.AUTO_FUZZY, SYSTEM_ACTOR, now=NOW
        )

        # Act
        relinked = await link_service.relink(
            identity.id, new_owner.user_id, "admin-1", "Shared account handed over"
        )

        # Assert
        assert relinked.user_id == new_owner.user_id
        assert relinked.link_method == LinkMethod.ADMIN
        assert relinked.link_confidence == Decimal("1.00")

        history = await audit_repo.find_by_identity(identity.id)
        assert [entry.action for entry in history] == [
            AuditAction.LINKED,
            AuditAction.UNLINKED,
            AuditAction.LINKED,
        ]
        assert history[1].previous_user_id == old_owner.user_id
        assert history[1].reason == (
            "Re-linking to different user: Shared account handed over"
        )
        assert history[0].reason == "Shared account handed over"

    @pytest.mark.asyncio
    async def test_relink_unlinked_identity_just_links(self, unit_env):
        link_service = await unit_env.get(LinkService)
        member_repo = await unit_env.get(MemberRepository)
        org_id = new_org_id()
        member = await add_member(member_repo, org_id, "John Smith")
        identity = await _unlinked_identity(unit_env, org_id)

        relinked = await link_service.relink(
            identity.id, member.user_id, "admin-1", "Manual cleanup"
        )

        assert relinked.user_id == member.user_id

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reason", ["", "   "])
    async def test_relink_requires_reason(self, unit_env, reason):
        link_service = await unit_env.get(LinkService)
        identity = await _unlinked_identity(unit_env, new_org_id())

        with pytest.raises(ValidationError):
            await link_service.relink(identity.id, UserId(uuid4()), "admin-1", reason)

    @pytest.mark.asyncio
    async def test_relink_to_non_member_keeps_existing_link(self, unit_env):
        """A bad target fails before the current link is touched."""
        link_service = await unit_env.get(LinkService)
        member_repo = await unit_env.get(MemberRepository)
        org_id = new_org_id()
        owner = await add_member(member_repo, org_id, "John Smith")
        identity = await _unlinked_identity(unit_env, org_id)
        await link_service.link(identity.id, owner.user_id, LinkMethod.ADMIN, "admin-1")

        with pytest.raises(NotFoundError):
            await link_service.relink(
                identity.id, UserId(uuid4()), "admin-1", "Wrong person"
            )

        current = await link_service.get_identity(identity.id)
        assert current.user_id == owner.user_id
