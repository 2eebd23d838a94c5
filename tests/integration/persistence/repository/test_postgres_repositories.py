"""Integration tests for the PostgreSQL repositories.

These tests verify upsert and compare-and-set behavior against a real
database. They need a migrated postgres reachable through DATABASE__URL.
"""

import os
from datetime import timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from linkage.domain.model import LinkSuggestion
from linkage.domain.repository import (
    ExternalIdentityRepository,
    LinkAuditRepository,
    LinkSuggestionRepository,
    MemberRepository,
)
from linkage.domain.service import LinkService, ResolutionService, SuggestionService
from linkage.domain.value import (
    SYSTEM_ACTOR,
    AuditAction,
    LinkMethod,
    LinkStatus,
    LinkSuggestionId,
    MatchMethod,
    ResolutionAction,
    SuggestionStatus,
)
from tests.conftest import NOW, add_member, make_profile, new_org_id
from tests.harness import create_env_fixture

pytestmark = pytest.mark.skipif(
    not os.environ.get("DATABASE__URL"), reason="DATABASE__URL not set"
)

# Integration test fixture - real persistence, assumes postgres running
integration_env = create_env_fixture(unmock={"persistence"})


class TestExternalIdentityRepositoryIntegration:
    """Integration tests for PostgresExternalIdentityRepository."""

    @pytest.mark.asyncio
    async def test_upsert_profile_is_idempotent(self, integration_env):
        """Syncing the same provider user twice yields one row."""
        repo = await integration_env.get(ExternalIdentityRepository)
        org_id = new_org_id()
        profile = make_profile(provider_user_id="U1", display_name="A", email="a@x.io")

        first = await repo.upsert_profile(org_id, profile, NOW)
        second = await repo.upsert_profile(
            org_id,
            make_profile(provider_user_id="U1", display_name="B"),
            NOW + timedelta(minutes=1),
        )

        assert second.id == first.id
        assert second.display_name == "B"
        assert second.email == "a@x.io"
        assert second.last_synced_at == NOW + timedelta(minutes=1)

    @pytest.mark.asyncio
    async def test_compare_and_set(self, integration_env):
        """A write with a stale expected status is refused."""
        repo = await integration_env.get(ExternalIdentityRepository)
        member_repo = await integration_env.get(MemberRepository)
        org_id = new_org_id()
        member = await add_member(member_repo, org_id, "Jane")
        identity = await repo.upsert_profile(org_id, make_profile(), NOW)
        linked = identity.linked_to(
            member.user_id, LinkMethod.ADMIN, Decimal("1.00"), "admin", NOW
        )

        assert await repo.save_if_status_in(linked, {LinkStatus.UNLINKED}) is True
        assert await repo.save_if_status_in(linked, {LinkStatus.UNLINKED}) is False

        stored = await repo.find_by_id(identity.id)
        assert stored.user_id == member.user_id
        assert stored.link_confidence == Decimal("1.00")


class TestLinkSuggestionRepositoryIntegration:
    """Integration tests for PostgresLinkSuggestionRepository."""

    @pytest.mark.asyncio
    async def test_upsert_blocked_by_rejection(self, integration_env):
        identity_repo = await integration_env.get(ExternalIdentityRepository)
        suggestion_repo = await integration_env.get(LinkSuggestionRepository)
        member_repo = await integration_env.get(MemberRepository)
        org_id = new_org_id()
        member = await add_member(member_repo, org_id, "Jane")
        identity = await identity_repo.upsert_profile(org_id, make_profile(), NOW)

        suggestion = LinkSuggestion(
            id=LinkSuggestionId(uuid4()),
            organization_id=org_id,
            external_identity_id=identity.id,
            suggested_user_id=member.user_id,
            match_method=MatchMethod.SIMILARITY,
            confidence_score=0.9,
            expires_at=NOW + timedelta(days=30),
            created_at=NOW,
            updated_at=NOW,
        )
        stored = await suggestion_repo.upsert(suggestion)
        rejected = stored.evolve(status=SuggestionStatus.REJECTED, reviewed_by="admin")
        assert await suggestion_repo.save_if_status_in(
            rejected, {SuggestionStatus.PENDING}
        )
        assert not await suggestion_repo.save_if_status_in(
            rejected, {SuggestionStatus.PENDING}
        )

        again = await suggestion_repo.upsert(
            suggestion.evolve(id=LinkSuggestionId(uuid4()), confidence_score=0.95)
        )

        assert again is None
        rows = await suggestion_repo.find_by_identity(identity.id)
        assert len(rows) == 1
        assert rows[0].status == SuggestionStatus.REJECTED


class TestResolutionIntegration:
    """End-to-end resolution against PostgreSQL."""

    @pytest.mark.asyncio
    async def test_email_auto_link(self, integration_env):
        service = await integration_env.get(ResolutionService)
        member_repo = await integration_env.get(MemberRepository)
        org_id = new_org_id()
        member = await add_member(member_repo, org_id, "Jane", "jane@acme.com")

        result = await service.resolve(
            make_profile(email="jane@acme.com"), org_id, SYSTEM_ACTOR
        )

        assert result.action == ResolutionAction.AUTO_LINKED
        assert result.linked_user_id == member.user_id


class TestLinkAuditIntegration:
    """Audit history against PostgreSQL."""

    @pytest.mark.asyncio
    async def test_relink_history_is_newest_first(self, integration_env):
        """Entries written at the same instant keep their insertion order."""
        link_service = await integration_env.get(LinkService)
        identity_repo = await integration_env.get(ExternalIdentityRepository)
        audit_repo = await integration_env.get(LinkAuditRepository)
        member_repo = await integration_env.get(MemberRepository)
        org_id = new_org_id()
        first = await add_member(member_repo, org_id, "Jane")
        second = await add_member(member_repo, org_id, "Janet")
        identity = await identity_repo.upsert_profile(org_id, make_profile(), NOW)
        await link_service.link(
            identity.id, first.user_id, LinkMethod.ADMIN, "admin", now=NOW
        )

        for _ in range(5):
            current = await identity_repo.find_by_id(identity.id)
            target = second if current.user_id == first.user_id else first
            await link_service.relink(
                identity.id, target.user_id, "admin", "Wrong person", now=NOW
            )

        history = await audit_repo.find_by_identity(identity.id)
        assert [entry.action for entry in history] == [
            AuditAction.LINKED,
            AuditAction.UNLINKED,
        ] * 5 + [AuditAction.LINKED]
        stored = await identity_repo.find_by_id(identity.id)
        assert history[0].user_id == stored.user_id

    @pytest.mark.asyncio
    async def test_suggestion_cleanup_leaves_audit_untouched(self, integration_env):
        """Deleting a decided suggestion keeps the audit's reference to it."""
        resolution_service = await integration_env.get(ResolutionService)
        suggestion_service = await integration_env.get(SuggestionService)
        audit_repo = await integration_env.get(LinkAuditRepository)
        member_repo = await integration_env.get(MemberRepository)
        org_id = new_org_id()
        await add_member(member_repo, org_id, "John Smith")
        result = await resolution_service.resolve(
            make_profile(provider_user_id=str(uuid4()), display_name="Jon Smith"),
            org_id,
            SYSTEM_ACTOR,
            now=NOW,
        )
        suggestion = (
            await suggestion_service.get_for_identity(result.external_identity_id)
        )[0]
        await suggestion_service.decide(suggestion.id, False, "reviewer", now=NOW)

        await suggestion_service.cleanup_processed(90, now=NOW + timedelta(days=91))

        assert await suggestion_service.get_for_identity(
            result.external_identity_id
        ) == []
        rejected = [
            entry
            for entry in await audit_repo.find_by_identity(result.external_identity_id)
            if entry.action == AuditAction.REJECTED
        ]
        assert [entry.suggestion_id for entry in rejected] == [suggestion.id]
