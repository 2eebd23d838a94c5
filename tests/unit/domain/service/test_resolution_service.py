"""Unit tests for ResolutionService."""

import asyncio
from decimal import Decimal

import pytest

from linkage.domain.error import ConfigurationError
from linkage.domain.repository import (
    ExternalIdentityRepository,
    LinkAuditRepository,
    LinkSuggestionRepository,
    MemberRepository,
)
from linkage.domain.service import (
    IdentitySettingsService,
    LinkService,
    ResolutionService,
    SuggestionService,
)
from linkage.domain.value import (
    SYSTEM_ACTOR,
    AuditAction,
    LinkMethod,
    LinkStatus,
    ResolutionAction,
    ResolutionOptions,
    SuggestionStatus,
)
from tests.conftest import add_member, make_profile, new_org_id
from tests.harness import create_env_fixture

# Unit test fixture - everything mocked, no database needed
unit_env = create_env_fixture()


class TestEmailResolution:
    """Exact email matches link automatically."""

    @pytest.mark.asyncio
    async def test_exact_email_auto_links(self, unit_env):
        """A single member with the profile's email is linked at 0.98."""
        # Arrange
        service = await unit_env.get(ResolutionService)
        member_repo = await unit_env.get(MemberRepository)
        identity_repo = await unit_env.get(ExternalIdentityRepository)
        audit_repo = await unit_env.get(LinkAuditRepository)
        org_id = new_org_id()
        member = await add_member(member_repo, org_id, "Jane Doe", "jane@acme.com")

        # Act
        result = await service.resolve(
            make_profile(display_name="JD", email="JANE@acme.com"),
            org_id,
            SYSTEM_ACTOR,
        )

        # Assert
        assert result.action == ResolutionAction.AUTO_LINKED
        assert result.linked_user_id == member.user_id
        assert result.method == LinkMethod.AUTO_EMAIL
        assert result.confidence == 0.98

        identity = await identity_repo.find_by_id(result.external_identity_id)
        assert identity.link_status == LinkStatus.LINKED
        assert identity.user_id == member.user_id
        assert identity.link_confidence == Decimal("0.98")
        assert identity.linked_by == SYSTEM_ACTOR

        history = await audit_repo.find_by_identity(identity.id)
        assert [entry.action for entry in history] == [AuditAction.LINKED]
        assert history[0].reason == "Exact email match"

    @pytest.mark.asyncio
    async def test_second_resolution_reports_already_linked(self, unit_env):
        """Resolving a linked identity again changes nothing."""
        service = await unit_env.get(ResolutionService)
        member_repo = await unit_env.get(MemberRepository)
        audit_repo = await unit_env.get(LinkAuditRepository)
        org_id = new_org_id()
        member = await add_member(member_repo, org_id, "Jane Doe", "jane@acme.com")
        profile = make_profile(email="jane@acme.com")

        first = await service.resolve(profile, org_id, SYSTEM_ACTOR)
        second = await service.resolve(profile, org_id, SYSTEM_ACTOR)

        assert second.action == ResolutionAction.ALREADY_LINKED
        assert second.external_identity_id == first.external_identity_id
        assert second.linked_user_id == member.user_id
        assert second.method == LinkMethod.AUTO_EMAIL
        assert len(await audit_repo.find_by_identity(first.external_identity_id)) == 1

    @pytest.mark.asyncio
    async def test_concurrent_resolutions_link_once(self, unit_env, monkeypatch):
        """Interleaved resolutions of a new identity produce a single link."""
        service = await unit_env.get(ResolutionService)
        member_repo = await unit_env.get(MemberRepository)
        audit_repo = await unit_env.get(LinkAuditRepository)
        org_id = new_org_id()
        member = await add_member(member_repo, org_id, "Jane Doe", "jane@acme.com")
        profile = make_profile(email="jane@acme.com")

        # Every resolution reads the identity as unlinked before any links it
        original_find = member_repo.find_by_user_id
        waiting = 0

        async def find_after_everyone_read(organization_id, user_id):
            nonlocal waiting
            waiting += 1
            while waiting < 3:
                await asyncio.sleep(0)
            return await original_find(organization_id, user_id)

        monkeypatch.setattr(member_repo, "find_by_user_id", find_after_everyone_read)

        results = await asyncio.gather(
            *(service.resolve(profile, org_id, SYSTEM_ACTOR) for _ in range(3))
        )

        assert waiting == 3
        actions = sorted(r.action.value for r in results)
        assert actions == ["already_linked", "already_linked", "auto_linked"]
        assert {r.linked_user_id for r in results} == {member.user_id}
        history = await audit_repo.find_by_identity(results[0].external_identity_id)
        assert [entry.action for entry in history] == [AuditAction.LINKED]

    @pytest.mark.asyncio
    async def test_link_during_suggestion_reports_already_linked(
        self, unit_env, monkeypatch
    ):
        """An identity linked while suggestions are stored stays linked."""
        service = await unit_env.get(ResolutionService)
        link_service = await unit_env.get(LinkService)
        member_repo = await unit_env.get(MemberRepository)
        suggestion_repo = await unit_env.get(LinkSuggestionRepository)
        identity_repo = await unit_env.get(ExternalIdentityRepository)
        org_id = new_org_id()
        member = await add_member(member_repo, org_id, "John Smith")

        original_upsert = suggestion_repo.upsert

        async def upsert_then_link_elsewhere(suggestion):
            stored = await original_upsert(suggestion)
            await link_service.link(
                suggestion.external_identity_id,
                member.user_id,
                LinkMethod.ADMIN,
                "admin",
            )
            return stored

        monkeypatch.setattr(suggestion_repo, "upsert", upsert_then_link_elsewhere)

        result = await service.resolve(
            make_profile(display_name="Jon Smith"), org_id, SYSTEM_ACTOR
        )

        assert result.action == ResolutionAction.ALREADY_LINKED
        assert result.linked_user_id == member.user_id
        assert result.method == LinkMethod.ADMIN
        identity = await identity_repo.find_by_id(result.external_identity_id)
        assert identity.link_status == LinkStatus.LINKED

    @pytest.mark.asyncio
    async def test_email_linking_disabled_by_settings(self, unit_env):
        """Organizations can turn off email auto-linking."""
        service = await unit_env.get(ResolutionService)
        settings_service = await unit_env.get(IdentitySettingsService)
        member_repo = await unit_env.get(MemberRepository)
        org_id = new_org_id()
        await add_member(member_repo, org_id, "Jane Doe", "jane@acme.com")
        await settings_service.update_settings(org_id, {"auto_link_on_email": False})

        result = await service.resolve(
            make_profile(display_name="Someone Else", email="jane@acme.com"),
            org_id,
            SYSTEM_ACTOR,
        )

        assert result.action == ResolutionAction.NO_MATCH

    @pytest.mark.asyncio
    async def test_email_shared_by_members_falls_back_to_names(self, unit_env):
        """An email matching several members is not used for linking."""
        service = await unit_env.get(ResolutionService)
        member_repo = await unit_env.get(MemberRepository)
        org_id = new_org_id()
        await add_member(member_repo, org_id, "Team Inbox", "team@acme.com")
        owner = await add_member(member_repo, org_id, "Jane Doe", "team@acme.com")

        result = await service.resolve(
            make_profile(display_name="Jane Doe", email="team@acme.com"),
            org_id,
            SYSTEM_ACTOR,
        )

        assert result.action == ResolutionAction.AUTO_LINKED
        assert result.method == LinkMethod.AUTO_FUZZY
        assert result.linked_user_id == owner.user_id


class TestNameResolution:
    """Name matches link or suggest depending on thresholds."""

    @pytest.mark.asyncio
    async def test_single_confident_name_match_auto_links(self, unit_env):
        """One candidate at or above the auto-link threshold is linked."""
        service = await unit_env.get(ResolutionService)
        member_repo = await unit_env.get(MemberRepository)
        audit_repo = await unit_env.get(LinkAuditRepository)
        org_id = new_org_id()
        member = await add_member(member_repo, org_id, "John Smith")

        result = await service.resolve(
            make_profile(display_name="john smith"), org_id, SYSTEM_ACTOR
        )

        assert result.action == ResolutionAction.AUTO_LINKED
        assert result.method == LinkMethod.AUTO_FUZZY
        assert result.linked_user_id == member.user_id
        assert result.confidence == 0.98

        history = await audit_repo.find_by_identity(result.external_identity_id)
        assert history[0].reason == "Name match (normalized)"

    @pytest.mark.asyncio
    async def test_medium_confidence_creates_suggestion(self, unit_env):
        """A candidate between the thresholds becomes a pending suggestion."""
        # Arrange
        service = await unit_env.get(ResolutionService)
        member_repo = await unit_env.get(MemberRepository)
        identity_repo = await unit_env.get(ExternalIdentityRepository)
        suggestion_repo = await unit_env.get(LinkSuggestionRepository)
        audit_repo = await unit_env.get(LinkAuditRepository)
        org_id = new_org_id()
        member = await add_member(member_repo, org_id, "John Smith")

        # Act
        result = await service.resolve(
            make_profile(display_name="Jon Smith"), org_id, SYSTEM_ACTOR
        )

        # Assert
        assert result.action == ResolutionAction.SUGGESTED
        assert result.linked_user_id is None
        assert [c.user_id for c in result.suggestions] == [member.user_id]
        assert result.confidence == pytest.approx(0.9474)

        identity = await identity_repo.find_by_id(result.external_identity_id)
        assert identity.link_status == LinkStatus.SUGGESTED
        assert identity.user_id is None

        suggestions = await suggestion_repo.find_by_identity(identity.id)
        assert len(suggestions) == 1
        assert suggestions[0].status == SuggestionStatus.PENDING
        assert suggestions[0].suggested_user_id == member.user_id

        history = await audit_repo.find_by_identity(identity.id)
        assert [entry.action for entry in history] == [AuditAction.SUGGESTION_CREATED]
        assert history[0].metadata["candidate_count"] == 1

    @pytest.mark.asyncio
    async def test_several_confident_matches_are_ambiguous(self, unit_env):
        """Two members with the same name are suggested, never auto-linked."""
        service = await unit_env.get(ResolutionService)
        member_repo = await unit_env.get(MemberRepository)
        org_id = new_org_id()
        first = await add_member(member_repo, org_id, "John Smith")
        second = await add_member(member_repo, org_id, "John Smith")

        result = await service.resolve(
            make_profile(display_name="John Smith"), org_id, SYSTEM_ACTOR
        )

        assert result.action == ResolutionAction.SUGGESTED
        assert {c.user_id for c in result.suggestions} == {
            first.user_id,
            second.user_id,
        }

    @pytest.mark.asyncio
    async def test_weak_match_is_no_match(self, unit_env):
        """Candidates below the suggestion threshold are ignored."""
        service = await unit_env.get(ResolutionService)
        member_repo = await unit_env.get(MemberRepository)
        identity_repo = await unit_env.get(ExternalIdentityRepository)
        org_id = new_org_id()
        await add_member(member_repo, org_id, "Maria Garcia")

        result = await service.resolve(
            make_profile(display_name="John Smith"), org_id, SYSTEM_ACTOR
        )

        assert result.action == ResolutionAction.NO_MATCH
        assert result.suggestions == []
        identity = await identity_repo.find_by_id(result.external_identity_id)
        assert identity.link_status == LinkStatus.UNLINKED

    @pytest.mark.asyncio
    async def test_suggestions_capped_at_max(self, unit_env):
        service = await unit_env.get(ResolutionService)
        member_repo = await unit_env.get(MemberRepository)
        org_id = new_org_id()
        for _ in range(service.max_suggestions + 2):
            await add_member(member_repo, org_id, "John Smith")

        result = await service.resolve(
            make_profile(display_name="John Smith"), org_id, SYSTEM_ACTOR
        )

        assert len(result.suggestions) == service.max_suggestions

    @pytest.mark.asyncio
    async def test_rejected_user_is_not_suggested_again(self, unit_env):
        """A rejection blocks the same pairing on later resolutions."""
        # Arrange
        service = await unit_env.get(ResolutionService)
        suggestion_service = await unit_env.get(SuggestionService)
        member_repo = await unit_env.get(MemberRepository)
        identity_repo = await unit_env.get(ExternalIdentityRepository)
        org_id = new_org_id()
        await add_member(member_repo, org_id, "John Smith")
        profile = make_profile(display_name="Jon Smith")

        first = await service.resolve(profile, org_id, SYSTEM_ACTOR)
        suggestion = (
            await suggestion_service.get_for_identity(first.external_identity_id)
        )[0]
        await suggestion_service.decide(suggestion.id, False, "admin", "Not him")

        # Act
        second = await service.resolve(profile, org_id, SYSTEM_ACTOR)

        # Assert
        assert second.action == ResolutionAction.NO_MATCH
        identity = await identity_repo.find_by_id(first.external_identity_id)
        assert identity.link_status == LinkStatus.UNLINKED


class TestResolutionGuards:
    """Bots, overrides and configuration errors."""

    @pytest.mark.asyncio
    async def test_bot_accounts_are_skipped(self, unit_env):
        """Bots are synced but never linked."""
        service = await unit_env.get(ResolutionService)
        member_repo = await unit_env.get(MemberRepository)
        identity_repo = await unit_env.get(ExternalIdentityRepository)
        org_id = new_org_id()
        await add_member(member_repo, org_id, "Deploy Bot", "bot@acme.com")

        result = await service.resolve(
            make_profile(display_name="Deploy Bot", email="bot@acme.com", is_bot=True),
            org_id,
            SYSTEM_ACTOR,
        )

        assert result.action == ResolutionAction.NO_MATCH
        identity = await identity_repo.find_by_id(result.external_identity_id)
        assert identity is not None
        assert identity.metadata["is_bot"] is True

    @pytest.mark.asyncio
    async def test_skip_auto_link_turns_links_into_suggestions(self, unit_env):
        """With skip_auto_link even a perfect match is only suggested."""
        service = await unit_env.get(ResolutionService)
        member_repo = await unit_env.get(MemberRepository)
        org_id = new_org_id()
        member = await add_member(member_repo, org_id, "Jane Doe", "jane@acme.com")

        result = await service.resolve(
            make_profile(display_name="Jane Doe", email="jane@acme.com"),
            org_id,
            SYSTEM_ACTOR,
            ResolutionOptions(skip_auto_link=True),
        )

        assert result.action == ResolutionAction.SUGGESTED
        assert [c.user_id for c in result.suggestions] == [member.user_id]

    @pytest.mark.asyncio
    async def test_threshold_overrides_apply_to_one_call(self, unit_env):
        """Lowering the auto-link threshold links a similarity match."""
        service = await unit_env.get(ResolutionService)
        member_repo = await unit_env.get(MemberRepository)
        org_id = new_org_id()
        member = await add_member(member_repo, org_id, "John Smith")

        result = await service.resolve(
            make_profile(display_name="Jon Smith"),
            org_id,
            SYSTEM_ACTOR,
            ResolutionOptions(auto_link_threshold=0.9),
        )

        assert result.action == ResolutionAction.AUTO_LINKED
        assert result.linked_user_id == member.user_id

    @pytest.mark.asyncio
    async def test_out_of_order_overrides_rejected(self, unit_env):
        """Suggestion threshold above auto-link threshold is a config error."""
        service = await unit_env.get(ResolutionService)
        org_id = new_org_id()

        with pytest.raises(ConfigurationError):
            await service.resolve(
                make_profile(display_name="Jon Smith"),
                org_id,
                SYSTEM_ACTOR,
                ResolutionOptions(auto_link_threshold=0.8, suggestion_threshold=0.9),
            )

    @pytest.mark.asyncio
    async def test_profile_refresh_keeps_missing_fields(self, unit_env):
        """A later sync without email keeps the stored email."""
        service = await unit_env.get(ResolutionService)
        identity_repo = await unit_env.get(ExternalIdentityRepository)
        org_id = new_org_id()

        first = await service.resolve(
            make_profile(display_name="Old Name", email="x@acme.com"),
            org_id,
            SYSTEM_ACTOR,
        )
        await service.resolve(
            make_profile(display_name="New Name"), org_id, SYSTEM_ACTOR
        )

        identity = await identity_repo.find_by_id(first.external_identity_id)
        assert identity.display_name == "New Name"
        assert identity.email == "x@acme.com"


class TestThresholdScenarios:
    """The same near-miss name under different auto-link thresholds."""

    @pytest.mark.asyncio
    async def test_smyth_suggested_at_default_threshold(self, unit_env):
        service = await unit_env.get(ResolutionService)
        member_repo = await unit_env.get(MemberRepository)
        org_id = new_org_id()
        await add_member(member_repo, org_id, "John Smith")

        result = await service.resolve(
            make_profile(display_name="John Smyth"), org_id, SYSTEM_ACTOR
        )

        assert result.action == ResolutionAction.SUGGESTED
        assert result.confidence == pytest.approx(0.9)

    @pytest.mark.asyncio
    async def test_smyth_auto_linked_at_lower_threshold(self, unit_env):
        service = await unit_env.get(ResolutionService)
        settings_service = await unit_env.get(IdentitySettingsService)
        member_repo = await unit_env.get(MemberRepository)
        org_id = new_org_id()
        member = await add_member(member_repo, org_id, "John Smith")
        await settings_service.update_settings(
            org_id, {"auto_link_threshold": 0.85, "suggestion_threshold": 0.8}
        )

        result = await service.resolve(
            make_profile(display_name="John Smyth"), org_id, SYSTEM_ACTOR
        )

        assert result.action == ResolutionAction.AUTO_LINKED
        assert result.method == LinkMethod.AUTO_FUZZY
        assert result.linked_user_id == member.user_id
