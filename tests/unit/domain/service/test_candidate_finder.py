"""Unit tests for CandidateFinder."""

import pytest

from linkage.domain.repository import MemberRepository
from linkage.domain.service import CandidateFinder
from linkage.domain.value import MatchMethod
from tests.conftest import add_member, new_org_id
from tests.harness import create_env_fixture

# Unit test fixture - everything mocked, no database needed
unit_env = create_env_fixture()


class TestFindCandidates:
    """Tests for find_candidates method."""

    @pytest.mark.asyncio
    async def test_ranks_members_by_confidence(self, unit_env):
        """Candidates come back highest confidence first."""
        # Arrange
        finder = await unit_env.get(CandidateFinder)
        member_repo = await unit_env.get(MemberRepository)
        org_id = new_org_id()

        close = await add_member(member_repo, org_id, "Jon Smith")
        exact = await add_member(member_repo, org_id, "John Smith")
        await add_member(member_repo, org_id, "Maria Garcia")

        # Act
        candidates = await finder.find_candidates(org_id, "John Smith", None)

        # Assert
        assert [c.user_id for c in candidates] == [exact.user_id, close.user_id]
        assert candidates[0].match_result.method == MatchMethod.EXACT

    @pytest.mark.asyncio
    async def test_only_searches_own_organization(self, unit_env):
        """Members of other organizations are never candidates."""
        finder = await unit_env.get(CandidateFinder)
        member_repo = await unit_env.get(MemberRepository)
        org_id = new_org_id()

        await add_member(member_repo, new_org_id(), "John Smith")

        candidates = await finder.find_candidates(org_id, "John Smith", None)

        assert candidates == []

    @pytest.mark.asyncio
    async def test_corporate_domain_boosts_name_match(self, unit_env):
        """A shared corporate domain adds a flat boost to the name match."""
        # Arrange
        finder = await unit_env.get(CandidateFinder)
        member_repo = await unit_env.get(MemberRepository)
        org_id = new_org_id()

        await add_member(member_repo, org_id, "Smith John", email="john@acme.com")

        # Act
        candidates = await finder.find_candidates(org_id, "John Smith", "js@acme.com")

        # Assert
        assert len(candidates) == 1
        result = candidates[0].match_result
        assert result.method == MatchMethod.TOKEN
        assert result.domain_boosted is True
        assert result.confidence == 1.0  # 0.95 + 0.10, capped
        assert result.details["domain_match"] is True

    @pytest.mark.asyncio
    async def test_free_mail_domain_gets_no_boost(self, unit_env):
        finder = await unit_env.get(CandidateFinder)
        member_repo = await unit_env.get(MemberRepository)
        org_id = new_org_id()

        await add_member(member_repo, org_id, "Smith John", email="john@gmail.com")

        candidates = await finder.find_candidates(
            org_id, "John Smith", "js@gmail.com"
        )

        assert candidates[0].match_result.domain_boosted is False
        assert candidates[0].confidence == 0.95

    @pytest.mark.asyncio
    async def test_domain_alone_is_not_a_match(self, unit_env):
        """A member sharing only the email domain is not a candidate."""
        finder = await unit_env.get(CandidateFinder)
        member_repo = await unit_env.get(MemberRepository)
        org_id = new_org_id()

        await add_member(member_repo, org_id, "Maria Garcia", email="maria@acme.com")

        candidates = await finder.find_candidates(org_id, "John Smith", "js@acme.com")

        assert candidates == []

    @pytest.mark.asyncio
    async def test_no_name_and_no_email(self, unit_env):
        finder = await unit_env.get(CandidateFinder)
        member_repo = await unit_env.get(MemberRepository)
        org_id = new_org_id()
        await add_member(member_repo, org_id, "John Smith")

        assert await finder.find_candidates(org_id, None, None) == []
