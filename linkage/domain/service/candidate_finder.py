"""Candidate finder domain service."""

from typing import Optional

import logfire

from linkage.domain.model import Member
from linkage.domain.repository import MemberRepository
from linkage.domain.value import LinkCandidate, MatchResult, OrganizationId

from .base import Service
from .name_matcher import NameMatcher

DOMAIN_BOOST = 0.10


class CandidateFinder(Service):
    """Ranks organization members against an external profile."""

    def __init__(
        self, member_repository: MemberRepository, name_matcher: NameMatcher
    ) -> None:
        """Initialize candidate finder.

        Args:
            member_repository: Organization member repository
            name_matcher: Name matcher
        """
        self.member_repository = member_repository
        self.name_matcher = name_matcher

    async def find_candidates(
        self,
        organization_id: OrganizationId,
        name: Optional[str],
        email: Optional[str],
    ) -> list[LinkCandidate]:
        """Score every member of the organization.

        Members sharing a corporate email domain with the profile get a flat
        boost on their name match. Members scoring zero are dropped.

        Args:
            organization_id: Organization to search
            name: Profile display name
            email: Profile email

        Returns:
            Candidates sorted by confidence descending, ties by user id
        """
        with logfire.span(
            "candidate_finder.find_candidates",
            organization_id=str(organization_id),
            has_name=bool(name),
            has_email=bool(email),
        ):
            if not name and not email:
                logfire.debug(
                    "No name or email to match on",
                    organization_id=str(organization_id),
                )
                return []

            members = await self.member_repository.find_all_by_organization(
                organization_id
            )

            candidates = []
            for member in members:
                match_result = self._score(member, name, email)
                if match_result.confidence > 0:
                    candidates.append(
                        LinkCandidate(
                            user_id=member.user_id,
                            email=member.email,
                            display_name=member.display_name,
                            match_result=match_result,
                        )
                    )

            candidates.sort(key=lambda c: (-c.confidence, str(c.user_id)))

            logfire.info(
                "Candidate search completed",
                organization_id=str(organization_id),
                members_scanned=len(members),
                candidates_found=len(candidates),
                top_confidence=candidates[0].confidence if candidates else None,
            )
            return candidates

    def _score(
        self, member: Member, name: Optional[str], email: Optional[str]
    ) -> MatchResult:
        """Match one member, applying the corporate domain boost."""
        match_result = self.name_matcher.match(name, member.display_name)

        if not self.name_matcher.is_same_corporate_domain(email, member.email):
            return match_result

        # Boost only strengthens name evidence; a shared domain alone is not a match
        if match_result.confidence == 0:
            return match_result

        return match_result.model_copy(
            update={
                "confidence": round(
                    min(match_result.confidence + DOMAIN_BOOST, 1.0), 4
                ),
                "domain_boosted": True,
                "details": {**match_result.details, "domain_match": True},
            }
        )
