"""Resolve identity use case."""

from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, model_validator

from linkage.application.usecase.base import BaseUseCase
from linkage.application.usecase.views import CandidateView
from linkage.domain.repository import UnitOfWork
from linkage.domain.service import ProfileNormalizer, ResolutionService
from linkage.domain.value import (
    SYSTEM_ACTOR,
    ExternalProfile,
    IdentityProvider,
    LinkMethod,
    OrganizationId,
    ResolutionAction,
    ResolutionOptions,
)


class ResolveIdentityRequest(BaseModel):
    """Resolve identity request.

    Carries either a raw provider payload (normalized here) or an already
    normalized profile.
    """

    organization_id: str  # UUID string
    provider: Optional[IdentityProvider] = None
    payload: Optional[dict[str, Any]] = None
    profile: Optional[ExternalProfile] = None
    actor: str = SYSTEM_ACTOR
    options: Optional[ResolutionOptions] = None

    @model_validator(mode="after")
    def check_source(self) -> "ResolveIdentityRequest":
        """Require exactly one of payload and profile."""
        if (self.payload is None) == (self.profile is None):
            raise ValueError("Provide either a provider payload or a profile")
        if self.payload is not None and self.provider is None:
            raise ValueError("A provider is required to normalize a payload")
        return self


class ResolveIdentityResponse(BaseModel):
    """Resolve identity response."""

    action: ResolutionAction
    external_identity_id: str
    linked_user_id: Optional[str] = None
    suggestions: list[CandidateView] = []
    confidence: Optional[float] = None
    method: Optional[LinkMethod] = None


class ResolveIdentityUseCase(BaseUseCase):
    """Use case for resolving an external profile to an internal user."""

    def __init__(
        self,
        resolution_service: ResolutionService,
        profile_normalizer: ProfileNormalizer,
        unit_of_work: UnitOfWork,
    ) -> None:
        """Initialize resolve identity use case.

        Args:
            resolution_service: Resolution domain service
            profile_normalizer: Provider profile normalizer
            unit_of_work: Transaction boundary
        """
        self.resolution_service = resolution_service
        self.profile_normalizer = profile_normalizer
        self.unit_of_work = unit_of_work

    async def execute(self, request: ResolveIdentityRequest) -> ResolveIdentityResponse:
        """Execute identity resolution.

        Steps:
        1. Normalize the provider payload (if given)
        2. Sync the identity and decide: already linked, auto-link,
           suggest or no match
        3. Commit every side effect together

        Args:
            request: Profile or payload plus organization

        Returns:
            What resolution did

        Raises:
            ValidationError: If the payload is malformed
            ConfigurationError: If threshold overrides are out of order
        """
        if request.profile is not None:
            profile = request.profile
        else:
            profile = self.profile_normalizer.normalize(
                request.provider, request.payload
            )

        async with self.unit_of_work.transaction():
            result = await self.resolution_service.resolve(
                profile,
                OrganizationId(UUID(request.organization_id)),
                request.actor,
                request.options,
            )

        return ResolveIdentityResponse(
            action=result.action,
            external_identity_id=str(result.external_identity_id),
            linked_user_id=str(result.linked_user_id) if result.linked_user_id else None,
            suggestions=[CandidateView.from_candidate(c) for c in result.suggestions],
            confidence=result.confidence,
            method=result.method,
        )
