"""Provider profile normalization domain service."""

from typing import Any

import logfire
from pydantic import ValidationError as PydanticValidationError

from linkage.domain.error import ValidationError
from linkage.domain.value import ExternalProfile, IdentityProvider

from .base import Service


class ProfileExtractor:
    """Generic profile extractor interface for all providers."""

    provider: IdentityProvider

    def extract_profile(self, payload: dict[str, Any]) -> ExternalProfile:
        """Convert a provider user payload into an ExternalProfile.

        Args:
            payload: User object as returned by the provider's API

        Returns:
            Normalized profile

        Raises:
            ValidationError: If the payload has no usable user id
        """
        raise NotImplementedError


class ProfileNormalizer(Service):
    """Dispatches provider payloads to the matching profile extractor."""

    def __init__(self, extractors: dict[IdentityProvider, ProfileExtractor]) -> None:
        """Initialize profile normalizer.

        Args:
            extractors: Map of provider to profile extractor
        """
        self.extractors = extractors

    def normalize(
        self, provider: IdentityProvider, payload: dict[str, Any]
    ) -> ExternalProfile:
        """Normalize a provider payload.

        Args:
            provider: Provider the payload came from
            payload: Raw provider user object

        Returns:
            Normalized profile

        Raises:
            ValidationError: If the provider is unsupported or the payload
                is malformed
        """
        extractor = self.extractors.get(provider)
        if extractor is None:
            logfire.warn("Unsupported identity provider", provider=str(provider))
            raise ValidationError(f"Unsupported provider: {provider}")

        try:
            profile = extractor.extract_profile(payload)
        except PydanticValidationError as e:
            logfire.warn(
                "Malformed provider profile",
                provider=provider.value,
                errors=e.error_count(),
            )
            raise ValidationError(
                f"Malformed {provider.value} profile: {e.errors()[0]['msg']}"
            ) from e

        logfire.debug(
            "Profile normalized",
            provider=provider.value,
            provider_user_id=profile.provider_user_id,
            has_email=profile.email is not None,
        )
        return profile
