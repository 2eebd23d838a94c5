"""Google Workspace profile extractor.

Reads Admin SDK Directory API user resources.
"""

from typing import Any

from linkage.adapter.payload import require_user_id, section, text
from linkage.domain.service.profile_normalizer import ProfileExtractor
from linkage.domain.value import ExternalProfile, IdentityProvider


class GoogleProfileExtractor(ProfileExtractor):
    """Builds profiles from Google Directory user resources."""

    provider = IdentityProvider.GOOGLE

    def extract_profile(self, payload: dict[str, Any]) -> ExternalProfile:
        """Convert a Directory user resource into an ExternalProfile."""
        user_id = require_user_id(self.provider, payload)
        name = section(payload, "name")
        full_name = text(name.get("fullName"))

        metadata: dict[str, Any] = {
            "suspended": payload.get("suspended") is True,
            "is_admin": payload.get("isAdmin") is True,
        }
        if payload.get("orgUnitPath"):
            metadata["org_unit_path"] = payload["orgUnitPath"]

        return ExternalProfile(
            provider=self.provider,
            provider_user_id=user_id,
            provider_team_id=text(payload.get("customerId")),
            email=text(payload.get("primaryEmail")),
            display_name=full_name,
            real_name=full_name,
            avatar_url=text(payload.get("thumbnailPhotoUrl")),
            metadata=metadata,
        )
