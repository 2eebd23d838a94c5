"""Slack profile extractor.

Reads the user object returned by Slack's `users.info` and `users.list`.
"""

from typing import Any

from linkage.adapter.payload import require_user_id, section, text
from linkage.domain.service.profile_normalizer import ProfileExtractor
from linkage.domain.value import ExternalProfile, IdentityProvider


class SlackProfileExtractor(ProfileExtractor):
    """Builds profiles from Slack user objects."""

    provider = IdentityProvider.SLACK

    def extract_profile(self, payload: dict[str, Any]) -> ExternalProfile:
        """Convert a Slack user object into an ExternalProfile.

        Slack leaves `profile.display_name` empty for many users; the name
        used for matching then falls back to `real_name`.
        """
        user_id = require_user_id(self.provider, payload)
        profile = section(payload, "profile")

        metadata: dict[str, Any] = {
            "is_bot": payload.get("is_bot") is True,
            "deleted": payload.get("deleted") is True,
            "is_restricted": payload.get("is_restricted") is True,
            "is_ultra_restricted": payload.get("is_ultra_restricted") is True,
        }
        if payload.get("tz"):
            metadata["tz"] = payload["tz"]
        if payload.get("name"):
            metadata["username"] = payload["name"]

        return ExternalProfile(
            provider=self.provider,
            provider_user_id=user_id,
            provider_team_id=text(payload.get("team_id")),
            email=text(profile.get("email")),
            display_name=text(profile.get("display_name")),
            real_name=text(payload.get("real_name")) or text(profile.get("real_name")),
            avatar_url=text(profile.get("image_192")),
            metadata=metadata,
        )
