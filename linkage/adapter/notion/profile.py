"""Notion profile extractor.

Reads user objects from the Notion `users` endpoints. People carry an
email under `person`; bots carry their workspace under `bot`.
"""

from typing import Any

from linkage.adapter.payload import require_user_id, section, text
from linkage.domain.service.profile_normalizer import ProfileExtractor
from linkage.domain.value import ExternalProfile, IdentityProvider


class NotionProfileExtractor(ProfileExtractor):
    """Builds profiles from Notion user objects."""

    provider = IdentityProvider.NOTION

    def extract_profile(self, payload: dict[str, Any]) -> ExternalProfile:
        """Convert a Notion user object into an ExternalProfile."""
        user_id = require_user_id(self.provider, payload)
        user_type = text(payload.get("type")) or "person"
        person = section(payload, "person")
        bot = section(payload, "bot")

        metadata: dict[str, Any] = {"type": user_type}
        workspace_name = text(bot.get("workspace_name"))
        if workspace_name:
            metadata["workspace_name"] = workspace_name

        name = text(payload.get("name"))
        return ExternalProfile(
            provider=self.provider,
            provider_user_id=user_id,
            email=text(person.get("email")),
            display_name=name,
            real_name=name,
            avatar_url=text(payload.get("avatar_url")),
            metadata=metadata,
        )
