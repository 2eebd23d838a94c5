"""Profile extractor infrastructure provider."""

from dishka import Scope, provide

from linkage.adapter.google import GoogleProfileExtractor
from linkage.adapter.notion import NotionProfileExtractor
from linkage.adapter.slack import SlackProfileExtractor
from linkage.domain.service import ProfileExtractor
from linkage.domain.value import IdentityProvider
from linkage.util.di.base import ProviderBase


class ProfileExtractorAggregatorProvider(ProviderBase):
    """Provider that aggregates all profile extractors into a dictionary."""

    scope = Scope.APP

    @provide(scope=Scope.APP)
    def get_slack_profile_extractor(self) -> SlackProfileExtractor:
        """Provide Slack profile extractor."""
        return SlackProfileExtractor()

    @provide(scope=Scope.APP)
    def get_google_profile_extractor(self) -> GoogleProfileExtractor:
        """Provide Google profile extractor."""
        return GoogleProfileExtractor()

    @provide(scope=Scope.APP)
    def get_notion_profile_extractor(self) -> NotionProfileExtractor:
        """Provide Notion profile extractor."""
        return NotionProfileExtractor()

    @provide(scope=Scope.APP)
    def get_profile_extractors(
        self,
        slack_profile_extractor: SlackProfileExtractor,
        google_profile_extractor: GoogleProfileExtractor,
        notion_profile_extractor: NotionProfileExtractor,
    ) -> dict[IdentityProvider, ProfileExtractor]:
        """Provide dictionary of all profile extractors by provider.

        Args:
            slack_profile_extractor: Slack profile extractor
            google_profile_extractor: Google profile extractor
            notion_profile_extractor: Notion profile extractor

        Returns:
            Dictionary mapping IdentityProvider to ProfileExtractor
        """
        return {
            IdentityProvider.SLACK: slack_profile_extractor,
            IdentityProvider.GOOGLE: google_profile_extractor,
            IdentityProvider.NOTION: notion_profile_extractor,
        }
