"""Domain services."""

from .audit_service import AuditService
from .base import Service
from .candidate_finder import CandidateFinder
from .external_identity_service import ExternalIdentityService
from .identity_settings_service import IdentitySettingsService, SettingsCache
from .link_service import LinkService
from .name_matcher import NameMatcher
from .profile_normalizer import ProfileExtractor, ProfileNormalizer
from .resolution_service import ResolutionService
from .suggestion_service import SuggestionService

__all__ = [
    "AuditService",
    "CandidateFinder",
    "ExternalIdentityService",
    "IdentitySettingsService",
    "LinkService",
    "NameMatcher",
    "ProfileExtractor",
    "ProfileNormalizer",
    "ResolutionService",
    "Service",
    "SettingsCache",
    "SuggestionService",
]
