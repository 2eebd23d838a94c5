"""Google Workspace adapter."""

from .profile import GoogleProfileExtractor

__all__ = ["GoogleProfileExtractor"]
