"""Notion adapter."""

from .profile import NotionProfileExtractor

__all__ = ["NotionProfileExtractor"]
