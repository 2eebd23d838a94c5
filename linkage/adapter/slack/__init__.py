"""Slack adapter."""

from .profile import SlackProfileExtractor

__all__ = ["SlackProfileExtractor"]
