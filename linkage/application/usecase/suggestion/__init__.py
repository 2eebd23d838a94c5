"""Suggestion use cases."""

from .decide_suggestion import (
    DecideSuggestionRequest,
    DecideSuggestionResponse,
    DecideSuggestionUseCase,
)
from .expire_suggestions import (
    ExpireSuggestionsRequest,
    ExpireSuggestionsResponse,
    ExpireSuggestionsUseCase,
)
from .get_suggestions import (
    GetSuggestionsRequest,
    GetSuggestionsResponse,
    GetSuggestionsUseCase,
)

__all__ = [
    "DecideSuggestionRequest",
    "DecideSuggestionResponse",
    "DecideSuggestionUseCase",
    "ExpireSuggestionsRequest",
    "ExpireSuggestionsResponse",
    "ExpireSuggestionsUseCase",
    "GetSuggestionsRequest",
    "GetSuggestionsResponse",
    "GetSuggestionsUseCase",
]
