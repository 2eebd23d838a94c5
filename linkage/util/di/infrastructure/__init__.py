"""Infrastructure providers."""

# Import bases
from .persistence import PersistenceProvider
from .profile import ProfileExtractorAggregatorProvider

# Import implementations (needed for __subclasses__())
from .persistence import ProdPersistenceProvider  # noqa: F401

__all__ = [
    "PersistenceProvider",
    "ProdPersistenceProvider",
    "ProfileExtractorAggregatorProvider",
]
