"""Dependency injection module."""

from typing import Type

from linkage.util.di.application import ProdApplicationProvider
from linkage.util.di.base import Component, ProviderBase
from linkage.util.di.core import ProdConfigProvider
from linkage.util.di.domain import ProdDomainProvider
from linkage.util.di.infrastructure import (
    PersistenceProvider,
    ProdPersistenceProvider,
    ProfileExtractorAggregatorProvider,
)
from linkage.util.error import DependencyInjectionError

# Every provider the container is built from, in registration order
PROVIDERS: list[Type[ProviderBase]] = [
    # Always production
    ProdConfigProvider,
    ProdDomainProvider,
    ProdApplicationProvider,
    # Mockable components
    PersistenceProvider,
    # Provider-keyed extractor mapping
    ProfileExtractorAggregatorProvider,
]


def get_provider(
    base: Type[ProviderBase], use_mock: bool = False
) -> Type[ProviderBase]:
    """Resolve a provider base to the class the container should build.

    Bases without subclasses are concrete and returned unchanged. A base
    with subclasses is a mockable component: the subclass whose
    `__is_mock__` equals `use_mock` is chosen.

    Raises:
        DependencyInjectionError: If the component has no matching variant
    """
    variants = base.__subclasses__()
    if not variants:
        return base

    by_kind = {bool(getattr(v, "__is_mock__", False)): v for v in variants}
    try:
        return by_kind[use_mock]
    except KeyError:
        kind = "mock" if use_mock else "production"
        component = getattr(base, "__mock_component__", None) or base.__name__
        raise DependencyInjectionError(
            f"No {kind} implementation for {component}"
        ) from None


__all__ = [
    "Component",
    "ProviderBase",
    "PROVIDERS",
    "get_provider",
    # Core providers
    "ProdConfigProvider",
    "ProdDomainProvider",
    "ProdApplicationProvider",
    # Infrastructure
    "PersistenceProvider",
    "ProdPersistenceProvider",
    "ProfileExtractorAggregatorProvider",
]
