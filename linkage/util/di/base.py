"""Base classes for dependency injection providers."""

from typing import ClassVar, Literal

from dishka import Provider

# Components with an in-memory test double
Component = Literal["persistence"]


class ProviderBase(Provider):
    """Base for all DI providers.

    A provider class that declares `__mock_component__` is a mockable
    component base; its subclasses are the production implementation and
    the test double, told apart by `__is_mock__`. Providers without
    subclasses are used as-is.

    Attributes:
        __mock_component__: Component name, None for concrete providers
        __is_mock__: Whether this is the test double
        __depends_on__: Components that must also be real when this one is
    """

    __mock_component__: ClassVar[Component | None] = None
    __is_mock__: ClassVar[bool] = False
    __depends_on__: ClassVar[frozenset[Component]] = frozenset()
