"""Adapter layer errors."""

from linkage.domain.error import ValidationError


class AdapterError(Exception):
    """Base adapter error."""

    pass


class ProviderPayloadError(AdapterError, ValidationError):
    """Provider payload is missing required fields or has the wrong shape.

    Also a domain ValidationError, so callers handling bad input need not
    know which adapter raised it.
    """

    pass
