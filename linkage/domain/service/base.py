"""Base class for domain services."""


class Service:
    """Marker base for identity-linking services.

    Services hold the rules that span several entities (matching, the
    resolution policy, the suggestion lifecycle, link transitions) and are
    built per request by the DI container.
    """
