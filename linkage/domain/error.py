"""Domain layer errors.

Every error is machine-distinguishable by type; callers translate them into
user-facing messages.
"""


class DomainError(Exception):
    """Base domain error."""

    pass


class ValidationError(DomainError):
    """Input is missing or malformed (e.g. relink without a reason)."""

    pass


class InvalidStateError(DomainError):
    """Operation is not allowed in the entity's current state."""

    pass


class ConfigurationError(DomainError):
    """Identity settings violate an invariant (e.g. threshold ordering)."""

    pass


class NotFoundError(DomainError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")
