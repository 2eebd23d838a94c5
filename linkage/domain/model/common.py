"""Base model for all domain entities."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class DomainModel(BaseModel):
    """Base class for all domain models.

    Entities are immutable; state changes produce a new instance through
    `evolve(...)` which is then saved by a repository.
    """

    model_config = ConfigDict(
        frozen=True,
        arbitrary_types_allowed=True,
    )

    def evolve(self, **changes):
        """Return a validated copy with `changes` applied.

        Unlike `model_copy(update=...)`, the copy goes through validation, so
        entity invariants hold for every state transition.
        """
        return type(self).model_validate({**self.model_dump(), **changes})
