"""Utility layer errors.

Raised while wiring the application together, before any domain code runs.
"""


class UtilError(Exception):
    """Base utility error."""

    pass


class ConfigurationError(UtilError):
    """Environment variables or .env hold values Settings cannot accept."""

    pass


class DependencyInjectionError(UtilError):
    """No provider implementation matches the requested component."""

    pass


class MigrationError(UtilError):
    """Alembic could not bring the schema to the requested revision."""

    def __init__(self, revision: str, cause: Exception):
        self.revision = revision
        super().__init__(f"Migration to {revision} failed: {cause}")
