"""Helpers for reading loosely-typed provider payloads."""

from typing import Any, Optional

from linkage.adapter.error import ProviderPayloadError
from linkage.domain.value import IdentityProvider

# Matches the provider_user_id column width
MAX_USER_ID_LENGTH = 255


def require_user_id(
    provider: IdentityProvider, payload: Any, key: str = "id"
) -> str:
    """Get the provider user id from a payload.

    Raises:
        ProviderPayloadError: If the payload is not an object or the id is
            missing, blank or longer than MAX_USER_ID_LENGTH
    """
    if not isinstance(payload, dict):
        raise ProviderPayloadError(
            f"{provider.value} payload must be an object, got {type(payload).__name__}"
        )
    user_id = payload.get(key)
    if user_id is None or not str(user_id).strip():
        raise ProviderPayloadError(f"{provider.value} payload has no user {key}")
    user_id = str(user_id)
    if len(user_id) > MAX_USER_ID_LENGTH:
        raise ProviderPayloadError(
            f"{provider.value} user {key} exceeds {MAX_USER_ID_LENGTH} characters"
        )
    return user_id


def section(payload: dict[str, Any], key: str) -> dict[str, Any]:
    """Get a nested object, treating anything else as empty."""
    value = payload.get(key)
    return value if isinstance(value, dict) else {}


def text(value: Any) -> Optional[str]:
    """Trimmed string value, or None when missing or blank."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None
