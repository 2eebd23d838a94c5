"""Identity settings use cases."""

from .purge_audit import PurgeAuditRequest, PurgeAuditResponse, PurgeAuditUseCase
from .update_identity_settings import (
    UpdateIdentitySettingsRequest,
    UpdateIdentitySettingsResponse,
    UpdateIdentitySettingsUseCase,
)

__all__ = [
    "PurgeAuditRequest",
    "PurgeAuditResponse",
    "PurgeAuditUseCase",
    "UpdateIdentitySettingsRequest",
    "UpdateIdentitySettingsResponse",
    "UpdateIdentitySettingsUseCase",
]
