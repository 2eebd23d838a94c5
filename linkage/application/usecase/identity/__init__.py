"""Identity use cases."""

from .get_identities import (
    GetIdentitiesRequest,
    GetIdentitiesResponse,
    GetIdentitiesUseCase,
)
from .get_identity_history import (
    GetIdentityHistoryRequest,
    GetIdentityHistoryResponse,
    GetIdentityHistoryUseCase,
)
from .get_identity_stats import (
    GetIdentityStatsRequest,
    GetIdentityStatsResponse,
    GetIdentityStatsUseCase,
)
from .link_identity import LinkIdentityRequest, LinkIdentityResponse, LinkIdentityUseCase
from .relink_identity import (
    RelinkIdentityRequest,
    RelinkIdentityResponse,
    RelinkIdentityUseCase,
)
from .resolve_identity import (
    ResolveIdentityRequest,
    ResolveIdentityResponse,
    ResolveIdentityUseCase,
)
from .unlink_identity import (
    UnlinkIdentityRequest,
    UnlinkIdentityResponse,
    UnlinkIdentityUseCase,
)

__all__ = [
    "GetIdentitiesRequest",
    "GetIdentitiesResponse",
    "GetIdentitiesUseCase",
    "GetIdentityHistoryRequest",
    "GetIdentityHistoryResponse",
    "GetIdentityHistoryUseCase",
    "GetIdentityStatsRequest",
    "GetIdentityStatsResponse",
    "GetIdentityStatsUseCase",
    "LinkIdentityRequest",
    "LinkIdentityResponse",
    "LinkIdentityUseCase",
    "RelinkIdentityRequest",
    "RelinkIdentityResponse",
    "RelinkIdentityUseCase",
    "ResolveIdentityRequest",
    "ResolveIdentityResponse",
    "ResolveIdentityUseCase",
    "UnlinkIdentityRequest",
    "UnlinkIdentityResponse",
    "UnlinkIdentityUseCase",
]
