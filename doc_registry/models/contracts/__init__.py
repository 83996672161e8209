"""API contracts (request/response schemas)."""

from doc_registry.models.contracts.common import ErrorResponse, HealthResponse, SuccessResponse
from doc_registry.models.contracts.document import (
    AccessPublic,
    DocumentCreate,
    DocumentPublic,
    DocumentRename,
    GeneratedIdPublic,
    RoomPublic,
    RoomRequest,
    SharePublic,
    ShareRequest,
)

__all__ = [
    "AccessPublic",
    "DocumentCreate",
    "DocumentPublic",
    "DocumentRename",
    "ErrorResponse",
    "GeneratedIdPublic",
    "HealthResponse",
    "RoomPublic",
    "RoomRequest",
    "SharePublic",
    "ShareRequest",
    "SuccessResponse",
]
