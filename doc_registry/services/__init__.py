"""Registry services: access control and the operations layer."""

from doc_registry.services.registry import (
    AccessGrant,
    DocumentRegistryService,
    RoomAssignment,
    get_registry_service,
)

__all__ = [
    "AccessGrant",
    "DocumentRegistryService",
    "RoomAssignment",
    "get_registry_service",
]
