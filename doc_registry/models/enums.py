"""
Enums for document registry models.
"""

from enum import Enum


class UserRole(str, Enum):
    """User roles for access control."""

    ADMIN = "admin"
    MEMBER = "member"


class Permission(str, Enum):
    """Content permissions a share grant can carry."""

    READ = "read"
    WRITE = "write"


class RegistryAction(str, Enum):
    """Actions accepted by the action-dispatch endpoint."""

    CREATE = "create"
    LIST = "list"
    LIST_BY_TAG = "list_by_tag"
    RENAME = "rename"
    SHARE = "share"
    REVOKE = "revoke"
    DELETE = "delete"
    RESTORE = "restore"
    PERMANENT_DELETE = "permanent_delete"
    ACCESS = "access"
    GET_ROOM = "get_room"
    GENERATE_ID = "generate_id"

    @property
    def is_read_only(self) -> bool:
        """Read-only actions are served over GET; everything else needs POST."""
        return self in (
            RegistryAction.LIST,
            RegistryAction.LIST_BY_TAG,
            RegistryAction.ACCESS,
            RegistryAction.GENERATE_ID,
        )
