"""
Input Validation

Format rules shared by request contracts and the operations layer.
Every helper raises InvalidArgumentError naming the offending field.
"""

import re

from doc_registry.core.errors import InvalidArgumentError
from doc_registry.models.enums import Permission

DOCUMENT_ID_PATTERN = r"^[A-Za-z0-9_.\-]+$"
VERSION_PATTERN = r"^[A-Za-z0-9.]+$"

DOCUMENT_ID_MAX_LENGTH = 255
VERSION_MAX_LENGTH = 64
USERNAME_MAX_LENGTH = 255
TAG_MAX_LENGTH = 255
TITLE_MAX_LENGTH = 1024

MIN_TOKEN_LENGTH = 1
MAX_TOKEN_LENGTH = 128

DEFAULT_VERSION = "1"

_document_id_re = re.compile(DOCUMENT_ID_PATTERN)
_version_re = re.compile(VERSION_PATTERN)


def validate_document_id(document_id: str | None) -> str:
    """
    Validate a caller-supplied document id.

    Args:
        document_id: Raw id value

    Returns:
        The id, unchanged

    Raises:
        InvalidArgumentError: If missing, too long, or outside [A-Za-z0-9_.-]
    """
    if not document_id:
        raise InvalidArgumentError("Missing id", field="id")
    if len(document_id) > DOCUMENT_ID_MAX_LENGTH:
        raise InvalidArgumentError(
            f"id must be at most {DOCUMENT_ID_MAX_LENGTH} characters", field="id"
        )
    if not _document_id_re.fullmatch(document_id):
        raise InvalidArgumentError(
            "Invalid id format: only letters, digits, '_', '.' and '-' are allowed",
            field="id",
        )
    return document_id


def validate_version(version: str | None, *, default: str | None = None) -> str:
    """
    Validate a version label, falling back to a default when omitted.

    Raises:
        InvalidArgumentError: If missing without default, too long, or outside [A-Za-z0-9.]
    """
    if version is None or version == "":
        if default is None:
            raise InvalidArgumentError("Missing version", field="version")
        return default
    if len(version) > VERSION_MAX_LENGTH:
        raise InvalidArgumentError(
            f"version must be at most {VERSION_MAX_LENGTH} characters", field="version"
        )
    if not _version_re.fullmatch(version):
        raise InvalidArgumentError(
            "Invalid version format: only letters, digits and '.' are allowed",
            field="version",
        )
    return version


def validate_username(username: str | None) -> str:
    """Require a non-blank username of at most USERNAME_MAX_LENGTH characters."""
    if not username or not username.strip():
        raise InvalidArgumentError("Missing username", field="username")
    if len(username) > USERNAME_MAX_LENGTH:
        raise InvalidArgumentError(
            f"username must be at most {USERNAME_MAX_LENGTH} characters", field="username"
        )
    return username


def validate_tag(tag: str | None) -> str:
    """Normalize an optional app/tool tag; a missing tag becomes ""."""
    if not tag:
        return ""
    if len(tag) > TAG_MAX_LENGTH:
        raise InvalidArgumentError(f"tag must be at most {TAG_MAX_LENGTH} characters", field="tag")
    return tag


def validate_title(title: str | None, *, default: str | None = None) -> str:
    """
    Validate a display title, falling back to a default when omitted.

    Without a default only None counts as missing; an empty title is kept.

    Raises:
        InvalidArgumentError: If missing without default, or too long
    """
    if title is None and default is None:
        raise InvalidArgumentError("Missing title", field="title")
    if not title and default is not None:
        return default
    if len(title) > TITLE_MAX_LENGTH:
        raise InvalidArgumentError(
            f"title must be at most {TITLE_MAX_LENGTH} characters", field="title"
        )
    return title


def parse_permissions(permissions: str | list[str] | None) -> tuple[bool, bool]:
    """
    Parse a permission list into (can_read, can_write).

    Accepts either a comma-joined string ("read,write") or a list of strings.
    Duplicates are tolerated; unknown or empty entries are rejected.

    Raises:
        InvalidArgumentError: If missing, empty, not a string or list of
            strings, or containing an unknown permission
    """
    if permissions is None:
        raise InvalidArgumentError("Missing permissions", field="permissions")

    if isinstance(permissions, str):
        items = permissions.split(",")
    elif isinstance(permissions, list) and all(isinstance(item, str) for item in permissions):
        items = permissions
    else:
        raise InvalidArgumentError(
            "permissions must be a string or a list of strings", field="permissions"
        )

    items = [item.strip() for item in items]
    if not items or items == [""]:
        raise InvalidArgumentError("Missing permissions", field="permissions")

    allowed = {p.value for p in Permission}
    for item in items:
        if item not in allowed:
            raise InvalidArgumentError(
                f"Invalid permission: {item!r} (allowed: read, write)",
                field="permissions",
            )

    return Permission.READ.value in items, Permission.WRITE.value in items


def validate_token_length(length: int) -> int:
    """Require MIN_TOKEN_LENGTH <= length <= MAX_TOKEN_LENGTH."""
    if length < MIN_TOKEN_LENGTH or length > MAX_TOKEN_LENGTH:
        raise InvalidArgumentError(
            f"Invalid length ({MIN_TOKEN_LENGTH}-{MAX_TOKEN_LENGTH} allowed)",
            field="length",
        )
    return length
