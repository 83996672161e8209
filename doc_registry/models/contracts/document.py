"""
Document contracts (API request/response schemas).
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from doc_registry.core.validation import (
    DOCUMENT_ID_MAX_LENGTH,
    DOCUMENT_ID_PATTERN,
    TAG_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    VERSION_MAX_LENGTH,
    VERSION_PATTERN,
)
from doc_registry.models.enums import Permission
from doc_registry.models.orm.document import Document


class DocumentCreate(BaseModel):
    """Document creation request model."""

    id: str = Field(
        ...,
        min_length=1,
        max_length=DOCUMENT_ID_MAX_LENGTH,
        pattern=DOCUMENT_ID_PATTERN,
        description="Caller-chosen stable document id",
    )
    tag: str | None = Field(default=None, max_length=TAG_MAX_LENGTH, description="App/tool tag")
    title: str | None = Field(default=None, max_length=TITLE_MAX_LENGTH, description="Display title")
    version: str | None = Field(
        default=None,
        max_length=VERSION_MAX_LENGTH,
        pattern=VERSION_PATTERN,
        description='Initial version label (defaults to "1")',
    )


class DocumentRename(BaseModel):
    """Rename request model."""

    title: str = Field(..., max_length=TITLE_MAX_LENGTH, description="New display title")


class ShareRequest(BaseModel):
    """Share grant request model."""

    permissions: list[Permission] = Field(
        ..., min_length=1, description='Granted permissions, e.g. ["read", "write"]'
    )


class RoomRequest(BaseModel):
    """Get-or-create room request model."""

    version: str = Field(
        ...,
        min_length=1,
        max_length=VERSION_MAX_LENGTH,
        pattern=VERSION_PATTERN,
        description="Version label",
    )


class SharePublic(BaseModel):
    """Share grant as exposed to clients."""

    username: str
    permissions: list[str]


class DocumentPublic(BaseModel):
    """Document public response model."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    owner: str
    app: str
    title: str
    deleted: bool
    created_at: datetime
    updated_at: datetime
    versions: dict[str, str] = Field(default_factory=dict)
    shared_with: list[SharePublic] = Field(default_factory=list)

    @classmethod
    def from_document(cls, doc: Document) -> "DocumentPublic":
        """Build the response shape from a loaded document."""
        return cls(
            id=doc.id,
            owner=doc.owner,
            app=doc.app or "",
            title=doc.title,
            deleted=doc.deleted,
            created_at=doc.created_at,
            updated_at=doc.updated_at,
            versions=doc.version_map,
            shared_with=[
                SharePublic(username=share.username, permissions=share.permissions)
                for share in doc.shares
            ],
        )


class AccessPublic(BaseModel):
    """Access check response model."""

    id: str
    version: str
    room: str
    user: str
    permissions: list[str]


class RoomPublic(BaseModel):
    """Get-or-create room response model."""

    id: str
    version: str
    room: str
    created: bool = False


class GeneratedIdPublic(BaseModel):
    """Generated id response model."""

    id: str
