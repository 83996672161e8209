"""
Documents Router

REST endpoints for the document registry: lifecycle, sharing, and the
version -> room mappings used by the real-time sync transport.

Read-only endpoints use GET; every mutation uses POST, PATCH, PUT or DELETE.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from doc_registry.core.auth import CurrentUser
from doc_registry.core.database import DbSession
from doc_registry.core.validation import MAX_TOKEN_LENGTH
from doc_registry.models.contracts.common import SuccessResponse
from doc_registry.models.contracts.document import (
    AccessPublic,
    DocumentCreate,
    DocumentPublic,
    DocumentRename,
    GeneratedIdPublic,
    RoomPublic,
    RoomRequest,
    ShareRequest,
)
from doc_registry.services.registry import DocumentRegistryService, get_registry_service


def registry_service(db: DbSession) -> DocumentRegistryService:
    """Dependency providing the registry service for the request session."""
    return get_registry_service(db)


Registry = Annotated[DocumentRegistryService, Depends(registry_service)]

router = APIRouter(prefix="/api/documents", tags=["documents"])
ids_router = APIRouter(prefix="/api/ids", tags=["ids"])


@router.get("", response_model=list[DocumentPublic])
async def list_documents(
    current_user: CurrentUser,
    registry: Registry,
    tag: str | None = Query(None, description="Filter by app/tool tag"),
    all: bool = Query(False, description="Admins only: list every document"),
    include_deleted: bool = Query(False, description="Include soft-deleted documents"),
    deleted_only: bool = Query(False, description="Only soft-deleted documents"),
) -> list[DocumentPublic]:
    """
    List documents visible to the caller.

    Args:
        current_user: Current authenticated user
        registry: Registry service
        tag: Optional tag filter
        all: Widen scope to all documents (ignored for non-admins)
        include_deleted: Include soft-deleted documents
        deleted_only: Only soft-deleted documents

    Returns:
        Documents in insertion order
    """
    documents = await registry.list_documents(
        current_user,
        tag=tag,
        all_documents=all,
        include_deleted=include_deleted,
        deleted_only=deleted_only,
    )
    return [DocumentPublic.from_document(doc) for doc in documents]


@router.post("", response_model=DocumentPublic, status_code=status.HTTP_201_CREATED)
async def create_document(
    doc_data: DocumentCreate,
    current_user: CurrentUser,
    registry: Registry,
) -> DocumentPublic:
    """
    Create a document owned by the caller with its initial version room.

    Returns:
        Created document
    """
    doc = await registry.create(
        current_user,
        doc_data.id,
        tag=doc_data.tag,
        title=doc_data.title,
        version=doc_data.version,
    )
    return DocumentPublic.from_document(doc)


@router.get("/{document_id}/access", response_model=AccessPublic)
async def check_access(
    document_id: str,
    current_user: CurrentUser,
    registry: Registry,
    version: str | None = Query(None, description='Version label (defaults to "1")'),
) -> AccessPublic:
    """
    Resolve the room for a version plus the caller's permissions.

    Never creates a mapping; use POST /rooms for get-or-create.
    """
    grant = await registry.access(current_user, document_id, version)
    return AccessPublic(
        id=grant.document_id,
        version=grant.version,
        room=grant.room,
        user=grant.user,
        permissions=grant.permissions,
    )


@router.post("/{document_id}/rooms", response_model=RoomPublic)
async def get_or_create_room(
    document_id: str,
    request: RoomRequest,
    current_user: CurrentUser,
    registry: Registry,
) -> RoomPublic:
    """
    Return the room for a version, creating it if it does not exist yet.

    Requires write access.
    """
    assignment = await registry.get_or_create_room(current_user, document_id, request.version)
    return RoomPublic(
        id=assignment.document_id,
        version=assignment.version,
        room=assignment.room,
        created=assignment.created,
    )


@router.patch("/{document_id}", response_model=DocumentPublic)
async def rename_document(
    document_id: str,
    request: DocumentRename,
    current_user: CurrentUser,
    registry: Registry,
) -> DocumentPublic:
    """Rename a document (owner or admin)."""
    doc = await registry.rename(current_user, document_id, request.title)
    return DocumentPublic.from_document(doc)


@router.put("/{document_id}/shares/{username}", response_model=DocumentPublic)
async def share_document(
    document_id: str,
    username: str,
    request: ShareRequest,
    current_user: CurrentUser,
    registry: Registry,
) -> DocumentPublic:
    """Grant or replace a user's permissions (owner or admin)."""
    doc = await registry.share(
        current_user,
        document_id,
        username,
        [permission.value for permission in request.permissions],
    )
    return DocumentPublic.from_document(doc)


@router.delete("/{document_id}/shares/{username}", response_model=DocumentPublic)
async def revoke_share(
    document_id: str,
    username: str,
    current_user: CurrentUser,
    registry: Registry,
) -> DocumentPublic:
    """Revoke a user's grant (owner or admin). Missing grants are ignored."""
    doc = await registry.revoke(current_user, document_id, username)
    return DocumentPublic.from_document(doc)


@router.delete("/{document_id}/permanent", response_model=SuccessResponse)
async def permanent_delete_document(
    document_id: str,
    current_user: CurrentUser,
    registry: Registry,
) -> SuccessResponse:
    """Purge a document with its versions and shares (owner or admin)."""
    await registry.permanent_delete(current_user, document_id)
    return SuccessResponse()


@router.delete("/{document_id}", response_model=SuccessResponse)
async def delete_document(
    document_id: str,
    current_user: CurrentUser,
    registry: Registry,
) -> SuccessResponse:
    """Soft-delete a document (owner or admin)."""
    await registry.delete(current_user, document_id)
    return SuccessResponse()


@router.post("/{document_id}/restore", response_model=SuccessResponse)
async def restore_document(
    document_id: str,
    current_user: CurrentUser,
    registry: Registry,
) -> SuccessResponse:
    """Restore a soft-deleted document (owner or admin)."""
    await registry.restore(current_user, document_id)
    return SuccessResponse()


@ids_router.get("/generate", response_model=GeneratedIdPublic)
async def generate_id(
    current_user: CurrentUser,
    registry: Registry,
    length: int = Query(16, description=f"Token length (1-{MAX_TOKEN_LENGTH})"),
) -> GeneratedIdPublic:
    """Generate a random id from the unambiguous alphabet."""
    return GeneratedIdPublic(id=registry.generate_id(length))
