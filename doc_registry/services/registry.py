"""
Document Registry Service

The operations layer: authorizes each request against Access Control, runs
it through the DocumentRepository and commits. Every mutating operation
commits its own transaction before returning, so a response is only
produced for fully applied changes.

Callers without the required permission get NotFoundOrDeniedError, the
same failure as for a missing document, so existence never leaks.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from doc_registry.config import get_settings
from doc_registry.core.auth import UserPrincipal
from doc_registry.core.errors import ConflictError, InvalidArgumentError, NotFoundOrDeniedError
from doc_registry.core.security import generate_token
from doc_registry.core.validation import (
    DEFAULT_VERSION,
    parse_permissions,
    validate_document_id,
    validate_tag,
    validate_title,
    validate_token_length,
    validate_username,
    validate_version,
)
from doc_registry.models.orm.document import Document
from doc_registry.repositories.document import DocumentRepository
from doc_registry.services import access_control

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Untitled"


@dataclass(frozen=True)
class AccessGrant:
    """Result of an access check: the room plus the caller's permissions."""

    document_id: str
    version: str
    room: str
    user: str
    permissions: list[str]


@dataclass(frozen=True)
class RoomAssignment:
    """Result of get-or-create room."""

    document_id: str
    version: str
    room: str
    created: bool


class DocumentRegistryService:
    """Registry operations over one database session."""

    def __init__(
        self,
        db: AsyncSession,
        *,
        token_factory: Callable[[int], str] = generate_token,
        room_length: int = 16,
    ):
        self.db = db
        self.token_factory = token_factory
        self.repo = DocumentRepository(
            db, token_factory=token_factory, room_length=room_length
        )

    async def _load(
        self,
        document_id: str,
        caller: UserPrincipal,
        check: Callable[[Document, str, bool], bool],
        *,
        include_deleted: bool = False,
    ) -> Document:
        """Fetch a document and apply a permission predicate, or fail uniformly."""
        validate_document_id(document_id)
        doc = await self.repo.get(document_id, include_deleted=include_deleted)
        if doc is None or not check(doc, caller.username, caller.is_admin):
            logger.info(
                "Registry request denied or document missing",
                extra={"doc_id": document_id, "user": caller.username},
            )
            raise NotFoundOrDeniedError()
        return doc

    async def _reload(self, document_id: str) -> Document:
        # Statement-level upserts bypass the identity map
        self.db.expire_all()
        doc = await self.repo.get(document_id, include_deleted=True)
        if doc is None:
            raise NotFoundOrDeniedError()
        return doc

    async def _raise_if_purged(self, document_id: str, caller: UserPrincipal) -> None:
        """
        Turn a foreign key failure into NotFoundOrDeniedError when the
        document was purged between the permission check and the write.

        Rolls back the failed transaction; returns if the document still
        exists so the caller can re-raise the original error.
        """
        await self.db.rollback()
        if not await self.repo.exists_any_state(document_id):
            logger.info(
                "Document purged during write",
                extra={"doc_id": document_id, "user": caller.username},
            )
            raise NotFoundOrDeniedError() from None

    async def create(
        self,
        caller: UserPrincipal,
        document_id: str,
        *,
        tag: str | None = None,
        title: str | None = None,
        version: str | None = None,
    ) -> Document:
        """
        Create a document owned by the caller together with its first version.

        Args:
            caller: Authenticated caller
            document_id: Caller-chosen document id
            tag: Optional app/tool tag
            title: Optional title (defaults to "Untitled")
            version: Initial version label (defaults to "1")

        Returns:
            The created document with its version map

        Raises:
            InvalidArgumentError: If the id, version, tag or title is malformed
            ConflictError: If the id is already in use, including by a soft-deleted document
        """
        validate_document_id(document_id)
        version = validate_version(version, default=DEFAULT_VERSION)
        tag = validate_tag(tag)
        title = validate_title(title, default=DEFAULT_TITLE)

        if await self.repo.exists_any_state(document_id):
            logger.warning(
                "Document create conflict",
                extra={"doc_id": document_id, "user": caller.username},
            )
            raise ConflictError("Document already exists")

        try:
            room = await self.repo.insert_document_with_version(
                document_id=document_id,
                owner=caller.username,
                app=tag,
                title=title,
                version=version,
            )
        except ConflictError:
            logger.warning(
                "Document create lost race",
                extra={"doc_id": document_id, "user": caller.username},
            )
            await self.db.rollback()
            raise
        await self.db.commit()

        logger.info(
            f"Document created: {document_id}",
            extra={
                "doc_id": document_id,
                "user": caller.username,
                "version": version,
                "room": room,
            },
        )
        return await self._reload(document_id)

    async def list_documents(
        self,
        caller: UserPrincipal,
        *,
        tag: str | None = None,
        all_documents: bool = False,
        include_deleted: bool = False,
        deleted_only: bool = False,
    ) -> list[Document]:
        """
        List documents the caller can read.

        `all_documents` widens the scope to every document for admins and is
        ignored for everyone else.
        """
        return await self.repo.list_visible(
            caller.username,
            caller.is_admin,
            tag=tag,
            include_deleted=include_deleted,
            deleted_only=deleted_only,
            all_documents=all_documents,
        )

    async def list_by_tag(
        self,
        caller: UserPrincipal,
        tag: str | None,
        *,
        all_documents: bool = False,
        include_deleted: bool = False,
        deleted_only: bool = False,
    ) -> list[Document]:
        """List documents carrying a tag. The tag is required."""
        if not tag:
            raise InvalidArgumentError("Missing tag", field="tag")
        return await self.list_documents(
            caller,
            tag=tag,
            all_documents=all_documents,
            include_deleted=include_deleted,
            deleted_only=deleted_only,
        )

    async def rename(self, caller: UserPrincipal, document_id: str, title: str | None) -> Document:
        """Change a document's title (owner or admin)."""
        title = validate_title(title)
        await self._load(document_id, caller, access_control.can_manage)

        await self.repo.update_title(document_id, title)
        await self.db.commit()

        logger.info(
            f"Document renamed: {document_id}",
            extra={"doc_id": document_id, "user": caller.username},
        )
        return await self._reload(document_id)

    async def share(
        self,
        caller: UserPrincipal,
        document_id: str,
        username: str | None,
        permissions: str | list[str] | None,
    ) -> Document:
        """
        Grant a user read and/or write access, replacing any earlier grant.

        Raises:
            InvalidArgumentError: If the username or permissions are malformed
            NotFoundOrDeniedError: If the document is missing or the caller cannot manage it
        """
        validate_document_id(document_id)
        username = validate_username(username)
        can_read, can_write = parse_permissions(permissions)
        await self._load(document_id, caller, access_control.can_manage)

        try:
            await self.repo.upsert_share(document_id, username, can_read, can_write)
        except IntegrityError:
            await self._raise_if_purged(document_id, caller)
            raise
        await self.db.commit()

        logger.info(
            f"Document shared: {document_id} -> {username}",
            extra={
                "doc_id": document_id,
                "user": caller.username,
                "grantee": username,
                "can_read": can_read,
                "can_write": can_write,
            },
        )
        return await self._reload(document_id)

    async def revoke(self, caller: UserPrincipal, document_id: str, username: str | None) -> Document:
        """Remove a user's grant. Revoking a missing grant is not an error."""
        validate_document_id(document_id)
        username = validate_username(username)
        await self._load(document_id, caller, access_control.can_manage)

        removed = await self.repo.delete_share(document_id, username)
        await self.db.commit()

        logger.info(
            f"Document share revoked: {document_id} -> {username}",
            extra={
                "doc_id": document_id,
                "user": caller.username,
                "grantee": username,
                "removed": removed,
            },
        )
        return await self._reload(document_id)

    async def delete(self, caller: UserPrincipal, document_id: str) -> None:
        """Soft-delete a document. Deleting an already deleted document succeeds."""
        await self._load(document_id, caller, access_control.can_manage, include_deleted=True)

        await self.repo.set_deleted_flag(document_id, True)
        await self.db.commit()

        logger.info(
            f"Document deleted: {document_id}",
            extra={"doc_id": document_id, "user": caller.username},
        )

    async def restore(self, caller: UserPrincipal, document_id: str) -> None:
        """Clear the soft-delete flag. Restoring a live document succeeds."""
        await self._load(document_id, caller, access_control.can_manage, include_deleted=True)

        await self.repo.set_deleted_flag(document_id, False)
        await self.db.commit()

        logger.info(
            f"Document restored: {document_id}",
            extra={"doc_id": document_id, "user": caller.username},
        )

    async def permanent_delete(self, caller: UserPrincipal, document_id: str) -> None:
        """
        Purge a document with its versions and shares.

        The id becomes available for a new create afterwards; the purged
        rooms stay reserved in the ledger.
        """
        await self._load(document_id, caller, access_control.can_manage, include_deleted=True)

        await self.repo.purge_document(document_id)
        await self.db.commit()

        logger.info(
            f"Document permanently deleted: {document_id}",
            extra={"doc_id": document_id, "user": caller.username},
        )

    async def access(
        self, caller: UserPrincipal, document_id: str, version: str | None = None
    ) -> AccessGrant:
        """
        Resolve the room for a version and the caller's permissions.

        Read-only: a version without a mapping is reported as not found
        instead of being created.

        Raises:
            InvalidArgumentError: If the id or version is malformed
            NotFoundOrDeniedError: If the document or version is missing, or the caller cannot read
        """
        version = validate_version(version, default=DEFAULT_VERSION)
        doc = await self._load(document_id, caller, access_control.can_read)

        room = doc.version_map.get(version)
        if room is None:
            raise NotFoundOrDeniedError("Version not found")

        return AccessGrant(
            document_id=document_id,
            version=version,
            room=room,
            user=caller.username,
            permissions=access_control.effective_permissions(
                doc, caller.username, caller.is_admin
            ),
        )

    async def get_or_create_room(
        self, caller: UserPrincipal, document_id: str, version: str | None
    ) -> RoomAssignment:
        """
        Return the room for (document, version), creating it if absent.

        Safe to retry: concurrent calls for the same unset version all
        observe the single room that gets persisted.
        """
        version = validate_version(version)
        await self._load(document_id, caller, access_control.can_write)

        try:
            room, created = await self.repo.insert_version_if_absent(document_id, version)
        except IntegrityError:
            await self._raise_if_purged(document_id, caller)
            raise
        await self.db.commit()

        if created:
            logger.info(
                f"Room created for {document_id}@{version}",
                extra={
                    "doc_id": document_id,
                    "user": caller.username,
                    "version": version,
                    "room": room,
                },
            )
        return RoomAssignment(
            document_id=document_id, version=version, room=room, created=created
        )

    def generate_id(self, length: int = 16) -> str:
        """Generate a random id from the safe alphabet (1-128 characters)."""
        return self.token_factory(validate_token_length(length))


def get_registry_service(db: AsyncSession) -> DocumentRegistryService:
    """Build a registry service configured from settings."""
    return DocumentRegistryService(db, room_length=get_settings().room_token_length)
