"""
Document Repository

The registry store: durable keeper of documents, their version -> room
mappings and share grants.

Multi-row writes (create, get-or-insert version, purge) run inside the
caller's transaction and rely on primary key and unique constraints with
ON CONFLICT clauses, so concurrent writers converge through the database
rather than through in-process locks.
"""

from collections.abc import Callable
from datetime import UTC, datetime

from sqlalchemy import delete, exists, insert, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from doc_registry.core.errors import ConflictError
from doc_registry.core.security import generate_token
from doc_registry.models.orm.document import Document, DocumentShare, DocumentVersion
from doc_registry.repositories.base import BaseRepository
from doc_registry.repositories.issued_room import IssuedRoomRepository


class DocumentRepository(BaseRepository[Document]):
    """Repository for Document aggregate operations."""

    model = Document

    def __init__(
        self,
        session: AsyncSession,
        *,
        token_factory: Callable[[int], str] = generate_token,
        room_length: int = 16,
    ):
        super().__init__(session)
        self.rooms = IssuedRoomRepository(
            session, token_factory=token_factory, room_length=room_length
        )

    def _select_full(self):
        """Select documents with versions and shares, refreshing cached instances."""
        return (
            select(Document)
            .options(selectinload(Document.versions), selectinload(Document.shares))
            .execution_options(populate_existing=True)
        )

    async def _touch(self, document_id: str) -> None:
        """Bump updated_at."""
        await self.session.execute(
            update(Document)
            .where(Document.id == document_id)
            .values(updated_at=datetime.now(UTC))
        )

    async def get(self, document_id: str, *, include_deleted: bool = False) -> Document | None:
        """
        Get a document with its full version map and share list.

        Args:
            document_id: Document id
            include_deleted: Also return soft-deleted documents

        Returns:
            Document or None if absent (or soft-deleted and not requested)
        """
        query = self._select_full().where(Document.id == document_id)
        if not include_deleted:
            query = query.where(Document.deleted.is_(False))
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def exists_any_state(self, document_id: str) -> bool:
        """Check whether a document row exists, deleted or not."""
        result = await self.session.execute(
            select(Document.id).where(Document.id == document_id)
        )
        return result.scalar_one_or_none() is not None

    async def insert_document_with_version(
        self,
        *,
        document_id: str,
        owner: str,
        app: str,
        title: str,
        version: str,
    ) -> str:
        """
        Insert a document and its first version mapping.

        Both rows (and the ledger entry for the new room) are written in the
        current transaction; the caller commits.

        Returns:
            The room assigned to the initial version

        Raises:
            ConflictError: If a document with this id exists in any state
        """
        now = datetime.now(UTC)
        stmt = (
            self.insert_stmt(Document)
            .values(
                id=document_id,
                owner=owner,
                app=app,
                title=title,
                deleted=False,
                created_at=now,
                updated_at=now,
            )
            .on_conflict_do_nothing(index_elements=[Document.id])
            .returning(Document.id)
        )
        result = await self.session.execute(stmt)
        if result.scalar_one_or_none() is None:
            raise ConflictError("Document already exists")

        room = await self.rooms.issue_room()
        await self.session.execute(
            insert(DocumentVersion).values(
                document_id=document_id,
                version=version,
                room=room,
                created_at=now,
            )
        )
        await self.rooms.record(room, document_id, version)
        return room

    async def update_title(self, document_id: str, title: str) -> bool:
        """
        Set a document's title.

        Returns:
            True if a row was updated
        """
        result = await self.session.execute(
            update(Document)
            .where(Document.id == document_id)
            .values(title=title, updated_at=datetime.now(UTC))
        )
        return result.rowcount > 0

    async def upsert_share(
        self, document_id: str, username: str, can_read: bool, can_write: bool
    ) -> None:
        """
        Create or replace the grant for (document, username).

        The whole row is replaced; flags from an earlier grant are not merged.
        """
        stmt = self.insert_stmt(DocumentShare).values(
            document_id=document_id,
            username=username,
            can_read=can_read,
            can_write=can_write,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[DocumentShare.document_id, DocumentShare.username],
            set_={
                "can_read": stmt.excluded.can_read,
                "can_write": stmt.excluded.can_write,
            },
        )
        await self.session.execute(stmt)
        await self._touch(document_id)

    async def delete_share(self, document_id: str, username: str) -> bool:
        """
        Remove the grant for (document, username) if present.

        Returns:
            True if a grant was removed
        """
        result = await self.session.execute(
            delete(DocumentShare).where(
                DocumentShare.document_id == document_id,
                DocumentShare.username == username,
            )
        )
        await self._touch(document_id)
        return result.rowcount > 0

    async def set_deleted_flag(self, document_id: str, deleted: bool) -> bool:
        """
        Set or clear the soft-delete flag.

        Returns:
            True if a row was updated
        """
        result = await self.session.execute(
            update(Document)
            .where(Document.id == document_id)
            .values(deleted=deleted, updated_at=datetime.now(UTC))
        )
        return result.rowcount > 0

    async def get_room(self, document_id: str, version: str) -> str | None:
        """Look up the room mapped to (document, version) without creating one."""
        result = await self.session.execute(
            select(DocumentVersion.room).where(
                DocumentVersion.document_id == document_id,
                DocumentVersion.version == version,
            )
        )
        return result.scalar_one_or_none()

    async def insert_version_if_absent(self, document_id: str, version: str) -> tuple[str, bool]:
        """
        Get or insert the room for (document, version).

        Concurrent callers race on the (document_id, version) primary key:
        the losing INSERT waits for the winner's commit, does nothing, and
        the loser then reads back the winner's room.

        Returns:
            Tuple of (room, created)

        Raises:
            RuntimeError: If no mapping exists after the insert attempt
        """
        existing = await self.get_room(document_id, version)
        if existing is not None:
            return existing, False

        room = await self.rooms.issue_room()
        stmt = (
            self.insert_stmt(DocumentVersion)
            .values(
                document_id=document_id,
                version=version,
                room=room,
                created_at=datetime.now(UTC),
            )
            .on_conflict_do_nothing(
                index_elements=[DocumentVersion.document_id, DocumentVersion.version]
            )
            .returning(DocumentVersion.room)
        )
        inserted = (await self.session.execute(stmt)).scalar_one_or_none()
        if inserted is not None:
            await self.rooms.record(inserted, document_id, version)
            await self._touch(document_id)
            return inserted, True

        existing = await self.get_room(document_id, version)
        if existing is None:
            raise RuntimeError("Version mapping insert failed to materialise")
        return existing, False

    async def purge_document(self, document_id: str) -> bool:
        """
        Permanently remove a document with its versions and shares.

        Issued rooms stay in the ledger.

        Returns:
            True if the document existed
        """
        await self.session.execute(
            delete(DocumentShare).where(DocumentShare.document_id == document_id)
        )
        await self.session.execute(
            delete(DocumentVersion).where(DocumentVersion.document_id == document_id)
        )
        result = await self.session.execute(
            delete(Document).where(Document.id == document_id)
        )
        return result.rowcount > 0

    async def list_visible(
        self,
        caller: str,
        is_admin: bool,
        *,
        tag: str | None = None,
        include_deleted: bool = False,
        deleted_only: bool = False,
        all_documents: bool = False,
    ) -> list[Document]:
        """
        List documents visible to a caller, in insertion order.

        Args:
            caller: Caller username
            is_admin: Caller's admin flag
            tag: Optional app/tool tag filter
            include_deleted: Include soft-deleted documents
            deleted_only: Return only soft-deleted documents (trash view)
            all_documents: Admins see every document instead of owned/shared ones

        Returns:
            List of documents with versions and shares loaded
        """
        query = self._select_full()

        if deleted_only:
            query = query.where(Document.deleted.is_(True))
        elif not include_deleted:
            query = query.where(Document.deleted.is_(False))

        if tag:
            query = query.where(Document.app == tag)

        if not (all_documents and is_admin):
            readable_share = exists().where(
                DocumentShare.document_id == Document.id,
                DocumentShare.username == caller,
                DocumentShare.can_read.is_(True),
            )
            query = query.where(or_(Document.owner == caller, readable_share))

        query = query.order_by(Document.created_at, Document.id)
        result = await self.session.execute(query)
        return list(result.scalars().all())
