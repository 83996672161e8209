"""
Legacy Registry Import

Imports the flat JSON registry used before the database store existed:

    [
        {
            "id": "notes",
            "owner": "alice",
            "tool": "whiteboard",
            "title": "Notes",
            "versions": {"1": "k3n8..."},
            "shared_with": [{"username": "bob", "permissions": ["read"]}]
        }
    ]

Documents that already exist (in any state) are left alone. Every imported
room is recorded in the issued room ledger; rooms that were already issued
are skipped so no room ever ends up mapped twice.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from doc_registry.core.errors import InvalidArgumentError
from doc_registry.core.validation import (
    parse_permissions,
    validate_document_id,
    validate_tag,
    validate_title,
    validate_username,
    validate_version,
)
from doc_registry.models.orm.document import Document, DocumentShare, DocumentVersion
from doc_registry.repositories.document import DocumentRepository
from doc_registry.services.registry import DEFAULT_TITLE

logger = logging.getLogger(__name__)


@dataclass
class ImportReport:
    """Counters collected during an import run."""

    documents_seen: int = 0
    documents_imported: int = 0
    documents_skipped: int = 0
    rooms_imported: int = 0
    rooms_skipped: int = 0
    shares_imported: int = 0
    shares_skipped: int = 0


def load_legacy_file(path: Path) -> list[dict[str, Any]]:
    """
    Read a legacy registry file.

    Raises:
        ValueError: If the file is not a JSON list of objects
    """
    with path.open(encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise ValueError(f"{path} does not contain a JSON list of documents")
    return data


class LegacyImporter:
    """Imports legacy JSON records into the registry store."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = DocumentRepository(db)
        self.report = ImportReport()
        self._claimed_rooms: set[str] = set()

    async def run(self, records: list[dict[str, Any]], *, dry_run: bool = False) -> ImportReport:
        """
        Import all records in one transaction.

        Args:
            records: Parsed legacy documents
            dry_run: Roll back instead of committing

        Returns:
            ImportReport with per-kind counters
        """
        for record in records:
            self.report.documents_seen += 1
            await self._import_document(record)

        if dry_run:
            await self.db.rollback()
            logger.info("[DRY RUN] Rolled back legacy import")
        else:
            await self.db.commit()
        return self.report

    async def _import_document(self, record: dict[str, Any]) -> None:
        try:
            document_id = validate_document_id(record.get("id"))
            owner = validate_username(record.get("owner"))
            app = validate_tag(record.get("tool") or record.get("app"))
            title = validate_title(record.get("title"), default=DEFAULT_TITLE)
        except InvalidArgumentError as e:
            logger.warning(f"Skipping legacy record {record.get('id')!r}: {e.message}")
            self.report.documents_skipped += 1
            return

        if await self.repo.exists_any_state(document_id):
            logger.info(f"Skipping {document_id}: already in registry")
            self.report.documents_skipped += 1
            return

        versions = record.get("versions") or {}
        if not isinstance(versions, dict):
            logger.warning(f"Ignoring malformed versions of {document_id}")
            self.report.rooms_skipped += len(versions) if isinstance(versions, list) else 1
            versions = {}

        imported_rooms: list[tuple[str, str]] = []
        for version, room in versions.items():
            if await self._room_usable(document_id, str(version), room):
                imported_rooms.append((room, str(version)))

        shares: dict[str, DocumentShare] = {}
        for share in record.get("shared_with") or []:
            grant = self._parse_share(document_id, share)
            if grant is not None and grant.username not in shares:
                shares[grant.username] = grant
        self.report.shares_imported += len(shares)

        # Collections are populated up front; an async session cannot lazy-load them later
        self.db.add(
            Document(
                id=document_id,
                owner=owner,
                app=app,
                title=title,
                deleted=bool(record.get("deleted", False)),
                versions=[
                    DocumentVersion(version=version, room=room) for room, version in imported_rooms
                ],
                shares=list(shares.values()),
            )
        )
        await self.db.flush()

        for room, version in imported_rooms:
            await self.repo.rooms.record(room, document_id, version)
        self.report.rooms_imported += len(imported_rooms)
        self.report.documents_imported += 1

        logger.info(
            f"Imported {document_id} ({len(imported_rooms)} rooms, {len(shares)} shares)",
            extra={"doc_id": document_id, "user": owner},
        )

    async def _room_usable(self, document_id: str, version: str, room: Any) -> bool:
        """A legacy mapping is kept only if both labels are valid and the room is unclaimed."""
        try:
            validate_version(version)
        except InvalidArgumentError:
            logger.warning(f"Skipping {document_id}@{version!r}: invalid version label")
            self.report.rooms_skipped += 1
            return False

        if not isinstance(room, str) or not room or len(room) > 128:
            logger.warning(f"Skipping {document_id}@{version}: invalid room")
            self.report.rooms_skipped += 1
            return False

        if room in self._claimed_rooms or await self.repo.rooms.is_issued(room):
            logger.warning(f"Skipping {document_id}@{version}: room {room} already issued")
            self.report.rooms_skipped += 1
            return False

        self._claimed_rooms.add(room)
        return True

    def _parse_share(self, document_id: str, share: Any) -> DocumentShare | None:
        if not isinstance(share, dict):
            self.report.shares_skipped += 1
            return None
        try:
            username = validate_username(share.get("username"))
            can_read, can_write = parse_permissions(share.get("permissions"))
        except InvalidArgumentError as e:
            logger.warning(f"Skipping share on {document_id}: {e.message}")
            self.report.shares_skipped += 1
            return None
        return DocumentShare(username=username, can_read=can_read, can_write=can_write)


async def import_legacy_documents(
    db: AsyncSession, records: list[dict[str, Any]], *, dry_run: bool = False
) -> ImportReport:
    """Import legacy records through a fresh LegacyImporter."""
    return await LegacyImporter(db).run(records, dry_run=dry_run)
