"""Data access repositories."""

from doc_registry.repositories.document import DocumentRepository
from doc_registry.repositories.issued_room import IssuedRoomRepository

__all__ = [
    "DocumentRepository",
    "IssuedRoomRepository",
]
