"""SQLAlchemy ORM Models for the document registry.

Pure database models using SQLAlchemy 2.0 declarative style.
These models define the database schema and relationships.
"""

from doc_registry.models.orm.base import Base
from doc_registry.models.orm.document import Document, DocumentShare, DocumentVersion
from doc_registry.models.orm.issued_room import IssuedRoom

__all__ = [
    # Base
    "Base",
    # Documents
    "Document",
    "DocumentVersion",
    "DocumentShare",
    # Room ledger
    "IssuedRoom",
]
