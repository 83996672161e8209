"""
Issued room ORM model.

Append-only ledger of every collaboration room handed out by the registry.
Rows survive document purges so that a room token is never assigned twice.
"""

from datetime import UTC, datetime

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from doc_registry.models.orm.base import Base


class IssuedRoom(Base):
    """Issued room ledger table."""

    __tablename__ = "issued_rooms"

    room: Mapped[str] = mapped_column(String(128), primary_key=True)
    # No foreign key: the ledger outlives the documents it references
    document_id: Mapped[str] = mapped_column(String(255), nullable=False)
    version: Mapped[str] = mapped_column(String(64), nullable=False)
    issued_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
    )
