"""
Document ORM models.

A document is the aggregate root of the registry. Its version mappings
(version label -> collaboration room) and share grants belong to it and are
only destroyed when the document itself is purged.
"""

from datetime import UTC, datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
    false,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from doc_registry.models.orm.base import Base


class Document(Base):
    """Document database table."""

    __tablename__ = "documents"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    owner: Mapped[str] = mapped_column(String(255), nullable=False)
    app: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default="",
        server_default="",
        comment="Free-form app/tool tag used for filtering",
    )
    title: Mapped[str] = mapped_column(String(1024), nullable=False, default="Untitled")
    deleted: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
        onupdate=lambda: datetime.now(UTC),
    )

    # Relationships
    versions: Mapped[list["DocumentVersion"]] = relationship(
        back_populates="document",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="DocumentVersion.created_at",
    )
    shares: Mapped[list["DocumentShare"]] = relationship(
        back_populates="document",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="DocumentShare.username",
    )

    @property
    def version_map(self) -> dict[str, str]:
        """Version label -> room mapping."""
        return {v.version: v.room for v in self.versions}

    def share_for(self, username: str) -> "DocumentShare | None":
        """Return the share grant for a user, if any."""
        for share in self.shares:
            if share.username == username:
                return share
        return None

    __table_args__ = (
        Index("ix_documents_owner", "owner"),
        Index("ix_documents_app", "app"),
        Index("ix_documents_created_at", "created_at"),
    )


class DocumentVersion(Base):
    """Version label -> collaboration room mapping."""

    __tablename__ = "document_versions"

    document_id: Mapped[str] = mapped_column(
        ForeignKey("documents.id", ondelete="CASCADE"),
        primary_key=True,
    )
    version: Mapped[str] = mapped_column(String(64), primary_key=True)
    room: Mapped[str] = mapped_column(String(128), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
    )

    document: Mapped["Document"] = relationship(back_populates="versions")

    __table_args__ = (UniqueConstraint("room", name="uq_document_versions_room"),)


class DocumentShare(Base):
    """Per-user read/write grant on a document."""

    __tablename__ = "document_shares"

    document_id: Mapped[str] = mapped_column(
        ForeignKey("documents.id", ondelete="CASCADE"),
        primary_key=True,
    )
    username: Mapped[str] = mapped_column(String(255), primary_key=True)
    can_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    can_write: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    document: Mapped["Document"] = relationship(back_populates="shares")

    @property
    def permissions(self) -> list[str]:
        """Granted permissions as a list drawn from ["read", "write"]."""
        perms = []
        if self.can_read:
            perms.append("read")
        if self.can_write:
            perms.append("write")
        return perms

    __table_args__ = (Index("ix_document_shares_username", "username"),)
