"""Initial registry tables

Revision ID: 001
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # Documents table
    op.create_table(
        "documents",
        sa.Column("id", sa.String(length=255), nullable=False),
        sa.Column("owner", sa.String(length=255), nullable=False),
        sa.Column(
            "app",
            sa.String(length=255),
            nullable=False,
            server_default="",
            comment="Free-form app/tool tag used for filtering",
        ),
        sa.Column("title", sa.String(length=1024), nullable=False),
        sa.Column("deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_documents_owner", "documents", ["owner"], unique=False)
    op.create_index("ix_documents_app", "documents", ["app"], unique=False)
    op.create_index("ix_documents_created_at", "documents", ["created_at"], unique=False)

    # Version -> room mappings
    op.create_table(
        "document_versions",
        sa.Column("document_id", sa.String(length=255), nullable=False),
        sa.Column("version", sa.String(length=64), nullable=False),
        sa.Column("room", sa.String(length=128), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["document_id"], ["documents.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("document_id", "version"),
        sa.UniqueConstraint("room", name="uq_document_versions_room"),
    )

    # Share grants
    op.create_table(
        "document_shares",
        sa.Column("document_id", sa.String(length=255), nullable=False),
        sa.Column("username", sa.String(length=255), nullable=False),
        sa.Column("can_read", sa.Boolean(), nullable=False),
        sa.Column("can_write", sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(["document_id"], ["documents.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("document_id", "username"),
    )
    op.create_index(
        "ix_document_shares_username", "document_shares", ["username"], unique=False
    )

    # Issued room ledger (no foreign key: outlives purged documents)
    op.create_table(
        "issued_rooms",
        sa.Column("room", sa.String(length=128), nullable=False),
        sa.Column("document_id", sa.String(length=255), nullable=False),
        sa.Column("version", sa.String(length=64), nullable=False),
        sa.Column(
            "issued_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("room"),
    )


def downgrade() -> None:
    op.drop_table("issued_rooms")
    op.drop_index("ix_document_shares_username", table_name="document_shares")
    op.drop_table("document_shares")
    op.drop_table("document_versions")
    op.drop_index("ix_documents_created_at", table_name="documents")
    op.drop_index("ix_documents_app", table_name="documents")
    op.drop_index("ix_documents_owner", table_name="documents")
    op.drop_table("documents")
