"""
Base Repository

Provides common database operations for all repositories.
Uses SQLAlchemy async session for all operations.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from doc_registry.models.orm.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """
    Base repository with common operations.

    Provides a consistent interface for database access across all models.
    """

    model: type[ModelT]

    def __init__(self, session: AsyncSession):
        """
        Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def get_by_id(self, id: Any) -> ModelT | None:
        """
        Get entity by primary key.

        Args:
            id: Primary key value

        Returns:
            Entity or None if not found
        """
        return await self.session.get(self.model, id)

    @property
    def dialect_name(self) -> str:
        """Name of the bound database dialect ("postgresql", "sqlite", ...)."""
        bind = self.session.get_bind()
        return bind.dialect.name if bind is not None else ""

    def insert_stmt(self, model: type[Base]) -> Any:
        """
        Build a dialect-specific INSERT supporting ON CONFLICT clauses.

        Args:
            model: ORM class to insert into

        Returns:
            postgresql or sqlite Insert construct

        Raises:
            RuntimeError: If the dialect has no ON CONFLICT support
        """
        if self.dialect_name == "postgresql":
            return postgresql.insert(model)
        if self.dialect_name == "sqlite":
            return sqlite.insert(model)
        raise RuntimeError(f"Unsupported database dialect: {self.dialect_name}")
