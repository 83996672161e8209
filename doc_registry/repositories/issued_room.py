"""
Issued Room Repository

Allocates collaboration room tokens and records them in the append-only
ledger. A token present in the ledger is never handed out again.
"""

from collections.abc import Callable

from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncSession

from doc_registry.core.security import generate_token
from doc_registry.models.orm.issued_room import IssuedRoom
from doc_registry.repositories.base import BaseRepository

MAX_ISSUE_ATTEMPTS = 8


class IssuedRoomRepository(BaseRepository[IssuedRoom]):
    """Repository for the issued room ledger."""

    model = IssuedRoom

    def __init__(
        self,
        session: AsyncSession,
        *,
        token_factory: Callable[[int], str] = generate_token,
        room_length: int = 16,
    ):
        super().__init__(session)
        self.token_factory = token_factory
        self.room_length = room_length

    async def is_issued(self, room: str) -> bool:
        """Check whether a room token was ever assigned."""
        return await self.get_by_id(room) is not None

    async def issue_room(self) -> str:
        """
        Draw a room token that has never been issued.

        The token is not reserved until record() is called in the same
        transaction as the version mapping that uses it.

        Returns:
            Fresh room token

        Raises:
            RuntimeError: If no unused token is found within MAX_ISSUE_ATTEMPTS
        """
        for _ in range(MAX_ISSUE_ATTEMPTS):
            room = self.token_factory(self.room_length)
            if not await self.is_issued(room):
                return room
        raise RuntimeError("Could not allocate an unused room token")

    async def record(self, room: str, document_id: str, version: str) -> None:
        """Add a room to the ledger."""
        await self.session.execute(
            insert(IssuedRoom).values(
                room=room,
                document_id=document_id,
                version=version,
            )
        )
