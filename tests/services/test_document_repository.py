"""
Tests for the registry store primitives (DocumentRepository and the issued
room ledger).
"""

import pytest

from doc_registry.core.errors import ConflictError
from doc_registry.repositories import DocumentRepository, IssuedRoomRepository


@pytest.fixture
def repo(db_session) -> DocumentRepository:
    return DocumentRepository(db_session)


async def seed(repo: DocumentRepository, document_id: str = "notes", owner: str = "alice") -> str:
    room = await repo.insert_document_with_version(
        document_id=document_id, owner=owner, app="", title="Notes", version="1"
    )
    await repo.session.commit()
    return room


class TestDocumentRepository:
    """Tests for DocumentRepository."""

    async def test_insert_and_get(self, repo):
        room = await seed(repo)

        doc = await repo.get("notes")

        assert doc.owner == "alice"
        assert doc.version_map == {"1": room}
        assert await repo.rooms.is_issued(room)

    async def test_insert_conflict(self, repo):
        await seed(repo)

        with pytest.raises(ConflictError):
            await repo.insert_document_with_version(
                document_id="notes", owner="bob", app="", title="Other", version="1"
            )

    async def test_get_hides_deleted_unless_requested(self, repo):
        await seed(repo)
        assert await repo.set_deleted_flag("notes", True) is True
        await repo.session.commit()

        assert await repo.get("notes") is None
        assert (await repo.get("notes", include_deleted=True)).deleted is True
        assert await repo.exists_any_state("notes") is True

    async def test_update_missing_document(self, repo):
        assert await repo.update_title("ghost", "Title") is False
        assert await repo.set_deleted_flag("ghost", True) is False

    async def test_upsert_share_replaces_row(self, repo):
        await seed(repo)
        await repo.upsert_share("notes", "bob", True, False)
        await repo.upsert_share("notes", "bob", False, True)
        await repo.session.commit()

        doc = await repo.get("notes")

        assert len(doc.shares) == 1
        assert doc.share_for("bob").permissions == ["write"]

    async def test_delete_share(self, repo):
        await seed(repo)
        await repo.upsert_share("notes", "bob", True, False)

        assert await repo.delete_share("notes", "bob") is True
        assert await repo.delete_share("notes", "bob") is False

    async def test_insert_version_if_absent(self, repo):
        await seed(repo)

        room, created = await repo.insert_version_if_absent("notes", "2")
        same, created_again = await repo.insert_version_if_absent("notes", "2")

        assert created is True
        assert created_again is False
        assert same == room
        assert await repo.get_room("notes", "2") == room

    async def test_purge(self, repo):
        room = await seed(repo)
        await repo.upsert_share("notes", "bob", True, True)

        assert await repo.purge_document("notes") is True
        await repo.session.commit()

        assert await repo.exists_any_state("notes") is False
        assert await repo.get_room("notes", "1") is None
        assert await repo.rooms.is_issued(room)
        assert await repo.purge_document("notes") is False


class TestIssuedRoomRepository:
    """Tests for the issued room ledger."""

    async def test_issue_skips_recorded_rooms(self, db_session):
        tokens = iter(["taken123", "taken123", "fresh456"])
        rooms = IssuedRoomRepository(db_session, token_factory=lambda _n: next(tokens))

        first = await rooms.issue_room()
        await rooms.record(first, "notes", "1")

        assert first == "taken123"
        assert await rooms.issue_room() == "fresh456"

    async def test_room_length_is_passed_to_factory(self, db_session):
        lengths = []

        def factory(length: int) -> str:
            lengths.append(length)
            return "x" * length

        rooms = IssuedRoomRepository(db_session, token_factory=factory, room_length=24)

        assert await rooms.issue_room() == "x" * 24
        assert lengths == [24]
