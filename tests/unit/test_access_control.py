"""
Unit tests for access control predicates.

Predicates are pure functions of (document, caller, is_admin), so these
tests build documents in memory without a database.
"""

import pytest

from doc_registry.models.orm.document import Document, DocumentShare
from doc_registry.services import access_control


def make_document(owner: str = "alice", shares: list[tuple[str, bool, bool]] | None = None) -> Document:
    doc = Document(id="doc-1", owner=owner, app="", title="Doc", deleted=False)
    doc.shares = [
        DocumentShare(username=username, can_read=can_read, can_write=can_write)
        for username, can_read, can_write in (shares or [])
    ]
    return doc


@pytest.mark.unit
class TestReadWrite:
    """Tests for can_read and can_write."""

    def test_owner_can_read_and_write(self):
        doc = make_document()
        assert access_control.can_read(doc, "alice", False)
        assert access_control.can_write(doc, "alice", False)

    def test_admin_can_read_and_write(self):
        doc = make_document()
        assert access_control.can_read(doc, "root", True)
        assert access_control.can_write(doc, "root", True)

    def test_stranger_has_no_access(self):
        doc = make_document()
        assert not access_control.can_read(doc, "mallory", False)
        assert not access_control.can_write(doc, "mallory", False)

    def test_read_grant(self):
        doc = make_document(shares=[("bob", True, False)])
        assert access_control.can_read(doc, "bob", False)
        assert not access_control.can_write(doc, "bob", False)

    def test_write_only_grant(self):
        doc = make_document(shares=[("bob", False, True)])
        assert not access_control.can_read(doc, "bob", False)
        assert access_control.can_write(doc, "bob", False)

    def test_grant_for_other_user_does_not_apply(self):
        doc = make_document(shares=[("bob", True, True)])
        assert not access_control.can_read(doc, "carol", False)
        assert not access_control.can_write(doc, "carol", False)


@pytest.mark.unit
class TestManage:
    """Tests for can_manage."""

    def test_owner_and_admin_can_manage(self):
        doc = make_document()
        assert access_control.can_manage(doc, "alice", False)
        assert access_control.can_manage(doc, "root", True)

    def test_full_grant_does_not_allow_manage(self):
        doc = make_document(shares=[("bob", True, True)])
        assert not access_control.can_manage(doc, "bob", False)


@pytest.mark.unit
class TestEffectivePermissions:
    """Tests for effective_permissions."""

    def test_owner_gets_read_and_write_in_order(self):
        doc = make_document()
        assert access_control.effective_permissions(doc, "alice", False) == ["read", "write"]

    def test_admin_gets_read_and_write(self):
        doc = make_document()
        assert access_control.effective_permissions(doc, "root", True) == ["read", "write"]

    def test_read_grant(self):
        doc = make_document(shares=[("bob", True, False)])
        assert access_control.effective_permissions(doc, "bob", False) == ["read"]

    def test_write_only_grant(self):
        doc = make_document(shares=[("bob", False, True)])
        assert access_control.effective_permissions(doc, "bob", False) == ["write"]

    def test_no_grant(self):
        doc = make_document()
        assert access_control.effective_permissions(doc, "bob", False) == []
