"""
Unit tests for input validation and random token generation.
"""

import pytest

from doc_registry.core.errors import InvalidArgumentError
from doc_registry.core.security import SAFE_ALPHABET, generate_token
from doc_registry.core.validation import (
    parse_permissions,
    validate_document_id,
    validate_tag,
    validate_title,
    validate_token_length,
    validate_username,
    validate_version,
)


@pytest.mark.unit
class TestDocumentId:
    """Tests for validate_document_id."""

    @pytest.mark.parametrize("doc_id", ["notes", "My_Doc-2.final", "a", "x" * 255])
    def test_valid_ids(self, doc_id):
        assert validate_document_id(doc_id) == doc_id

    @pytest.mark.parametrize("doc_id", ["has space", "slash/y", "semi;colon", "ünï", "x" * 256])
    def test_invalid_ids(self, doc_id):
        with pytest.raises(InvalidArgumentError) as exc_info:
            validate_document_id(doc_id)
        assert exc_info.value.field == "id"

    @pytest.mark.parametrize("doc_id", [None, ""])
    def test_missing_id(self, doc_id):
        with pytest.raises(InvalidArgumentError, match="Missing id"):
            validate_document_id(doc_id)


@pytest.mark.unit
class TestVersion:
    """Tests for validate_version."""

    @pytest.mark.parametrize("version", ["1", "2.0", "draft", "v1.2.3"])
    def test_valid_versions(self, version):
        assert validate_version(version) == version

    @pytest.mark.parametrize("version", ["1-2", "v 1", "1_0", "x" * 65])
    def test_invalid_versions(self, version):
        with pytest.raises(InvalidArgumentError) as exc_info:
            validate_version(version)
        assert exc_info.value.field == "version"

    def test_missing_version_uses_default(self):
        assert validate_version(None, default="1") == "1"
        assert validate_version("", default="1") == "1"

    def test_missing_version_without_default(self):
        with pytest.raises(InvalidArgumentError, match="Missing version"):
            validate_version(None)


@pytest.mark.unit
class TestUsername:
    """Tests for validate_username."""

    def test_valid_username(self):
        assert validate_username("bob") == "bob"

    @pytest.mark.parametrize("username", [None, "", "   "])
    def test_blank_username(self, username):
        with pytest.raises(InvalidArgumentError):
            validate_username(username)

    def test_username_length_limit(self):
        assert validate_username("u" * 255) == "u" * 255
        with pytest.raises(InvalidArgumentError) as exc_info:
            validate_username("u" * 256)
        assert exc_info.value.field == "username"


@pytest.mark.unit
class TestTagAndTitle:
    """Tests for validate_tag and validate_title."""

    def test_missing_tag_is_empty(self):
        assert validate_tag(None) == ""
        assert validate_tag("") == ""

    def test_tag_length_limit(self):
        assert validate_tag("t" * 255) == "t" * 255
        with pytest.raises(InvalidArgumentError) as exc_info:
            validate_tag("t" * 256)
        assert exc_info.value.field == "tag"

    def test_title_default(self):
        assert validate_title(None, default="Untitled") == "Untitled"
        assert validate_title("", default="Untitled") == "Untitled"
        assert validate_title("") == ""

    def test_missing_title_without_default(self):
        with pytest.raises(InvalidArgumentError, match="Missing title"):
            validate_title(None)

    def test_title_length_limit(self):
        assert validate_title("x" * 1024) == "x" * 1024
        with pytest.raises(InvalidArgumentError) as exc_info:
            validate_title("x" * 1025, default="Untitled")
        assert exc_info.value.field == "title"


@pytest.mark.unit
class TestPermissions:
    """Tests for parse_permissions."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("read", (True, False)),
            ("write", (False, True)),
            ("read,write", (True, True)),
            ("write, read", (True, True)),
            (["read"], (True, False)),
            (["read", "read"], (True, False)),
        ],
    )
    def test_valid_permissions(self, raw, expected):
        assert parse_permissions(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        [None, "", [], "admin", "read,", ["read", "delete"], 5, {"read": False}, ["read", 1]],
    )
    def test_invalid_permissions(self, raw):
        with pytest.raises(InvalidArgumentError) as exc_info:
            parse_permissions(raw)
        assert exc_info.value.field == "permissions"


@pytest.mark.unit
class TestTokens:
    """Tests for token length validation and generation."""

    @pytest.mark.parametrize("length", [1, 16, 128])
    def test_accepted_lengths(self, length):
        assert validate_token_length(length) == length

    @pytest.mark.parametrize("length", [0, -1, 129])
    def test_rejected_lengths(self, length):
        with pytest.raises(InvalidArgumentError, match="Invalid length"):
            validate_token_length(length)

    @pytest.mark.parametrize("length", [1, 16, 128])
    def test_generated_token_length_and_alphabet(self, length):
        token = generate_token(length)
        assert len(token) == length
        assert set(token) <= set(SAFE_ALPHABET)

    def test_alphabet_excludes_ambiguous_characters(self):
        for ch in "0o1li":
            assert ch not in SAFE_ALPHABET

    def test_tokens_are_not_repeated(self):
        tokens = {generate_token(16) for _ in range(200)}
        assert len(tokens) == 200
